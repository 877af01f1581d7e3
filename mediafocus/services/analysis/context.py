# mediafocus/services/analysis/context.py
from __future__ import annotations

from typing import Callable, List, Optional

from mediafocus.common.concurrency.line_channel import StreamEnd
from mediafocus.common.logging import get_logger
from mediafocus.common.settings import AnalysisConfig
from mediafocus.domain.dataclasses.reports import RunReport
from mediafocus.domain.dataclasses.results import AnalysisResult
from mediafocus.domain.entities.media import FileAttributes
from mediafocus.domain.entities.progress import ProgressSnapshot
from mediafocus.domain.enums.exit_status import EngineExitStatus
from mediafocus.domain.policies.progress import ProgressEstimator, estimate_total
from mediafocus.services.analytics.derived import apply_bitrate_estimates, resolve_frame_rate, summarize
from mediafocus.services.frames.parser import FrameLineParser
from mediafocus.services.metadata.aggregator import aggregate

logger = get_logger(__name__)

ProgressCallback = Callable[[ProgressSnapshot], None]


class ProgressFeed:
    """Callback registrations for ProgressSnapshot updates of the active run."""

    def __init__(self) -> None:
        self._subscribers: List[ProgressCallback] = []

    def subscribe(self, callback: ProgressCallback) -> Callable[[], None]:
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            self.unsubscribe(callback)

        return _unsubscribe

    def unsubscribe(self, callback: ProgressCallback) -> None:
        try:
            self._subscribers.remove(callback)
        except ValueError:
            pass

    def clear(self) -> None:
        self._subscribers.clear()

    def __len__(self) -> int:
        return len(self._subscribers)

    def publish(self, snapshot: ProgressSnapshot) -> None:
        for callback in list(self._subscribers):
            callback(snapshot)


class RunContext:
    """
    Everything one analysis run accumulates, from the first line to the
    published result. Created per run and dropped on reset or a new file.

    feed_line() is called once per delivered line and only touches in-memory
    state. finish() is called once, after the stream-ended signal.
    """

    def __init__(
        self,
        file_attributes: FileAttributes,
        *,
        cfg: Optional[AnalysisConfig] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        self.cfg = cfg or AnalysisConfig()
        self.file_attributes = file_attributes
        self.report = RunReport()
        self.report.start()
        self._lines: List[str] = []
        self._parser = FrameLineParser(assumed_frame_rate=self.cfg.assumed_frame_rate)
        self._progress = ProgressEstimator(
            self.cfg.fallback_total_frames,
            report_every=self.cfg.progress_every,
        )
        self._snapshots: List[ProgressSnapshot] = []
        self._on_progress = on_progress
        self._total_estimated = False
        self._finished = False

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def snapshots(self) -> tuple[ProgressSnapshot, ...]:
        return tuple(self._snapshots)

    @property
    def estimated_total(self) -> int:
        return self._progress.estimated_total

    def feed_line(self, line: str) -> Optional[ProgressSnapshot]:
        if self._finished:
            raise RuntimeError("feed_line() after finish()")
        self.report.lines_seen += 1
        self._lines.append(line)
        record = self._parser.feed(line)
        if record is None:
            return None
        if not self._total_estimated:
            self._estimate_from_header()
        snapshot = self._progress.on_frame_observed(record.frame_number)
        if snapshot is not None:
            self._emit(snapshot)
        return snapshot

    def _estimate_from_header(self) -> None:
        # The probe banner (Duration, Stream lines) precedes the first frame report.
        self._total_estimated = True
        header = aggregate("\n".join(self._lines), self.file_attributes)
        self._progress.retarget(estimate_total(header, fallback=self.cfg.fallback_total_frames))
        if self.cfg.prefer_true_frame_rate:
            self._parser.set_frame_rate(header.frame_rate_fps)
        logger.debug(
            "run %s: expecting ~%d frames (rate %.3f, assumed=%s)",
            self.file_attributes.name,
            self._progress.estimated_total,
            self._parser.frame_rate,
            self._parser.frame_rate_assumed,
        )

    def _emit(self, snapshot: ProgressSnapshot) -> None:
        self._snapshots.append(snapshot)
        self.report.progress_updates += 1
        if self._on_progress is not None:
            self._on_progress(snapshot)

    def finish(self, end: StreamEnd) -> AnalysisResult:
        if self._finished:
            raise RuntimeError("finish() called twice for the same run")
        self._finished = True

        self.report.exit_status = end.exit_status
        self.report.return_code = end.return_code
        if end.exit_status == EngineExitStatus.failure:
            # the probe exits non-zero when no output artifact is requested
            logger.info(
                "run %s: engine exited with rc=%s; parsing captured lines anyway",
                self.file_attributes.name, end.return_code,
            )
        elif end.exit_status == EngineExitStatus.unavailable:
            self.report.add_error(self.file_attributes.name, "analysis engine unavailable")

        metadata = aggregate("\n".join(self._lines), self.file_attributes)
        rate, assumed = resolve_frame_rate(
            metadata,
            prefer_true_frame_rate=self.cfg.prefer_true_frame_rate,
            assumed_frame_rate=self.cfg.assumed_frame_rate,
        )
        frames = self._parser.frames()
        if not assumed:
            frames = apply_bitrate_estimates(frames, rate)
        analytics = summarize(
            frames,
            metadata,
            prefer_true_frame_rate=self.cfg.prefer_true_frame_rate,
            assumed_frame_rate=self.cfg.assumed_frame_rate,
            layout_modulus=self.cfg.layout_modulus,
        )

        self.report.frame_lines = self._parser.frame_lines
        self.report.malformed_lines = self._parser.malformed_lines
        self.report.duplicate_frames = self._parser.duplicates
        self.report.frames_parsed = len(frames)

        completion = self._progress.complete()
        if completion is not None:
            self._emit(completion)
        self.report.stop()

        logger.info(
            "run %s finished: %d line(s), %d frame(s), exit=%s",
            self.file_attributes.name, self.report.lines_seen, len(frames), end.exit_status,
        )
        return AnalysisResult(
            metadata=metadata,
            frames=frames,
            analytics=analytics,
            progress=tuple(self._snapshots),
            report=self.report,
        )
