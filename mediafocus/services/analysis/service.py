# mediafocus/services/analysis/service.py
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Iterable, Optional

from mediafocus.common.concurrency.line_channel import LineChannel, StreamEnd
from mediafocus.common.logging import get_logger
from mediafocus.common.settings import Settings, get_settings
from mediafocus.domain.dataclasses.results import AnalysisResult
from mediafocus.domain.entities.media import FileAttributes
from mediafocus.domain.entities.progress import ProgressSnapshot
from mediafocus.domain.enums.exit_status import EngineExitStatus
from mediafocus.domain.ports.engine import AnalysisEnginePort
from mediafocus.services.analysis.context import ProgressCallback, ProgressFeed, RunContext
from mediafocus.services.analysis.worker import AnalysisWorker
from mediafocus.services.engine.ffmpeg_adapter import EngineError, EngineUnavailableError

logger = get_logger(__name__)


class AnalysisService:
    """
    High-level orchestrator: one analysis run at a time.

    Starting a run drops the previous run's progress subscriptions and makes its
    result unpublishable; a superseded run is abandoned wholesale. Results are
    published atomically once the line stream has ended.
    """

    def __init__(self, engine: Optional[AnalysisEnginePort] = None, *, cfg: Optional[Settings] = None):
        self.cfg = cfg or get_settings()
        self.engine = engine
        self.progress = ProgressFeed()
        self._generation = 0
        self._current: Optional[RunContext] = None
        self._result: Optional[AnalysisResult] = None

    @property
    def current_run(self) -> Optional[RunContext]:
        return self._current

    @property
    def latest_result(self) -> Optional[AnalysisResult]:
        return self._result

    def reset(self) -> None:
        """Abandon whatever is running and forget the last published result."""
        self.progress.clear()
        self._generation += 1
        self._current = None
        self._result = None

    def start_run(self, file_attributes: FileAttributes, *, on_progress: Optional[ProgressCallback] = None) -> RunContext:
        self.reset()
        if on_progress is not None:
            self.progress.subscribe(on_progress)
        generation = self._generation

        def _forward(snapshot: ProgressSnapshot) -> None:
            # a superseded run keeps running until its stream ends; its snapshots go nowhere
            if generation == self._generation:
                self.progress.publish(snapshot)

        ctx = RunContext(file_attributes, cfg=self.cfg.analysis, on_progress=_forward)
        self._current = ctx
        logger.info("run started for %s (%s)", file_attributes.name, file_attributes.mime_type)
        return ctx

    def _publish(self, ctx: RunContext, generation: int, result: AnalysisResult) -> Optional[AnalysisResult]:
        if generation != self._generation or ctx is not self._current:
            logger.info("run for %s was superseded; dropping its result", ctx.file_attributes.name)
            return None
        self._result = result
        return result

    # ---- entry points ------------------------------------------------------------
    def analyze_text(
        self,
        lines: Iterable[str],
        file_attributes: FileAttributes,
        *,
        exit_status: EngineExitStatus = EngineExitStatus.success,
        return_code: Optional[int] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> AnalysisResult:
        """Run the pipeline over lines captured elsewhere."""
        ctx = self.start_run(file_attributes, on_progress=on_progress)
        generation = self._generation
        for line in lines:
            ctx.feed_line(line)
        result = ctx.finish(StreamEnd(exit_status, return_code))
        published = self._publish(ctx, generation, result)
        return published if published is not None else result

    async def analyze_file(
        self,
        path: Path,
        file_attributes: FileAttributes,
        *,
        on_progress: Optional[ProgressCallback] = None,
    ) -> Optional[AnalysisResult]:
        """
        Drive the engine against `path` and consume its lines as they arrive.
        Returns None when a newer run superseded this one before it ended.
        """
        if self.engine is None:
            raise RuntimeError("AnalysisService has no engine configured")
        ctx = self.start_run(file_attributes, on_progress=on_progress)
        generation = self._generation
        channel = LineChannel(maxsize=self.cfg.analysis.line_queue_maxsize)

        producer = asyncio.create_task(self._drive_engine(self.engine, path, channel))
        try:
            result = await AnalysisWorker().consume(channel, ctx)
        except BaseException:
            producer.cancel()
            # wait for the adapter to reap its subprocess before giving up the run
            await asyncio.gather(producer, return_exceptions=True)
            raise
        await producer
        return self._publish(ctx, generation, result)

    async def _drive_engine(self, engine: AnalysisEnginePort, path: Path, channel: LineChannel) -> None:
        try:
            await engine.run(path, channel)
        except EngineUnavailableError as e:
            logger.warning("analysis engine unavailable: %s", e.message)
            await channel.close(StreamEnd(EngineExitStatus.unavailable))
        except EngineError as e:
            logger.warning("analysis engine failed: %s (rc=%s)", e.message, e.rc)
            await channel.close(StreamEnd(EngineExitStatus.failure, e.rc))
        except Exception:
            await channel.close(StreamEnd(EngineExitStatus.failure))
            raise
        if not channel.closed:
            await channel.close(StreamEnd(EngineExitStatus.failure))
