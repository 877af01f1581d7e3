# mediafocus/domain/policies/progress.py
from __future__ import annotations

from typing import Optional

from mediafocus.domain.entities.media import MediaMetadata
from mediafocus.domain.entities.progress import ProgressSnapshot

DEFAULT_FALLBACK_TOTAL = 1000
DEFAULT_REPORT_EVERY = 50
STREAMING_CEILING = 99


def estimate_total(metadata: MediaMetadata | None, fallback: int = DEFAULT_FALLBACK_TOTAL) -> int:
    """
    Expected frame count: round(duration * fps) when both are known.
    The result is an estimate; the real stream may overshoot or stop short.
    """
    if metadata is None:
        return fallback
    duration = metadata.duration_seconds
    fps = metadata.frame_rate_fps
    if duration and fps and duration > 0 and fps > 0:
        total = round(duration * fps)
        if total > 0:
            return total
    return fallback


class ProgressEstimator:
    """
    Maps observed frame numbers onto a throttled completion percentage.

    - emits only on multiples of `report_every` and never twice for the same frame number
    - clamps to [0, 99] while streaming
    - 100 is only produced by complete(), exactly once
    """

    def __init__(self, estimated_total: int = DEFAULT_FALLBACK_TOTAL, *, report_every: int = DEFAULT_REPORT_EVERY) -> None:
        if report_every <= 0:
            raise ValueError("report_every must be positive")
        self._total = max(1, int(estimated_total))
        self._every = report_every
        self._last_reported: Optional[int] = None
        self._processed = 0
        self._completed = False

    @property
    def estimated_total(self) -> int:
        return self._total

    @property
    def completed(self) -> bool:
        return self._completed

    def retarget(self, estimated_total: int) -> None:
        self._total = max(1, int(estimated_total))

    def on_frame_observed(self, frame_number: int) -> Optional[ProgressSnapshot]:
        if self._completed:
            return None
        self._processed = max(self._processed, frame_number + 1)
        if frame_number % self._every != 0 or frame_number == self._last_reported:
            return None
        self._last_reported = frame_number
        pct = int(frame_number * 100 / self._total)
        pct = max(0, min(STREAMING_CEILING, pct))
        return ProgressSnapshot(
            processed_frames=frame_number,
            estimated_total_frames=self._total,
            percent=pct,
        )

    def complete(self) -> Optional[ProgressSnapshot]:
        """Completion event fired after the source stream has ended."""
        if self._completed:
            return None
        self._completed = True
        return ProgressSnapshot(
            processed_frames=self._processed,
            estimated_total_frames=self._total,
            percent=100,
        )
