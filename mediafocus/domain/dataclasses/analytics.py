# mediafocus/domain/dataclasses/analytics.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from mediafocus.domain.dataclasses.outcome import Outcome


@dataclass(frozen=True)
class FrameTypeBuckets:
    i_frames: Tuple[int, ...] = ()
    p_frames: Tuple[int, ...] = ()
    b_frames: Tuple[int, ...] = ()
    key_frames: Tuple[int, ...] = ()

    @property
    def total(self) -> int:
        return len(self.i_frames) + len(self.p_frames) + len(self.b_frames)

    def counts(self) -> Dict[str, int]:
        return {"I": len(self.i_frames), "P": len(self.p_frames), "B": len(self.b_frames)}

    def ratios(self) -> Dict[str, float]:
        total = self.total
        if total == 0:
            return {"I": 0.0, "P": 0.0, "B": 0.0}
        return {k: v / total for k, v in self.counts().items()}


@dataclass(frozen=True)
class BitrateSeries:
    points: Tuple[Tuple[int, float], ...] = ()   # (frame_number, kbps)
    min_kbps: Optional[float] = None
    max_kbps: Optional[float] = None
    avg_kbps: Optional[float] = None


@dataclass(frozen=True)
class FrameAnalytics:
    aspect_ratio: Optional[str]
    frame_rate_used: float
    frame_rate_assumed: bool
    frame_types: FrameTypeBuckets
    key_frame_intervals: Tuple[int, ...]
    average_gop_length: Optional[float]
    bitrate: BitrateSeries
    layout_buckets: Dict[int, List[int]] = field(default_factory=dict)
    av_sync: Optional[Outcome] = None
