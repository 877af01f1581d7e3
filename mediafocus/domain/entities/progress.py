# mediafocus/domain/entities/progress.py
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProgressSnapshot:
    processed_frames: int
    estimated_total_frames: int
    percent: int  # 0..99 while streaming, 100 only once the stream has ended

    @property
    def is_complete(self) -> bool:
        return self.percent == 100
