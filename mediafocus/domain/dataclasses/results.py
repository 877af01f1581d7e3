# mediafocus/domain/dataclasses/results.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from mediafocus.domain.dataclasses.analytics import FrameAnalytics
from mediafocus.domain.dataclasses.reports import RunReport
from mediafocus.domain.entities.frame import FrameRecord
from mediafocus.domain.entities.media import MediaMetadata
from mediafocus.domain.entities.progress import ProgressSnapshot


@dataclass(frozen=True)
class AnalysisResult:
    """Everything one run publishes once its line stream has ended."""
    metadata: MediaMetadata
    frames: Tuple[FrameRecord, ...]
    analytics: FrameAnalytics
    progress: Tuple[ProgressSnapshot, ...]
    report: RunReport

    @property
    def final_progress(self) -> ProgressSnapshot | None:
        return self.progress[-1] if self.progress else None
