# mediafocus/domain/dataclasses/reports.py
from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from mediafocus.domain.enums.exit_status import EngineExitStatus


@dataclass
class BaseReport:
    """Common report base:
    - timing: started_at / finished_at
    - error capture: error_details
    - helpers: start(), stop(), add_error(), as_dict()
    """
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    # Each tuple is (subject, message)
    error_details: List[Tuple[str, str]] = field(default_factory=list)

    def start(self) -> None:
        if self.started_at is None:
            self.started_at = datetime.now()

    def stop(self) -> None:
        self.finished_at = datetime.now()

    def add_error(self, subject: str, message: str) -> None:
        self.error_details.append((subject, message))

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class RunReport(BaseReport):
    lines_seen: int = 0
    frame_lines: int = 0         # lines carrying the frame-report marker
    frames_parsed: int = 0       # distinct frame numbers kept
    malformed_lines: int = 0     # marker present, frame index missing
    duplicate_frames: int = 0
    progress_updates: int = 0
    exit_status: Optional[EngineExitStatus] = None
    return_code: Optional[int] = None

    @property
    def degraded(self) -> bool:
        return self.lines_seen == 0
