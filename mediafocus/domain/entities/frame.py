# mediafocus/domain/entities/frame.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from mediafocus.domain.enums.frame_type import FrameType

LAYOUT_MODULUS = 100


@dataclass(frozen=True)
class FrameRecord:
    """
    One frame-report line from the engine. An I frame is always a key frame;
    the engine may also flag non-I frames as key frames.
    """
    frame_number: int
    presentation_time_seconds: float
    frame_type: FrameType = FrameType.P
    is_key_frame: bool = False
    size_bytes: Optional[int] = None
    estimated_bitrate_kbps: Optional[float] = None

    def __post_init__(self) -> None:
        if self.frame_type == FrameType.I and not self.is_key_frame:
            object.__setattr__(self, "is_key_frame", True)

    @property
    def layout_bucket(self) -> int:
        return self.frame_number % LAYOUT_MODULUS
