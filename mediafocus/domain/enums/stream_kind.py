from __future__ import annotations
from enum import StrEnum


class StreamKind(StrEnum):
    video = "Video"
    audio = "Audio"
