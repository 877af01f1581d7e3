from __future__ import annotations
from enum import StrEnum


class FrameType(StrEnum):
    I = "I"
    P = "P"
    B = "B"

    @classmethod
    def parse(cls, code: str | None) -> "FrameType | None":
        if not code:
            return None
        try:
            return cls(code.strip().upper())
        except ValueError:
            return None
