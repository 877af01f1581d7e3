from __future__ import annotations
from enum import StrEnum


class EngineExitStatus(StrEnum):
    success = "success"
    failure = "failure"          # non-zero exit; informational only
    unavailable = "unavailable"  # engine never started, zero lines

    @classmethod
    def from_return_code(cls, rc: int | None) -> "EngineExitStatus":
        if rc is None:
            return cls.unavailable
        return cls.success if rc == 0 else cls.failure
