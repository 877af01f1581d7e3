from mediafocus.domain.enums.exit_status import EngineExitStatus
from mediafocus.domain.enums.frame_type import FrameType
from mediafocus.domain.enums.stream_kind import StreamKind

__all__ = [
    "EngineExitStatus",
    "FrameType",
    "StreamKind",
]
