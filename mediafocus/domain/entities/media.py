# mediafocus/domain/entities/media.py
from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import datetime, timezone
from typing import Optional

from mediafocus.common.probe.ratios import reduce_aspect_ratio
from mediafocus.common.strings.formatting import format_duration, format_file_size


@dataclass(frozen=True)
class FileAttributes:
    """What the file handle tells us before the engine ever runs."""
    name: str
    size_bytes: int
    mime_type: str
    last_modified_epoch_ms: int

    @property
    def last_modified_at(self) -> datetime:
        return datetime.fromtimestamp(self.last_modified_epoch_ms / 1000.0, tz=timezone.utc)

    @property
    def is_video(self) -> bool:
        return self.mime_type.startswith("video/")

    @property
    def is_audio(self) -> bool:
        return self.mime_type.startswith("audio/")


@dataclass(frozen=True)
class VideoStream:
    codec: Optional[str] = None
    profile: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    pixel_format: Optional[str] = None
    color_space: Optional[str] = None
    color_range: Optional[str] = None
    bit_depth_bits: Optional[int] = None
    sample_aspect_ratio: Optional[str] = None
    display_aspect_ratio: Optional[str] = None
    frame_rate_fps: Optional[float] = None
    time_base_rational: Optional[str] = None   # tbr
    time_base_numerator: Optional[str] = None  # tbn
    time_base_clock: Optional[str] = None      # tbc
    bitrate_kbps: Optional[int] = None
    language: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.width is None) != (self.height is None):
            raise ValueError("width and height must be set together")

    @property
    def resolution(self) -> Optional[str]:
        if self.width is None or self.height is None:
            return None
        return f"{self.width}x{self.height}"

    @property
    def aspect_ratio(self) -> Optional[str]:
        if self.width is None or self.height is None:
            return None
        return reduce_aspect_ratio(self.width, self.height)


@dataclass(frozen=True)
class AudioStream:
    codec: Optional[str] = None
    profile: Optional[str] = None
    sample_rate_hz: Optional[int] = None
    sample_format: Optional[str] = None
    bit_depth_bits: Optional[int] = None
    channel_layout_label: Optional[str] = None
    channel_count: Optional[int] = None
    bitrate_kbps: Optional[int] = None
    language: Optional[str] = None


@dataclass(frozen=True)
class MediaMetadata:
    """
    Normalized result of reading the engine's probe banner for one file.
    The four file fields are always known; everything else is best-effort.
    """
    file_name: str
    file_size_bytes: int
    mime_type: str
    last_modified_at: datetime

    duration_seconds: Optional[float] = None
    start_time_seconds: Optional[float] = None
    container_format: Optional[str] = None
    title: Optional[str] = None
    encoder: Optional[str] = None
    overall_bitrate_kbps: Optional[int] = None
    video: Optional[VideoStream] = None
    audio: Optional[AudioStream] = None

    @classmethod
    def from_file(cls, attrs: FileAttributes) -> "MediaMetadata":
        return cls(
            file_name=attrs.name,
            file_size_bytes=attrs.size_bytes,
            mime_type=attrs.mime_type,
            last_modified_at=attrs.last_modified_at,
        )

    @property
    def formatted_duration(self) -> Optional[str]:
        return format_duration(self.duration_seconds)

    @property
    def formatted_file_size(self) -> str:
        return format_file_size(self.file_size_bytes)

    @property
    def frame_rate_fps(self) -> Optional[float]:
        return self.video.frame_rate_fps if self.video else None

    @property
    def has_parsed_fields(self) -> bool:
        file_fields = {"file_name", "file_size_bytes", "mime_type", "last_modified_at"}
        return any(
            getattr(self, f.name) is not None
            for f in fields(self)
            if f.name not in file_fields
        )
