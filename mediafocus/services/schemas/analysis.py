# mediafocus/services/schemas/analysis.py
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from mediafocus.domain.enums.exit_status import EngineExitStatus
from mediafocus.domain.enums.frame_type import FrameType


# ---------- Input ----------
class FileAttributesIn(BaseModel):
    name: str = Field(..., min_length=1)
    size_bytes: int = Field(..., ge=0)
    mime_type: str = ""
    last_modified_epoch_ms: int = Field(..., ge=0)


class AnalysisRequest(BaseModel):
    """Captured engine output for one file. Either `text` or `lines` (or both, text first)."""
    file: FileAttributesIn
    text: Optional[str] = None
    lines: List[str] = Field(default_factory=list)
    exit_status: EngineExitStatus = EngineExitStatus.success
    return_code: Optional[int] = None

    @model_validator(mode="after")
    def _status_matches_rc(self) -> "AnalysisRequest":
        if self.return_code is not None and self.exit_status == EngineExitStatus.success and self.return_code != 0:
            self.exit_status = EngineExitStatus.failure
        return self

    def all_lines(self) -> List[str]:
        out = self.text.splitlines() if self.text else []
        out.extend(self.lines)
        return out


# ---------- Output ----------
class VideoStreamOut(BaseModel):
    codec: Optional[str] = None
    profile: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    resolution: Optional[str] = None
    aspect_ratio: Optional[str] = None
    pixel_format: Optional[str] = None
    color_space: Optional[str] = None
    color_range: Optional[str] = None
    bit_depth_bits: Optional[int] = None
    sample_aspect_ratio: Optional[str] = None
    display_aspect_ratio: Optional[str] = None
    frame_rate_fps: Optional[float] = None
    time_base_rational: Optional[str] = None
    time_base_numerator: Optional[str] = None
    time_base_clock: Optional[str] = None
    bitrate_kbps: Optional[int] = None
    language: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class AudioStreamOut(BaseModel):
    codec: Optional[str] = None
    profile: Optional[str] = None
    sample_rate_hz: Optional[int] = None
    sample_format: Optional[str] = None
    bit_depth_bits: Optional[int] = None
    channel_layout_label: Optional[str] = None
    channel_count: Optional[int] = None
    bitrate_kbps: Optional[int] = None
    language: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class MediaMetadataOut(BaseModel):
    file_name: str
    file_size_bytes: int
    formatted_file_size: str
    mime_type: str
    last_modified_at: datetime

    duration_seconds: Optional[float] = None
    formatted_duration: Optional[str] = None
    start_time_seconds: Optional[float] = None
    container_format: Optional[str] = None
    title: Optional[str] = None
    encoder: Optional[str] = None
    overall_bitrate_kbps: Optional[int] = None
    video: Optional[VideoStreamOut] = None
    audio: Optional[AudioStreamOut] = None

    model_config = ConfigDict(from_attributes=True)


class FrameRecordOut(BaseModel):
    frame_number: int
    presentation_time_seconds: float
    frame_type: FrameType
    is_key_frame: bool
    size_bytes: Optional[int] = None
    estimated_bitrate_kbps: Optional[float] = None
    layout_bucket: int

    model_config = ConfigDict(from_attributes=True)


class ProgressSnapshotOut(BaseModel):
    processed_frames: int
    estimated_total_frames: int
    percent: int = Field(..., ge=0, le=100)

    model_config = ConfigDict(from_attributes=True)


class AvSyncOut(BaseModel):
    computed: bool
    offsets_ms: Optional[List[float]] = None
    reason: Optional[str] = None


class BitrateSeriesOut(BaseModel):
    points: List[Tuple[int, float]] = Field(default_factory=list)
    min_kbps: Optional[float] = None
    max_kbps: Optional[float] = None
    avg_kbps: Optional[float] = None


class FrameAnalyticsOut(BaseModel):
    aspect_ratio: Optional[str] = None
    frame_rate_used: float
    frame_rate_assumed: bool
    frame_type_counts: Dict[str, int]
    frame_type_ratios: Dict[str, float]
    key_frames: List[int]
    key_frame_intervals: List[int]
    average_gop_length: Optional[float] = None
    bitrate: BitrateSeriesOut
    layout_buckets: Dict[int, List[int]]
    av_sync: AvSyncOut


class RunReportOut(BaseModel):
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    lines_seen: int = 0
    frame_lines: int = 0
    frames_parsed: int = 0
    malformed_lines: int = 0
    duplicate_frames: int = 0
    progress_updates: int = 0
    exit_status: Optional[EngineExitStatus] = None
    return_code: Optional[int] = None
    degraded: bool = False
    errors: List[Tuple[str, str]] = Field(default_factory=list)


class AnalysisResponse(BaseModel):
    metadata: MediaMetadataOut
    frames: List[FrameRecordOut]
    frame_count: int
    analytics: FrameAnalyticsOut
    progress: List[ProgressSnapshotOut]
    report: RunReportOut


class FramePageOut(BaseModel):
    page: int
    page_size: int
    total_frames: int
    total_pages: int
    items: List[FrameRecordOut]
