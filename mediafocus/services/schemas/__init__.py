from mediafocus.services.schemas.analysis import (
    AnalysisRequest,
    AnalysisResponse,
    AudioStreamOut,
    AvSyncOut,
    BitrateSeriesOut,
    FileAttributesIn,
    FrameAnalyticsOut,
    FramePageOut,
    FrameRecordOut,
    MediaMetadataOut,
    ProgressSnapshotOut,
    RunReportOut,
    VideoStreamOut,
)

__all__ = [
    "AnalysisRequest",
    "AnalysisResponse",
    "AudioStreamOut",
    "AvSyncOut",
    "BitrateSeriesOut",
    "FileAttributesIn",
    "FrameAnalyticsOut",
    "FramePageOut",
    "FrameRecordOut",
    "MediaMetadataOut",
    "ProgressSnapshotOut",
    "RunReportOut",
    "VideoStreamOut",
]
