# mediafocus/services/mappers/analysis.py
from __future__ import annotations

from typing import Iterable, List, Sequence

from mediafocus.common.iter import page_count, page_slice
from mediafocus.domain.dataclasses.analytics import FrameAnalytics
from mediafocus.domain.dataclasses.outcome import Computed, Outcome
from mediafocus.domain.dataclasses.reports import RunReport
from mediafocus.domain.dataclasses.results import AnalysisResult
from mediafocus.domain.entities.frame import FrameRecord
from mediafocus.domain.entities.media import FileAttributes, MediaMetadata
from mediafocus.services.schemas.analysis import (
    AnalysisResponse,
    AvSyncOut,
    BitrateSeriesOut,
    FileAttributesIn,
    FrameAnalyticsOut,
    FramePageOut,
    FrameRecordOut,
    MediaMetadataOut,
    ProgressSnapshotOut,
    RunReportOut,
)


def to_file_attributes(payload: FileAttributesIn) -> FileAttributes:
    return FileAttributes(
        name=payload.name,
        size_bytes=payload.size_bytes,
        mime_type=payload.mime_type,
        last_modified_epoch_ms=payload.last_modified_epoch_ms,
    )


def to_metadata_out(metadata: MediaMetadata) -> MediaMetadataOut:
    return MediaMetadataOut.model_validate(metadata)


def to_frames_out(frames: Iterable[FrameRecord]) -> List[FrameRecordOut]:
    return [FrameRecordOut.model_validate(f) for f in frames]


def to_av_sync_out(outcome: Outcome | None) -> AvSyncOut:
    if isinstance(outcome, Computed):
        return AvSyncOut(computed=True, offsets_ms=list(outcome.value))
    if outcome is None:
        return AvSyncOut(computed=False, reason="not evaluated")
    return AvSyncOut(computed=False, reason=outcome.reason)


def to_analytics_out(analytics: FrameAnalytics) -> FrameAnalyticsOut:
    types = analytics.frame_types
    return FrameAnalyticsOut(
        aspect_ratio=analytics.aspect_ratio,
        frame_rate_used=analytics.frame_rate_used,
        frame_rate_assumed=analytics.frame_rate_assumed,
        frame_type_counts=types.counts(),
        frame_type_ratios=types.ratios(),
        key_frames=list(types.key_frames),
        key_frame_intervals=list(analytics.key_frame_intervals),
        average_gop_length=analytics.average_gop_length,
        bitrate=BitrateSeriesOut(
            points=list(analytics.bitrate.points),
            min_kbps=analytics.bitrate.min_kbps,
            max_kbps=analytics.bitrate.max_kbps,
            avg_kbps=analytics.bitrate.avg_kbps,
        ),
        layout_buckets=analytics.layout_buckets,
        av_sync=to_av_sync_out(analytics.av_sync),
    )


def to_report_out(report: RunReport) -> RunReportOut:
    return RunReportOut(
        started_at=report.started_at,
        finished_at=report.finished_at,
        lines_seen=report.lines_seen,
        frame_lines=report.frame_lines,
        frames_parsed=report.frames_parsed,
        malformed_lines=report.malformed_lines,
        duplicate_frames=report.duplicate_frames,
        progress_updates=report.progress_updates,
        exit_status=report.exit_status,
        return_code=report.return_code,
        degraded=report.degraded,
        errors=list(report.error_details),
    )


def to_analysis_response(result: AnalysisResult) -> AnalysisResponse:
    return AnalysisResponse(
        metadata=to_metadata_out(result.metadata),
        frames=to_frames_out(result.frames),
        frame_count=len(result.frames),
        analytics=to_analytics_out(result.analytics),
        progress=[ProgressSnapshotOut.model_validate(p) for p in result.progress],
        report=to_report_out(result.report),
    )


def to_frame_page(frames: Sequence[FrameRecord], page: int, page_size: int) -> FramePageOut:
    return FramePageOut(
        page=page,
        page_size=page_size,
        total_frames=len(frames),
        total_pages=page_count(len(frames), page_size),
        items=to_frames_out(page_slice(frames, page, page_size)),
    )
