# mediafocus/services/api/routers/analysis.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from mediafocus.common.settings import get_settings
from mediafocus.services.analysis.service import AnalysisService
from mediafocus.services.api.deps import get_analysis_service
from mediafocus.services.mappers.analysis import (
    to_analysis_response,
    to_file_attributes,
    to_frame_page,
    to_metadata_out,
)
from mediafocus.services.metadata.aggregator import aggregate_lines
from mediafocus.services.schemas.analysis import (
    AnalysisRequest,
    AnalysisResponse,
    FramePageOut,
    MediaMetadataOut,
)

cfg = get_settings()
router = APIRouter(prefix=f"{cfg.api.prefix}/analysis", tags=["analysis"])


@router.post("/parse", response_model=AnalysisResponse)
def parse_capture(
    payload: AnalysisRequest,
    svc: AnalysisService = Depends(get_analysis_service),
) -> AnalysisResponse:
    result = svc.analyze_text(
        payload.all_lines(),
        to_file_attributes(payload.file),
        exit_status=payload.exit_status,
        return_code=payload.return_code,
    )
    return to_analysis_response(result)


@router.post("/metadata", response_model=MediaMetadataOut)
def parse_metadata(payload: AnalysisRequest) -> MediaMetadataOut:
    return to_metadata_out(aggregate_lines(payload.all_lines(), to_file_attributes(payload.file)))


@router.post("/frames", response_model=FramePageOut)
def parse_frames_page(
    payload: AnalysisRequest,
    page: int = Query(1, ge=1, description="1-based page number"),
    page_size: int | None = Query(None, ge=1, le=1000, description="Frames per page"),
    svc: AnalysisService = Depends(get_analysis_service),
) -> FramePageOut:
    if page_size is None:
        page_size = cfg.analysis.page_size
    result = svc.analyze_text(
        payload.all_lines(),
        to_file_attributes(payload.file),
        exit_status=payload.exit_status,
        return_code=payload.return_code,
    )
    return to_frame_page(result.frames, page, page_size)
