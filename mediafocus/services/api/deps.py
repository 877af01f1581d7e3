# mediafocus/services/api/deps.py
from __future__ import annotations

from mediafocus.domain.ports.engine import AnalysisEnginePort
from mediafocus.services.analysis.service import AnalysisService
from mediafocus.services.engine.ffmpeg_adapter import FFmpegEngine


def get_analysis_engine() -> AnalysisEnginePort:
    """
    Provide an AnalysisEnginePort implementation (ffmpeg) via DI.
    Swappable later if you add other engines.
    """
    return FFmpegEngine()


def get_analysis_service() -> AnalysisService:
    """
    Request-scoped service: every request is its own run, so nothing is shared
    between requests and nothing outlives the response.
    """
    return AnalysisService()
