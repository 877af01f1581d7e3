# mediafocus/common/settings.py
from __future__ import annotations

from functools import lru_cache
from typing import Annotated, List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from mediafocus.common.strings.splitters import csv_to_list


def _to_bool(v: str | bool | int | None, default: bool = False) -> bool:
    if isinstance(v, bool):
        return v
    if v is None:
        return default
    s = str(v).strip().lower()
    return s in {"1", "true", "yes", "y", "on"}


class APIConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    prefix: str = "/api"

    cors_allow_origins: List[str] = Field(default_factory=lambda: ["http://localhost:5173"])
    cors_allow_methods: List[str] = Field(default_factory=lambda: ["GET", "POST", "OPTIONS"])
    cors_allow_headers: List[str] = Field(default_factory=lambda: ["*"])
    cors_allow_credentials: bool = False

    @field_validator("cors_allow_origins", "cors_allow_methods", "cors_allow_headers", mode="before")
    @classmethod
    def _split_csv(cls, v):
        return csv_to_list(v)


class EngineConfig(BaseModel):
    ffmpeg_bin: str = "ffmpeg"
    timeout_sec: int = 600
    log_level: str = "info"  # showinfo lines are only printed at info or above
    frame_filter: str = "showinfo"


class AnalysisConfig(BaseModel):
    assumed_frame_rate: float = Field(30.0, gt=0)
    fallback_total_frames: int = Field(1000, ge=1)
    progress_every: int = Field(50, ge=1)
    layout_modulus: int = Field(100, ge=1)
    page_size: int = Field(50, ge=1, le=1000)
    line_queue_maxsize: int = Field(1024, ge=1)
    prefer_true_frame_rate: bool = True

    @field_validator("prefer_true_frame_rate", mode="before")
    @classmethod
    def _boolify(cls, v):
        return _to_bool(v, default=True)


class Settings(BaseSettings):
    # -------- App / Env --------
    app_name: str = "mediafocus"
    app_env: str = "development"  # development|test|staging|production
    log_level: str = "INFO"

    # -------- Accepted uploads (mime prefixes) --------
    media_mime_prefixes: Annotated[List[str], NoDecode] = Field(default_factory=lambda: ["video/", "audio/"])

    @field_validator("media_mime_prefixes", mode="before")
    @classmethod
    def _split_prefixes(cls, v):
        return csv_to_list(v)

    # -------- Sub-configs --------
    api: APIConfig = APIConfig()
    engine: EngineConfig = EngineConfig()
    analysis: AnalysisConfig = AnalysisConfig()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    ffmpeg_bin_override: Optional[str] = Field(default=None, alias="FFMPEG_BIN")

    @property
    def ffmpeg_bin(self) -> str:
        return self.ffmpeg_bin_override or self.engine.ffmpeg_bin


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Global settings accessor (cached). Use this everywhere you need config:
        from mediafocus.common.settings import get_settings
        cfg = get_settings()
    """
    return Settings()  # pydantic_settings will read from .env automatically
