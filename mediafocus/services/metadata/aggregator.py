# mediafocus/services/metadata/aggregator.py
from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Sequence

from mediafocus.common.logging import get_logger
from mediafocus.common.probe.matchers import (
    AUDIO_RULES,
    CONTAINER_RULES,
    VIDEO_RULES,
    FieldRule,
    Scope,
    audio_descriptor,
    video_descriptor,
)
from mediafocus.domain.entities.media import AudioStream, FileAttributes, MediaMetadata, VideoStream

logger = get_logger(__name__)


def _fold(rules: Sequence[FieldRule], scopes: Mapping[Scope, Optional[str]]) -> Dict[str, Any]:
    """
    Run rules in order. A field is filled by the first rule that yields a value;
    later rules for the same field are skipped once it is set.
    """
    values: Dict[str, Any] = {}
    for rule in rules:
        if rule.field in values:
            continue
        scoped = scopes.get(rule.scope)
        if not scoped:
            continue
        value = rule.matcher(scoped)
        if value is not None:
            values[rule.field] = value
    return values


def _video_stream(values: Dict[str, Any]) -> VideoStream:
    resolution = values.pop("resolution", None)
    if resolution is not None:
        values["width"], values["height"] = resolution
    return VideoStream(**values)


def aggregate(full_log_text: str, file_attributes: FileAttributes) -> MediaMetadata:
    """
    Fold every matcher over the captured engine text into one MediaMetadata.

    Never fails: empty or unrecognisable text yields the file-attribute fields only.
    Pure and idempotent for identical input.
    """
    base = MediaMetadata.from_file(file_attributes)
    text = full_log_text or ""
    if not text.strip():
        logger.debug("aggregate: empty capture for %s", file_attributes.name)
        return base

    vdesc = video_descriptor(text)
    adesc = audio_descriptor(text)
    scopes: Dict[Scope, Optional[str]] = {
        Scope.text: text,
        Scope.video: vdesc,
        Scope.audio: adesc,
    }

    container = _fold(CONTAINER_RULES, scopes)
    video = _video_stream(_fold(VIDEO_RULES, scopes)) if vdesc else None
    audio = AudioStream(**_fold(AUDIO_RULES, scopes)) if adesc else None

    logger.debug(
        "aggregate: %s -> %d container field(s), video=%s audio=%s",
        file_attributes.name, len(container), video is not None, audio is not None,
    )
    return MediaMetadata(
        file_name=base.file_name,
        file_size_bytes=base.file_size_bytes,
        mime_type=base.mime_type,
        last_modified_at=base.last_modified_at,
        video=video,
        audio=audio,
        **container,
    )


def aggregate_lines(lines: Iterable[str], file_attributes: FileAttributes) -> MediaMetadata:
    return aggregate("\n".join(lines), file_attributes)
