from __future__ import annotations

from datetime import timezone

import pytest

from mediafocus.domain.entities.media import AudioStream, FileAttributes, MediaMetadata, VideoStream


def test_file_attributes_timestamp_is_utc(file_attrs):
    ts = file_attrs.last_modified_at
    assert ts.tzinfo == timezone.utc
    assert ts.year == 2023
    assert file_attrs.is_video and not file_attrs.is_audio


def test_from_file_sets_only_file_fields(file_attrs):
    md = MediaMetadata.from_file(file_attrs)
    assert md.file_name == "clip.mp4"
    assert md.file_size_bytes == 47_185_920
    assert md.mime_type == "video/mp4"
    assert md.has_parsed_fields is False
    assert md.formatted_duration is None
    assert md.formatted_file_size == "45 MB"
    assert md.frame_rate_fps is None


def test_has_parsed_fields_with_duration(file_attrs):
    base = MediaMetadata.from_file(file_attrs)
    md = MediaMetadata(
        file_name=base.file_name,
        file_size_bytes=base.file_size_bytes,
        mime_type=base.mime_type,
        last_modified_at=base.last_modified_at,
        duration_seconds=90.5,
    )
    assert md.has_parsed_fields is True
    assert md.formatted_duration == "1:30"


def test_video_stream_resolution_and_aspect():
    v = VideoStream(width=1920, height=1080, frame_rate_fps=24.0)
    assert v.resolution == "1920x1080"
    assert v.aspect_ratio == "16:9"
    assert VideoStream().resolution is None
    assert VideoStream().aspect_ratio is None


def test_video_stream_requires_both_dimensions():
    with pytest.raises(ValueError):
        VideoStream(width=1920)


def test_frame_rate_comes_from_video_stream():
    md = MediaMetadata(
        file_name="a.mkv",
        file_size_bytes=1,
        mime_type="video/x-matroska",
        last_modified_at=FileAttributes("a.mkv", 1, "video/x-matroska", 0).last_modified_at,
        video=VideoStream(frame_rate_fps=25.0),
        audio=AudioStream(codec="opus"),
    )
    assert md.frame_rate_fps == 25.0
