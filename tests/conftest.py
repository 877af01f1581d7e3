# tests/conftest.py
from __future__ import annotations

from typing import List

import pytest

from mediafocus.common import settings as s
from mediafocus.domain.entities.media import FileAttributes

SAMPLE_HEADER = """\
Input #0, mov,mp4,m4a,3gp,3g2,mj2, from 'clip.mp4':
  Metadata:
    major_brand     : isom
    title           : Big Buck Bunny
    encoder         : Lavf58.29.100
  Duration: 00:01:30.50, start: 0.000000, bitrate: 4194 kb/s
  Stream #0:0[0x1](und): Video: h264 (High) (avc1 / 0x31637661), yuv420p(tv, bt709, progressive), 1920x1080 [SAR 1:1 DAR 16:9], 4000 kb/s, 24 fps, 24 tbr, 12288 tbn (default)
  Stream #0:1[0x2](eng): Audio: aac (LC) (mp4a / 0x6134706D), 48000 Hz, stereo, fltp, 128 kb/s (default)
Stream mapping:
  Stream #0:0 -> #0:0 (h264 (native) -> wrapped_avframe (native))
"""


def showinfo_line(n: int, *, rate: float = 24.0, frame_type: str = "P", size: int = 4096) -> str:
    key = 1 if frame_type == "I" else 0
    return (
        f"[Parsed_showinfo_0 @ 0x55d0c8a0] n:{n:4d} pts:{n * 512:7d} pts_time:{n / rate:.6g} "
        f"duration:512 pos:{48 + n * size} fmt:yuv420p sar:1/1 s:1920x1080 i:P "
        f"iskey:{key} type:{frame_type} checksum:9A3C11F0 plane_checksum:[1 2 3] pkt_size:{size}"
    )


@pytest.fixture(autouse=True)
def _fresh_settings():
    s.get_settings.cache_clear()
    yield
    s.get_settings.cache_clear()


@pytest.fixture()
def file_attrs() -> FileAttributes:
    return FileAttributes(
        name="clip.mp4",
        size_bytes=47_185_920,
        mime_type="video/mp4",
        last_modified_epoch_ms=1_700_000_000_000,
    )


@pytest.fixture()
def sample_header() -> str:
    return SAMPLE_HEADER


@pytest.fixture()
def capture_lines() -> List[str]:
    """Header, then 240 frames (10s at 24 fps) with a key frame every 48 frames."""
    lines = SAMPLE_HEADER.splitlines()
    for n in range(240):
        lines.append(showinfo_line(n, frame_type="I" if n % 48 == 0 else ("B" if n % 3 == 2 else "P")))
    return lines


@pytest.fixture()
def make_showinfo_line():
    return showinfo_line
