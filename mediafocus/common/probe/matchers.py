# mediafocus/common/probe/matchers.py
"""
Stateless matchers over the engine's human-readable probe banner, e.g.

    Input #0, mov,mp4,m4a,3gp,3g2,mj2, from 'clip.mp4':
      Metadata:
        title           : Big Buck Bunny
        encoder         : Lavf58.29.100
      Duration: 00:01:30.50, start: 0.000000, bitrate: 4194 kb/s
      Stream #0:0[0x1](und): Video: h264 (High) (avc1 / 0x31637661), yuv420p(tv, bt709, progressive), 1920x1080 [SAR 1:1 DAR 16:9], 4000 kb/s, 24 fps, 24 tbr, 12288 tbn (default)
      Stream #0:1[0x2](eng): Audio: aac (LC) (mp4a / 0x6134706D), 48000 Hz, stereo, fltp, 128 kb/s (default)

Every matcher takes a text (a single line, a stream descriptor, or the whole
joined log) and returns a value or None. Matchers never raise on malformed
input. CONTAINER_RULES, VIDEO_RULES and AUDIO_RULES list them in priority
order per field.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Callable, Dict, Optional, Tuple

from mediafocus.common.probe.ratios import parse_rate
from mediafocus.common.strings.splitters import split_top_level
from mediafocus.domain.enums.stream_kind import StreamKind

# ---- patterns ------------------------------------------------------------------
_DURATION_RE = re.compile(r"Duration:\s*(\d+):(\d+):(\d+(?:\.\d+)?)")
_START_RE = re.compile(r"\bstart:\s*(-?\d+(?:\.\d+)?)")
_OVERALL_BITRATE_RE = re.compile(r"Duration:[^\r\n]*?bitrate:\s*(\d+)\s*kb/s")
_CONTAINER_RE = re.compile(r"Input\s+#\d+,\s*(.+?),\s*from\s+['\"]")
_TITLE_RE = re.compile(r"^\s*title\s*:\s*(.+?)\s*$", re.MULTILINE)
_ENCODER_RE = re.compile(r"^\s*encoder\s*:\s*(.+?)\s*$", re.MULTILINE)

_RESOLUTION_RE = re.compile(r"(?<![\dA-Za-z])(\d{3,5})x(\d{3,5})(?!\d)")
_SAR_DAR_RE = re.compile(r"SAR\s+(\d+:\d+)\s+DAR\s+(\d+:\d+)")
_FPS_RE = re.compile(r"(\d+(?:\.\d+)?)\s*fps\b(?!=)")
_TBR_RE = re.compile(r"(\d+(?:\.\d+)?k?)\s*tbr\b")
_TBN_RE = re.compile(r"(\d+(?:\.\d+)?k?)\s*tbn\b")
_TBC_RE = re.compile(r"(\d+(?:\.\d+)?k?)\s*tbc\b")
_KBPS_RE = re.compile(r"(\d+)\s*kb/s")

_CODEC_RE = re.compile(r"^\s*([A-Za-z0-9_.\-]+)")
_PAREN_RE = re.compile(r"\(([^()]*)\)")
_PIXEL_FORMAT_RE = re.compile(
    r"(?:^|,)\s*((?:yuvj|yuva|yuv|nv|p0|rgba|rgb|bgra|bgr|argb|abgr|gbrap|gbrp|gray|ya|xyz|pal|mono)[a-z0-9_]*)(?:\(([^)]*)\))?"
)
_PIXEL_DEPTH_RE = re.compile(r"p(\d{1,2})(?:le|be)$")

_SAMPLE_RATE_RE = re.compile(r"(\d+)\s*Hz\b")
_CHANNEL_LAYOUT_RE = re.compile(r"\d+\s*Hz\s*,\s*([^,]+?)\s*(?:,|$)")
_CHANNELS_RE = re.compile(r"^(\d+)\s*channels?\b")
_SAMPLE_FORMAT_RE = re.compile(r"(?:^|,)\s*(u8p?|s16p?|s32p?|s64p?|fltp?|dblp?)\b")
_EXPLICIT_BITS_RE = re.compile(r"\((\d+)\s*bit\)")

_DESCRIPTOR_RE: Dict[StreamKind, re.Pattern[str]] = {
    StreamKind.video: re.compile(r"\bVideo:\s*([^\r\n]*)"),
    StreamKind.audio: re.compile(r"\bAudio:\s*([^\r\n]*)"),
}
_STREAM_LANGUAGE_RE: Dict[StreamKind, re.Pattern[str]] = {
    StreamKind.video: re.compile(r"Stream\s+#\d+:\d+(?:\[[^\]]*\])?\(([A-Za-z]{2,3})\)\s*:\s*Video:"),
    StreamKind.audio: re.compile(r"Stream\s+#\d+:\d+(?:\[[^\]]*\])?\(([A-Za-z]{2,3})\)\s*:\s*Audio:"),
}

_COLOR_RANGES = {"tv", "pc", "limited", "full"}
_FIELD_ORDERS = {"progressive", "top first", "bottom first", "top coded first (swapped)", "bottom coded first (swapped)"}

_LAYOUT_CHANNELS: Dict[str, int] = {
    "mono": 1,
    "stereo": 2,
    "2.1": 3,
    "3.0": 3,
    "3.0(back)": 3,
    "4.0": 4,
    "quad": 4,
    "quad(side)": 4,
    "3.1": 4,
    "5.0": 5,
    "5.0(side)": 5,
    "4.1": 5,
    "5.1": 6,
    "5.1(side)": 6,
    "6.0": 6,
    "hexagonal": 6,
    "6.1": 7,
    "7.0": 7,
    "7.1": 8,
    "7.1(wide)": 8,
    "octagonal": 8,
}
_SAMPLE_FORMAT_BITS: Dict[str, int] = {"u8": 8, "s16": 16, "s32": 32, "s64": 64, "flt": 32, "dbl": 64}


# ---- tiny helpers ----------------------------------------------------------------
def _first(pattern: re.Pattern[str], text: Optional[str], group: int = 1) -> Optional[str]:
    if not text:
        return None
    m = pattern.search(text)
    if not m:
        return None
    val = m.group(group)
    return val.strip() if val is not None else None


def _to_int(x: Optional[str]) -> Optional[int]:
    try:
        if x is None:
            return None
        return int(x)
    except ValueError:
        return None


def _to_float(x: Optional[str]) -> Optional[float]:
    try:
        if x is None:
            return None
        return float(x)
    except ValueError:
        return None


# ---- container-level (whole text) ----------------------------------------------
def match_duration(text: str) -> Optional[float]:
    """`Duration: HH:MM:SS.ff` -> H*3600 + M*60 + S. Shape is trusted; ranges are not checked."""
    if not text:
        return None
    m = _DURATION_RE.search(text)
    if not m:
        return None
    try:
        hours, minutes = int(m.group(1)), int(m.group(2))
        seconds = float(m.group(3))
    except ValueError:
        return None
    return hours * 3600 + minutes * 60 + seconds


def match_start_time(text: str) -> Optional[float]:
    return _to_float(_first(_START_RE, text))


def match_overall_bitrate(text: str) -> Optional[int]:
    return _to_int(_first(_OVERALL_BITRATE_RE, text))


def match_container(text: str) -> Optional[str]:
    return _first(_CONTAINER_RE, text)


def match_title(text: str) -> Optional[str]:
    return _first(_TITLE_RE, text) or None


def match_encoder(text: str) -> Optional[str]:
    return _first(_ENCODER_RE, text) or None


def match_resolution(text: str) -> Optional[Tuple[int, int]]:
    """First `WxH` with both sides 3-5 digits."""
    if not text:
        return None
    m = _RESOLUTION_RE.search(text)
    if not m:
        return None
    return int(m.group(1)), int(m.group(2))


def match_sample_aspect_ratio(text: str) -> Optional[str]:
    return _first(_SAR_DAR_RE, text, 1)


def match_display_aspect_ratio(text: str) -> Optional[str]:
    return _first(_SAR_DAR_RE, text, 2)


def match_fps(text: str) -> Optional[float]:
    return _to_float(_first(_FPS_RE, text))


def match_tbr(text: str) -> Optional[str]:
    return _first(_TBR_RE, text)


def match_tbn(text: str) -> Optional[str]:
    return _first(_TBN_RE, text)


def match_tbc(text: str) -> Optional[str]:
    return _first(_TBC_RE, text)


def match_tbr_rate(text: str) -> Optional[float]:
    """tbr read as a frame rate; fallback when no `fps` token is printed."""
    return parse_rate(match_tbr(text))


def match_kbps(text: str) -> Optional[int]:
    return _to_int(_first(_KBPS_RE, text))


# ---- stream descriptors ----------------------------------------------------------
def stream_descriptor(text: str, kind: StreamKind) -> Optional[str]:
    """Text following the first `Video:` / `Audio:` keyword, up to end of line."""
    pattern = _DESCRIPTOR_RE.get(kind)
    if pattern is None or not text:
        return None
    return _first(pattern, text)


def video_descriptor(text: str) -> Optional[str]:
    return stream_descriptor(text, StreamKind.video)


def audio_descriptor(text: str) -> Optional[str]:
    return stream_descriptor(text, StreamKind.audio)


def match_codec(descriptor: str) -> Optional[str]:
    return _first(_CODEC_RE, descriptor)


def match_profile(descriptor: str) -> Optional[str]:
    """First parenthesised group of the codec token that is not a `(tag / 0x...)` fourcc."""
    if not descriptor:
        return None
    tokens = split_top_level(descriptor)
    if not tokens:
        return None
    for group in _PAREN_RE.findall(tokens[0]):
        group = group.strip()
        if not group or ("/" in group and "0x" in group):
            continue
        return group
    return None


def _pixel_match(descriptor: str) -> Optional[re.Match[str]]:
    if not descriptor:
        return None
    return _PIXEL_FORMAT_RE.search(descriptor)


def match_pixel_format(descriptor: str) -> Optional[str]:
    m = _pixel_match(descriptor)
    return m.group(1) if m else None


def _pixel_attributes(descriptor: str) -> Tuple[str, ...]:
    m = _pixel_match(descriptor)
    if not m or not m.group(2):
        return ()
    return tuple(p.strip().lower() for p in m.group(2).split(",") if p.strip())


def match_color_range(descriptor: str) -> Optional[str]:
    for attr in _pixel_attributes(descriptor):
        if attr in _COLOR_RANGES:
            return attr
    return None


def match_color_space(descriptor: str) -> Optional[str]:
    # e.g. "bt709" or "bt709/bt709/iec61966-2-1" (space/primaries/transfer)
    for attr in _pixel_attributes(descriptor):
        if attr in _COLOR_RANGES or attr in _FIELD_ORDERS:
            continue
        space = attr.split("/", 1)[0].strip()
        if space and space != "unknown":
            return space
    return None


def match_video_bit_depth(descriptor: str) -> Optional[int]:
    pix = match_pixel_format(descriptor)
    if not pix:
        return None
    m = _PIXEL_DEPTH_RE.search(pix)
    if m:
        return _to_int(m.group(1))
    if pix.startswith(("yuv", "yuvj", "nv12", "nv21")):
        return 8
    return None


def match_sample_rate(descriptor: str) -> Optional[int]:
    return _to_int(_first(_SAMPLE_RATE_RE, descriptor))


def match_channel_layout(descriptor: str) -> Optional[str]:
    return _first(_CHANNEL_LAYOUT_RE, descriptor)


def match_channel_count(descriptor: str) -> Optional[int]:
    layout = match_channel_layout(descriptor)
    if not layout:
        return None
    label = layout.lower()
    if label in _LAYOUT_CHANNELS:
        return _LAYOUT_CHANNELS[label]
    return _to_int(_first(_CHANNELS_RE, label))


def match_sample_format(descriptor: str) -> Optional[str]:
    return _first(_SAMPLE_FORMAT_RE, descriptor)


def match_audio_bit_depth(descriptor: str) -> Optional[int]:
    explicit = _to_int(_first(_EXPLICIT_BITS_RE, descriptor))
    if explicit:
        return explicit
    fmt = match_sample_format(descriptor)
    if not fmt:
        return None
    return _SAMPLE_FORMAT_BITS.get(fmt.rstrip("p"))


def match_stream_language(text: str, kind: StreamKind) -> Optional[str]:
    pattern = _STREAM_LANGUAGE_RE.get(kind)
    if pattern is None:
        return None
    return _first(pattern, text)


def match_video_language(text: str) -> Optional[str]:
    return match_stream_language(text, StreamKind.video)


def match_audio_language(text: str) -> Optional[str]:
    return match_stream_language(text, StreamKind.audio)


# ---- registry ----------------------------------------------------------------------
class Scope(StrEnum):
    text = "text"    # whole joined log
    video = "video"  # video stream descriptor only
    audio = "audio"  # audio stream descriptor only


@dataclass(frozen=True)
class FieldRule:
    field: str
    matcher: Callable[[str], Any]
    scope: Scope = Scope.text


# Order is priority: the first rule yielding a value for a field wins.
CONTAINER_RULES: Tuple[FieldRule, ...] = (
    FieldRule("duration_seconds", match_duration),
    FieldRule("start_time_seconds", match_start_time),
    FieldRule("container_format", match_container),
    FieldRule("title", match_title),
    FieldRule("encoder", match_encoder),
    FieldRule("overall_bitrate_kbps", match_overall_bitrate),
)

VIDEO_RULES: Tuple[FieldRule, ...] = (
    FieldRule("codec", match_codec, Scope.video),
    FieldRule("profile", match_profile, Scope.video),
    FieldRule("resolution", match_resolution, Scope.video),
    FieldRule("resolution", match_resolution, Scope.text),
    FieldRule("pixel_format", match_pixel_format, Scope.video),
    FieldRule("color_space", match_color_space, Scope.video),
    FieldRule("color_range", match_color_range, Scope.video),
    FieldRule("bit_depth_bits", match_video_bit_depth, Scope.video),
    FieldRule("sample_aspect_ratio", match_sample_aspect_ratio, Scope.video),
    FieldRule("display_aspect_ratio", match_display_aspect_ratio, Scope.video),
    FieldRule("frame_rate_fps", match_fps, Scope.video),
    FieldRule("frame_rate_fps", match_fps, Scope.text),
    FieldRule("frame_rate_fps", match_tbr_rate, Scope.text),
    FieldRule("time_base_rational", match_tbr, Scope.text),
    FieldRule("time_base_numerator", match_tbn, Scope.text),
    FieldRule("time_base_clock", match_tbc, Scope.text),
    FieldRule("bitrate_kbps", match_kbps, Scope.video),
    FieldRule("language", match_video_language, Scope.text),
)

AUDIO_RULES: Tuple[FieldRule, ...] = (
    FieldRule("codec", match_codec, Scope.audio),
    FieldRule("profile", match_profile, Scope.audio),
    FieldRule("sample_rate_hz", match_sample_rate, Scope.audio),
    FieldRule("sample_format", match_sample_format, Scope.audio),
    FieldRule("bit_depth_bits", match_audio_bit_depth, Scope.audio),
    FieldRule("channel_layout_label", match_channel_layout, Scope.audio),
    FieldRule("channel_count", match_channel_count, Scope.audio),
    FieldRule("bitrate_kbps", match_kbps, Scope.audio),
    FieldRule("language", match_audio_language, Scope.text),
)
