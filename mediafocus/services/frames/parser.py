# mediafocus/services/frames/parser.py
"""
Per-frame report lines, as printed by the engine's `showinfo` filter or an
equivalent frame dump:

    [Parsed_showinfo_0 @ 0x55d0] n:  12 pts:  6144 pts_time:0.5  ... iskey:0 type:P ...
    n:120 pts_time:4.000 type:I iskey:1 pkt_size:51200

A line is a frame report when it carries the `n:` marker token. Each attribute
is extracted on its own; anything missing falls back to a default instead of
rejecting the line. Only a missing frame index drops the line.
"""
from __future__ import annotations

import re
from typing import Callable, Dict, Iterable, Optional, Sequence, Tuple

from mediafocus.common.logging import get_logger
from mediafocus.domain.entities.frame import FrameRecord
from mediafocus.domain.enums.frame_type import FrameType
from mediafocus.services.analytics.derived import ASSUMED_FRAME_RATE, estimate_frame_bitrate_kbps

logger = get_logger(__name__)

FRAME_MARKER_RE = re.compile(r"(?<![\w.])n:")
_FRAME_INDEX_RE = re.compile(r"(?<![\w.])n:\s*(\d+)")
_PTS_TIME_RE = re.compile(r"\bpts_time[:=]\s*(-?\d+(?:\.\d+)?)")

# Alternates in priority order; the first pattern that matches wins.
_TYPE_RES: Tuple[re.Pattern[str], ...] = (
    re.compile(r"(?<![\w.])type:\s*([IPB])\b"),
    re.compile(r"\bpict_type[:=]\s*([IPB])\b"),
)
_KEY_RES: Tuple[re.Pattern[str], ...] = (
    re.compile(r"\biskey:\s*([01])\b"),
    re.compile(r"\bkey_frame[:=]\s*([01])\b"),
)
_SIZE_RES: Tuple[re.Pattern[str], ...] = (
    re.compile(r"\bpkt_size[:=]\s*(\d+)\b"),
)


def _first_of(patterns: Sequence[re.Pattern[str]], line: str) -> Optional[str]:
    for pattern in patterns:
        m = pattern.search(line)
        if m:
            return m.group(1)
    return None


def is_frame_line(line: str) -> bool:
    return bool(line) and FRAME_MARKER_RE.search(line) is not None


def match_frame_number(line: str) -> Optional[int]:
    m = _FRAME_INDEX_RE.search(line)
    return int(m.group(1)) if m else None


def match_pts_time(line: str) -> Optional[float]:
    m = _PTS_TIME_RE.search(line)
    if not m:
        return None
    try:
        return float(m.group(1))
    except ValueError:
        return None


def match_frame_type(line: str) -> Optional[FrameType]:
    return FrameType.parse(_first_of(_TYPE_RES, line))


def match_key_flag(line: str) -> Optional[bool]:
    flag = _first_of(_KEY_RES, line)
    if flag is None:
        return None
    return flag == "1"


def match_packet_size(line: str) -> Optional[int]:
    size = _first_of(_SIZE_RES, line)
    return int(size) if size is not None else None


class FrameLineParser:
    """
    Turns frame-report lines into FrameRecord values and keeps the run's timeline.

    - parse_line() is pure: one line in, a record (or None) out
    - feed() also stores the record; a duplicate frame number overwrites the
      earlier record, so re-feeding the same line changes nothing
    - frames() returns the timeline ordered by frame number

    `frame_rate` is the true rate when it is already known; otherwise the
    assumed rate (30 fps) is used for derived timestamps and bitrates.
    """

    def __init__(
        self,
        frame_rate: Optional[float] = None,
        *,
        assumed_frame_rate: float = ASSUMED_FRAME_RATE,
        on_malformed: Optional[Callable[[str], None]] = None,
    ) -> None:
        if assumed_frame_rate <= 0:
            raise ValueError("assumed_frame_rate must be positive")
        self._assumed = assumed_frame_rate
        self._rate = frame_rate if frame_rate and frame_rate > 0 else None
        self._records: Dict[int, FrameRecord] = {}
        self._on_malformed = on_malformed
        self.frame_lines = 0
        self.malformed_lines = 0
        self.duplicates = 0

    @property
    def frame_rate(self) -> float:
        return self._rate or self._assumed

    @property
    def frame_rate_assumed(self) -> bool:
        return self._rate is None

    def set_frame_rate(self, frame_rate: Optional[float]) -> None:
        """Adopt the true rate once the probe banner revealed it."""
        if frame_rate and frame_rate > 0:
            self._rate = frame_rate

    def parse_line(self, line: str) -> Optional[FrameRecord]:
        if not is_frame_line(line):
            return None
        frame_number = match_frame_number(line)
        if frame_number is None:
            return None

        rate = self.frame_rate
        frame_type = match_frame_type(line) or FrameType.P
        pts = match_pts_time(line)
        if pts is None:
            pts = frame_number / rate
        is_key = match_key_flag(line)
        if is_key is None:
            is_key = frame_type == FrameType.I
        size = match_packet_size(line)
        bitrate = estimate_frame_bitrate_kbps(size, rate) if frame_number > 0 else None

        return FrameRecord(
            frame_number=frame_number,
            presentation_time_seconds=pts,
            frame_type=frame_type,
            is_key_frame=is_key,
            size_bytes=size,
            estimated_bitrate_kbps=bitrate,
        )

    def feed(self, line: str) -> Optional[FrameRecord]:
        if not is_frame_line(line):
            return None
        self.frame_lines += 1
        record = self.parse_line(line)
        if record is None:
            self.malformed_lines += 1
            if self._on_malformed is not None:
                self._on_malformed(line)
            return None
        if record.frame_number in self._records:
            self.duplicates += 1
        self._records[record.frame_number] = record
        return record

    def frames(self) -> Tuple[FrameRecord, ...]:
        return tuple(self._records[n] for n in sorted(self._records))

    def __len__(self) -> int:
        return len(self._records)


def parse_lines(
    lines: Iterable[str],
    frame_rate: Optional[float] = None,
    *,
    assumed_frame_rate: float = ASSUMED_FRAME_RATE,
) -> Tuple[FrameRecord, ...]:
    """Parse a finished capture into its ordered frame timeline."""
    parser = FrameLineParser(frame_rate, assumed_frame_rate=assumed_frame_rate)
    for line in lines:
        parser.feed(line)
    if parser.malformed_lines:
        logger.debug("parse_lines: dropped %d malformed frame line(s)", parser.malformed_lines)
    return parser.frames()
