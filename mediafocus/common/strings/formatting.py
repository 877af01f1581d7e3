# mediafocus/common/strings/formatting.py
from __future__ import annotations

import math

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB", "TB")


def format_duration(seconds: float | None) -> str | None:
    """`M:SS` below an hour, `H:MM:SS` above. Fractions are truncated."""
    if seconds is None or seconds < 0 or math.isinf(seconds) or math.isnan(seconds):
        return None
    total = int(seconds)
    hrs, rem = divmod(total, 3600)
    mins, secs = divmod(rem, 60)
    if hrs > 0:
        return f"{hrs}:{mins:02d}:{secs:02d}"
    return f"{mins}:{secs:02d}"


def format_file_size(size_bytes: int) -> str:
    """1024-based human size, e.g. 1536 -> '1.5 KB'."""
    if size_bytes <= 0:
        return "0 Bytes"
    i = min(int(math.floor(math.log(size_bytes, 1024))), len(_SIZE_UNITS) - 1)
    value = round(size_bytes / (1024 ** i), 2)
    if value == int(value):
        return f"{int(value)} {_SIZE_UNITS[i]}"
    return f"{value:g} {_SIZE_UNITS[i]}"
