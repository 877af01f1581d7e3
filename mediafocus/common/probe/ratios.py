# mediafocus/common/probe/ratios.py
from __future__ import annotations

import math
from typing import Optional, Tuple


def reduce_ratio(width: int, height: int) -> Optional[Tuple[int, int]]:
    """Divide both sides by their gcd. Non-positive input has no ratio."""
    if width <= 0 or height <= 0:
        return None
    divisor = math.gcd(width, height)
    return width // divisor, height // divisor


def reduce_aspect_ratio(width: int, height: int) -> Optional[str]:
    reduced = reduce_ratio(width, height)
    if reduced is None:
        return None
    return f"{reduced[0]}:{reduced[1]}"


def parse_rate(rate: Optional[str]) -> Optional[float]:
    """
    Engine rate tokens: '23.98', '30000/1001', '90k' (tbn/tbc shorthand for 90000).
    """
    if not rate:
        return None
    token = rate.strip().lower()
    try:
        if "/" in token:
            n, d = token.split("/", 1)
            num, den = float(n), float(d)
            if den == 0:
                return None
            return num / den
        if token.endswith("k"):
            return float(token[:-1]) * 1000.0
        return float(token)
    except ValueError:
        return None
