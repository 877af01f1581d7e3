# mediafocus/common/iter.py
from __future__ import annotations

import math
from typing import Sequence, TypeVar

T = TypeVar("T")


def page_count(total: int, page_size: int) -> int:
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return max(1, math.ceil(total / page_size))


def page_slice(items: Sequence[T], page: int, page_size: int) -> list[T]:
    """1-based page of `items`; pages past the end are empty."""
    if page < 1:
        raise ValueError("page must be >= 1")
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    start = (page - 1) * page_size
    return list(items[start:start + page_size])
