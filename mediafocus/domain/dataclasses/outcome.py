# mediafocus/domain/dataclasses/outcome.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True)
class Computed(Generic[T]):
    value: T

    @property
    def is_computed(self) -> bool:
        return True


@dataclass(frozen=True)
class NotApplicable:
    """A value that cannot be derived from what was observed. Not the same as zero."""
    reason: str

    @property
    def is_computed(self) -> bool:
        return False


Outcome = Union[Computed[T], NotApplicable]
