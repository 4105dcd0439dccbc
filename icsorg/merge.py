"""Combine normalized masters and occurrences into one event stream."""
from __future__ import annotations

from typing import Iterable, Tuple

from .model import NormalizedEvent

__all__ = ["merge_window"]


def merge_window(
    masters: Iterable[NormalizedEvent],
    occurrences: Iterable[NormalizedEvent],
    chronological: bool = False,
) -> Tuple[NormalizedEvent, ...]:
    """Return all master events followed by all occurrences.

    Each group keeps its own order and nothing is sorted by date unless
    ``chronological`` is set, which applies a stable sort on (start, end).
    """
    merged = tuple(masters) + tuple(occurrences)
    if chronological:
        return tuple(sorted(merged, key=lambda e: (e.start, e.end)))
    return merged
