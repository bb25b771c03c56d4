# src/fxrate/domain/gaps.py
"""
Gap Analysis - Missing Date Ranges

Computes which calendar days of a requested range are not covered by a
cache entry, grouped into maximal contiguous ranges.

Files that USE this module:
- fxrate.application.rates_service (decides which sub-ranges to fetch)
- tests.test_gaps (unit tests)

Files that this module USES:
- fxrate.domain.models (GapRange)
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import AbstractSet, Iterator, List

from fxrate.domain.models import GapRange

ONE_DAY = timedelta(days=1)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day from start to end inclusive."""
    current = start
    while current <= end:
        yield current
        current += ONE_DAY


def compute_gaps(existing_dates: AbstractSet[date], start: date, end: date) -> List[GapRange]:
    """
    Find the maximal runs of days in [start, end] absent from existing_dates.

    Args:
        existing_dates: Days already cached
        start: First requested day
        end: Last requested day (inclusive)

    Returns:
        Sorted, non-overlapping, non-adjacent GapRanges; empty if fully covered

    Raises:
        ValueError: If start is after end
    """
    if start > end:
        raise ValueError(f"start {start} is after end {end}")

    gaps: List[GapRange] = []
    run_start = None
    for day in iter_days(start, end):
        if day in existing_dates:
            if run_start is not None:
                gaps.append(GapRange(run_start, day - ONE_DAY))
                run_start = None
        elif run_start is None:
            run_start = day

    if run_start is not None:
        gaps.append(GapRange(run_start, end))
    return gaps
