# src/fxrate/domain/pagination.py
"""Deterministic slicing of an ordered result set into pages."""
from __future__ import annotations

from typing import Sequence, TypeVar

from fxrate.domain.models import PaginatedResult

T = TypeVar("T")


def paginate(ordered_items: Sequence[T], page: int, page_size: int) -> PaginatedResult[T]:
    """
    Return the 1-based page of ordered_items.

    A page past the end yields an empty items list rather than an error.
    page and page_size are expected to be >= 1 (validated by callers).
    """
    offset = (page - 1) * page_size
    return PaginatedResult(
        items=list(ordered_items[offset:offset + page_size]),
        page=page,
        page_size=page_size,
        total_items=len(ordered_items),
    )
