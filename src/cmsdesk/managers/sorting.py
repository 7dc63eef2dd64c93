"""Client-side ordering for list views."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

SORT_FIELDS = ("priority", "title", "createdAt", "updatedAt")

T = TypeVar("T")


def _sort_key(sort_by: str) -> Callable[[Any], Any]:
    """Key function for ``sort_by``; unknown fields sort by priority."""
    if sort_by == "title":
        return lambda r: r.title.lower()
    if sort_by == "createdAt":
        return lambda r: r.created_at
    if sort_by == "updatedAt":
        return lambda r: r.updated_at
    return lambda r: r.priority or 0


def sort_records(records: list[T], sort_by: str = "priority", descending: bool = True) -> list[T]:
    """Return ``records`` ordered by one of ``SORT_FIELDS``.

    Unknown fields fall back to priority.  The sort is stable.
    """
    return sorted(records, key=_sort_key(sort_by), reverse=descending)
