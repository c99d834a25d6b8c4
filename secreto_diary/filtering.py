"""
Entry filtering for the diary dashboard and the entries API.

Filtering is a pure function over already-retrieved entries: the full list
is re-scanned on every call, which is fine at personal-diary scale.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime, time

from .models import DateMode, DiaryEntry, FilterSpec


def filter_entries(
    entries: Iterable[DiaryEntry], spec: FilterSpec
) -> list[DiaryEntry]:
    """
    Return the entries matching every dimension of the filter spec.

    Args:
        entries: The entries to filter; never mutated
        spec: The search and filter criteria

    Returns:
        A new list with the matching entries in their original order
    """
    return [entry for entry in entries if matches(entry, spec)]


def matches(entry: DiaryEntry, spec: FilterSpec) -> bool:
    """Check a single entry against the spec, cheapest predicates first."""
    if spec.term and not _matches_term(entry, spec.term):
        return False
    if spec.mood is not None and entry.mood != spec.mood:
        return False
    return _matches_date(entry, spec)


def _matches_term(entry: DiaryEntry, term: str) -> bool:
    needle = term.lower()
    return needle in entry.title.lower() or needle in entry.content.lower()


def _matches_date(entry: DiaryEntry, spec: FilterSpec) -> bool:
    # A mode without its parameter does not constrain anything
    if spec.date_mode == DateMode.DAY and spec.day:
        return entry.entry_date.isoformat() == spec.day.isoformat()

    if spec.date_mode == DateMode.MONTH and spec.month:
        return (entry.entry_date.year, entry.entry_date.month) == spec.month

    if spec.date_mode == DateMode.RANGE and spec.start and spec.end:
        moment = datetime.combine(entry.entry_date, time.min)
        start = datetime.combine(spec.start, time.min)
        end = datetime.combine(spec.end, time.max)
        return start <= moment <= end

    return True


def sort_entries(entries: Sequence[DiaryEntry]) -> list[DiaryEntry]:
    """Newest entry date first, ties broken by newest creation time."""
    return sorted(
        entries, key=lambda e: (e.entry_date, e.created_at), reverse=True
    )
