"""
Experience duration aggregation.

Sums the years covered by a candidate's work history. Entries with a
missing or unparsable start date are excluded rather than rejected, and an
absent end date means the role is ongoing. Overlapping roles are summed
additively unless ``merge_overlaps`` is requested.
"""

from datetime import date
from typing import Iterable, List, Optional, Tuple

from .dates import is_ongoing, parse_date
from .models import ExperienceEntry
from .normalize import round_half_up

DAYS_PER_YEAR = 365.25


def entry_range(entry: ExperienceEntry, today: date) -> Optional[Tuple[date, date]]:
    """Return (start, effective_end) for an entry, or None if it can't be scored."""
    start = parse_date(entry.start_date)
    if start is None:
        return None
    if is_ongoing(entry.end_date):
        return (start, today)
    end = parse_date(entry.end_date)
    if end is None:
        return None
    return (start, end)


def entry_years(entry: ExperienceEntry, today: Optional[date] = None) -> Optional[float]:
    """Unrounded years for one entry; None when the entry is skipped."""
    span = entry_range(entry, today or date.today())
    if span is None:
        return None
    start, end = span
    return max(0.0, (end - start).days / DAYS_PER_YEAR)


def _merge_ranges(ranges: List[Tuple[date, date]]) -> List[Tuple[date, date]]:
    merged: List[Tuple[date, date]] = []
    for start, end in sorted(r for r in ranges if r[1] > r[0]):
        if merged and start <= merged[-1][1]:
            if end > merged[-1][1]:
                merged[-1] = (merged[-1][0], end)
        else:
            merged.append((start, end))
    return merged


def compute_experience_years(
    entries: Iterable[ExperienceEntry],
    today: Optional[date] = None,
    merge_overlaps: bool = False,
) -> float:
    """
    Total years of experience, rounded to one decimal place.

    Args:
        entries: Work history entries
        today: Effective end date for ongoing roles (default: date.today())
        merge_overlaps: Count overlapping periods once instead of summing them

    Returns:
        Non-negative years; 0 for an empty list
    """
    today = today or date.today()

    if merge_overlaps:
        ranges = [r for r in (entry_range(e, today) for e in entries) if r is not None]
        total_days = sum((end - start).days for start, end in _merge_ranges(ranges))
        return round_half_up(total_days / DAYS_PER_YEAR, 1)

    total = 0.0
    for entry in entries:
        years = entry_years(entry, today)
        if years is not None:
            total += years
    return round_half_up(total, 1)
