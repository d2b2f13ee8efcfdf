"""Lenient date parsing for candidate-entered experience and education dates."""

from datetime import date, datetime
from typing import Any, Optional

ONGOING_SENTINELS = {"present", "current", "ongoing", "now"}


def is_ongoing(value: Any) -> bool:
    """True when an end date means "still in this role"."""
    if value is None:
        return True
    if isinstance(value, str):
        text = value.strip().lower()
        return text == "" or text in ONGOING_SENTINELS
    return False


def parse_date(value: Any) -> Optional[date]:
    """
    Parse a date, datetime or ISO-8601 string into a date.

    Returns None for missing or unparsable input instead of raising.
    Accepts "YYYY-MM-DD", full ISO timestamps (with or without a
    trailing "Z") and "YYYY-MM" month precision.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    try:
        return datetime.strptime(text, "%Y-%m").date()
    except ValueError:
        return None
