import math
from typing import Any, Tuple


def normalize_text(s: str) -> str:
    return " ".join(s.strip().lower().split())


def is_present(value: Any) -> bool:
    """A scalar profile field counts when it is a non-blank string."""
    return isinstance(value, str) and value.strip() != ""


def normalize_degree(degree: str) -> str:
    return normalize_text(degree)


def split_full_name(full_name: str) -> Tuple[str, str]:
    """Split a full name into (first_name, last_name).

    The first whitespace-separated part is the first name; everything
    after it is the last name.
    """
    if not full_name or not full_name.strip():
        return ("", "")
    parts = full_name.split()
    if len(parts) == 1:
        return (parts[0], "")
    return (parts[0], " ".join(parts[1:]))


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves away from zero for non-negative values (2.25 -> 2.3)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor
