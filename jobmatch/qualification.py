"""
Qualification classification.

An education entry is scored by its ``degree_level`` when one was captured
at data entry. Otherwise the free-text degree is decoded by keyword tiers,
checked top-down as plain substrings so the first (highest) matching
tier wins; short keywords such as "ma" also fire inside longer words
("diploma"). Degree text
with no keyword match still counts as an unclassified qualification.
"""

from typing import Iterable, List, Optional, Tuple

from .models import DegreeLevel, EducationEntry
from .normalize import normalize_degree

# Ordered top-down; first matching tier wins.
DEGREE_TIERS: List[Tuple[DegreeLevel, Tuple[str, ...]]] = [
    (DegreeLevel.DOCTORATE, ("phd", "doctorate", "doctoral")),
    (DegreeLevel.MASTER, ("master", "mba", "msc", "ma")),
    (DegreeLevel.BACHELOR, ("bachelor", "bsc", "ba", "b.tech", "b.eng")),
    (DegreeLevel.DIPLOMA, ("diploma", "associate")),
    (DegreeLevel.CERTIFICATE, ("certificate", "cert")),
]


def classify_degree(degree: Optional[str]) -> Optional[DegreeLevel]:
    """Decode free-text degree into a DegreeLevel; None for blank text."""
    if not degree or not degree.strip():
        return None
    text = normalize_degree(degree)
    for level, keywords in DEGREE_TIERS:
        if any(k in text for k in keywords):
            return level
    return DegreeLevel.OTHER


def entry_level(entry: EducationEntry) -> Optional[DegreeLevel]:
    if entry.degree_level is not None:
        return entry.degree_level
    return classify_degree(entry.degree)


def highest_degree_level(entries: Iterable[EducationEntry]) -> Optional[DegreeLevel]:
    """Best qualification across entries, or None without usable data."""
    levels = [lvl for lvl in (entry_level(e) for e in entries) if lvl is not None]
    if not levels:
        return None
    return max(levels, key=lambda lvl: lvl.score)


def compute_qualification_score(entries: Iterable[EducationEntry]) -> int:
    """Ordinal qualification score in {0, 2, 3, 4, 6, 8, 10}."""
    best = highest_degree_level(entries)
    return best.score if best is not None else 0
