"""
Profile and score data structures consumed and produced by the scoring engine.

Profile data arrives from the profile store as JSON with camelCase keys
(``startDate``, ``fieldOfStudy``, ``hasPrimaryCV``); the ``from_dict``
constructors accept those as well as snake_case keys.
"""

from dataclasses import dataclass, field, asdict
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

from .normalize import split_full_name

DateLike = Union[date, str, None]


class DegreeLevel(Enum):
    """Ordinal qualification tiers. The value is the qualification score."""

    DOCTORATE = 10
    MASTER = 8
    BACHELOR = 6
    DIPLOMA = 4
    OTHER = 3
    CERTIFICATE = 2

    @property
    def score(self) -> int:
        return self.value

    @classmethod
    def parse(cls, value: Any) -> Optional["DegreeLevel"]:
        """Accept a DegreeLevel, its name (any case) or None."""
        if value is None or isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().upper()
            if not key:
                return None
            try:
                return cls[key]
            except KeyError:
                raise ValueError(f"Unknown degree level: {value!r}")
        raise ValueError(f"Unknown degree level: {value!r}")


def _pick(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return default


@dataclass
class ExperienceEntry:
    title: str = ""
    company: str = ""
    location: str = ""
    start_date: DateLike = None
    end_date: DateLike = None  # None means ongoing
    description: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ExperienceEntry":
        return cls(
            title=_pick(data, "title", default="") or "",
            company=_pick(data, "company", default="") or "",
            location=_pick(data, "location", default="") or "",
            start_date=_pick(data, "start_date", "startDate", "start"),
            end_date=_pick(data, "end_date", "endDate", "end"),
            description=_pick(data, "description", default="") or "",
        )


@dataclass
class EducationEntry:
    institution: str = ""
    degree: str = ""
    field_of_study: str = ""
    start_date: DateLike = None
    end_date: DateLike = None
    degree_level: Optional[DegreeLevel] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EducationEntry":
        return cls(
            institution=_pick(data, "institution", default="") or "",
            degree=_pick(data, "degree", default="") or "",
            field_of_study=_pick(data, "field_of_study", "fieldOfStudy", default="") or "",
            start_date=_pick(data, "start_date", "startDate", "start"),
            end_date=_pick(data, "end_date", "endDate", "end"),
            degree_level=DegreeLevel.parse(_pick(data, "degree_level", "degreeLevel")),
        )


@dataclass
class ProfileSnapshot:
    """Read-only view of a candidate profile as seen by the scoring engine."""

    full_name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    headline: str = ""
    experience: List[ExperienceEntry] = field(default_factory=list)
    education: List[EducationEntry] = field(default_factory=list)
    has_primary_cv: bool = False
    has_primary_photo: bool = False

    @property
    def first_name(self) -> str:
        return split_full_name(self.full_name)[0]

    @property
    def last_name(self) -> str:
        return split_full_name(self.full_name)[1]

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProfileSnapshot":
        experience = _pick(data, "experience", default=None) or []
        education = _pick(data, "education", default=None) or []
        return cls(
            full_name=_pick(data, "full_name", "fullName", default="") or "",
            email=_pick(data, "email", default="") or "",
            phone=_pick(data, "phone", default="") or "",
            location=_pick(data, "location", default="") or "",
            headline=_pick(data, "headline", default="") or "",
            experience=[
                e if isinstance(e, ExperienceEntry) else ExperienceEntry.from_dict(e)
                for e in experience
            ],
            education=[
                e if isinstance(e, EducationEntry) else EducationEntry.from_dict(e)
                for e in education
            ],
            has_primary_cv=bool(_pick(data, "has_primary_cv", "hasPrimaryCV", default=False)),
            has_primary_photo=bool(_pick(data, "has_primary_photo", "hasPrimaryPhoto", default=False)),
        )


@dataclass(frozen=True)
class MatchScores:
    """The four numbers stored on a matching record."""

    skill_score: float
    experience_score: float
    qualification_score: float
    total_score: float

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)
