"""
Score composition.

Blends experience years and qualification tier into the bounded skill
score and derives the experience and total scores stored on a matching
record. All scores except the total live on a 0-10 scale; the total is
a weighted blend of the three, scaled to 0-100.
"""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from .experience import compute_experience_years, entry_years
from .logger import get_logger
from .models import EducationEntry, ExperienceEntry, MatchScores
from .normalize import round_half_up
from .qualification import compute_qualification_score, entry_level

logger = get_logger()

SKILL_EXPERIENCE_WEIGHT = 0.5
SKILL_QUALIFICATION_WEIGHT = 0.5
SCORE_CAP = 10.0


@dataclass(frozen=True)
class TotalScoreWeights:
    skill: float = 0.4
    experience: float = 0.3
    qualification: float = 0.3

    def __post_init__(self):
        if min(self.skill, self.experience, self.qualification) < 0:
            raise ValueError("Total score weights must be non-negative")
        if abs(self.skill + self.experience + self.qualification - 1.0) > 1e-9:
            raise ValueError("Total score weights must sum to 1.0")


DEFAULT_WEIGHTS = TotalScoreWeights()


def compute_skill_score(experience_years: float, qualification_score: float) -> float:
    """Skill score in [0, 10]: half experience years, half qualification score."""
    raw = experience_years * SKILL_EXPERIENCE_WEIGHT + qualification_score * SKILL_QUALIFICATION_WEIGHT
    return max(0.0, min(SCORE_CAP, round_half_up(raw, 1)))


def compute_experience_score(experience_years: float) -> float:
    """One point per year of experience, capped at 10."""
    return max(0.0, min(SCORE_CAP, round_half_up(experience_years, 1)))


def compute_total_score(
    skill_score: float,
    experience_score: float,
    qualification_score: float,
    weights: TotalScoreWeights = DEFAULT_WEIGHTS,
) -> float:
    """Weighted blend of the three 0-10 scores, scaled to 0-100."""
    blended = (
        weights.skill * skill_score
        + weights.experience * experience_score
        + weights.qualification * qualification_score
    )
    return max(0.0, min(100.0, round_half_up(blended * 10, 1)))


def score_profile(
    experience: Iterable[ExperienceEntry],
    education: Iterable[EducationEntry],
    today: Optional[date] = None,
    weights: TotalScoreWeights = DEFAULT_WEIGHTS,
    merge_overlaps: bool = False,
) -> MatchScores:
    """Compute every score stored on a matching record for one profile."""
    experience = list(experience)
    education = list(education)
    today = today or date.today()

    for entry in experience:
        if entry_years(entry, today) is None:
            logger.record_skipped_entry("experience_bad_date")
            logger.debug(
                "Skipping experience entry with unusable dates",
                title=entry.title,
                start_date=entry.start_date,
                end_date=entry.end_date,
            )
    for entry in education:
        if entry_level(entry) is None:
            logger.record_skipped_entry("education_no_degree")

    years = compute_experience_years(experience, today=today, merge_overlaps=merge_overlaps)
    qualification = compute_qualification_score(education)
    skill = compute_skill_score(years, qualification)
    experience_score = compute_experience_score(years)
    total = compute_total_score(skill, experience_score, qualification, weights)

    logger.record_score_computation()
    return MatchScores(
        skill_score=skill,
        experience_score=experience_score,
        qualification_score=float(qualification),
        total_score=total,
    )
