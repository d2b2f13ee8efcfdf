"""
Profile completeness.

Nine equally weighted checks: five scalar fields, non-empty experience and
education lists, and a primary CV and primary photo flagged in the
document store. Raw "ever uploaded" flags do not count; only an item
marked primary does.
"""

from typing import Dict, List, Optional

from .models import ProfileSnapshot
from .normalize import is_present

CHECKLIST_FIELDS = (
    "full_name",
    "email",
    "phone",
    "location",
    "headline",
    "experience",
    "education",
    "primary_cv",
    "primary_photo",
)


def completion_checklist(
    profile: Optional[ProfileSnapshot],
    has_primary_cv: bool,
    has_primary_photo: bool,
) -> Dict[str, bool]:
    """Per-field completion flags, in display order."""
    if profile is None:
        return {name: False for name in CHECKLIST_FIELDS}
    return {
        "full_name": is_present(profile.full_name),
        "email": is_present(profile.email),
        "phone": is_present(profile.phone),
        "location": is_present(profile.location),
        "headline": is_present(profile.headline),
        "experience": len(profile.experience) >= 1,
        "education": len(profile.education) >= 1,
        "primary_cv": bool(has_primary_cv),
        "primary_photo": bool(has_primary_photo),
    }


def compute_profile_completion(
    profile: Optional[ProfileSnapshot],
    has_primary_cv: bool,
    has_primary_photo: bool,
) -> int:
    """Completion percentage as an integer in [0, 100]."""
    checks = completion_checklist(profile, has_primary_cv, has_primary_photo)
    done = sum(1 for ok in checks.values() if ok)
    # k/9*100 never lands on .5, so round() and half-up agree
    return int(round(done / len(CHECKLIST_FIELDS) * 100))


def missing_fields(
    profile: Optional[ProfileSnapshot],
    has_primary_cv: bool,
    has_primary_photo: bool,
) -> List[str]:
    """Checklist items still to fill in."""
    checks = completion_checklist(profile, has_primary_cv, has_primary_photo)
    return [name for name, ok in checks.items() if not ok]
