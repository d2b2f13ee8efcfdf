import math
from typing import Any, Dict, List, Mapping

# field -> (camelCase alias, upper bound)
SCORE_FIELDS = {
    "skill_score": ("skillScore", 10.0),
    "experience_score": ("experienceScore", 10.0),
    "qualification_score": ("qualificationScore", 10.0),
    "total_score": ("totalScore", 100.0),
}
REQUIRED_SCORE_FIELDS = ["skill_score", "experience_score", "qualification_score"]

PROFILE_STR_FIELDS = ["fullName", "email", "phone", "location", "headline"]
PROFILE_LIST_FIELDS = ["experience", "education"]


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool) and math.isfinite(v)


def _get(data: Mapping[str, Any], field: str) -> Any:
    if field in data:
        return data[field]
    return data.get(SCORE_FIELDS[field][0])


def validate_scores(data: Mapping[str, Any]) -> List[str]:
    """
    Returns a list of validation error messages. Empty list means valid.
    total_score may be omitted; it is derived when persisting.
    """
    errors: List[str] = []

    for f in SCORE_FIELDS:
        value = _get(data, f)
        if value is None:
            if f in REQUIRED_SCORE_FIELDS:
                errors.append(f"Missing required score: {f}")
            continue
        if not _is_number(value):
            errors.append(f"Score '{f}' must be a finite number")
            continue
        upper = SCORE_FIELDS[f][1]
        if value < 0 or value > upper:
            errors.append(f"Score '{f}' must be between 0 and {upper:g}")

    return errors


def normalize_scores(data: Mapping[str, Any]) -> Dict[str, float]:
    """Snake_case float scores from a validated payload (total may be None)."""
    result = {}
    for f in SCORE_FIELDS:
        value = _get(data, f)
        result[f] = float(value) if value is not None else None
    return result


def validate_profile(data: Mapping[str, Any]) -> List[str]:
    """Shape checks for a raw profile payload before it is scored."""
    errors: List[str] = []
    if not isinstance(data, Mapping):
        return ["Profile must be a JSON object"]

    for f in PROFILE_STR_FIELDS:
        snake = "full_name" if f == "fullName" else f
        value = data.get(f, data.get(snake))
        if value is not None and not isinstance(value, str):
            errors.append(f"Field '{f}' must be a string if provided")

    for f in PROFILE_LIST_FIELDS:
        value = data.get(f)
        if value is None:
            continue
        if not isinstance(value, list):
            errors.append(f"Field '{f}' must be a list")
            continue
        for i, item in enumerate(value):
            if not isinstance(item, Mapping):
                errors.append(f"Field '{f}[{i}]' must be an object")

    return errors
