"""
Tests for score and profile payload validation.
"""

from jobmatch.schema import normalize_scores, validate_profile, validate_scores


class TestValidateScores:
    """Test score payload validation."""

    def test_valid_scores(self):
        data = {"skill_score": 4.0, "experience_score": 2.0, "qualification_score": 6, "total_score": 40.0}
        assert validate_scores(data) == []

    def test_total_score_optional(self):
        data = {"skill_score": 4.0, "experience_score": 2.0, "qualification_score": 6}
        assert validate_scores(data) == []

    def test_camel_case_accepted(self):
        data = {"skillScore": 4.0, "experienceScore": 2.0, "qualificationScore": 6, "totalScore": 40}
        assert validate_scores(data) == []

    def test_missing_required_score(self):
        errors = validate_scores({"skill_score": 4.0, "experience_score": 2.0})
        assert any("qualification_score" in err for err in errors)

    def test_non_numeric_score(self):
        errors = validate_scores({"skill_score": "high", "experience_score": 2.0, "qualification_score": 6})
        assert any("skill_score" in err and "number" in err for err in errors)

    def test_bool_is_not_a_number(self):
        errors = validate_scores({"skill_score": True, "experience_score": 2.0, "qualification_score": 6})
        assert errors

    def test_nan_rejected(self):
        errors = validate_scores({"skill_score": float("nan"), "experience_score": 2.0, "qualification_score": 6})
        assert errors

    def test_out_of_range(self):
        errors = validate_scores({"skill_score": 11, "experience_score": -1, "qualification_score": 6, "total_score": 101})
        assert len(errors) == 3

    def test_normalize_scores(self):
        values = normalize_scores({"skillScore": 4, "experience_score": 2, "qualificationScore": 6})
        assert values == {
            "skill_score": 4.0,
            "experience_score": 2.0,
            "qualification_score": 6.0,
            "total_score": None,
        }


class TestValidateProfile:
    """Test raw profile payload shape checks."""

    def test_valid_profile(self, profile_data):
        assert validate_profile(profile_data) == []

    def test_not_an_object(self):
        assert validate_profile(["not", "a", "profile"]) == ["Profile must be a JSON object"]

    def test_wrong_scalar_type(self, profile_data):
        profile_data["phone"] = 771234567
        errors = validate_profile(profile_data)
        assert any("phone" in err for err in errors)

    def test_list_fields_must_be_lists(self, profile_data):
        profile_data["experience"] = "five years"
        errors = validate_profile(profile_data)
        assert any("experience" in err for err in errors)

    def test_list_items_must_be_objects(self, profile_data):
        profile_data["education"] = ["BSc"]
        errors = validate_profile(profile_data)
        assert any("education[0]" in err for err in errors)
