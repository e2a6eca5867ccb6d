"""
Unit tests for the name-correction rules.
"""

import pytest

from name_corrector.phonetics import get_phonetic_vibration_analysis
from name_corrector.profile import get_comprehensive_numerology_profile
from name_corrector.rules import (
    analyze_edge_cases,
    calculate_number_compatibility,
    filter_strictly_valid_suggestions,
    validate_suggested_name_rules,
)


@pytest.fixture
def profile_payload(client_profile):
    return client_profile.to_payload()


class TestValidateSuggestedName:
    """Tests for the rule-based YES/NO."""

    def test_sound_name_is_valid(self, profile_payload):
        is_valid, rationale = validate_suggested_name_rules("Edna", profile_payload)

        assert is_valid is True
        assert rationale.startswith("Expression 6 (Venus (♀)) is numerologically sound")
        assert "balances the missing 6" in rationale

    def test_karmic_total_is_rejected(self, profile_payload):
        is_valid, rationale = validate_suggested_name_rules("Lena", profile_payload)

        assert is_valid is False
        assert "(14) is a Karmic Debt Number" in rationale

    def test_unsupported_master_is_rejected(self, profile_payload):
        is_valid, rationale = validate_suggested_name_rules("Dina", profile_payload)

        assert is_valid is False
        assert "Master Expression 11" in rationale

    def test_master_supported_by_core_number(self, profile_payload):
        profile_payload["birth_day_number"] = 2
        is_valid, rationale = validate_suggested_name_rules("Dina", profile_payload)

        assert is_valid is True
        assert "well-supported" in rationale

    def test_expression_8_without_8_in_grid(self, profile_payload):
        is_valid, rationale = validate_suggested_name_rules("Mara", profile_payload)

        assert is_valid is False
        assert "Expression 8 is problematic" in rationale

    def test_astrological_caution_invalidates(self, profile_payload):
        profile_payload["astro_info"] = {
            "planetary_lords": [{"planet": "Venus (♀)", "nature": "Malefic"}],
        }
        is_valid, rationale = validate_suggested_name_rules("Edna", profile_payload)

        assert is_valid is False
        assert "Astrological concern" in rationale

    def test_harsh_phonetics_invalidate(self, profile_payload):
        assert get_phonetic_vibration_analysis("Strath")["is_harmonious"] is False
        is_valid, rationale = validate_suggested_name_rules("Strath", profile_payload)

        assert is_valid is False
        assert "Phonetic vibration concern" in rationale


class TestStrictFilter:
    """Tests for the filter applied to model suggestions."""

    def test_filters_names_and_dicts(self):
        suggestions = [
            {"name": "Edna", "rationale": "", "expression_number": 6},
            {"name": "Lena", "rationale": "", "expression_number": 5},
            {"name": "Mara", "rationale": "", "expression_number": 8},
            "Adam",
        ]
        kept = filter_strictly_valid_suggestions(suggestions, life_path_number=3, birth_day_number=6)

        assert kept == [suggestions[0], "Adam"]

    def test_incompatible_numbers_are_dropped(self):
        # Life Path 9 and Birth Day 9 only accept 3, 6 and 9
        assert filter_strictly_valid_suggestions(["Adam"], 9, 9) == []

    def test_empty_names_are_dropped(self):
        assert filter_strictly_valid_suggestions(["", "123"], 3, 6) == []


class TestProfileAnnotations:
    """Compatibility, edge cases and the comprehensive profile."""

    def test_compatibility_is_symmetric(self):
        forward = calculate_number_compatibility(1, 3)
        backward = calculate_number_compatibility(3, 1)

        assert forward["compatibility_score"] == backward["compatibility_score"] == 0.9
        assert forward["synergy_areas"] == backward["synergy_areas"]

    def test_unknown_pair_defaults_to_moderate(self):
        result = calculate_number_compatibility(0, 5)

        assert result["compatibility_score"] == 0.6
        assert "moderate" in result["description"]

    def test_expression_8_life_path_1_conflict(self):
        edge_cases = analyze_edge_cases({"expression_number": 8, "life_path_number": 1, "lo_shu_grid": {"has_8": True}})
        assert any("Saturn vs. Sun" in case["type"] for case in edge_cases)

    def test_comprehensive_profile(self):
        profile = get_comprehensive_numerology_profile("John Doe", "1990-05-15", birth_time="10:30", birth_place="Pune")

        assert profile["expression_number"] == 7
        assert profile["life_path_number"] == 3
        assert profile["birth_day_number"] == 6
        assert profile["soul_urge_number"] == 1
        assert profile["personality_number"] == 6
        assert profile["lo_shu_grid"]["missing_numbers"] == [2, 3, 4, 6, 7, 8]
        assert profile["astro_info"]["planetary_compatibility"]["expression_planet"] == "Ketu / Neptune (☋)"
        assert "compatibility_score" in profile["compatibility_insights"]

    def test_conceptual_chart_is_stable(self):
        first = get_comprehensive_numerology_profile("John Doe", "1990-05-15", "10:30", "Pune")
        second = get_comprehensive_numerology_profile("John Doe", "1990-05-15", "10:30", "Pune")

        assert first["astro_info"] == second["astro_info"]
        assert first["profile_hash"] == second["profile_hash"]
