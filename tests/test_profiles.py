"""Tests for the profile catalog and the settings vector."""

import pytest

from ghosttutor.engine.profiles import PROFILES, DifficultyProfile, ProfileCatalog
from ghosttutor.engine.settings_model import NUMERIC_BOUNDS, DifficultySettings

EXTREME = DifficultySettings(
    ghost_complexity=0.0,
    patch_risk_multiplier=2.0,
    hint_availability=0.0,
    educational_depth=0.0,
    error_tolerance=1.0,
    feedback_frequency=0.0,
)


class TestDifficultySettings:
    def test_clamped_pulls_values_into_bounds(self):
        raw = DifficultySettings(ghost_complexity=1.7, patch_risk_multiplier=0.1, hint_availability=-0.3)
        clamped = raw.clamped()
        assert clamped.ghost_complexity == 1.0
        assert clamped.patch_risk_multiplier == 0.5
        assert clamped.hint_availability == 0.0

    def test_from_dict_ignores_unknown_keys(self):
        settings = DifficultySettings.from_dict({"ghost_complexity": 0.2, "volume": 11})
        assert settings.ghost_complexity == 0.2

    def test_to_dict_uses_camel_case(self):
        data = DifficultySettings().to_dict()
        assert data["ghostComplexity"] == 0.5
        assert data["patchRiskMultiplier"] == 1.0
        assert data["adaptiveAssistance"] is True
        assert not any("_" in key for key in data)

    def test_from_dict_reads_camel_case(self):
        original = DifficultySettings(ghost_complexity=0.3, time_constraints=True)
        assert DifficultySettings.from_dict(original.to_dict()) == original

    def test_field_for(self):
        assert DifficultySettings.field_for("errorTolerance") == "error_tolerance"
        assert DifficultySettings.field_for("error_tolerance") == "error_tolerance"
        assert DifficultySettings.field_for("volume") is None

    def test_difference_is_mean_over_numeric_fields(self):
        a = DifficultySettings()
        b = a.with_changes(ghost_complexity=a.ghost_complexity + 0.3)
        assert a.difference(b) == pytest.approx(0.3 / len(NUMERIC_BOUNDS))

    def test_difference_ignores_booleans(self):
        a = DifficultySettings()
        b = a.with_changes(time_constraints=True, adaptive_assistance=False)
        assert a.difference(b) == 0

    def test_similarity_counts_booleans(self):
        a = DifficultySettings()
        b = a.with_changes(time_constraints=not a.time_constraints)
        assert a.similarity(b) == pytest.approx(7 / 8)

    def test_differs_from_threshold(self):
        a = DifficultySettings()
        assert not a.differs_from(a.with_changes(ghost_complexity=a.ghost_complexity + 0.005))
        assert a.differs_from(a.with_changes(ghost_complexity=a.ghost_complexity + 0.02))
        assert a.differs_from(a.with_changes(adaptive_assistance=not a.adaptive_assistance))


class TestProfileCatalog:
    @pytest.fixture
    def catalog(self):
        return ProfileCatalog()

    def test_four_profiles_in_order(self, catalog):
        ids = [p.id for p in catalog.list_profiles()]
        assert ids == ["beginner", "balanced", "challenging", "expert"]

    def test_balanced_reference_point(self, catalog):
        balanced = catalog.get("balanced")
        assert balanced.target_success_rate == 0.65
        assert balanced.adaptation_speed == 0.5

    def test_unknown_id(self, catalog):
        assert catalog.get("nightmare") is None

    @pytest.mark.parametrize("profile", PROFILES, ids=lambda p: p.id)
    def test_exact_settings_match_their_profile(self, catalog, profile):
        assert catalog.match(profile.settings).id == profile.id

    def test_closest_profile_wins(self, catalog):
        near_expert = catalog.get("expert").settings.with_changes(ghost_complexity=0.8)
        assert catalog.match(near_expert).id == "expert"

    def test_far_settings_fall_back_to_balanced(self, catalog):
        for profile in catalog.list_profiles():
            assert EXTREME.difference(profile.settings) > 0.3
        assert catalog.match(EXTREME).id == "balanced"

    def test_catalog_requires_default(self):
        lonely = DifficultyProfile(
            id="solo", name="Solo", description="", settings=DifficultySettings(),
            target_success_rate=0.5, adaptation_speed=0.5,
        )
        with pytest.raises(ValueError, match="balanced"):
            ProfileCatalog((lonely,))

    def test_label_names_most_similar_profile(self, catalog):
        assert catalog.label(catalog.get("balanced").settings) == "Balanced"
        assert catalog.label(catalog.get("expert").settings) == "Expert"

    def test_label_custom_when_nothing_is_close(self, catalog):
        assert catalog.label(EXTREME) == "Custom"
