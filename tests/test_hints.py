"""Tests for hint gating."""

import random

import pytest

from ghosttutor.engine.hints import CONTEXT_HINTS, STRUGGLE_HINTS, HintContext, HintGatekeeper
from ghosttutor.engine.metrics import PlayerPerformanceMetrics
from ghosttutor.engine.settings_model import DifficultySettings
from ghosttutor.engine.struggle import StruggleIndicator, StruggleType

from conftest import START


class _FixedRandom(random.Random):
    def __init__(self, value: float):
        super().__init__()
        self.value = value

    def random(self) -> float:
        return self.value


def _metrics(*types: StruggleType) -> PlayerPerformanceMetrics:
    return PlayerPerformanceMetrics(
        success_rate=0.5,
        average_completion_time=0.0,
        hints_used=0,
        questions_asked=0,
        patches_applied=0,
        ethics_violations=0,
        struggling_indicators=[
            StruggleIndicator(type=t, severity=0.5, description="", detected_at=START) for t in types
        ],
    )


class TestContextualHints:
    def test_truncated_by_availability(self):
        gatekeeper = HintGatekeeper()
        hints = gatekeeper.contextual_hints("ghost_encounter", _metrics(), DifficultySettings(hint_availability=0.6))
        assert hints == CONTEXT_HINTS[HintContext.GHOST_ENCOUNTER][:2]

    def test_struggle_hints_follow_base_hints(self):
        gatekeeper = HintGatekeeper()
        metrics = _metrics(StruggleType.REPEATED_FAILURES, StruggleType.LOW_ENGAGEMENT)
        hints = gatekeeper.contextual_hints(
            HintContext.PATCH_REVIEW, metrics, DifficultySettings(hint_availability=0.6)
        )
        assert hints == (
            CONTEXT_HINTS[HintContext.PATCH_REVIEW]
            + STRUGGLE_HINTS[StruggleType.REPEATED_FAILURES][:1]
        )

    def test_full_availability_shows_everything(self):
        gatekeeper = HintGatekeeper()
        metrics = _metrics(StruggleType.EXCESSIVE_HINTS)
        hints = gatekeeper.contextual_hints(
            "meter_management", metrics, DifficultySettings(hint_availability=1.0)
        )
        assert len(hints) == 6

    def test_zero_availability_shows_nothing(self):
        gatekeeper = HintGatekeeper()
        assert gatekeeper.contextual_hints("patch_generation", None, DifficultySettings(hint_availability=0.0)) == []

    def test_unknown_context_rejected(self):
        with pytest.raises(ValueError):
            HintGatekeeper().contextual_hints("haunted_attic", None, DifficultySettings())


class TestShouldProvide:
    def test_struggling_player_with_assistance_always_gets_hints(self):
        gatekeeper = HintGatekeeper(rng=_FixedRandom(0.99))
        settings = DifficultySettings(hint_availability=0.0, adaptive_assistance=True)
        assert gatekeeper.should_provide("ghost_encounter", _metrics(StruggleType.LOW_ENGAGEMENT), settings)

    def test_struggle_without_assistance_uses_normal_gate(self):
        gatekeeper = HintGatekeeper(rng=_FixedRandom(0.0))
        settings = DifficultySettings(hint_availability=0.4, adaptive_assistance=False)
        assert not gatekeeper.should_provide("ghost_encounter", _metrics(StruggleType.LOW_ENGAGEMENT), settings)

    def test_low_availability_blocks(self):
        gatekeeper = HintGatekeeper(rng=_FixedRandom(0.0))
        assert not gatekeeper.should_provide("ghost_encounter", _metrics(), DifficultySettings(hint_availability=0.5))

    def test_random_draw_gates(self):
        settings = DifficultySettings(hint_availability=0.8)
        assert HintGatekeeper(rng=_FixedRandom(0.79)).should_provide("patch_review", None, settings)
        assert not HintGatekeeper(rng=_FixedRandom(0.8)).should_provide("patch_review", None, settings)

    def test_quota_per_context(self):
        gatekeeper = HintGatekeeper(rng=_FixedRandom(0.0))
        settings = DifficultySettings(hint_availability=0.9)
        for _ in range(5):
            gatekeeper.record_usage("patch_review")
        assert not gatekeeper.should_provide("patch_review", None, settings)
        assert gatekeeper.should_provide("patch_generation", None, settings)


class TestUsage:
    def test_counts_accumulate(self):
        gatekeeper = HintGatekeeper()
        gatekeeper.record_usage("ghost_encounter")
        assert gatekeeper.record_usage(HintContext.GHOST_ENCOUNTER) == 2
        gatekeeper.record_usage("meter_management")
        assert gatekeeper.usage() == {HintContext.GHOST_ENCOUNTER: 2, HintContext.METER_MANAGEMENT: 1}
        assert gatekeeper.total_used() == 3

    def test_usage_is_a_copy(self):
        gatekeeper = HintGatekeeper()
        gatekeeper.record_usage("ghost_encounter")
        gatekeeper.usage()[HintContext.GHOST_ENCOUNTER] = 0
        assert gatekeeper.total_used() == 1

    def test_reset(self):
        gatekeeper = HintGatekeeper()
        gatekeeper.record_usage("ghost_encounter")
        gatekeeper.reset()
        assert gatekeeper.usage() == {}

    def test_unknown_context_not_recorded(self):
        gatekeeper = HintGatekeeper()
        with pytest.raises(ValueError):
            gatekeeper.record_usage("anywhere")
        assert gatekeeper.usage() == {}
