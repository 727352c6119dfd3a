"""
Tests for effect descriptors and their application
"""

import random

import pytest

from effects import (
    FixedDelta, RangedDelta, DimensionDelta, RandomDimensionDelta,
    ChosenDimensionDelta, TeamExperience, GambleEffect, EffectModifiers,
    fixed, apply_effects, describe_effects, requires_dimension_choice,
)
from state import GameState, Resources, Metrics, DIMENSIONS


class TestDescriptors:
    """Test descriptor validation."""

    def test_unknown_target_rejected(self):
        with pytest.raises(ValueError):
            FixedDelta('happiness', 5)

    def test_ranged_bounds_ordered(self):
        with pytest.raises(ValueError):
            RangedDelta('budget', 10, 5)

    def test_unknown_dimension_rejected(self):
        with pytest.raises(ValueError):
            DimensionDelta('charisma', 5)

    def test_gamble_rate_range(self):
        with pytest.raises(ValueError):
            GambleEffect(1.5, (), ())

    def test_gambles_do_not_nest(self):
        inner = GambleEffect(0.5, fixed(budget=1), fixed(budget=-1))
        with pytest.raises(ValueError):
            GambleEffect(0.5, (inner,), ())

    def test_dimension_choice_detection(self):
        assert requires_dimension_choice((ChosenDimensionDelta(10),))
        assert requires_dimension_choice((GambleEffect(0.5, (ChosenDimensionDelta(5),), ()),))
        assert not requires_dimension_choice(fixed(entropy=3))


class TestApplyEffects:
    """Test in-place application and clamping."""

    def test_fixed_deltas_in_order(self):
        state = GameState(resources=Resources(budget=1000))
        apply_effects(state, fixed(budget=-300, entropy=10), random.Random(0))
        assert state.resources.budget == 700
        assert state.metrics.entropy == 10

    def test_gauges_clamped(self):
        state = GameState()
        apply_effects(state, fixed(entropy=500, legal_risk=-20), random.Random(0))
        assert state.metrics.entropy == 100
        assert state.risks.legal_risk == 0

    def test_budget_may_go_negative(self):
        state = GameState(resources=Resources(budget=100))
        apply_effects(state, fixed(budget=-600), random.Random(0))
        assert state.resources.budget == -500

    def test_data_limited_by_capacity(self):
        state = GameState(resources=Resources(golden_data=300, data_capacity=1000))
        apply_effects(state, fixed(dirty_data=5000), random.Random(0))
        assert state.resources.dirty_data == 700

    def test_metric_gain_refreshes_fit_score(self):
        state = GameState()
        apply_effects(state, fixed(accuracy=50), random.Random(0))
        assert state.metrics.accuracy == 50
        assert state.metrics.fit_score == 20

    def test_metrics_respect_fit_score_cap(self):
        state = GameState(metrics=Metrics(accuracy=95, fit_score_cap=100))
        apply_effects(state, fixed(fit_score_cap=-10), random.Random(0))
        assert state.metrics.fit_score_cap == 90
        assert state.metrics.accuracy == 90

    def test_ranged_delta_within_bounds(self):
        rng = random.Random(3)
        for _ in range(50):
            state = GameState(resources=Resources(budget=0))
            report = apply_effects(state, (RangedDelta('budget', 800, 1200),), rng)
            assert 800 <= state.resources.budget <= 1200
            assert report.rolled['budget'] == state.resources.budget

    def test_random_dimensions_are_distinct(self):
        state = GameState()
        report = apply_effects(state, (RandomDimensionDelta(count=2, amount=15),), random.Random(9))
        assert len(set(report.dimensions_hit)) == 2
        raised = [d for d in DIMENSIONS if getattr(state.dimensions, d) == 35]
        assert sorted(raised) == sorted(report.dimensions_hit)

    def test_chosen_dimension_requires_target(self):
        with pytest.raises(ValueError):
            apply_effects(GameState(), (ChosenDimensionDelta(20),), random.Random(0))

    def test_chosen_dimension(self):
        state = GameState()
        apply_effects(state, (ChosenDimensionDelta(20),), random.Random(0), target_dimension='stability')
        assert state.dimensions.stability == 40

    def test_team_experience_reported_not_applied(self):
        report = apply_effects(GameState(), (TeamExperience(50), TeamExperience(25)), random.Random(0))
        assert report.experience_awarded == 75


class TestGamble:
    """Exactly one branch of a gamble fires."""

    def test_only_one_branch_applies(self):
        gamble = GambleEffect(0.45, fixed(budget=100), fixed(budget=-50))
        rng = random.Random(12)
        outcomes = set()
        for _ in range(200):
            state = GameState(resources=Resources(budget=0))
            report = apply_effects(state, (gamble,), rng)
            assert state.resources.budget in (100, -50)
            assert report.gamble_outcome == (state.resources.budget == 100)
            outcomes.add(report.gamble_outcome)
        assert outcomes == {True, False}

    def test_certain_success(self):
        gamble = GambleEffect(1.0, fixed(entropy=5), fixed(entropy=50))
        state = GameState()
        report = apply_effects(state, (gamble,), random.Random(0))
        assert report.gamble_outcome is True
        assert state.metrics.entropy == 5

    def test_certain_failure(self):
        gamble = GambleEffect(0.0, fixed(entropy=5), fixed(entropy=50))
        state = GameState()
        report = apply_effects(state, (gamble,), random.Random(0))
        assert report.gamble_outcome is False
        assert state.metrics.entropy == 50


class TestModifiers:
    """Multipliers scale positive gains only."""

    def test_training_multiplier(self):
        state = GameState()
        apply_effects(state, fixed(accuracy=5), random.Random(0), EffectModifiers(training_multiplier=1.5))
        assert state.metrics.accuracy == 7

    def test_negative_deltas_not_scaled(self):
        state = GameState(metrics=Metrics(entropy=50))
        apply_effects(state, fixed(entropy=-20), random.Random(0), EffectModifiers(entropy_multiplier=0.5))
        assert state.metrics.entropy == 30

    def test_entropy_gain_reduced(self):
        state = GameState()
        apply_effects(state, fixed(entropy=10), random.Random(0), EffectModifiers(entropy_multiplier=0.75))
        assert state.metrics.entropy == 7

    def test_data_multiplier(self):
        state = GameState()
        apply_effects(state, fixed(dirty_data=200), random.Random(0), EffectModifiers(data_multiplier=1.5))
        assert state.resources.dirty_data == 300


class TestDescribe:
    def test_gamble_description(self):
        described = describe_effects((GambleEffect(0.45, fixed(robustness=18), fixed(robustness=-4)),))
        assert described[0]['kind'] == 'GambleEffect'
        assert described[0]['success_rate'] == 0.45
        assert described[0]['on_success'] == [{'kind': 'FixedDelta', 'target': 'robustness', 'amount': 18}]


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
