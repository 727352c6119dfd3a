"""
Effect descriptors shared by operations and events.

An effect list is an ordered tuple of small immutable records. Each record
carries only the fields it needs; apply_effects() dispatches on type and
clamps every value immediately after it changes.
"""

from dataclasses import dataclass, asdict, field
from random import Random
from typing import Dict, Any, List, Optional, Tuple, Union

from state import (
    GameState,
    DIMENSIONS,
    MODEL_METRICS,
    MAX_GAUGE,
    MIN_GAUGE,
    MIN_COMPUTE_MAX,
    MAX_COMPUTE_MAX,
    clamp,
)


# Targets a FixedDelta/RangedDelta may address
RESOURCE_TARGETS = ('budget', 'dirty_data', 'golden_data', 'compute_max')
GAUGE_TARGETS = ('entropy', 'legal_risk', 'reputation', 'fit_score_cap')
# 'fit_score' spreads the amount over all four model metrics
DELTA_TARGETS = RESOURCE_TARGETS + GAUGE_TARGETS + MODEL_METRICS + ('fit_score',)


def _check_target(target: str):
    if target not in DELTA_TARGETS:
        raise ValueError(f"Unknown delta target: {target}")


def _check_dimension(dimension: str):
    if dimension not in DIMENSIONS:
        raise ValueError(f"Unknown dimension: {dimension}")


# =============================================================================
# DESCRIPTORS
# =============================================================================

@dataclass(frozen=True)
class FixedDelta:
    target: str
    amount: int

    def __post_init__(self):
        _check_target(self.target)


@dataclass(frozen=True)
class RangedDelta:
    """Uniform integer in [low, high], both inclusive."""

    target: str
    low: int
    high: int

    def __post_init__(self):
        _check_target(self.target)
        if self.low > self.high:
            raise ValueError(f"RangedDelta low {self.low} exceeds high {self.high}")


@dataclass(frozen=True)
class DimensionDelta:
    dimension: str
    amount: int

    def __post_init__(self):
        _check_dimension(self.dimension)


@dataclass(frozen=True)
class RandomDimensionDelta:
    """Pick `count` distinct dimensions and add `amount` to each."""

    count: int
    amount: int

    def __post_init__(self):
        if not 1 <= self.count <= len(DIMENSIONS):
            raise ValueError(f"RandomDimensionDelta count out of range: {self.count}")


@dataclass(frozen=True)
class ChosenDimensionDelta:
    """Add `amount` to the dimension the player picked."""

    amount: int


@dataclass(frozen=True)
class TeamExperience:
    """Award experience to every team member."""

    amount: int

    def __post_init__(self):
        if self.amount < 0:
            raise ValueError("TeamExperience amount must be non-negative")


@dataclass(frozen=True)
class GambleEffect:
    """Exactly one of the two branches fires."""

    success_rate: float
    on_success: Tuple['Effect', ...]
    on_failure: Tuple['Effect', ...]

    def __post_init__(self):
        if not 0.0 <= self.success_rate <= 1.0:
            raise ValueError(f"Gamble success rate out of range: {self.success_rate}")
        if any(isinstance(e, GambleEffect) for e in self.on_success + self.on_failure):
            raise ValueError("Gamble branches cannot nest gambles")


Effect = Union[
    FixedDelta,
    RangedDelta,
    DimensionDelta,
    RandomDimensionDelta,
    ChosenDimensionDelta,
    TeamExperience,
    GambleEffect,
]


def fixed(**deltas: int) -> Tuple[FixedDelta, ...]:
    """Shorthand: fixed(entropy=8, dirty_data=350)."""
    return tuple(FixedDelta(target, amount) for target, amount in deltas.items())


def dimensions_delta(**deltas: int) -> Tuple[DimensionDelta, ...]:
    return tuple(DimensionDelta(dim, amount) for dim, amount in deltas.items())


def requires_dimension_choice(effects: Tuple[Effect, ...]) -> bool:
    for effect in effects:
        if isinstance(effect, ChosenDimensionDelta):
            return True
        if isinstance(effect, GambleEffect):
            if requires_dimension_choice(effect.on_success + effect.on_failure):
                return True
    return False


# =============================================================================
# APPLICATION
# =============================================================================

@dataclass(frozen=True)
class EffectModifiers:
    """Multipliers applied to positive gains. Computed by the engine."""

    training_multiplier: float = 1.0
    entropy_multiplier: float = 1.0
    data_multiplier: float = 1.0


@dataclass
class EffectReport:
    """What happened while applying an effect list."""

    gamble_outcome: Optional[bool] = None
    experience_awarded: int = 0
    rolled: Dict[str, int] = field(default_factory=dict)
    dimensions_hit: List[str] = field(default_factory=list)


def _add_data(state: GameState, target: str, amount: int):
    res = state.resources
    if target == 'dirty_data':
        room = res.data_capacity - res.golden_data
        res.dirty_data = clamp(res.dirty_data + amount, 0, max(0, room))
    else:
        room = res.data_capacity - res.dirty_data
        res.golden_data = clamp(res.golden_data + amount, 0, max(0, room))


def _apply_delta(state: GameState, target: str, amount: int, modifiers: EffectModifiers):
    res, met = state.resources, state.metrics

    if target == 'budget':
        res.budget += amount

    elif target in ('dirty_data', 'golden_data'):
        if amount > 0:
            amount = int(amount * modifiers.data_multiplier)
        _add_data(state, target, amount)

    elif target == 'compute_max':
        res.compute_max = clamp(res.compute_max + amount, MIN_COMPUTE_MAX, MAX_COMPUTE_MAX)

    elif target == 'entropy':
        if amount > 0:
            amount = int(amount * modifiers.entropy_multiplier)
        met.entropy = clamp(met.entropy + amount, MIN_GAUGE, MAX_GAUGE)

    elif target == 'legal_risk':
        state.risks.legal_risk = clamp(state.risks.legal_risk + amount, MIN_GAUGE, MAX_GAUGE)

    elif target == 'reputation':
        state.reputation = clamp(state.reputation + amount, MIN_GAUGE, MAX_GAUGE)

    elif target == 'fit_score_cap':
        met.fit_score_cap = clamp(met.fit_score_cap + amount, MIN_GAUGE, MAX_GAUGE)
        for name in MODEL_METRICS:
            setattr(met, name, min(getattr(met, name), met.fit_score_cap))

    elif target in MODEL_METRICS:
        if amount > 0:
            amount = int(amount * modifiers.training_multiplier)
        setattr(met, target, clamp(getattr(met, target) + amount, MIN_GAUGE, met.fit_score_cap))

    elif target == 'fit_score':
        for name in MODEL_METRICS:
            setattr(met, name, clamp(getattr(met, name) + amount, MIN_GAUGE, met.fit_score_cap))

    state.recompute_fit_score()


def _add_dimension(state: GameState, dimension: str, amount: int):
    current = getattr(state.dimensions, dimension)
    setattr(state.dimensions, dimension, clamp(current + amount, MIN_GAUGE, MAX_GAUGE))


def apply_effects(
    state: GameState,
    effects: Tuple[Effect, ...],
    rng: Random,
    modifiers: EffectModifiers = EffectModifiers(),
    target_dimension: Optional[str] = None,
    report: Optional[EffectReport] = None,
) -> EffectReport:
    """
    Apply an effect list to state in order, in place.

    TeamExperience is not applied here; its amount is accumulated on the
    report for the team subsystem to award.
    """
    report = report or EffectReport()

    for effect in effects:
        if isinstance(effect, FixedDelta):
            _apply_delta(state, effect.target, effect.amount, modifiers)

        elif isinstance(effect, RangedDelta):
            amount = rng.randint(effect.low, effect.high)
            report.rolled[effect.target] = amount
            _apply_delta(state, effect.target, amount, modifiers)

        elif isinstance(effect, DimensionDelta):
            _add_dimension(state, effect.dimension, effect.amount)
            report.dimensions_hit.append(effect.dimension)

        elif isinstance(effect, RandomDimensionDelta):
            for dimension in rng.sample(DIMENSIONS, effect.count):
                _add_dimension(state, dimension, effect.amount)
                report.dimensions_hit.append(dimension)

        elif isinstance(effect, ChosenDimensionDelta):
            if target_dimension not in DIMENSIONS:
                raise ValueError(f"A target dimension is required, got {target_dimension!r}")
            _add_dimension(state, target_dimension, effect.amount)
            report.dimensions_hit.append(target_dimension)

        elif isinstance(effect, TeamExperience):
            report.experience_awarded += effect.amount

        elif isinstance(effect, GambleEffect):
            succeeded = rng.random() < effect.success_rate
            report.gamble_outcome = succeeded
            branch = effect.on_success if succeeded else effect.on_failure
            apply_effects(state, branch, rng, modifiers, target_dimension, report)

        else:
            raise TypeError(f"Unsupported effect descriptor: {effect!r}")

    return report


def describe_effects(effects: Tuple[Effect, ...]) -> List[Dict[str, Any]]:
    """Plain-data view of an effect list, for UI display."""
    described = []
    for effect in effects:
        entry = {'kind': type(effect).__name__}
        if isinstance(effect, GambleEffect):
            entry['success_rate'] = effect.success_rate
            entry['on_success'] = describe_effects(effect.on_success)
            entry['on_failure'] = describe_effects(effect.on_failure)
        else:
            entry.update(asdict(effect))
        described.append(entry)
    return described
