"""
Traffic-surge exams.

Every exam interval the model faces a scenario; internal stats are turned
into a traffic reward that either pays out or falls short.
"""

import logging
from dataclasses import dataclass, asdict
from random import Random
from typing import Dict, Any, Optional, Tuple

from balance import Rules, DEFAULT_RULES, ExamScenario, DimensionThreshold
from state import GameState, MIN_GAUGE, MAX_GAUGE, clamp
import team

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExamResult:
    """Outcome of one exam. Logged for the player; the engine never re-reads it."""

    scenario_id: str
    scenario_name: str
    focus_dimensions: Tuple[str, ...]
    base_traffic: int
    fit_score_multiplier: float
    stability_coefficient: float
    dimension_bonus: float
    difficulty_level: float
    final_reward: int
    meets_threshold: bool
    passed: bool
    payout: int = 0
    penalty: int = 0
    reputation_change: int = 0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['focus_dimensions'] = list(self.focus_dimensions)
        return data


def pick_scenario(rng: Random, rules: Rules = DEFAULT_RULES) -> ExamScenario:
    return rng.choice(rules.exam_scenarios)


def focus_dimensions(state: GameState, scenario: ExamScenario, rules: Rules = DEFAULT_RULES) -> Tuple[str, ...]:
    """The scenario's first dimension, or its first two once enough exams are passed."""
    if state.progress.exams_passed >= rules.dual_focus_after_exams:
        return scenario.focus_dimensions[:2]
    return scenario.focus_dimensions[:1]


def active_threshold(state: GameState, rules: Rules = DEFAULT_RULES) -> Optional[DimensionThreshold]:
    """The dimension threshold that applies to the upcoming exam, if any."""
    config = rules.difficulty(state.difficulty)
    upcoming = state.progress.exams_passed + 1
    if upcoming >= config.dimension_threshold2.exam_count:
        return config.dimension_threshold2
    if upcoming >= config.dimension_threshold1.exam_count:
        return config.dimension_threshold1
    return None


def meets_threshold(state: GameState, rules: Rules = DEFAULT_RULES) -> bool:
    threshold = active_threshold(state, rules)
    if threshold is None:
        return True
    dims = team.effective_dimensions(state, rules)
    qualifying = sum(1 for value in dims.values() if value >= threshold.value)
    return qualifying >= threshold.dim_count


def evaluate_exam(state: GameState, scenario: ExamScenario, rules: Rules = DEFAULT_RULES) -> ExamResult:
    """Compute the exam outcome for a given scenario without touching state."""
    config = rules.difficulty(state.difficulty)
    archetype = rules.archetype(state.archetype)
    dims = team.effective_dimensions(state, rules)
    focus = focus_dimensions(state, scenario, rules)

    fit_multiplier = state.metrics.fit_score / 100
    stability = (100 - state.metrics.entropy) / 100
    mean_focus = sum(dims[d] for d in focus) / len(focus)
    dimension_bonus = (mean_focus - 50) / 50
    difficulty_level = (1 + config.exam_difficulty_growth) ** state.progress.exams_passed

    final_reward = int(
        scenario.base_traffic * fit_multiplier * stability * (1 + dimension_bonus) / difficulty_level
    )
    threshold_ok = meets_threshold(state, rules)
    passed = final_reward >= rules.min_passing_reward and threshold_ok

    payout = penalty = reputation_change = 0
    if passed:
        reputation_multiplier = (
            rules.reputation_bonus_multiplier
            if state.reputation >= rules.reputation_bonus_threshold else 1.0
        )
        payout = int(final_reward * archetype.exam_reward_multiplier * reputation_multiplier)
        reputation_change = rules.pass_reputation_gain
    else:
        penalty = config.exam_fail_penalty
        reputation_change = -config.exam_fail_reputation_penalty

    return ExamResult(
        scenario_id=scenario.scenario_id,
        scenario_name=scenario.name,
        focus_dimensions=focus,
        base_traffic=scenario.base_traffic,
        fit_score_multiplier=fit_multiplier,
        stability_coefficient=stability,
        dimension_bonus=dimension_bonus,
        difficulty_level=difficulty_level,
        final_reward=final_reward,
        meets_threshold=threshold_ok,
        passed=passed,
        payout=payout,
        penalty=penalty,
        reputation_change=reputation_change,
    )


def apply_exam_result(state: GameState, result: ExamResult):
    """Settle an exam outcome onto state, in place."""
    if result.passed:
        state.resources.budget += result.payout
        state.progress.exams_passed += 1
    else:
        state.resources.budget -= result.penalty
    state.reputation = clamp(state.reputation + result.reputation_change, MIN_GAUGE, MAX_GAUGE)


def run_exam(state: GameState, rng: Random, rules: Rules = DEFAULT_RULES) -> ExamResult:
    scenario = pick_scenario(rng, rules)
    result = evaluate_exam(state, scenario, rules)
    apply_exam_result(state, result)
    logger.info(
        f"Exam '{scenario.name}': reward {result.final_reward}, "
        f"{'passed' if result.passed else 'failed'} (exams passed: {state.progress.exams_passed})"
    )
    return result
