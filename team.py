"""
Team and hiring for Black Box: Algorithm Ascension.

Candidates are drawn from the seeded RNG, hired into a capped team, levelled
by experience and paid every salary interval. Trait bonuses are aggregated
on every read; only the compute bonus is folded into compute_max, by
sync_compute_bonus() whenever the team changes.
"""

import logging
import uuid
from dataclasses import dataclass, field
from random import Random
from typing import Dict, List, Optional, Tuple

from balance import Rules, DEFAULT_RULES
from errors import IneligibleOperation
from state import (
    GameState,
    TeamMember,
    BaseStats,
    DIMENSIONS,
    MAX_GAUGE,
    MIN_COMPUTE_MAX,
    MAX_COMPUTE_MAX,
    clamp,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CANDIDATE GENERATION
# =============================================================================

def determine_rarity(rng: Random, rules: Rules = DEFAULT_RULES) -> str:
    """Weighted roll over the rarity drop rates, rarest first."""
    roll = rng.random()
    cumulative = 0.0
    for rarity_id, config in rules.rarities.items():
        cumulative += config.drop_rate
        if roll < cumulative:
            return rarity_id
    return 'common'


def generate_base_stats(rarity: str, rng: Random, rules: Rules = DEFAULT_RULES) -> BaseStats:
    low, high = rules.rarities[rarity].stat_range
    return BaseStats(
        compute_contribution=rng.randint(low, high),
        data_efficiency=rng.randint(low, high),
        maintenance_skill=rng.randint(low, high),
    )


def random_traits(count: int, rng: Random, rules: Rules = DEFAULT_RULES, exclude=()) -> Tuple[str, ...]:
    """Draw `count` distinct traits not already in `exclude`."""
    available = [t for t in rules.traits if t not in exclude]
    return tuple(rng.sample(available, min(count, len(available))))


def _member_id(rng: Random) -> str:
    return str(uuid.UUID(int=rng.getrandbits(128), version=4))


def generate_member(state: GameState, rng: Random, rules: Rules = DEFAULT_RULES) -> TeamMember:
    rarity = determine_rarity(rng, rules)
    config = rules.rarities[rarity]
    multiplier = rules.difficulty(state.difficulty).hiring_cost_multiplier

    return TeamMember(
        id=_member_id(rng),
        name=rng.choice(rules.candidate_names),
        rarity=rarity,
        base_stats=generate_base_stats(rarity, rng, rules),
        traits=random_traits(config.trait_slots, rng, rules),
        level=1,
        experience=0,
        hiring_cost=int(config.base_hiring_cost * multiplier),
        salary=config.base_salary,
    )


def generate_hiring_pool(state: GameState, rng: Random, rules: Rules = DEFAULT_RULES) -> List[TeamMember]:
    return [generate_member(state, rng, rules) for _ in range(rules.hiring_pool_size)]


# =============================================================================
# HIRE / FIRE
# =============================================================================

def _find(members: List[TeamMember], member_id: str) -> Optional[int]:
    for index, member in enumerate(members):
        if member.id == member_id:
            return index
    return None


def hire_member(state: GameState, member_id: str, rules: Rules = DEFAULT_RULES) -> TeamMember:
    """
    Move a candidate from the hiring pool into the team, paying the hiring cost.

    Mutates state in place; every check runs before anything changes.

    Raises:
        IneligibleOperation: Candidate not in pool, team full, or budget short.
    """
    index = _find(state.hiring_pool, member_id)
    if index is None:
        raise IneligibleOperation(f"No candidate {member_id} in the hiring pool")
    if len(state.team) >= rules.max_team_size:
        raise IneligibleOperation(f"Team is full ({rules.max_team_size} members)")

    candidate = state.hiring_pool[index]
    if state.resources.budget < candidate.hiring_cost:
        raise IneligibleOperation(
            f"Hiring {candidate.name} costs {candidate.hiring_cost}, budget is {state.resources.budget}"
        )

    state.resources.budget -= candidate.hiring_cost
    state.team.append(state.hiring_pool.pop(index))
    sync_compute_bonus(state, rules)
    logger.debug(f"Hired {candidate.name} ({candidate.rarity}) for {candidate.hiring_cost}")
    return candidate


def fire_member(state: GameState, member_id: str, rules: Rules = DEFAULT_RULES) -> Tuple[TeamMember, int]:
    """Remove a member and refund part of their hiring cost. Returns (member, refund)."""
    index = _find(state.team, member_id)
    if index is None:
        raise IneligibleOperation(f"No team member {member_id}")

    member = state.team.pop(index)
    refund = int(member.hiring_cost * rules.fire_refund_rate)
    state.resources.budget += refund
    sync_compute_bonus(state, rules)
    logger.debug(f"Fired {member.name}, refunded {refund}")
    return member, refund


# =============================================================================
# EXPERIENCE AND SALARY
# =============================================================================

def calculate_level(experience: int, rules: Rules = DEFAULT_RULES) -> int:
    level = 1
    for index, threshold in enumerate(rules.exp_per_level):
        if experience >= threshold:
            level = index + 1
    return min(level, rules.max_member_level)


def member_salary(member: TeamMember, rules: Rules = DEFAULT_RULES) -> int:
    base = rules.rarities[member.rarity].base_salary
    return int(base * (1 + rules.salary_level_scaling * (member.level - 1)))


def total_salary(state: GameState, rules: Rules = DEFAULT_RULES) -> int:
    return sum(member_salary(m, rules) for m in state.team)


@dataclass
class LevelUp:
    member_id: str
    name: str
    old_level: int
    new_level: int
    new_traits: List[str] = field(default_factory=list)


def _try_new_trait(member: TeamMember, rng: Random, rules: Rules) -> Optional[str]:
    if len(member.traits) >= rules.max_traits:
        return None
    if rng.random() >= rules.trait_unlock_chance:
        return None
    drawn = random_traits(1, rng, rules, exclude=member.traits)
    return drawn[0] if drawn else None


def add_experience(member: TeamMember, amount: int, rng: Random, rules: Rules = DEFAULT_RULES) -> Optional[LevelUp]:
    """Award experience to one member; even levels may unlock a trait."""
    old_level = member.level
    member.experience += amount
    member.level = max(old_level, calculate_level(member.experience, rules))
    if member.level == old_level:
        return None

    level_up = LevelUp(member.id, member.name, old_level, member.level)
    for level in range(old_level + 1, member.level + 1):
        if level % 2 == 0:
            trait = _try_new_trait(member, rng, rules)
            if trait:
                member.traits = member.traits + (trait,)
                level_up.new_traits.append(trait)
    member.salary = member_salary(member, rules)
    return level_up


def add_experience_to_all(state: GameState, amount: int, rng: Random, rules: Rules = DEFAULT_RULES) -> List[LevelUp]:
    level_ups = []
    for member in state.team:
        level_up = add_experience(member, amount, rng, rules)
        if level_up:
            level_ups.append(level_up)
    if level_ups:
        sync_compute_bonus(state, rules)
    return level_ups


@dataclass
class PayrollResult:
    paid: int = 0
    laid_off: List[TeamMember] = field(default_factory=list)


def pay_salaries(state: GameState, rng: Random, rules: Rules = DEFAULT_RULES) -> PayrollResult:
    """
    Deduct the team's payroll from the budget.

    When the budget cannot cover it, random members are laid off one at a
    time until it can or the team is empty.
    """
    result = PayrollResult()
    while state.team:
        payroll = total_salary(state, rules)
        if state.resources.budget >= payroll:
            state.resources.budget -= payroll
            result.paid = payroll
            break
        laid_off = state.team.pop(rng.randrange(len(state.team)))
        result.laid_off.append(laid_off)
        logger.info(f"Laid off {laid_off.name}: payroll {payroll} exceeds budget {state.resources.budget}")
    if result.laid_off:
        sync_compute_bonus(state, rules)
    return result


# =============================================================================
# TRAIT AGGREGATION
# =============================================================================

@dataclass
class TeamBonuses:
    dimension_bonus: Dict[str, float] = field(default_factory=lambda: {d: 0.0 for d in DIMENSIONS})
    ap_bonus: float = 0.0
    cost_reduction: float = 0.0
    data_bonus: float = 0.0


def calculate_team_bonuses(state: GameState, rules: Rules = DEFAULT_RULES) -> TeamBonuses:
    """Sum trait effects over the team, each scaled by the member's level."""
    bonuses = TeamBonuses()
    for member in state.team:
        level_multiplier = 1 + rules.trait_level_scaling * (member.level - 1)
        for trait_id in member.traits:
            trait = rules.traits[trait_id]
            for dimension, value in trait.dimension_bonus.items():
                bonuses.dimension_bonus[dimension] += value * level_multiplier
            bonuses.ap_bonus += trait.ap_bonus * level_multiplier
            bonuses.cost_reduction += trait.cost_reduction * level_multiplier
            bonuses.data_bonus += trait.data_bonus * level_multiplier
    bonuses.cost_reduction = min(bonuses.cost_reduction, rules.max_cost_reduction)
    return bonuses


def effective_dimensions(state: GameState, rules: Rules = DEFAULT_RULES) -> Dict[str, int]:
    """Base dimensions plus team trait bonuses, floored and capped at 100."""
    bonus = calculate_team_bonuses(state, rules).dimension_bonus
    base = state.dimensions.as_dict()
    return {name: min(MAX_GAUGE, int(base[name] + bonus[name])) for name in DIMENSIONS}


def sync_compute_bonus(state: GameState, rules: Rules = DEFAULT_RULES) -> int:
    """
    Fold the team's compute bonus into compute_max, in place.

    compute_max minus compute_bonus is the lab's own capacity; only the
    bonus part moves when the team changes. Compute points are trimmed to
    the new maximum. Returns the change in compute_max.
    """
    res = state.resources
    base = res.compute_max - res.compute_bonus
    bonus = int(calculate_team_bonuses(state, rules).ap_bonus)
    new_max = clamp(base + bonus, MIN_COMPUTE_MAX, MAX_COMPUTE_MAX)

    change = new_max - res.compute_max
    res.compute_max = new_max
    res.compute_bonus = max(0, new_max - base)
    res.compute_points = min(res.compute_points, new_max)
    if change:
        logger.debug(f"Team compute bonus now {res.compute_bonus}; compute_max {new_max}")
    return change


def effective_budget_cost(state: GameState, budget_cost: int, rules: Rules = DEFAULT_RULES) -> int:
    if budget_cost <= 0:
        return budget_cost
    reduction = calculate_team_bonuses(state, rules).cost_reduction
    return int(budget_cost * (1 - reduction))
