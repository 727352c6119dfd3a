"""
Balance tables for Black Box: Algorithm Ascension.

Every tunable number the engine reads lives here, bundled into a frozen
Rules object that is passed to each engine function. Tests derive variants
with Rules.with_overrides().
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Tuple

from .presets import (
    DimensionThreshold,
    DifficultyConfig,
    ArchetypeConfig,
    RarityConfig,
    TraitConfig,
    EquipmentLevel,
    DIFFICULTY_CONFIGS,
    ARCHETYPE_CONFIGS,
    RARITY_CONFIGS,
    TRAIT_CONFIGS,
    EQUIPMENT_LEVELS,
)
from .scenarios import (
    ExamScenario,
    GameEvent,
    EndingConfig,
    EXAM_SCENARIOS,
    POSITIVE_EVENTS,
    NEGATIVE_EVENTS,
    CONDITIONAL_EVENTS,
    ENDINGS,
)


CANDIDATE_NAMES = (
    'Ada', 'Alan', 'Grace', 'Linus', 'Margaret', 'Dennis', 'Barbara', 'Ken',
    'Frances', 'Edsger', 'Radia', 'Donald', 'Hedy', 'Claude', 'Sophie', 'Tim',
    'Katherine', 'Guido', 'Shafi', 'John', 'Lynn', 'Yann', 'Fei-Fei', 'Geoffrey',
)

EXP_PER_LEVEL = (0, 80, 200, 400, 700, 1100, 1600, 2200, 3000, 4000)

VICTORY_GRADES = (('SSS', 20000), ('SS', 15000), ('S', 10000))
DEFEAT_GRADES = (('B', 8000), ('C', 4000), ('D', 1500))


@dataclass(frozen=True)
class Rules:
    """Immutable bundle of every balance table and constant."""

    difficulties: Dict[str, DifficultyConfig] = field(default_factory=lambda: DIFFICULTY_CONFIGS)
    archetypes: Dict[str, ArchetypeConfig] = field(default_factory=lambda: ARCHETYPE_CONFIGS)
    rarities: Dict[str, RarityConfig] = field(default_factory=lambda: RARITY_CONFIGS)
    traits: Dict[str, TraitConfig] = field(default_factory=lambda: TRAIT_CONFIGS)
    equipment_levels: Dict[str, Tuple[EquipmentLevel, ...]] = field(default_factory=lambda: EQUIPMENT_LEVELS)
    exam_scenarios: Tuple[ExamScenario, ...] = EXAM_SCENARIOS
    positive_events: Tuple[GameEvent, ...] = POSITIVE_EVENTS
    negative_events: Tuple[GameEvent, ...] = NEGATIVE_EVENTS
    conditional_events: Tuple[GameEvent, ...] = CONDITIONAL_EVENTS
    endings: Dict[str, EndingConfig] = field(default_factory=lambda: ENDINGS)

    # Turn cycle
    exam_interval: int = 5
    salary_interval: int = 5
    victory_exams: int = 10
    bankruptcy_turns: int = 2
    entropy_drift: int = 1
    equipment_upkeep_per_level: int = 50
    positive_event_chance: float = 0.08
    side_job_cap: int = 2

    # Risk
    meltdown_threshold: int = 80
    meltdown_penalty: int = 1000
    meltdown_fatal_turns: int = 3
    legal_shutdown_threshold: int = 100

    # Exam
    min_passing_reward: int = 1000
    pass_reputation_gain: int = 5
    reputation_bonus_threshold: int = 70
    reputation_bonus_multiplier: float = 1.1
    dual_focus_after_exams: int = 3

    # Team
    hiring_pool_size: int = 3
    max_team_size: int = 5
    hiring_refresh_interval: int = 1
    fire_refund_rate: float = 0.3
    max_cost_reduction: float = 0.5
    exp_per_level: Tuple[int, ...] = EXP_PER_LEVEL
    max_member_level: int = 10
    max_traits: int = 3
    trait_unlock_chance: float = 0.25
    trait_level_scaling: float = 0.08
    salary_level_scaling: float = 0.10
    candidate_names: Tuple[str, ...] = CANDIDATE_NAMES

    # Scoring
    victory_grades: Tuple[Tuple[str, int], ...] = VICTORY_GRADES
    defeat_grades: Tuple[Tuple[str, int], ...] = DEFEAT_GRADES
    victory_floor_grade: str = 'A'
    defeat_floor_grade: str = 'F'

    def with_overrides(self, **changes) -> 'Rules':
        """Return a copy with some fields replaced."""
        return replace(self, **changes)

    def difficulty(self, difficulty_id: str) -> DifficultyConfig:
        return self.difficulties[difficulty_id]

    def archetype(self, archetype_id: str) -> ArchetypeConfig:
        return self.archetypes[archetype_id]

    def equipment_level(self, kind: str, level: int) -> EquipmentLevel:
        return self.equipment_levels[kind][level - 1]


DEFAULT_RULES = Rules()


__all__ = [
    'Rules',
    'DEFAULT_RULES',
    'DimensionThreshold',
    'DifficultyConfig',
    'ArchetypeConfig',
    'RarityConfig',
    'TraitConfig',
    'EquipmentLevel',
    'ExamScenario',
    'GameEvent',
    'EndingConfig',
    'CANDIDATE_NAMES',
    'EXP_PER_LEVEL',
]
