"""
Starting presets and progression tables.

Difficulty, archetype, rarity, trait and equipment tables. All records are
frozen and the tables are read-only module data.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple


# =============================================================================
# DIFFICULTY
# =============================================================================

@dataclass(frozen=True)
class DimensionThreshold:
    """From the exam_count-th exam on, dim_count dimensions must be >= value."""

    exam_count: int
    dim_count: int
    value: int


@dataclass(frozen=True)
class DifficultyConfig:
    difficulty_id: str
    name: str
    description: str
    initial_budget_multiplier: float
    exam_difficulty_growth: float
    negative_event_chance: float
    hiring_cost_multiplier: float
    exam_fail_penalty: int
    exam_fail_reputation_penalty: int
    dimension_threshold1: DimensionThreshold
    dimension_threshold2: DimensionThreshold
    # Every dimension at or above this on victory earns the top ending
    ascension_dimension_value: int


DIFFICULTY_CONFIGS: Dict[str, DifficultyConfig] = {
    'easy': DifficultyConfig(
        difficulty_id='easy',
        name='Easy',
        description='Plenty of resources, gentle exams.',
        initial_budget_multiplier=1.5,
        exam_difficulty_growth=0.05,
        negative_event_chance=0.05,
        hiring_cost_multiplier=0.8,
        exam_fail_penalty=500,
        exam_fail_reputation_penalty=0,
        dimension_threshold1=DimensionThreshold(exam_count=5, dim_count=1, value=40),
        dimension_threshold2=DimensionThreshold(exam_count=8, dim_count=2, value=50),
        ascension_dimension_value=70,
    ),
    'normal': DifficultyConfig(
        difficulty_id='normal',
        name='Normal',
        description='The standard, balanced experience.',
        initial_budget_multiplier=1.0,
        exam_difficulty_growth=0.08,
        negative_event_chance=0.10,
        hiring_cost_multiplier=1.0,
        exam_fail_penalty=1000,
        exam_fail_reputation_penalty=0,
        dimension_threshold1=DimensionThreshold(exam_count=4, dim_count=1, value=45),
        dimension_threshold2=DimensionThreshold(exam_count=6, dim_count=2, value=55),
        ascension_dimension_value=75,
    ),
    'hard': DifficultyConfig(
        difficulty_id='hard',
        name='Hard',
        description='Tight resources; every turn needs a plan.',
        initial_budget_multiplier=0.8,
        exam_difficulty_growth=0.12,
        negative_event_chance=0.15,
        hiring_cost_multiplier=1.2,
        exam_fail_penalty=2000,
        exam_fail_reputation_penalty=0,
        dimension_threshold1=DimensionThreshold(exam_count=3, dim_count=1, value=50),
        dimension_threshold2=DimensionThreshold(exam_count=5, dim_count=2, value=60),
        ascension_dimension_value=80,
    ),
    'nightmare': DifficultyConfig(
        difficulty_id='nightmare',
        name='Nightmare',
        description='One wrong step and it all unravels.',
        initial_budget_multiplier=0.6,
        exam_difficulty_growth=0.15,
        negative_event_chance=0.20,
        hiring_cost_multiplier=1.5,
        exam_fail_penalty=3000,
        exam_fail_reputation_penalty=5,
        dimension_threshold1=DimensionThreshold(exam_count=2, dim_count=1, value=55),
        dimension_threshold2=DimensionThreshold(exam_count=4, dim_count=2, value=65),
        ascension_dimension_value=85,
    ),
}


# =============================================================================
# ARCHETYPES
# =============================================================================

@dataclass(frozen=True)
class ArchetypeConfig:
    archetype_id: str
    name: str
    description: str
    budget: int
    compute_max: int
    dirty_data: int
    golden_data: int
    accuracy: int
    speed: int
    creativity: int
    robustness: int
    special_ability: str
    exam_reward_multiplier: float = 1.0
    training_efficiency: float = 1.0
    data_acquisition_bonus: float = 0.0


ARCHETYPE_CONFIGS: Dict[str, ArchetypeConfig] = {
    'startup': ArchetypeConfig(
        archetype_id='startup',
        name='Startup',
        description='Short on everything except upside.',
        budget=5000,
        compute_max=3,
        dirty_data=100,
        golden_data=0,
        accuracy=5,
        speed=10,
        creativity=15,
        robustness=5,
        special_ability='Exam rewards +50%',
        exam_reward_multiplier=1.5,
    ),
    'bigtech': ArchetypeConfig(
        archetype_id='bigtech',
        name='Big Tech Team',
        description='Deep pockets and steady growth.',
        budget=12000,
        compute_max=5,
        dirty_data=300,
        golden_data=100,
        accuracy=10,
        speed=15,
        creativity=5,
        robustness=10,
        special_ability='Higher starting compute',
    ),
    'academic': ArchetypeConfig(
        archetype_id='academic',
        name='Academic Lab',
        description='Strong data access and efficient training.',
        budget=8000,
        compute_max=4,
        dirty_data=200,
        golden_data=200,
        accuracy=15,
        speed=5,
        creativity=10,
        robustness=10,
        special_ability='Training efficiency +20%',
        training_efficiency=1.2,
        data_acquisition_bonus=0.5,
    ),
}


# =============================================================================
# TEAM: RARITY AND TRAITS
# =============================================================================

@dataclass(frozen=True)
class RarityConfig:
    rarity_id: str
    name: str
    trait_slots: int
    drop_rate: float
    base_salary: int
    base_hiring_cost: int
    stat_range: Tuple[int, int]


# Ordered rarest first; determine_rarity() walks cumulative drop rates in this order
RARITY_CONFIGS: Dict[str, RarityConfig] = {
    'legendary': RarityConfig('legendary', 'Legendary', 3, 0.03, 900, 4500, (12, 20)),
    'epic': RarityConfig('epic', 'Epic', 2, 0.12, 550, 2500, (8, 16)),
    'rare': RarityConfig('rare', 'Rare', 1, 0.25, 350, 1200, (5, 12)),
    'common': RarityConfig('common', 'Common', 0, 0.60, 200, 600, (3, 8)),
}


@dataclass(frozen=True)
class TraitConfig:
    trait_id: str
    name: str
    description: str
    dimension_bonus: Dict[str, float] = field(default_factory=dict)
    ap_bonus: float = 0.0
    cost_reduction: float = 0.0
    data_bonus: float = 0.0


TRAIT_CONFIGS: Dict[str, TraitConfig] = {
    'algorithm_expert': TraitConfig(
        'algorithm_expert', 'Algorithm Expert', 'Algorithm +8',
        dimension_bonus={'algorithm': 8},
    ),
    'data_engineer': TraitConfig(
        'data_engineer', 'Data Engineer', 'Data processing +8',
        dimension_bonus={'data_processing': 8},
    ),
    'architect': TraitConfig(
        'architect', 'Architect', 'Stability +8',
        dimension_bonus={'stability': 8},
    ),
    'product_manager': TraitConfig(
        'product_manager', 'Product Manager', 'User experience +8',
        dimension_bonus={'user_experience': 8},
    ),
    'fullstack': TraitConfig(
        'fullstack', 'Full-Stack Developer', 'Every dimension +2',
        dimension_bonus={'algorithm': 2, 'data_processing': 2, 'stability': 2, 'user_experience': 2},
    ),
    'efficiency': TraitConfig(
        'efficiency', 'Efficiency Guru', '+1 compute point per turn',
        ap_bonus=1,
    ),
    'cost_control': TraitConfig(
        'cost_control', 'Cost Controller', 'Operation budget costs -8%',
        cost_reduction=0.08,
    ),
    'data_mining': TraitConfig(
        'data_mining', 'Data Miner', 'Data acquisition +15%',
        data_bonus=0.15,
    ),
}


# =============================================================================
# EQUIPMENT
# =============================================================================

@dataclass(frozen=True)
class EquipmentLevel:
    level: int
    name: str
    bonus: int            # percent, except storage where it is extra capacity
    upgrade_cost: int     # cost to reach this level


EQUIPMENT_LEVELS: Dict[str, Tuple[EquipmentLevel, ...]] = {
    'gpu': (
        EquipmentLevel(1, 'Entry-level GPU', 0, 0),
        EquipmentLevel(2, 'Workstation GPU', 15, 3000),
        EquipmentLevel(3, 'Datacenter GPU', 30, 8000),
        EquipmentLevel(4, 'Frontier AI Cluster', 50, 20000),
    ),
    'storage': (
        EquipmentLevel(1, 'Basic Storage', 0, 0),
        EquipmentLevel(2, 'SSD Array', 500, 2000),
        EquipmentLevel(3, 'Distributed Storage', 1500, 5000),
        EquipmentLevel(4, 'Cloud Storage Cluster', 3000, 12000),
    ),
    'network': (
        EquipmentLevel(1, 'Office Network', 0, 0),
        EquipmentLevel(2, 'Fiber Uplink', 20, 1500),
        EquipmentLevel(3, 'Dedicated Line', 40, 4000),
        EquipmentLevel(4, 'Global CDN', 60, 10000),
    ),
    'cooling': (
        EquipmentLevel(1, 'Air Cooling', 0, 0),
        EquipmentLevel(2, 'Liquid Cooling', 10, 2500),
        EquipmentLevel(3, 'Liquid Nitrogen', 25, 6000),
        EquipmentLevel(4, 'Immersion Cooling', 40, 15000),
    ),
}


