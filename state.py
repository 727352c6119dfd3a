"""
Game state for Black Box: Algorithm Ascension.

The GameState dataclass tree is plain data: no callables, no cycles, no
random generators. Every numeric field has bounds that _clamp_all_values()
enforces; the engine calls it after every mutation.
"""

from dataclasses import dataclass, asdict, field
from typing import Dict, Any, List, Optional, Tuple


# =============================================================================
# BOUNDS AND ENUMERATIONS
# =============================================================================

MIN_GAUGE = 0
MAX_GAUGE = 100

MIN_COMPUTE_MAX = 1
MAX_COMPUTE_MAX = 10

DEFAULT_DATA_CAPACITY = 1000
DEFAULT_DIMENSION_VALUE = 20
MAX_EQUIPMENT_LEVEL = 4

MAX_MEMBER_LEVEL = 10
MAX_BASE_STAT = 20

DIMENSIONS = ('algorithm', 'data_processing', 'stability', 'user_experience')
MODEL_METRICS = ('accuracy', 'speed', 'creativity', 'robustness')
EQUIPMENT_KINDS = ('gpu', 'storage', 'network', 'cooling')

ARCHETYPES = ('startup', 'bigtech', 'academic')
DIFFICULTIES = ('easy', 'normal', 'hard', 'nightmare')
RARITIES = ('common', 'rare', 'epic', 'legendary')
TRAITS = (
    'algorithm_expert',
    'data_engineer',
    'architect',
    'product_manager',
    'fullstack',
    'efficiency',
    'cost_control',
    'data_mining',
)

STATUS_PLAYING = 'playing'
STATUS_GAME_OVER = 'game_over'
STATUS_VICTORY = 'victory'
GAME_STATUSES = (STATUS_PLAYING, STATUS_GAME_OVER, STATUS_VICTORY)

# Fit score weights over the four model metrics
FIT_SCORE_WEIGHTS = {
    'accuracy': 0.40,
    'speed': 0.25,
    'creativity': 0.20,
    'robustness': 0.15,
}

STATE_VERSION = '2.1.0'


def clamp(value, low, high):
    return max(low, min(high, value))


def calculate_fit_score(metrics: 'Metrics') -> int:
    """Weighted sum of the model metrics, floored and capped."""
    raw = sum(getattr(metrics, name) * weight for name, weight in FIT_SCORE_WEIGHTS.items())
    return clamp(int(raw), MIN_GAUGE, metrics.fit_score_cap)


# =============================================================================
# STATE COMPONENTS
# =============================================================================

@dataclass
class Resources:
    budget: int = 0
    compute_points: int = 0
    compute_max: int = 3
    dirty_data: int = 0
    golden_data: int = 0
    data_capacity: int = DEFAULT_DATA_CAPACITY
    # Part of compute_max granted by team traits; resynced on team changes
    compute_bonus: int = 0


@dataclass
class Metrics:
    fit_score: int = 0
    entropy: int = 0
    fit_score_cap: int = MAX_GAUGE
    accuracy: int = 0
    speed: int = 0
    creativity: int = 0
    robustness: int = 0


@dataclass
class Dimensions:
    algorithm: int = DEFAULT_DIMENSION_VALUE
    data_processing: int = DEFAULT_DIMENSION_VALUE
    stability: int = DEFAULT_DIMENSION_VALUE
    user_experience: int = DEFAULT_DIMENSION_VALUE

    def as_dict(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in DIMENSIONS}


@dataclass
class Progress:
    turn: int = 1
    turns_until_exam: int = 5
    consecutive_negative_budget: int = 0
    exams_passed: int = 0
    side_jobs_this_turn: int = 0


@dataclass
class Risks:
    legal_risk: int = 0
    server_meltdown: bool = False
    meltdown_turns: int = 0


@dataclass
class EquipmentTrack:
    kind: str
    level: int = 1
    max_level: int = MAX_EQUIPMENT_LEVEL


@dataclass
class Equipment:
    gpu: EquipmentTrack = field(default_factory=lambda: EquipmentTrack('gpu'))
    storage: EquipmentTrack = field(default_factory=lambda: EquipmentTrack('storage'))
    network: EquipmentTrack = field(default_factory=lambda: EquipmentTrack('network'))
    cooling: EquipmentTrack = field(default_factory=lambda: EquipmentTrack('cooling'))

    def track(self, kind: str) -> EquipmentTrack:
        if kind not in EQUIPMENT_KINDS:
            raise ValueError(f"Unknown equipment kind: {kind}")
        return getattr(self, kind)


@dataclass
class BaseStats:
    compute_contribution: int = 0
    data_efficiency: int = 0
    maintenance_skill: int = 0


@dataclass
class TeamMember:
    """A hired member or a hiring candidate. Traits never repeat."""

    id: str
    name: str
    rarity: str
    base_stats: BaseStats
    traits: Tuple[str, ...] = ()
    level: int = 1
    experience: int = 0
    hiring_cost: int = 0
    salary: int = 0

    def __post_init__(self):
        self.traits = tuple(self.traits)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TeamMember':
        data = dict(data)
        data['base_stats'] = BaseStats(**data['base_stats'])
        data['traits'] = tuple(data.get('traits', ()))
        return cls(**data)


# =============================================================================
# GAME STATE
# =============================================================================

@dataclass
class GameState:
    """
    Complete game state. Mutated only by the engine, on a working copy.

    Holds nothing that cannot round-trip through JSON.
    """

    resources: Resources = field(default_factory=Resources)
    metrics: Metrics = field(default_factory=Metrics)
    dimensions: Dimensions = field(default_factory=Dimensions)
    progress: Progress = field(default_factory=Progress)
    risks: Risks = field(default_factory=Risks)
    equipment: Equipment = field(default_factory=Equipment)
    archetype: str = 'startup'
    difficulty: str = 'normal'
    reputation: int = 0
    team: List[TeamMember] = field(default_factory=list)
    hiring_pool: List[TeamMember] = field(default_factory=list)
    game_status: str = STATUS_PLAYING
    game_over_reason: Optional[str] = None
    ending_type: Optional[str] = None
    version: str = STATE_VERSION

    def __post_init__(self):
        """Validate and clamp all values to valid ranges."""
        self._clamp_all_values()

    def _clamp_all_values(self):
        """Normalize every bounded field into its valid range."""
        res = self.resources
        res.compute_max = clamp(int(res.compute_max), MIN_COMPUTE_MAX, MAX_COMPUTE_MAX)
        res.compute_bonus = clamp(int(res.compute_bonus), 0, res.compute_max - MIN_COMPUTE_MAX)
        res.compute_points = clamp(int(res.compute_points), 0, res.compute_max)
        res.data_capacity = max(0, int(res.data_capacity))
        res.golden_data = clamp(int(res.golden_data), 0, res.data_capacity)
        res.dirty_data = clamp(int(res.dirty_data), 0, res.data_capacity - res.golden_data)
        res.budget = int(res.budget)

        met = self.metrics
        met.fit_score_cap = clamp(int(met.fit_score_cap), MIN_GAUGE, MAX_GAUGE)
        met.entropy = clamp(int(met.entropy), MIN_GAUGE, MAX_GAUGE)
        for name in MODEL_METRICS:
            setattr(met, name, clamp(int(getattr(met, name)), MIN_GAUGE, met.fit_score_cap))
        met.fit_score = clamp(int(met.fit_score), MIN_GAUGE, met.fit_score_cap)

        for name in DIMENSIONS:
            setattr(self.dimensions, name, clamp(int(getattr(self.dimensions, name)), MIN_GAUGE, MAX_GAUGE))

        self.risks.legal_risk = clamp(int(self.risks.legal_risk), MIN_GAUGE, MAX_GAUGE)
        self.risks.meltdown_turns = max(0, int(self.risks.meltdown_turns))
        self.reputation = clamp(int(self.reputation), MIN_GAUGE, MAX_GAUGE)

        for kind in EQUIPMENT_KINDS:
            track = self.equipment.track(kind)
            track.level = clamp(int(track.level), 1, track.max_level)

        prog = self.progress
        prog.consecutive_negative_budget = max(0, int(prog.consecutive_negative_budget))
        prog.exams_passed = max(0, int(prog.exams_passed))
        prog.side_jobs_this_turn = max(0, int(prog.side_jobs_this_turn))

    def recompute_fit_score(self):
        """Refresh fit_score from the model metrics."""
        self.metrics.fit_score = calculate_fit_score(self.metrics)

    def is_terminal(self) -> bool:
        """True once the game has reached game_over or victory."""
        return self.game_status != STATUS_PLAYING

    def to_dict(self) -> Dict[str, Any]:
        """Serialize state to nested plain data (JSON-compatible)."""
        data = asdict(self)
        for key in ('team', 'hiring_pool'):
            for member in data[key]:
                member['traits'] = list(member['traits'])
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'GameState':
        """
        Build state from nested plain data.

        Expects complete, current-version data; savegame.deserialize()
        validates and migrates before calling this.
        """
        equipment = data['equipment']
        return cls(
            resources=Resources(**data['resources']),
            metrics=Metrics(**data['metrics']),
            dimensions=Dimensions(**data['dimensions']),
            progress=Progress(**data['progress']),
            risks=Risks(**data['risks']),
            equipment=Equipment(**{kind: EquipmentTrack(**equipment[kind]) for kind in EQUIPMENT_KINDS}),
            archetype=data['archetype'],
            difficulty=data['difficulty'],
            reputation=data['reputation'],
            team=[TeamMember.from_dict(m) for m in data['team']],
            hiring_pool=[TeamMember.from_dict(m) for m in data['hiring_pool']],
            game_status=data['game_status'],
            game_over_reason=data.get('game_over_reason'),
            ending_type=data.get('ending_type'),
            version=data.get('version', STATE_VERSION),
        )
