"""
Operation catalog for Black Box: Algorithm Ascension.

Every player action is a static Operation record: a cost, an ordered effect
list and an optional requirement predicate. The engine dispatches by id
through OPERATIONS_BY_ID.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from balance import Rules, DEFAULT_RULES
from effects import (
    Effect,
    FixedDelta,
    RangedDelta,
    DimensionDelta,
    RandomDimensionDelta,
    ChosenDimensionDelta,
    TeamExperience,
    GambleEffect,
    fixed,
    requires_dimension_choice,
)
from errors import UnknownOperation
from state import GameState, DIMENSIONS
import team


CATEGORY_DATA = 'data'
CATEGORY_TRAINING = 'training'
CATEGORY_MAINTENANCE = 'maintenance'
CATEGORY_DIMENSION = 'dimension'
CATEGORY_PREMIUM = 'premium'
CATEGORY_TEAM = 'team'
CATEGORY_SIDE_JOB = 'side_job'

OPERATION_CATEGORIES: Dict[str, Dict[str, str]] = {
    CATEGORY_DATA: {'name': 'Data Acquisition', 'description': 'Collect and refine training data.'},
    CATEGORY_TRAINING: {'name': 'Model Training', 'description': 'Turn data and compute into model metrics.'},
    CATEGORY_MAINTENANCE: {'name': 'Maintenance', 'description': 'Keep entropy, legal risk and hardware in check.'},
    CATEGORY_DIMENSION: {'name': 'Capability Research', 'description': 'Raise one ability dimension.'},
    CATEGORY_PREMIUM: {'name': 'Premium', 'description': 'Expensive shortcuts to ability growth.'},
    CATEGORY_TEAM: {'name': 'Team', 'description': 'Invest in the team.'},
    CATEGORY_SIDE_JOB: {'name': 'Side Jobs', 'description': 'Earn budget on the side; limited per turn.'},
}

Requirement = Callable[[GameState, Rules], bool]


# =============================================================================
# RECORDS
# =============================================================================

@dataclass(frozen=True)
class Cost:
    budget: int = 0
    compute_points: int = 0
    dirty_data: int = 0
    golden_data: int = 0

    def __post_init__(self):
        for name in ('budget', 'compute_points', 'dirty_data', 'golden_data'):
            if getattr(self, name) < 0:
                raise ValueError(f"Cost {name} cannot be negative: {getattr(self, name)}")


@dataclass(frozen=True)
class Operation:
    """A static player action."""

    id: str
    name: str
    category: str
    description: str
    cost: Cost
    effects: Tuple[Effect, ...]
    requirement: Optional[Requirement] = None
    requirement_text: str = ''
    side_job: bool = False
    requires_dimension_choice: bool = field(init=False)

    def __post_init__(self):
        if self.category not in OPERATION_CATEGORIES:
            raise ValueError(f"Unknown operation category: {self.category}")
        object.__setattr__(self, 'requires_dimension_choice', requires_dimension_choice(self.effects))

    def budget_cost(self, state: GameState, rules: Rules = DEFAULT_RULES) -> int:
        """Budget cost after the team's cost reduction."""
        return team.effective_budget_cost(state, self.cost.budget, rules)

    def unmet_requirements(self, state: GameState, rules: Rules = DEFAULT_RULES) -> List[str]:
        """Reasons this operation cannot run right now; empty when it can."""
        res = state.resources
        reasons = []

        budget = self.budget_cost(state, rules)
        if res.budget < budget:
            reasons.append(f"needs {budget} budget, have {res.budget}")
        if res.compute_points < self.cost.compute_points:
            reasons.append(f"needs {self.cost.compute_points} compute points, have {res.compute_points}")
        if res.dirty_data < self.cost.dirty_data:
            reasons.append(f"needs {self.cost.dirty_data} dirty data, have {res.dirty_data}")
        if res.golden_data < self.cost.golden_data:
            reasons.append(f"needs {self.cost.golden_data} golden data, have {res.golden_data}")
        if self.side_job and state.progress.side_jobs_this_turn >= rules.side_job_cap:
            reasons.append(f"side job limit of {rules.side_job_cap} per turn reached")
        if self.requirement is not None and not self.requirement(state, rules):
            reasons.append(self.requirement_text or 'requirement not met')

        return reasons

    def can_execute(self, state: GameState, rules: Rules = DEFAULT_RULES) -> bool:
        """Pure eligibility check; never mutates state."""
        return not self.unmet_requirements(state, rules)


# =============================================================================
# REQUIREMENTS
# =============================================================================

def _compute_below(limit: int) -> Requirement:
    def check(state: GameState, rules: Rules) -> bool:
        return state.resources.compute_max < limit
    return check


def _has_team(state: GameState, rules: Rules) -> bool:
    return len(state.team) > 0


def _consulting_ready(state: GameState, rules: Rules) -> bool:
    dims = team.effective_dimensions(state, rules)
    return dims['algorithm'] >= 50 and state.reputation >= 30


def _blog_ready(state: GameState, rules: Rules) -> bool:
    dims = team.effective_dimensions(state, rules)
    return any(value >= 60 for value in dims.values()) and state.reputation >= 50


# =============================================================================
# DATA
# =============================================================================

WEB_CRAWL = Operation(
    id='web_crawl',
    name='Web Crawl',
    category=CATEGORY_DATA,
    description='Scrape a large pile of dirty data. Raises entropy.',
    cost=Cost(budget=150, compute_points=1),
    effects=fixed(dirty_data=350, entropy=8),
)

DATA_CLEANING = Operation(
    id='data_cleaning',
    name='Data Cleaning',
    category=CATEGORY_DATA,
    description='Refine dirty data into golden data and tidy up.',
    cost=Cost(budget=400, compute_points=2, dirty_data=250),
    effects=fixed(golden_data=180, entropy=-5),
)

BUY_PRIVATE_DATA = Operation(
    id='buy_private_data',
    name='Buy Private Data',
    category=CATEGORY_DATA,
    description='Golden data straight from a broker, at legal risk.',
    cost=Cost(budget=1200),
    effects=fixed(golden_data=220, legal_risk=12),
)

DATA_PARTNERSHIP = Operation(
    id='data_partnership',
    name='Data Partnership',
    category=CATEGORY_DATA,
    description='Share data with a partner. Safe, modest gains.',
    cost=Cost(budget=600, compute_points=1),
    effects=fixed(golden_data=100, dirty_data=120),
)

USER_TRACKING = Operation(
    id='user_tracking',
    name='User Tracking',
    category=CATEGORY_DATA,
    description='Cheap behavioral data with a little legal exposure.',
    cost=Cost(budget=80, compute_points=1),
    effects=fixed(dirty_data=220, legal_risk=4, entropy=4),
)


# =============================================================================
# TRAINING
# =============================================================================

SGD = Operation(
    id='sgd',
    name='Stochastic Gradient Descent',
    category=CATEGORY_TRAINING,
    description='Basic training on dirty data.',
    cost=Cost(compute_points=1, dirty_data=120),
    effects=fixed(accuracy=5, speed=2, entropy=6),
)

FINE_TUNING = Operation(
    id='fine_tuning',
    name='Fine-Tuning',
    category=CATEGORY_TRAINING,
    description='Balanced gains from golden data.',
    cost=Cost(compute_points=2, golden_data=60),
    effects=fixed(accuracy=6, speed=4, creativity=3, robustness=3, entropy=12),
)

ADVERSARIAL_TRAINING = Operation(
    id='adversarial_training',
    name='Adversarial Training',
    category=CATEGORY_TRAINING,
    description='A 45% shot at a big robustness jump; failure sets the model back.',
    cost=Cost(compute_points=3),
    effects=(
        GambleEffect(
            success_rate=0.45,
            on_success=fixed(robustness=18, accuracy=6, entropy=10),
            on_failure=fixed(robustness=-4, accuracy=-2, entropy=12),
        ),
    ),
)

TRANSFER_LEARNING = Operation(
    id='transfer_learning',
    name='Transfer Learning',
    category=CATEGORY_TRAINING,
    description='Borrow a pretrained backbone for speed.',
    cost=Cost(budget=800, compute_points=2, golden_data=25),
    effects=fixed(speed=8, accuracy=3, entropy=4),
)

REINFORCEMENT_LEARNING = Operation(
    id='reinforcement_learning',
    name='Reinforcement Learning',
    category=CATEGORY_TRAINING,
    description='Creative but chaotic.',
    cost=Cost(budget=600, compute_points=3, dirty_data=150),
    effects=fixed(creativity=10, speed=3, entropy=16),
)

MODEL_DISTILLATION_TRAINING = Operation(
    id='model_distillation_training',
    name='Model Distillation',
    category=CATEGORY_TRAINING,
    description='A smaller, faster model that loses a little creativity.',
    cost=Cost(budget=500, compute_points=2),
    effects=fixed(speed=12, creativity=-2, entropy=6),
)


# =============================================================================
# MAINTENANCE
# =============================================================================

REFACTOR = Operation(
    id='refactor',
    name='Refactor',
    category=CATEGORY_MAINTENANCE,
    description='Pay down technical debt.',
    cost=Cost(compute_points=2),
    effects=fixed(entropy=-25),
)

DISTILLATION = Operation(
    id='distillation',
    name='Full Distillation',
    category=CATEGORY_MAINTENANCE,
    description='Wipe entropy clean at the cost of a lower fit score cap.',
    cost=Cost(budget=2500, compute_points=3),
    effects=fixed(entropy=-100, fit_score_cap=-2),
)

SYSTEM_OPTIMIZATION = Operation(
    id='system_optimization',
    name='System Optimization',
    category=CATEGORY_MAINTENANCE,
    description='Small routine cleanup.',
    cost=Cost(budget=300, compute_points=1),
    effects=fixed(entropy=-12),
)

COMPLIANCE_AUDIT = Operation(
    id='compliance_audit',
    name='Compliance Audit',
    category=CATEGORY_MAINTENANCE,
    description='Lawyers review the data pipeline.',
    cost=Cost(budget=1000, compute_points=1),
    effects=fixed(legal_risk=-25),
)

SERVER_UPGRADE = Operation(
    id='server_upgrade',
    name='Server Upgrade',
    category=CATEGORY_MAINTENANCE,
    description='Permanently raise compute capacity by one.',
    cost=Cost(budget=4000),
    effects=fixed(compute_max=1),
    requirement=_compute_below(8),
    requirement_text='compute capacity must be below 8',
)


# =============================================================================
# DIMENSION RESEARCH
# =============================================================================

ALGORITHM_RESEARCH = Operation(
    id='algorithm_research',
    name='Algorithm Research',
    category=CATEGORY_DIMENSION,
    description='Algorithm +6.',
    cost=Cost(budget=500, compute_points=2),
    effects=(DimensionDelta('algorithm', 6),),
)

DATA_ENGINEERING = Operation(
    id='data_engineering',
    name='Data Engineering',
    category=CATEGORY_DIMENSION,
    description='Data processing +6.',
    cost=Cost(budget=500, compute_points=2),
    effects=(DimensionDelta('data_processing', 6),),
)

ARCHITECTURE_OPTIMIZATION = Operation(
    id='architecture_optimization',
    name='Architecture Optimization',
    category=CATEGORY_DIMENSION,
    description='Stability +6.',
    cost=Cost(budget=500, compute_points=2),
    effects=(DimensionDelta('stability', 6),),
)

USER_RESEARCH = Operation(
    id='user_research',
    name='User Research',
    category=CATEGORY_DIMENSION,
    description='User experience +6.',
    cost=Cost(budget=500, compute_points=2),
    effects=(DimensionDelta('user_experience', 6),),
)


# =============================================================================
# PREMIUM
# =============================================================================

HIRE_CONSULTANT = Operation(
    id='hire_consultant',
    name='Hire Consultant',
    category=CATEGORY_PREMIUM,
    description='An expert lifts the dimension of your choice by 20.',
    cost=Cost(budget=3000, compute_points=1),
    effects=(ChosenDimensionDelta(20),),
)

BUY_TRAINING_COURSE = Operation(
    id='buy_training_course',
    name='Buy Training Course',
    category=CATEGORY_PREMIUM,
    description='Every dimension +5.',
    cost=Cost(budget=2000),
    effects=tuple(DimensionDelta(dim, 5) for dim in DIMENSIONS),
)

TECH_SUMMIT = Operation(
    id='tech_summit',
    name='Tech Summit',
    category=CATEGORY_PREMIUM,
    description='Two random dimensions +15.',
    cost=Cost(budget=5000, compute_points=2),
    effects=(RandomDimensionDelta(count=2, amount=15),),
)


# =============================================================================
# TEAM
# =============================================================================

TEAM_TRAINING = Operation(
    id='team_training',
    name='Team Training',
    category=CATEGORY_TEAM,
    description='Every team member gains 50 experience.',
    cost=Cost(budget=1500),
    effects=(TeamExperience(50),),
    requirement=_has_team,
    requirement_text='requires at least one team member',
)


# =============================================================================
# SIDE JOBS
# =============================================================================

FREELANCE = Operation(
    id='freelance',
    name='Freelance Work',
    category=CATEGORY_SIDE_JOB,
    description='Contract work for 800-1200 budget.',
    cost=Cost(compute_points=2),
    effects=(RangedDelta('budget', 800, 1200), FixedDelta('entropy', 5)),
    side_job=True,
)

TECH_CONSULTING = Operation(
    id='tech_consulting',
    name='Tech Consulting',
    category=CATEGORY_SIDE_JOB,
    description='Well-paid advice for those with a reputation.',
    cost=Cost(compute_points=1),
    effects=fixed(budget=1500),
    requirement=_consulting_ready,
    requirement_text='requires algorithm >= 50 and reputation >= 30',
    side_job=True,
)

DATA_LABELING_OUTSOURCE = Operation(
    id='data_labeling_outsource',
    name='Data Labeling Outsource',
    category=CATEGORY_SIDE_JOB,
    description='Sell labeling work done on your dirty data.',
    cost=Cost(compute_points=1, dirty_data=200),
    effects=fixed(budget=600),
    side_job=True,
)

OPEN_SOURCE_CONTRIBUTION = Operation(
    id='open_source_contribution',
    name='Open Source Contribution',
    category=CATEGORY_SIDE_JOB,
    description='Sponsorship money and goodwill.',
    cost=Cost(compute_points=2),
    effects=fixed(budget=500, reputation=10) + (RandomDimensionDelta(count=1, amount=5),),
    side_job=True,
)

TECH_BLOG = Operation(
    id='tech_blog',
    name='Tech Blog',
    category=CATEGORY_SIDE_JOB,
    description='Write up what you know.',
    cost=Cost(compute_points=1),
    effects=fixed(budget=400, reputation=15),
    requirement=_blog_ready,
    requirement_text='requires any dimension >= 60 and reputation >= 50',
    side_job=True,
)


# =============================================================================
# CATALOG
# =============================================================================

DATA_OPERATIONS = (WEB_CRAWL, DATA_CLEANING, BUY_PRIVATE_DATA, DATA_PARTNERSHIP, USER_TRACKING)
TRAINING_OPERATIONS = (
    SGD,
    FINE_TUNING,
    ADVERSARIAL_TRAINING,
    TRANSFER_LEARNING,
    REINFORCEMENT_LEARNING,
    MODEL_DISTILLATION_TRAINING,
)
MAINTENANCE_OPERATIONS = (REFACTOR, DISTILLATION, SYSTEM_OPTIMIZATION, COMPLIANCE_AUDIT, SERVER_UPGRADE)
DIMENSION_OPERATIONS = (ALGORITHM_RESEARCH, DATA_ENGINEERING, ARCHITECTURE_OPTIMIZATION, USER_RESEARCH)
PREMIUM_OPERATIONS = (HIRE_CONSULTANT, BUY_TRAINING_COURSE, TECH_SUMMIT)
TEAM_OPERATIONS = (TEAM_TRAINING,)
SIDE_JOB_OPERATIONS = (
    FREELANCE,
    TECH_CONSULTING,
    DATA_LABELING_OUTSOURCE,
    OPEN_SOURCE_CONTRIBUTION,
    TECH_BLOG,
)

OPERATIONS_BY_CATEGORY: Dict[str, Tuple[Operation, ...]] = {
    CATEGORY_DATA: DATA_OPERATIONS,
    CATEGORY_TRAINING: TRAINING_OPERATIONS,
    CATEGORY_MAINTENANCE: MAINTENANCE_OPERATIONS,
    CATEGORY_DIMENSION: DIMENSION_OPERATIONS,
    CATEGORY_PREMIUM: PREMIUM_OPERATIONS,
    CATEGORY_TEAM: TEAM_OPERATIONS,
    CATEGORY_SIDE_JOB: SIDE_JOB_OPERATIONS,
}

ALL_OPERATIONS: Tuple[Operation, ...] = tuple(
    op for category in OPERATIONS_BY_CATEGORY.values() for op in category
)

OPERATIONS_BY_ID: Dict[str, Operation] = {op.id: op for op in ALL_OPERATIONS}


def get_operation(operation_id: str) -> Operation:
    """Look up an operation by id; raises UnknownOperation."""
    try:
        return OPERATIONS_BY_ID[operation_id]
    except KeyError:
        raise UnknownOperation(f"Unknown operation: {operation_id}") from None


def operations_in_category(category: str) -> Tuple[Operation, ...]:
    return OPERATIONS_BY_CATEGORY.get(category, ())


def available_operations(state: GameState, rules: Rules = DEFAULT_RULES) -> List[Operation]:
    """Operations the player can run right now."""
    if state.is_terminal():
        return []
    return [op for op in ALL_OPERATIONS if op.can_execute(state, rules)]
