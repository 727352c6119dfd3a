"""
Exam scenarios, random events and endings.
"""

from dataclasses import dataclass
from typing import Dict, Tuple

from effects import Effect, FixedDelta, fixed


# =============================================================================
# EXAM SCENARIOS
# =============================================================================

@dataclass(frozen=True)
class ExamScenario:
    scenario_id: str
    name: str
    base_traffic: int
    focus_dimensions: Tuple[str, ...]


EXAM_SCENARIOS: Tuple[ExamScenario, ...] = (
    ExamScenario('daily_traffic', 'Daily Traffic', 5000, ('stability',)),
    ExamScenario('weekend_peak', 'Weekend Peak', 8000, ('stability', 'user_experience')),
    ExamScenario('friday_rush', 'Friday Night Rush', 12000, ('algorithm', 'stability')),
    ExamScenario('breaking_news', 'Breaking News Surge', 18000, ('data_processing', 'stability')),
    ExamScenario('shopping_festival', 'Shopping Festival', 30000, ('algorithm', 'user_experience')),
    ExamScenario('new_year_rush', 'New Year Red Packet Rush', 50000, ('algorithm', 'stability')),
    ExamScenario('user_growth', 'New User Growth', 10000, ('user_experience', 'data_processing')),
    ExamScenario('algorithm_contest', 'Algorithm Contest', 15000, ('algorithm',)),
    ExamScenario('data_migration', 'Data Migration', 12000, ('data_processing', 'stability')),
)


# =============================================================================
# EVENTS
# =============================================================================

EVENT_POSITIVE = 'positive'
EVENT_NEGATIVE = 'negative'
EVENT_CONDITIONAL = 'conditional'


@dataclass(frozen=True)
class GameEvent:
    event_id: str
    name: str
    description: str
    kind: str
    effects: Tuple[Effect, ...]
    # Conditional events fire when legal risk is at least this
    legal_risk_trigger: int = 0


POSITIVE_EVENTS: Tuple[GameEvent, ...] = (
    GameEvent('investor_funding', 'Investor Funding',
              'An angel round closes: budget +3000.',
              EVENT_POSITIVE, fixed(budget=3000)),
    GameEvent('talent_recruitment', 'Talent Recruitment',
              'A strong engineer joins and cleans house: entropy -8.',
              EVENT_POSITIVE, fixed(entropy=-8)),
    GameEvent('data_donation', 'Data Donation',
              'A partner donates a curated set: golden data +100.',
              EVENT_POSITIVE, fixed(golden_data=100)),
    GameEvent('algorithm_breakthrough', 'Algorithm Breakthrough',
              'Research pays off: fit score +5.',
              EVENT_POSITIVE, fixed(fit_score=5)),
    GameEvent('government_grant', 'Government Grant',
              'An innovation subsidy arrives: budget +2000.',
              EVENT_POSITIVE, fixed(budget=2000)),
)

NEGATIVE_EVENTS: Tuple[GameEvent, ...] = (
    GameEvent('server_failure', 'Server Failure',
              'Hardware fails: budget -1500, entropy +15.',
              EVENT_NEGATIVE, fixed(budget=-1500, entropy=15)),
    GameEvent('data_leak', 'Data Leak',
              'Part of the dataset leaks: golden data -50, legal risk +10.',
              EVENT_NEGATIVE, fixed(golden_data=-50, legal_risk=10)),
    GameEvent('competitor_poaching', 'Competitor Poaching',
              'A core engineer is poached: entropy +12.',
              EVENT_NEGATIVE, fixed(entropy=12)),
    GameEvent('market_crash', 'Market Downturn',
              'The market cools: budget -1000.',
              EVENT_NEGATIVE, fixed(budget=-1000)),
    GameEvent('model_degradation', 'Model Degradation',
              'Model quality drifts: fit score -3.',
              EVENT_NEGATIVE, fixed(fit_score=-3)),
)

# Checked most severe first
CONDITIONAL_EVENTS: Tuple[GameEvent, ...] = (
    GameEvent('regulatory_investigation', 'Regulatory Investigation',
              'Regulators step in: budget -1500, legal risk cleared.',
              EVENT_CONDITIONAL,
              (FixedDelta('budget', -1500), FixedDelta('legal_risk', -100)),
              legal_risk_trigger=80),
    GameEvent('legal_fine', 'Privacy Fine',
              'Fined for data misuse: budget -2500, legal risk cleared.',
              EVENT_CONDITIONAL,
              (FixedDelta('budget', -2500), FixedDelta('legal_risk', -100)),
              legal_risk_trigger=50),
)


# =============================================================================
# ENDINGS
# =============================================================================

ENDING_BANKRUPTCY = 'bankruptcy'
ENDING_ENTROPY_COLLAPSE = 'entropy_collapse'
ENDING_LEGAL_SHUTDOWN = 'legal_shutdown'
ENDING_ASCENSION = 'algorithmic_ascension'
ENDING_INDUSTRY_LEADER = 'industry_leader'
ENDING_SURVIVOR = 'survivor'


@dataclass(frozen=True)
class EndingConfig:
    ending_id: str
    title: str
    victory: bool
    # Narrative template in the messages package
    template: str


ENDINGS: Dict[str, EndingConfig] = {
    ENDING_BANKRUPTCY: EndingConfig(ENDING_BANKRUPTCY, 'Bankrupt', False, 'endings/defeat.txt'),
    ENDING_ENTROPY_COLLAPSE: EndingConfig(ENDING_ENTROPY_COLLAPSE, 'Entropy Collapse', False, 'endings/defeat.txt'),
    ENDING_LEGAL_SHUTDOWN: EndingConfig(ENDING_LEGAL_SHUTDOWN, 'Shut Down by Regulators', False, 'endings/defeat.txt'),
    ENDING_ASCENSION: EndingConfig(ENDING_ASCENSION, 'Algorithmic Ascension', True, 'endings/victory.txt'),
    ENDING_INDUSTRY_LEADER: EndingConfig(ENDING_INDUSTRY_LEADER, 'Industry Leader', True, 'endings/victory.txt'),
    ENDING_SURVIVOR: EndingConfig(ENDING_SURVIVOR, 'Survivor', True, 'endings/victory.txt'),
}
