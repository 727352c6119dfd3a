"""
Black Box: Algorithm Ascension - Game Engine

Turn logic and state transitions. Every mutating call deep-copies the
current state, works on the copy and hands it back only on success, so a
refused action never leaves a half-applied state behind.

This module is the single source of truth for:
- Game creation from an archetype and a difficulty
- Operation execution (eligibility, cost, effects, team experience)
- The turn close (upkeep, salaries, events, risk checks, exams)
- Hiring, firing and equipment upgrades
- Terminal conditions and the player-facing game log
"""

from dataclasses import dataclass, asdict, field
from typing import Optional, Callable, Dict, Any, List, Tuple
import copy
import itertools
import logging
import random

from balance import Rules, DEFAULT_RULES, GameEvent
from balance.scenarios import (
    ENDING_BANKRUPTCY,
    ENDING_ENTROPY_COLLAPSE,
    ENDING_LEGAL_SHUTDOWN,
)
from effects import EffectModifiers, apply_effects
from errors import IneligibleOperation, GameOverError
from exam import ExamResult, run_exam
from messages import render_message
from operations import Operation, get_operation, available_operations, CATEGORY_DATA
from state import (
    GameState,
    Resources,
    Metrics,
    Progress,
    DIMENSIONS,
    EQUIPMENT_KINDS,
    MIN_GAUGE,
    MAX_GAUGE,
    MAX_COMPUTE_MAX,
    DEFAULT_DATA_CAPACITY,
    STATUS_GAME_OVER,
    STATUS_VICTORY,
    clamp,
)
import scoring
import team

logger = logging.getLogger(__name__)


# =============================================================================
# GAME LOG
# =============================================================================

LOG_OPERATION = 'operation'
LOG_EVENT = 'event'
LOG_EXAM = 'exam'
LOG_SYSTEM = 'system'
LOG_TYPES = (LOG_OPERATION, LOG_EVENT, LOG_EXAM, LOG_SYSTEM)


@dataclass(frozen=True)
class LogEntry:
    """One player-facing log line. timestamp comes from a logical clock."""

    type: str
    message: str
    turn: int
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# (type, message) pairs produced while working on a copy; stamped on commit
Note = Tuple[str, str]

_default_clock = itertools.count().__next__


def _stamp(notes: List[Note], turn: int, clock: Callable[[], int]) -> List[LogEntry]:
    return [LogEntry(entry_type, message, turn, clock()) for entry_type, message in notes]


def _commit_log(log: Optional[List[LogEntry]], notes: List[Note], turn: int,
                clock: Optional[Callable[[], int]]) -> List[LogEntry]:
    entries = _stamp(notes, turn, clock or _default_clock)
    if log is not None:
        log.extend(entries)
    return entries


# =============================================================================
# STATE DIFFS
# =============================================================================

def _flatten(data: Dict[str, Any], prefix: str = '') -> Dict[str, Any]:
    """Flatten nested dicts to dotted paths, skipping lists."""
    flat = {}
    for key, value in data.items():
        path = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{path}."))
        elif not isinstance(value, list):
            flat[path] = value
    return flat


def _compute_delta(old, new):
    """Compute numeric delta between two values."""
    if isinstance(old, bool) or isinstance(new, bool):
        return None
    try:
        return new - old
    except TypeError:
        return None


def calculate_changes(start: Dict[str, Any], end: Dict[str, Any]) -> List[Dict[str, Any]]:
    """List every scalar field that differs between two state dicts."""
    before, after = _flatten(start), _flatten(end)
    changes = []
    for path, old in before.items():
        new = after.get(path)
        if new != old:
            changes.append({
                'path': path,
                'field': path.rsplit('.', 1)[-1],
                'from': old,
                'to': new,
                'delta': _compute_delta(old, new),
            })
    return changes


# =============================================================================
# HELPERS
# =============================================================================

def _rng_or_default(rng: Optional[random.Random]) -> random.Random:
    return rng if rng is not None else random.Random()


def _ensure_playing(state: GameState):
    if state.is_terminal():
        raise GameOverError(f"Game is over: {state.game_over_reason}")


def compute_modifiers(state: GameState, rules: Rules = DEFAULT_RULES, category: Optional[str] = None) -> EffectModifiers:
    """Archetype, equipment and trait multipliers for an operation's positive gains."""
    archetype = rules.archetype(state.archetype)
    gpu = rules.equipment_level('gpu', state.equipment.gpu.level).bonus
    cooling = rules.equipment_level('cooling', state.equipment.cooling.level).bonus

    data_multiplier = 1.0
    if category == CATEGORY_DATA:
        network = rules.equipment_level('network', state.equipment.network.level).bonus
        data_bonus = team.calculate_team_bonuses(state, rules).data_bonus
        data_multiplier = (1 + network / 100) * (1 + data_bonus) * (1 + archetype.data_acquisition_bonus)

    return EffectModifiers(
        training_multiplier=archetype.training_efficiency * (1 + gpu / 100),
        entropy_multiplier=1 - cooling / 100,
        data_multiplier=data_multiplier,
    )


def _finish(state: GameState, status: str, ending_type: str, reason: str,
            rules: Rules, notes: List[Note]):
    """Move a playing game to a terminal status. Happens at most once."""
    if state.is_terminal():
        return
    state.game_status = status
    state.ending_type = ending_type
    state.game_over_reason = reason

    title = rules.endings[ending_type].title
    if status == STATUS_VICTORY:
        notes.append((LOG_SYSTEM, render_message('log/victory.txt', {
            'title': title,
            'exams_passed': state.progress.exams_passed,
        })))
        logger.info(f"Victory on turn {state.progress.turn}: {ending_type}")
    else:
        notes.append((LOG_SYSTEM, render_message('log/game_over.txt', {'title': title})))
        logger.info(f"Game over on turn {state.progress.turn}: {reason}")


def _check_legal_shutdown(state: GameState, rules: Rules, notes: List[Note]):
    if state.risks.legal_risk >= rules.legal_shutdown_threshold:
        _finish(state, STATUS_GAME_OVER, ENDING_LEGAL_SHUTDOWN, ENDING_LEGAL_SHUTDOWN, rules, notes)


def _level_up_notes(level_ups: List[team.LevelUp]) -> List[Note]:
    return [
        (LOG_SYSTEM, render_message('log/level_up.txt', {
            'name': lu.name,
            'level': lu.new_level,
            'traits': lu.new_traits,
        }))
        for lu in level_ups
    ]


# =============================================================================
# GAME CREATION
# =============================================================================

def create_game(archetype: str, difficulty: str, *, rng: Optional[random.Random] = None,
                rules: Rules = DEFAULT_RULES) -> GameState:
    """
    Build the starting state for an archetype and a difficulty.

    Raises:
        ValueError: Unknown archetype or difficulty.
    """
    if archetype not in rules.archetypes:
        raise ValueError(f"Unknown archetype: {archetype}")
    if difficulty not in rules.difficulties:
        raise ValueError(f"Unknown difficulty: {difficulty}")

    rng = _rng_or_default(rng)
    preset = rules.archetype(archetype)
    config = rules.difficulty(difficulty)

    state = GameState(
        resources=Resources(
            budget=int(preset.budget * config.initial_budget_multiplier),
            compute_points=preset.compute_max,
            compute_max=preset.compute_max,
            dirty_data=preset.dirty_data,
            golden_data=preset.golden_data,
            data_capacity=DEFAULT_DATA_CAPACITY,
        ),
        metrics=Metrics(
            accuracy=preset.accuracy,
            speed=preset.speed,
            creativity=preset.creativity,
            robustness=preset.robustness,
        ),
        progress=Progress(turn=1, turns_until_exam=rules.exam_interval),
        archetype=archetype,
        difficulty=difficulty,
    )
    state.recompute_fit_score()
    state.hiring_pool = team.generate_hiring_pool(state, rng, rules)
    state._clamp_all_values()

    logger.info(f"New game: {archetype} on {difficulty}, budget {state.resources.budget}")
    return state


# =============================================================================
# OPERATIONS
# =============================================================================

def _execute_operation(state: GameState, operation_id: str, target_dimension: Optional[str],
                       rng: random.Random, rules: Rules) -> Tuple[GameState, List[Note], Operation, Optional[bool]]:
    _ensure_playing(state)
    operation = get_operation(operation_id)

    reasons = operation.unmet_requirements(state, rules)
    if reasons:
        logger.debug(f"Refused {operation_id}: {'; '.join(reasons)}")
        raise IneligibleOperation(f"Cannot run {operation_id}: {'; '.join(reasons)}")
    if operation.requires_dimension_choice and target_dimension not in DIMENSIONS:
        raise IneligibleOperation(
            f"{operation_id} needs a target dimension, one of {', '.join(DIMENSIONS)}"
        )

    working = copy.deepcopy(state)
    start = working.to_dict()

    res = working.resources
    res.budget -= operation.budget_cost(state, rules)
    res.compute_points -= operation.cost.compute_points
    res.dirty_data -= operation.cost.dirty_data
    res.golden_data -= operation.cost.golden_data
    if operation.side_job:
        working.progress.side_jobs_this_turn += 1

    modifiers = compute_modifiers(working, rules, operation.category)
    report = apply_effects(working, operation.effects, rng, modifiers, target_dimension)
    level_ups = []
    if report.experience_awarded:
        level_ups = team.add_experience_to_all(working, report.experience_awarded, rng, rules)
    working._clamp_all_values()

    changes = [c for c in calculate_changes(start, working.to_dict()) if c['delta'] is not None]
    notes: List[Note] = [(LOG_OPERATION, render_message('log/operation.txt', {
        'name': operation.name,
        'gamble': report.gamble_outcome,
        'changes': changes,
    }))]
    notes.extend(_level_up_notes(level_ups))
    _check_legal_shutdown(working, rules, notes)

    logger.debug(f"Turn {working.progress.turn}: ran {operation_id}")
    return working, notes, operation, report.gamble_outcome


def apply_operation(state: GameState, operation_id: str, target_dimension: Optional[str] = None, *,
                    rng: Optional[random.Random] = None, rules: Rules = DEFAULT_RULES,
                    log: Optional[List[LogEntry]] = None,
                    clock: Optional[Callable[[], int]] = None) -> GameState:
    """
    Run one operation and return the new state. `state` is never modified.

    Raises:
        UnknownOperation: operation_id is not in the catalog.
        GameOverError: The game has already ended.
        IneligibleOperation: Costs or requirements are not met.
    """
    working, notes, _, _ = _execute_operation(state, operation_id, target_dimension,
                                              _rng_or_default(rng), rules)
    _commit_log(log, notes, working.progress.turn, clock)
    return working


# =============================================================================
# TURN CLOSE
# =============================================================================

@dataclass
class TurnOutcome:
    """What happened during one turn close."""

    upkeep: int = 0
    salaries_paid: int = 0
    laid_off: List[str] = field(default_factory=list)
    event: Optional[str] = None
    exam: Optional[ExamResult] = None


def _upkeep(state: GameState, rules: Rules, outcome: TurnOutcome, notes: List[Note]):
    cooling = rules.equipment_level('cooling', state.equipment.cooling.level).bonus
    entropy_change = rules.entropy_drift - cooling // 10
    state.metrics.entropy = clamp(state.metrics.entropy + entropy_change, MIN_GAUGE, MAX_GAUGE)

    outcome.upkeep = sum(
        rules.equipment_upkeep_per_level * (state.equipment.track(kind).level - 1)
        for kind in EQUIPMENT_KINDS
    )
    state.resources.budget -= outcome.upkeep
    state.resources.compute_points = state.resources.compute_max

    notes.append((LOG_SYSTEM, render_message('log/upkeep.txt', {
        'turn': state.progress.turn,
        'upkeep': outcome.upkeep,
        'entropy_change': entropy_change,
    })))


def _payroll(state: GameState, rng: random.Random, rules: Rules, outcome: TurnOutcome, notes: List[Note]):
    payroll = team.pay_salaries(state, rng, rules)
    outcome.salaries_paid = payroll.paid
    for member in payroll.laid_off:
        outcome.laid_off.append(member.id)
        notes.append((LOG_SYSTEM, render_message('log/layoff.txt', {
            'name': member.name,
            'rarity': member.rarity,
        })))
    if payroll.paid:
        notes.append((LOG_SYSTEM, render_message('log/salary.txt', {'amount': payroll.paid})))


def pick_event(state: GameState, rng: random.Random, rules: Rules = DEFAULT_RULES) -> Optional[GameEvent]:
    """Conditional legal events first, then a negative roll, then a positive roll."""
    for event in rules.conditional_events:
        if state.risks.legal_risk >= event.legal_risk_trigger:
            return event
    if rng.random() < rules.difficulty(state.difficulty).negative_event_chance:
        return rng.choice(rules.negative_events)
    if rng.random() < rules.positive_event_chance:
        return rng.choice(rules.positive_events)
    return None


def _roll_event(state: GameState, rng: random.Random, rules: Rules, outcome: TurnOutcome, notes: List[Note]):
    event = pick_event(state, rng, rules)
    if event is None:
        return
    apply_effects(state, event.effects, rng)
    outcome.event = event.event_id
    notes.append((LOG_EVENT, render_message('log/event.txt', {
        'name': event.name,
        'description': event.description,
    })))
    logger.info(f"Turn {state.progress.turn}: event {event.event_id}")


def _check_bankruptcy(state: GameState, rules: Rules, notes: List[Note]) -> bool:
    progress = state.progress
    if state.resources.budget < 0:
        progress.consecutive_negative_budget += 1
    else:
        progress.consecutive_negative_budget = 0
    if progress.consecutive_negative_budget >= rules.bankruptcy_turns:
        _finish(state, STATUS_GAME_OVER, ENDING_BANKRUPTCY, ENDING_BANKRUPTCY, rules, notes)
        return True
    return False


def _check_meltdown(state: GameState, rules: Rules, notes: List[Note]):
    risks = state.risks
    if state.metrics.entropy >= rules.meltdown_threshold:
        risks.server_meltdown = True
        risks.meltdown_turns += 1
        state.resources.budget -= rules.meltdown_penalty
        notes.append((LOG_SYSTEM, render_message('log/meltdown.txt', {
            'entropy': state.metrics.entropy,
            'penalty': rules.meltdown_penalty,
            'turns': risks.meltdown_turns,
        })))
        logger.info(f"Turn {state.progress.turn}: server meltdown ({risks.meltdown_turns} in a row)")
        if risks.meltdown_turns >= rules.meltdown_fatal_turns:
            _finish(state, STATUS_GAME_OVER, ENDING_ENTROPY_COLLAPSE, ENDING_ENTROPY_COLLAPSE, rules, notes)
    else:
        risks.server_meltdown = False
        risks.meltdown_turns = 0


def _exam_countdown(state: GameState, rng: random.Random, rules: Rules, outcome: TurnOutcome, notes: List[Note]):
    progress = state.progress
    progress.turns_until_exam -= 1
    if progress.turns_until_exam > 0:
        return

    result = run_exam(state, rng, rules)
    outcome.exam = result
    progress.turns_until_exam = rules.exam_interval
    notes.append((LOG_EXAM, render_message('log/exam.txt', {
        'scenario_name': result.scenario_name,
        'focus': result.focus_dimensions,
        'final_reward': result.final_reward,
        'passed': result.passed,
        'meets_threshold': result.meets_threshold,
        'payout': result.payout,
        'penalty': result.penalty,
    })))

    if progress.exams_passed >= rules.victory_exams:
        _finish(state, STATUS_VICTORY, scoring.victory_ending(state, rules), 'victory', rules, notes)


def _close_turn(state: GameState, rng: random.Random, rules: Rules) -> Tuple[GameState, List[Note], TurnOutcome]:
    _ensure_playing(state)
    working = copy.deepcopy(state)
    outcome = TurnOutcome()
    notes: List[Note] = []

    # 1. Upkeep
    _upkeep(working, rules, outcome, notes)

    # 2. Salaries
    if working.progress.turn % rules.salary_interval == 0:
        _payroll(working, rng, rules, outcome, notes)

    # 3. Events
    _roll_event(working, rng, rules, outcome, notes)

    # 4. Fit score
    working.recompute_fit_score()
    working._clamp_all_values()

    # 5. Bankruptcy ends the turn early
    if _check_bankruptcy(working, rules, notes):
        return working, notes, outcome

    # 6. Meltdown
    _check_meltdown(working, rules, notes)

    # 7. Exam
    if not working.is_terminal():
        _exam_countdown(working, rng, rules, outcome, notes)
    working._clamp_all_values()
    _check_legal_shutdown(working, rules, notes)
    if working.is_terminal():
        return working, notes, outcome

    # 8. Advance
    working.progress.turn += 1
    working.progress.side_jobs_this_turn = 0

    # 9. Hiring pool
    if working.progress.turn % rules.hiring_refresh_interval == 0:
        working.hiring_pool = team.generate_hiring_pool(working, rng, rules)

    logger.debug(f"Closed turn {state.progress.turn}; budget {working.resources.budget}, "
                 f"entropy {working.metrics.entropy}")
    return working, notes, outcome


def end_turn(state: GameState, *, rng: Optional[random.Random] = None, rules: Rules = DEFAULT_RULES,
             log: Optional[List[LogEntry]] = None,
             clock: Optional[Callable[[], int]] = None) -> GameState:
    """
    Close the current turn and return the new state. `state` is never modified.

    Raises:
        GameOverError: The game has already ended.
    """
    working, notes, _ = _close_turn(state, _rng_or_default(rng), rules)
    _commit_log(log, notes, state.progress.turn, clock)
    return working


# =============================================================================
# TEAM AND EQUIPMENT
# =============================================================================

def _hire(state: GameState, member_id: str, rules: Rules) -> Tuple[GameState, List[Note]]:
    _ensure_playing(state)
    working = copy.deepcopy(state)
    member = team.hire_member(working, member_id, rules)
    notes = [(LOG_SYSTEM, render_message('log/hire.txt', {
        'name': member.name,
        'rarity': member.rarity,
        'cost': member.hiring_cost,
    }))]
    return working, notes


def _fire(state: GameState, member_id: str, rules: Rules) -> Tuple[GameState, List[Note]]:
    _ensure_playing(state)
    working = copy.deepcopy(state)
    member, refund = team.fire_member(working, member_id, rules)
    notes = [(LOG_SYSTEM, render_message('log/fire.txt', {'name': member.name, 'refund': refund}))]
    return working, notes


def _upgrade(state: GameState, kind: str, rules: Rules) -> Tuple[GameState, List[Note]]:
    _ensure_playing(state)
    if kind not in EQUIPMENT_KINDS:
        raise IneligibleOperation(f"Unknown equipment kind: {kind}")

    track = state.equipment.track(kind)
    if track.level >= track.max_level:
        raise IneligibleOperation(f"{kind} is already at max level {track.max_level}")
    next_level = rules.equipment_level(kind, track.level + 1)
    if state.resources.budget < next_level.upgrade_cost:
        raise IneligibleOperation(
            f"Upgrading {kind} costs {next_level.upgrade_cost}, budget is {state.resources.budget}"
        )

    working = copy.deepcopy(state)
    working.resources.budget -= next_level.upgrade_cost
    working.equipment.track(kind).level = next_level.level

    if kind == 'gpu':
        working.resources.compute_max = min(MAX_COMPUTE_MAX, working.resources.compute_max + 1)
    elif kind == 'storage':
        working.resources.data_capacity = DEFAULT_DATA_CAPACITY + next_level.bonus
    elif kind == 'cooling':
        working.metrics.entropy = clamp(working.metrics.entropy - next_level.bonus // 2, MIN_GAUGE, MAX_GAUGE)
    working._clamp_all_values()

    notes = [(LOG_SYSTEM, render_message('log/equipment.txt', {
        'kind': kind,
        'level_name': next_level.name,
        'level': next_level.level,
        'cost': next_level.upgrade_cost,
    }))]
    return working, notes


def hire_member(state: GameState, member_id: str, *, rules: Rules = DEFAULT_RULES,
                log: Optional[List[LogEntry]] = None,
                clock: Optional[Callable[[], int]] = None) -> GameState:
    """Raises IneligibleOperation when the candidate cannot be hired."""
    working, notes = _hire(state, member_id, rules)
    _commit_log(log, notes, working.progress.turn, clock)
    return working


def fire_member(state: GameState, member_id: str, *, rules: Rules = DEFAULT_RULES,
                log: Optional[List[LogEntry]] = None,
                clock: Optional[Callable[[], int]] = None) -> GameState:
    working, notes = _fire(state, member_id, rules)
    _commit_log(log, notes, working.progress.turn, clock)
    return working


def upgrade_equipment(state: GameState, kind: str, *, rules: Rules = DEFAULT_RULES,
                      log: Optional[List[LogEntry]] = None,
                      clock: Optional[Callable[[], int]] = None) -> GameState:
    """Raises IneligibleOperation at max level or when unaffordable."""
    working, notes = _upgrade(state, kind, rules)
    _commit_log(log, notes, working.progress.turn, clock)
    return working


# =============================================================================
# GAME ENGINE CLASS
# Holds one session: state, seeded RNG, rules and the game log.
# =============================================================================

class GameEngine:
    """
    Stateful wrapper over the functional API.

    Every call returns a result dict; the state is replaced only when the
    call succeeds.
    """

    def __init__(self, state: Optional[GameState] = None, *, rng: Optional[random.Random] = None,
                 rules: Rules = DEFAULT_RULES, clock: Optional[Callable[[], int]] = None):
        self.rules = rules
        self.rng = _rng_or_default(rng)
        self.state = state or create_game('startup', 'normal', rng=self.rng, rules=rules)
        self._clock = clock or itertools.count().__next__
        self._log: List[LogEntry] = []

    def _record(self, notes: List[Note], turn: int) -> List[LogEntry]:
        entries = _stamp(notes, turn, self._clock)
        self._log.extend(entries)
        return entries

    def _result(self, start: Dict[str, Any], entries: List[LogEntry], **extra) -> Dict[str, Any]:
        result = {
            'state_changes': calculate_changes(start, self.state.to_dict()),
            'log': [entry.to_dict() for entry in entries],
            'game_over': self.state.is_terminal(),
            'victory': self.state.game_status == STATUS_VICTORY,
            'game_over_reason': self.state.game_over_reason,
        }
        result.update(extra)
        return result

    # -------------------------------------------------------------------------
    # ACTIONS
    # -------------------------------------------------------------------------

    def apply_operation(self, operation_id: str, target_dimension: Optional[str] = None) -> Dict[str, Any]:
        """
        Run one operation.

        Returns:
            Dict with the state changes, new log entries and game status
        """
        start = self.state.to_dict()
        working, notes, operation, gamble = _execute_operation(
            self.state, operation_id, target_dimension, self.rng, self.rules
        )
        self.state = working
        entries = self._record(notes, working.progress.turn)
        return self._result(start, entries, operation=operation.id, gamble_outcome=gamble)

    def end_turn(self) -> Dict[str, Any]:
        """Close the turn. The result carries the event id and exam outcome, if any."""
        start = self.state.to_dict()
        turn = self.state.progress.turn
        working, notes, outcome = _close_turn(self.state, self.rng, self.rules)
        self.state = working
        entries = self._record(notes, turn)
        return self._result(
            start,
            entries,
            turn=turn,
            upkeep=outcome.upkeep,
            salaries_paid=outcome.salaries_paid,
            laid_off=outcome.laid_off,
            event=outcome.event,
            exam=outcome.exam.to_dict() if outcome.exam else None,
        )

    def hire_member(self, member_id: str) -> Dict[str, Any]:
        start = self.state.to_dict()
        working, notes = _hire(self.state, member_id, self.rules)
        self.state = working
        return self._result(start, self._record(notes, working.progress.turn), member_id=member_id)

    def fire_member(self, member_id: str) -> Dict[str, Any]:
        start = self.state.to_dict()
        working, notes = _fire(self.state, member_id, self.rules)
        self.state = working
        return self._result(start, self._record(notes, working.progress.turn), member_id=member_id)

    def upgrade_equipment(self, kind: str) -> Dict[str, Any]:
        start = self.state.to_dict()
        working, notes = _upgrade(self.state, kind, self.rules)
        self.state = working
        return self._result(start, self._record(notes, working.progress.turn),
                            kind=kind, level=working.equipment.track(kind).level)

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    def get_state(self) -> GameState:
        """Return a copy so callers cannot mutate the live state."""
        return copy.deepcopy(self.state)

    def log(self) -> List[LogEntry]:
        return list(self._log)

    def summary(self) -> Dict[str, Any]:
        return scoring.summarize(self.state, self.rules)

    def is_game_over(self) -> bool:
        return self.state.is_terminal()

    def is_victory(self) -> bool:
        return self.state.game_status == STATUS_VICTORY

    def get_valid_operations(self) -> List[str]:
        """Ids of operations the player can run right now."""
        return [op.id for op in available_operations(self.state, self.rules)]

    def get_turn_summary(self) -> Dict[str, Any]:
        """Get summary of current turn state."""
        res, met = self.state.resources, self.state.metrics
        return {
            'turn': self.state.progress.turn,
            'budget': res.budget,
            'compute_points': res.compute_points,
            'compute_max': res.compute_max,
            'dirty_data': res.dirty_data,
            'golden_data': res.golden_data,
            'fit_score': met.fit_score,
            'entropy': met.entropy,
            'legal_risk': self.state.risks.legal_risk,
            'reputation': self.state.reputation,
            'dimensions': team.effective_dimensions(self.state, self.rules),
            'turns_until_exam': self.state.progress.turns_until_exam,
            'exams_passed': self.state.progress.exams_passed,
            'team_size': len(self.state.team),
            'game_status': self.state.game_status,
        }


# =============================================================================
# NEW GAME FACTORY
# =============================================================================

def new_game(archetype: str = 'startup', difficulty: str = 'normal', seed: Optional[int] = None,
             rules: Rules = DEFAULT_RULES) -> GameEngine:
    """Create a new seeded game session."""
    rng = random.Random(seed)
    state = create_game(archetype, difficulty, rng=rng, rules=rules)
    engine = GameEngine(state=state, rng=rng, rules=rules)
    engine._record([(LOG_SYSTEM, render_message('log/new_game.txt', {
        'archetype': rules.archetype(archetype).name,
        'difficulty': rules.difficulty(difficulty).name,
        'budget': state.resources.budget,
    }))], state.progress.turn)
    return engine


# =============================================================================
# MAIN ENTRY (for testing)
# =============================================================================

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)

    engine = new_game('bigtech', 'normal', seed=42)
    print("Initial state:", engine.get_turn_summary())

    for turn in range(7):
        valid = engine.get_valid_operations()
        if valid:
            result = engine.apply_operation(valid[0])
            print(f"\nTurn {engine.state.progress.turn}: {result['operation']}")
        result = engine.end_turn()
        if result['exam']:
            print(f"  Exam: {result['exam']['scenario_name']} passed={result['exam']['passed']}")
        if result['game_over']:
            break

    for entry in engine.log():
        print(f"[{entry.turn}:{entry.timestamp}] {entry.type}: {entry.message}")
    print("\nSummary:", engine.summary())
