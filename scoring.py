"""
Final score, grade and ending resolution.
"""

from typing import Dict, Any, Optional

from balance import Rules, DEFAULT_RULES
from balance.scenarios import (
    ENDING_ASCENSION,
    ENDING_INDUSTRY_LEADER,
    ENDING_SURVIVOR,
)
from messages import render_message
from state import GameState, STATUS_VICTORY, DIMENSIONS
import team


def calculate_score(state: GameState, rules: Rules = DEFAULT_RULES) -> int:
    dims = team.effective_dimensions(state, rules)
    mean_dimension = sum(dims.values()) / len(DIMENSIONS)
    raw = (
        state.progress.turn * 10
        + state.progress.exams_passed * 500
        + state.metrics.fit_score * 20
        + mean_dimension * 10
        + state.reputation * 15
        + max(0, state.resources.budget) / 100
        - state.metrics.entropy * 5
    )
    return max(0, int(raw))


def calculate_grade(score: int, victory: bool, rules: Rules = DEFAULT_RULES) -> str:
    table = rules.victory_grades if victory else rules.defeat_grades
    for grade, minimum in table:
        if score >= minimum:
            return grade
    return rules.victory_floor_grade if victory else rules.defeat_floor_grade


def strong_dimension_count(state: GameState, rules: Rules = DEFAULT_RULES) -> int:
    """Effective dimensions at or above the difficulty's ascension value."""
    target = rules.difficulty(state.difficulty).ascension_dimension_value
    return sum(1 for value in team.effective_dimensions(state, rules).values() if value >= target)


def victory_ending(state: GameState, rules: Rules = DEFAULT_RULES) -> str:
    strong = strong_dimension_count(state, rules)
    if strong == len(DIMENSIONS):
        return ENDING_ASCENSION
    if strong >= 2:
        return ENDING_INDUSTRY_LEADER
    return ENDING_SURVIVOR


def summarize(state: GameState, rules: Rules = DEFAULT_RULES) -> Dict[str, Any]:
    """
    Score and describe the run.

    For a game still in progress ending_type, title and narrative are None
    and the grade is computed as if the run had ended in defeat.
    """
    victory = state.game_status == STATUS_VICTORY
    score = calculate_score(state, rules)
    grade = calculate_grade(score, victory, rules)

    title: Optional[str] = None
    narrative: Optional[str] = None
    ending = rules.endings.get(state.ending_type) if state.ending_type else None
    if ending is not None:
        title = ending.title
        narrative = render_message(ending.template, {
            'ending_type': ending.ending_id,
            'turn': state.progress.turn,
            'exams_passed': state.progress.exams_passed,
            'fit_score': state.metrics.fit_score,
            'budget': state.resources.budget,
            'legal_risk': state.risks.legal_risk,
            'meltdown_turns': state.risks.meltdown_turns,
            'strong_dimensions': strong_dimension_count(state, rules),
            'score': score,
            'grade': grade,
        })

    return {
        'score': score,
        'grade': grade,
        'title': title,
        'ending_type': state.ending_type,
        'narrative': narrative,
    }
