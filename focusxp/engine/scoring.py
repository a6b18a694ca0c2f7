"""XP and focus scoring rules.

Every function here is pure and deterministic. Rounding follows the
half-away-from-zero convention used throughout the product (107.5 -> 108),
not Python's banker's rounding.
"""

import math
from datetime import datetime

from focusxp.engine.snapshots import FocusSessionSnapshot, TaskSnapshot

# ---------------------------------------------------------------------------
# Rule tables
# ---------------------------------------------------------------------------

PRIORITY_BASE_XP = {"low": 10, "medium": 20, "high": 30, "urgent": 50}
DEFAULT_BASE_XP = 20

PRIORITY_BONUS = {"low": 0, "medium": 5, "high": 10, "urgent": 20}
DIFFICULTY_MULTIPLIER = {"easy": 1.0, "medium": 1.2, "hard": 1.5}
ON_TIME_MULTIPLIER = 1.2

SESSION_XP_PER_PLANNED_MINUTE = 2
SESSION_TYPE_MULTIPLIER = {
    "pomodoro": 1.0,
    "custom": 1.0,
    "deep-work": 1.2,
    "study": 1.1,
    "break": 0.5,
}
COMPLETION_BONUS = 10

DISTRACTION_PENALTY = 3
MAX_DISTRACTION_PENALTY = 50

# Ordered descending so the first match wins.
RATING_THRESHOLDS: list[tuple[int, str]] = [
    (90, "excellent"),
    (75, "good"),
    (60, "average"),
    (40, "poor"),
]


def round_half_up(value: float) -> int:
    if value < 0:
        return -math.floor(-value + 0.5)
    return math.floor(value + 0.5)


# ---------------------------------------------------------------------------
# Task XP
# ---------------------------------------------------------------------------


def task_base_xp(priority: str) -> int:
    """Base XP stored on a task when it is created."""
    return PRIORITY_BASE_XP.get(priority, DEFAULT_BASE_XP)


def task_completion_xp(task: TaskSnapshot, now: datetime) -> int:
    xp = float(task.xp_value)
    if task.due_date is not None and now <= task.due_date:
        xp *= ON_TIME_MULTIPLIER
    xp *= DIFFICULTY_MULTIPLIER.get(task.difficulty, 1.0)
    xp += PRIORITY_BONUS.get(task.priority, 0)
    return max(round_half_up(xp), 0)


# ---------------------------------------------------------------------------
# Session metrics
# ---------------------------------------------------------------------------


def focus_percentage(distraction_count: int) -> int:
    """100 minus 3 points per distraction, with the penalty capped at 50."""
    penalty = min(distraction_count * DISTRACTION_PENALTY, MAX_DISTRACTION_PENALTY)
    return max(100 - penalty, 0)


def efficiency(actual_duration: int | None, planned_duration: int | None) -> int:
    """Actual over planned duration as a whole percentage; 0 when unknown."""
    if not actual_duration or not planned_duration:
        return 0
    return round_half_up(actual_duration / planned_duration * 100)


def session_rating(efficiency_pct: float, focus_pct: float) -> str:
    average = (efficiency_pct + focus_pct) / 2
    for threshold, rating in RATING_THRESHOLDS:
        if average >= threshold:
            return rating
    return "very-poor"


def session_metrics(session) -> dict:
    """Efficiency, focus percentage and rating of anything shaped like a session."""
    eff = efficiency(session.actual_duration, session.planned_duration)
    focus = focus_percentage(session.distraction_count)
    return {
        "efficiency": eff,
        "focus_percentage": focus,
        "rating": session_rating(eff, focus),
    }


# ---------------------------------------------------------------------------
# Session XP
# ---------------------------------------------------------------------------


def _efficiency_multiplier(eff: int) -> float:
    if eff >= 100:
        return 1.5
    if eff >= 80:
        return 1.2
    if eff < 50:
        return 0.7
    return 1.0


def _focus_multiplier(focus: int) -> float:
    if focus >= 95:
        return 1.3
    if focus >= 80:
        return 1.1
    if focus < 60:
        return 0.8
    return 1.0


def session_completion_xp(session: FocusSessionSnapshot) -> int:
    """XP for a finished session.

    The base is the *planned* duration, not the actual one; efficiency and
    focus only act as multipliers on top of it.
    """
    xp = float(session.planned_duration * SESSION_XP_PER_PLANNED_MINUTE)
    xp *= _efficiency_multiplier(
        efficiency(session.actual_duration, session.planned_duration)
    )
    xp *= _focus_multiplier(focus_percentage(session.distraction_count))
    xp *= SESSION_TYPE_MULTIPLIER.get(session.session_type, 1.0)
    if session.status == "completed":
        xp += COMPLETION_BONUS
    return max(round_half_up(xp), 0)
