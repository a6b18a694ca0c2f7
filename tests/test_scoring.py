import uuid
from datetime import datetime, timedelta, timezone

import pytest

from focusxp.engine import scoring
from focusxp.engine.snapshots import FocusSessionSnapshot, TaskSnapshot

NOW = datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc)


def _session(**overrides) -> FocusSessionSnapshot:
    fields = {
        "user_id": uuid.uuid4(),
        "planned_duration": 25,
        "actual_duration": 25,
        "session_type": "pomodoro",
        "status": "completed",
    }
    fields.update(overrides)
    return FocusSessionSnapshot(**fields)


def test_round_half_up():
    assert scoring.round_half_up(107.5) == 108
    assert scoring.round_half_up(2.5) == 3
    assert scoring.round_half_up(2.4) == 2
    assert scoring.round_half_up(-2.5) == -3


@pytest.mark.parametrize(
    "count,expected",
    [(0, 100), (1, 97), (10, 70), (16, 52), (17, 50), (20, 50), (100, 50)],
)
def test_focus_percentage(count, expected):
    assert scoring.focus_percentage(count) == expected


def test_efficiency():
    assert scoring.efficiency(25, 25) == 100
    assert scoring.efficiency(20, 25) == 80
    assert scoring.efficiency(30, 25) == 120
    assert scoring.efficiency(None, 25) == 0
    assert scoring.efficiency(0, 25) == 0


@pytest.mark.parametrize(
    "eff,focus,expected",
    [
        (100, 100, "excellent"),
        (80, 70, "good"),
        (60, 60, "average"),
        (40, 40, "poor"),
        (0, 70, "very-poor"),
    ],
)
def test_session_rating(eff, focus, expected):
    assert scoring.session_rating(eff, focus) == expected


def test_full_pomodoro_earns_108_xp():
    session = _session()
    metrics = scoring.session_metrics(session)
    assert metrics == {"efficiency": 100, "focus_percentage": 100, "rating": "excellent"}
    assert scoring.session_completion_xp(session) == 108


def test_session_xp_uses_planned_duration_as_base():
    # 60 planned, 30 actual: 120 * 1.0 (eff 50%) * 1.3 + 10
    assert scoring.session_completion_xp(_session(planned_duration=60, actual_duration=30)) == 166


def test_session_xp_type_multiplier():
    deep = scoring.session_completion_xp(_session(session_type="deep-work"))
    rest = scoring.session_completion_xp(_session(session_type="break"))
    assert deep > scoring.session_completion_xp(_session()) > rest


def test_session_xp_low_focus_and_efficiency():
    # 100 * 0.7 * 0.8 + 10 = 66
    session = _session(planned_duration=50, actual_duration=10, distraction_count=15)
    assert scoring.session_completion_xp(session) == 66


def test_task_base_xp():
    assert scoring.task_base_xp("low") == 10
    assert scoring.task_base_xp("urgent") == 50
    assert scoring.task_base_xp("unknown") == scoring.DEFAULT_BASE_XP


def test_task_completion_xp_on_time():
    task = TaskSnapshot(
        priority="high", difficulty="hard", xp_value=30, due_date=NOW + timedelta(hours=1)
    )
    # 30 * 1.2 * 1.5 + 10 = 64
    assert scoring.task_completion_xp(task, NOW) == 64


def test_task_completion_xp_late():
    task = TaskSnapshot(
        priority="medium", difficulty="medium", xp_value=20, due_date=NOW - timedelta(days=1)
    )
    # 20 * 1.2 (medium difficulty) + 5 = 29
    assert scoring.task_completion_xp(task, NOW) == 29


def test_task_completion_xp_without_due_date():
    task = TaskSnapshot(priority="low", difficulty="easy", xp_value=10)
    assert scoring.task_completion_xp(task, NOW) == 10
