import uuid
from datetime import datetime, timedelta, timezone

import pytest

from focusxp.engine import lifecycle
from focusxp.engine.errors import AlreadyTerminal, InvalidArgument, InvalidTransition

T0 = datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc)


def _scheduled(**kwargs):
    return lifecycle.create_session(uuid.uuid4(), planned_duration=25, **kwargs)


def _active():
    return lifecycle.start(_scheduled(), T0)


def test_create_session_defaults():
    session = _scheduled()
    assert session.status == "scheduled"
    assert session.title == "Focus Session"
    assert session.focus_score == 100
    assert session.xp_earned == 0
    assert session.actual_duration is None


@pytest.mark.parametrize("minutes", [0, 481, -5])
def test_create_session_rejects_out_of_range_duration(minutes):
    with pytest.raises(InvalidArgument):
        lifecycle.create_session(uuid.uuid4(), planned_duration=minutes)


def test_create_session_rejects_unknown_type():
    with pytest.raises(InvalidArgument):
        lifecycle.create_session(uuid.uuid4(), planned_duration=25, session_type="nap")


def test_start_sets_start_time():
    session = _active()
    assert session.status == "active"
    assert session.start_time == T0


@pytest.mark.parametrize("name", ["pause", "resume", "complete"])
def test_scheduled_rejects_out_of_order_transitions(name):
    session = _scheduled()
    with pytest.raises(InvalidTransition) as exc_info:
        lifecycle.transition(session, name, T0)
    assert exc_info.value.current_state == "scheduled"
    assert exc_info.value.transition == name
    assert session.status == "scheduled"


def test_scheduled_rejects_distraction():
    with pytest.raises(InvalidTransition):
        lifecycle.log_distraction(_scheduled(), "website", T0)


def test_scheduled_can_be_cancelled_without_duration():
    session = lifecycle.cancel(_scheduled(), T0)
    assert session.status == "cancelled"
    assert session.end_time == T0
    assert session.actual_duration is None
    assert session.xp_earned == 0


def test_pause_and_resume():
    paused = lifecycle.pause(_active(), T0 + timedelta(minutes=5))
    assert paused.status == "paused"
    assert paused.paused_at == T0 + timedelta(minutes=5)

    resumed = lifecycle.resume(paused, T0 + timedelta(minutes=7))
    assert resumed.status == "active"
    assert resumed.resumed_at == T0 + timedelta(minutes=7)
    assert resumed.paused_at is None


def test_complete_sets_duration_and_xp():
    session = lifecycle.complete(_active(), T0 + timedelta(minutes=25))
    assert session.status == "completed"
    assert session.actual_duration == 25
    assert session.focus_score == 100
    assert session.xp_earned == 108


def test_complete_from_paused():
    paused = lifecycle.pause(_active(), T0 + timedelta(minutes=10))
    session = lifecycle.complete(paused, T0 + timedelta(minutes=20))
    assert session.status == "completed"
    assert session.actual_duration == 20


def test_actual_duration_rounds_half_up():
    session = lifecycle.complete(_active(), T0 + timedelta(minutes=24, seconds=30))
    assert session.actual_duration == 25


def test_complete_records_reflection():
    session = lifecycle.complete(
        _active(), T0 + timedelta(minutes=25),
        notes_after="Good run", mood_after="good", productivity="high",
    )
    assert session.notes_after == "Good run"
    assert session.mood_after == "good"
    assert session.productivity == "high"


def test_complete_rejects_unknown_mood():
    active = _active()
    with pytest.raises(InvalidArgument):
        lifecycle.complete(active, T0 + timedelta(minutes=25), mood_after="ecstatic")
    assert active.status == "active"


def test_award_session_xp_is_idempotent():
    session = lifecycle.complete(_active(), T0 + timedelta(minutes=25))
    again = lifecycle.award_session_xp(session)
    assert again.xp_earned == session.xp_earned == 108


@pytest.mark.parametrize("terminal", ["complete", "cancel"])
@pytest.mark.parametrize("name", ["start", "pause", "resume", "complete", "cancel"])
def test_terminal_states_reject_everything(terminal, name):
    finished = lifecycle.transition(_active(), terminal, T0 + timedelta(minutes=25))
    with pytest.raises(AlreadyTerminal):
        lifecycle.transition(finished, name, T0 + timedelta(minutes=30))


def test_already_terminal_is_an_invalid_transition():
    finished = lifecycle.cancel(_active(), T0)
    with pytest.raises(InvalidTransition, match="already cancelled"):
        lifecycle.start(finished, T0)


def test_unknown_transition_name():
    with pytest.raises(InvalidTransition):
        lifecycle.transition(_active(), "rewind", T0)


def test_payload_only_accepted_by_complete():
    with pytest.raises(InvalidArgument):
        lifecycle.transition(_active(), "pause", T0, notes_after="x")


def test_complete_rejects_unknown_payload_field():
    with pytest.raises(InvalidArgument):
        lifecycle.transition(_active(), "complete", T0, rating="x")


def test_naive_times_are_read_as_utc():
    session = lifecycle.start(_scheduled(), datetime(2026, 3, 10, 9, 0))
    assert session.start_time == T0
    assert session.start_time.tzinfo is not None

    paused = lifecycle.pause(session, datetime(2026, 3, 10, 9, 10))
    resumed = lifecycle.resume(paused, datetime(2026, 3, 10, 9, 12))
    assert resumed.resumed_at == T0 + timedelta(minutes=12)

    done = lifecycle.complete(resumed, T0 + timedelta(minutes=25))
    assert done.end_time == T0 + timedelta(minutes=25)
    assert done.actual_duration == 25


def test_log_distraction_updates_focus_score():
    session = _active()
    for minute in range(1, 4):
        session = lifecycle.log_distraction(
            session, "notification", T0 + timedelta(minutes=minute), duration_seconds=30
        )
    assert session.distraction_count == 3
    assert session.focus_score == 91
    assert len(session.distractions) == 3
    assert session.distractions[0].category == "notification"


def test_log_distraction_validation():
    session = _active()
    with pytest.raises(InvalidArgument):
        lifecycle.log_distraction(session, "daydream", T0)
    with pytest.raises(InvalidArgument):
        lifecycle.log_distraction(session, "manual", T0, duration_seconds=3601)
    assert session.distraction_count == 0


def test_distraction_rejected_while_paused():
    paused = lifecycle.pause(_active(), T0)
    with pytest.raises(InvalidTransition):
        lifecycle.log_distraction(paused, "manual", T0)


def test_record_task_time_accumulates():
    task_id = uuid.uuid4()
    session = lifecycle.record_task_time(_active(), task_id, 10)
    session = lifecycle.record_task_time(session, task_id, 5, completed=True)
    assert len(session.tasks) == 1
    assert session.tasks[0].time_spent == 15
    assert session.tasks[0].completed is True


def test_record_task_time_rejects_negative_minutes():
    with pytest.raises(InvalidArgument):
        lifecycle.record_task_time(_active(), uuid.uuid4(), -1)
