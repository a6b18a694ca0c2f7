"""State machine for a single focus session.

    scheduled --start--> active --pause--> paused
                          ^  |               |
                          |  +----resume-----+
    active | paused --complete--> completed
    scheduled | active | paused --cancel--> cancelled

Each transition takes the current snapshot and the current time and returns a
new snapshot. A rejected transition raises and leaves the input untouched.
Whether another session of the same user is already open is not visible here;
that check belongs to the storage layer.
"""

import uuid
from collections.abc import Iterable
from datetime import datetime

from focusxp.engine import scoring
from focusxp.engine.errors import AlreadyTerminal, InvalidArgument, InvalidTransition
from focusxp.engine.snapshots import (
    DISTRACTION_CATEGORIES,
    MOODS,
    PRODUCTIVITY_LEVELS,
    SESSION_TYPES,
    TERMINAL_STATUSES,
    DistractionRecord,
    FocusSessionSnapshot,
    SessionTaskEntry,
    as_utc,
)

MIN_PLANNED_DURATION = 1
MAX_PLANNED_DURATION = 480
MAX_DISTRACTION_SECONDS = 3600

# transition name -> statuses it may be requested from
_LEGAL_SOURCES: dict[str, tuple[str, ...]] = {
    "start": ("scheduled",),
    "pause": ("active",),
    "resume": ("paused",),
    "complete": ("active", "paused"),
    "cancel": ("scheduled", "active", "paused"),
    "log_distraction": ("active",),
    "record_task_time": ("active", "paused"),
}


def _check(session: FocusSessionSnapshot, transition: str) -> None:
    if session.status in TERMINAL_STATUSES:
        raise AlreadyTerminal(session.status, transition)
    if session.status not in _LEGAL_SOURCES[transition]:
        raise InvalidTransition(session.status, transition)


def _actual_duration(start: datetime | None, end: datetime | None) -> int | None:
    if start is None or end is None:
        return None
    return scoring.round_half_up((end - start).total_seconds() / 60)


def create_session(
    user_id: uuid.UUID,
    planned_duration: int,
    session_type: str = "pomodoro",
    title: str | None = None,
    tasks: Iterable[uuid.UUID] = (),
    notes_before: str | None = None,
) -> FocusSessionSnapshot:
    """Build a new session in the ``scheduled`` state."""
    if not MIN_PLANNED_DURATION <= planned_duration <= MAX_PLANNED_DURATION:
        raise InvalidArgument(
            f"Planned duration must be between {MIN_PLANNED_DURATION} "
            f"and {MAX_PLANNED_DURATION} minutes"
        )
    if session_type not in SESSION_TYPES:
        raise InvalidArgument(f"Unknown session type: {session_type}")

    return FocusSessionSnapshot(
        user_id=user_id,
        title=title or "Focus Session",
        session_type=session_type,
        planned_duration=planned_duration,
        tasks=tuple(SessionTaskEntry(task_id=task_id) for task_id in tasks),
        notes_before=notes_before,
    )


def start(session: FocusSessionSnapshot, now: datetime) -> FocusSessionSnapshot:
    _check(session, "start")
    now = as_utc(now)
    return session.model_copy(update={"status": "active", "start_time": now})


def pause(session: FocusSessionSnapshot, now: datetime) -> FocusSessionSnapshot:
    _check(session, "pause")
    now = as_utc(now)
    return session.model_copy(update={"status": "paused", "paused_at": now})


def resume(session: FocusSessionSnapshot, now: datetime) -> FocusSessionSnapshot:
    _check(session, "resume")
    now = as_utc(now)
    return session.model_copy(
        update={"status": "active", "resumed_at": now, "paused_at": None}
    )


def award_session_xp(session: FocusSessionSnapshot) -> FocusSessionSnapshot:
    """Set ``xp_earned`` for a completed session, at most once."""
    if session.status != "completed" or session.xp_earned != 0:
        return session
    return session.model_copy(
        update={"xp_earned": scoring.session_completion_xp(session)}
    )


def complete(
    session: FocusSessionSnapshot,
    now: datetime,
    notes_after: str | None = None,
    mood_after: str | None = None,
    productivity: str | None = None,
) -> FocusSessionSnapshot:
    _check(session, "complete")
    now = as_utc(now)

    update = {
        "status": "completed",
        "end_time": now,
        "actual_duration": _actual_duration(session.start_time, now),
        "focus_score": scoring.focus_percentage(session.distraction_count),
    }
    if notes_after is not None:
        update["notes_after"] = notes_after
    if mood_after is not None:
        if mood_after not in MOODS:
            raise InvalidArgument(f"Unknown mood: {mood_after}")
        update["mood_after"] = mood_after
    if productivity is not None:
        if productivity not in PRODUCTIVITY_LEVELS:
            raise InvalidArgument(f"Unknown productivity level: {productivity}")
        update["productivity"] = productivity

    return award_session_xp(session.model_copy(update=update))


def cancel(session: FocusSessionSnapshot, now: datetime) -> FocusSessionSnapshot:
    _check(session, "cancel")
    now = as_utc(now)
    return session.model_copy(
        update={
            "status": "cancelled",
            "end_time": now,
            "actual_duration": _actual_duration(session.start_time, now),
        }
    )


def log_distraction(
    session: FocusSessionSnapshot,
    category: str,
    now: datetime,
    description: str | None = None,
    duration_seconds: int = 0,
) -> FocusSessionSnapshot:
    _check(session, "log_distraction")
    if category not in DISTRACTION_CATEGORIES:
        raise InvalidArgument(f"Unknown distraction category: {category}")
    if not 0 <= duration_seconds <= MAX_DISTRACTION_SECONDS:
        raise InvalidArgument(
            f"Distraction duration must be between 0 and {MAX_DISTRACTION_SECONDS} seconds"
        )

    record = DistractionRecord(
        timestamp=now,
        category=category,
        description=description,
        duration_seconds=duration_seconds,
    )
    count = session.distraction_count + 1
    return session.model_copy(
        update={
            "distractions": (*session.distractions, record),
            "distraction_count": count,
            "focus_score": scoring.focus_percentage(count),
        }
    )


def record_task_time(
    session: FocusSessionSnapshot,
    task_id: uuid.UUID,
    minutes: int,
    completed: bool = False,
) -> FocusSessionSnapshot:
    """Add time spent on a task during the session, appending it if new."""
    _check(session, "record_task_time")
    if minutes < 0:
        raise InvalidArgument("Time spent cannot be negative")

    entries = list(session.tasks)
    for i, entry in enumerate(entries):
        if entry.task_id == task_id:
            entries[i] = entry.model_copy(
                update={
                    "time_spent": entry.time_spent + minutes,
                    "completed": entry.completed or completed,
                }
            )
            break
    else:
        entries.append(
            SessionTaskEntry(task_id=task_id, time_spent=minutes, completed=completed)
        )
    return session.model_copy(update={"tasks": tuple(entries)})


_TRANSITIONS = {
    "start": start,
    "pause": pause,
    "resume": resume,
    "complete": complete,
    "cancel": cancel,
}

_COMPLETE_PAYLOAD = frozenset({"notes_after", "mood_after", "productivity"})


def transition(
    session: FocusSessionSnapshot, name: str, now: datetime, **payload
) -> FocusSessionSnapshot:
    """Apply a transition by name. Payload is only accepted by ``complete``."""
    func = _TRANSITIONS.get(name)
    if func is None:
        raise InvalidTransition(session.status, name)
    if payload and name != "complete":
        raise InvalidArgument(f"The {name} transition takes no payload")
    unknown = payload.keys() - _COMPLETE_PAYLOAD
    if unknown:
        raise InvalidArgument(f"Unknown completion fields: {', '.join(sorted(unknown))}")
    return func(session, now, **payload)
