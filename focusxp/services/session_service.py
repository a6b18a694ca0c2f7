import logging
import uuid
from datetime import UTC, datetime, time, timedelta

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from focusxp.engine import lifecycle
from focusxp.engine.errors import InvalidTransition
from focusxp.engine.scoring import round_half_up
from focusxp.engine.snapshots import OPEN_STATUSES, FocusSessionSnapshot, ProgressionUpdate
from focusxp.models.distraction import Distraction
from focusxp.models.focus_session import FocusSession, SessionTask
from focusxp.models.task import Task
from focusxp.models.user import User
from focusxp.services import gamification_service

logger = logging.getLogger(__name__)

_SCALAR_FIELDS = (
    "title",
    "session_type",
    "status",
    "planned_duration",
    "actual_duration",
    "start_time",
    "end_time",
    "paused_at",
    "resumed_at",
    "distraction_count",
    "focus_score",
    "xp_earned",
    "notes_before",
    "notes_after",
    "mood_after",
    "productivity",
)


class ActiveSessionExists(Exception):
    """The user already has an active or paused session."""

    def __init__(self, session_id: uuid.UUID | None = None):
        self.session_id = session_id
        super().__init__(
            "You already have an active session. Please complete or cancel it first."
        )


def to_snapshot(session: FocusSession) -> FocusSessionSnapshot:
    return FocusSessionSnapshot.model_validate(session, from_attributes=True)


def write_back(session: FocusSession, snapshot: FocusSessionSnapshot) -> None:
    """Copy a snapshot onto the ORM row, appending new distractions and task entries."""
    for field in _SCALAR_FIELDS:
        setattr(session, field, getattr(snapshot, field))

    for record in snapshot.distractions[len(session.distractions):]:
        session.distractions.append(Distraction(**record.model_dump()))

    existing = {t.task_id: t for t in session.tasks}
    for position, entry in enumerate(snapshot.tasks):
        row = existing.get(entry.task_id)
        if row is None:
            session.tasks.append(
                SessionTask(
                    task_id=entry.task_id,
                    position=position,
                    time_spent=entry.time_spent,
                    completed=entry.completed,
                )
            )
        else:
            row.time_spent = entry.time_spent
            row.completed = entry.completed

    session.updated_at = datetime.now(UTC)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


async def get_sessions(
    db: AsyncSession,
    user_id: uuid.UUID,
    limit: int = 20,
    offset: int = 0,
    status: str | None = None,
    session_type: str | None = None,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
) -> list[FocusSession]:
    query = select(FocusSession).where(FocusSession.user_id == user_id)
    if status:
        query = query.where(FocusSession.status == status)
    if session_type:
        query = query.where(FocusSession.session_type == session_type)
    if start_date:
        query = query.where(FocusSession.created_at >= start_date)
    if end_date:
        query = query.where(FocusSession.created_at <= end_date)
    query = query.order_by(FocusSession.created_at.desc()).limit(limit).offset(offset)
    result = await db.execute(query)
    return list(result.scalars().all())


async def get_session(
    db: AsyncSession, user_id: uuid.UUID, session_id: uuid.UUID
) -> FocusSession | None:
    result = await db.execute(
        select(FocusSession).where(
            FocusSession.id == session_id, FocusSession.user_id == user_id
        )
    )
    return result.scalar_one_or_none()


async def get_active_session(db: AsyncSession, user_id: uuid.UUID) -> FocusSession | None:
    result = await db.execute(
        select(FocusSession).where(
            FocusSession.user_id == user_id,
            FocusSession.status.in_(OPEN_STATUSES),
        )
    )
    return result.scalars().first()


async def get_today_sessions(db: AsyncSession, user: User) -> dict:
    """Sessions created today in the user's timezone, with a summary."""
    tz = gamification_service.user_timezone(user)
    now = datetime.now(UTC)
    day_start = datetime.combine(now.astimezone(tz).date(), time.min, tzinfo=tz).astimezone(UTC)
    day_end = day_start + timedelta(days=1)

    result = await db.execute(
        select(FocusSession)
        .where(
            FocusSession.user_id == user.id,
            FocusSession.created_at >= day_start,
            FocusSession.created_at < day_end,
        )
        .order_by(FocusSession.created_at.desc())
    )
    sessions = list(result.scalars().all())
    completed = [s for s in sessions if s.status == "completed"]

    return {
        "sessions": sessions,
        "stats": {
            "total_sessions": len(sessions),
            "completed_sessions": len(completed),
            "total_focus_time": sum(s.actual_duration or 0 for s in completed),
            "average_focus_score": (
                round_half_up(sum(s.focus_score for s in sessions) / len(sessions)) if sessions else 0
            ),
        },
    }


async def _ensure_no_open_session(
    db: AsyncSession, user_id: uuid.UUID, exclude: uuid.UUID | None = None
) -> None:
    query = select(FocusSession.id).where(
        FocusSession.user_id == user_id,
        FocusSession.status.in_(OPEN_STATUSES),
    )
    if exclude is not None:
        query = query.where(FocusSession.id != exclude)
    open_id = (await db.execute(query)).scalars().first()
    if open_id is not None:
        raise ActiveSessionExists(open_id)


async def _flush_guarded(db: AsyncSession, user_id: uuid.UUID) -> None:
    """Flush, turning a hit on the one-open-session index into a conflict."""
    try:
        await db.flush()
    except IntegrityError as exc:
        logger.warning("Concurrent open session rejected for user %s: %s", user_id, exc.orig)
        raise ActiveSessionExists() from exc


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def create_session(db: AsyncSession, user_id: uuid.UUID, data: dict) -> FocusSession:
    await _ensure_no_open_session(db, user_id)

    task_ids = list(dict.fromkeys(data.get("task_ids") or []))
    if task_ids:
        owned = await db.execute(
            select(func.count(Task.id)).where(Task.id.in_(task_ids), Task.user_id == user_id)
        )
        if owned.scalar_one() != len(task_ids):
            raise ValueError("One or more tasks not found or do not belong to you")

    snapshot = lifecycle.create_session(
        user_id,
        planned_duration=data["planned_duration"],
        session_type=data.get("session_type", "pomodoro"),
        title=data.get("title"),
        tasks=task_ids,
        notes_before=data.get("notes_before"),
    )
    session = FocusSession(user_id=user_id, distractions=[], tasks=[])
    write_back(session, snapshot)
    db.add(session)
    await db.flush()
    await db.refresh(session)
    return session


async def transition_session(
    db: AsyncSession,
    user_id: uuid.UUID,
    session_id: uuid.UUID,
    name: str,
    **payload,
) -> tuple[FocusSession, ProgressionUpdate | None] | None:
    """Run a lifecycle transition on a stored session.

    Returns ``None`` when the session does not exist. A completed session also
    feeds the user's progression; its outcome is returned alongside the row.
    """
    session = await get_session(db, user_id, session_id)
    if session is None:
        return None

    if name == "start":
        await _ensure_no_open_session(db, user_id, exclude=session.id)

    now = datetime.now(UTC)
    try:
        snapshot = lifecycle.transition(to_snapshot(session), name, now, **payload)
    except InvalidTransition as exc:
        logger.info("Rejected %s on session %s in state %s", name, session_id, exc.current_state)
        raise

    write_back(session, snapshot)
    await _flush_guarded(db, user_id)

    update = None
    if snapshot.status == "completed":
        update = await gamification_service.apply_session_completion(db, user_id, snapshot, now)

    await db.refresh(session)
    return session, update


async def log_distraction(
    db: AsyncSession, user_id: uuid.UUID, session_id: uuid.UUID, data: dict
) -> FocusSession | None:
    session = await get_session(db, user_id, session_id)
    if session is None:
        return None

    snapshot = lifecycle.log_distraction(
        to_snapshot(session),
        data["category"],
        datetime.now(UTC),
        description=data.get("description"),
        duration_seconds=data.get("duration_seconds", 0),
    )
    write_back(session, snapshot)

    user = await gamification_service.get_user(db, user_id)
    user.distractions_logged += 1

    await db.flush()
    await db.refresh(session)
    return session


async def record_task_time(
    db: AsyncSession, user_id: uuid.UUID, session_id: uuid.UUID, data: dict
) -> FocusSession | None:
    session = await get_session(db, user_id, session_id)
    if session is None:
        return None

    task = await db.execute(
        select(Task.id).where(Task.id == data["task_id"], Task.user_id == user_id)
    )
    if task.scalar_one_or_none() is None:
        raise ValueError("Task not found or does not belong to you")

    snapshot = lifecycle.record_task_time(
        to_snapshot(session),
        data["task_id"],
        data.get("time_spent", 0),
        completed=data.get("completed", False),
    )
    write_back(session, snapshot)

    await db.flush()
    await db.refresh(session)
    return session
