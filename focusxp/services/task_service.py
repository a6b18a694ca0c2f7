import uuid
from datetime import UTC, datetime, time, timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from focusxp.engine import progression, scoring
from focusxp.engine.snapshots import ProgressionUpdate, TaskSnapshot
from focusxp.models.task import Task
from focusxp.models.user import User
from focusxp.services import gamification_service

_PRIORITY_ORDER = {"urgent": 0, "high": 1, "medium": 2, "low": 3}
# fields an update may set back to null
_CLEARABLE = frozenset({"description", "due_date", "estimate_minutes"})


async def get_tasks(
    db: AsyncSession,
    user_id: uuid.UUID,
    status: str | None = None,
    category: str | None = None,
) -> list[Task]:
    query = select(Task).where(Task.user_id == user_id)
    if status is not None:
        query = query.where(Task.status == status)
    if category is not None:
        query = query.where(Task.category == category)
    query = query.order_by(Task.due_date.is_(None), Task.due_date.asc(), Task.created_at.desc())
    result = await db.execute(query)
    tasks = list(result.scalars().all())
    # stable sort keeps due-date order within a priority
    return sorted(tasks, key=lambda t: _PRIORITY_ORDER.get(t.priority, 2))


async def get_task(db: AsyncSession, user_id: uuid.UUID, task_id: uuid.UUID) -> Task | None:
    result = await db.execute(
        select(Task).where(Task.id == task_id, Task.user_id == user_id)
    )
    return result.scalar_one_or_none()


def _normalize(data: dict) -> dict:
    due_date = data.get("due_date")
    if due_date is not None:
        if due_date.tzinfo is None:
            due_date = due_date.replace(tzinfo=UTC)
        data = {**data, "due_date": due_date.astimezone(UTC)}
    return data


async def create_task(db: AsyncSession, user_id: uuid.UUID, data: dict) -> Task:
    data = _normalize(data)
    task = Task(user_id=user_id, xp_value=scoring.task_base_xp(data.get("priority", "medium")), **data)
    db.add(task)

    user = await gamification_service.get_user(db, user_id)
    user.total_tasks += 1

    await db.flush()
    await db.refresh(task)
    return task


async def _perfect_day(db: AsyncSession, user: User, now: datetime) -> bool:
    tz = gamification_service.user_timezone(user)
    day_start = datetime.combine(now.astimezone(tz).date(), time.min, tzinfo=tz).astimezone(UTC)
    day_end = day_start + timedelta(days=1)

    result = await db.execute(
        select(Task.status, func.count(Task.id))
        .where(
            Task.user_id == user.id,
            Task.due_date >= day_start,
            Task.due_date < day_end,
            Task.status != "cancelled",
        )
        .group_by(Task.status)
    )
    counts = dict(result.all())
    due_today = sum(counts.values())
    open_due_today = due_today - counts.get("completed", 0)
    return progression.perfect_day_earned(due_today, open_due_today)


async def update_task(
    db: AsyncSession, user_id: uuid.UUID, task_id: uuid.UUID, data: dict
) -> tuple[Task, ProgressionUpdate | None] | None:
    """Update a task. Moving it into ``completed`` awards completion XP once."""
    task = await get_task(db, user_id, task_id)
    if task is None:
        return None

    data = _normalize(data)
    was_completed = task.status == "completed"
    for key, value in data.items():
        if value is not None or key in _CLEARABLE:
            setattr(task, key, value)

    now = datetime.now(UTC)
    task.updated_at = now
    update = None

    if task.status == "completed" and not was_completed:
        task.completed_at = now
        await db.flush()

        xp = scoring.task_completion_xp(TaskSnapshot.model_validate(task, from_attributes=True), now)
        user = await gamification_service.get_user(db, user_id)
        update = await gamification_service.apply_task_completion(
            db, user, xp, now, perfect_day=await _perfect_day(db, user, now)
        )
    elif task.status != "completed":
        task.completed_at = None

    await db.flush()
    await db.refresh(task)
    return task, update


async def delete_task(db: AsyncSession, user_id: uuid.UUID, task_id: uuid.UUID) -> bool:
    task = await get_task(db, user_id, task_id)
    if task is None:
        return False

    user = await gamification_service.get_user(db, user_id)
    user.total_tasks = max(user.total_tasks - 1, 0)
    await db.delete(task)
    await db.flush()
    return True
