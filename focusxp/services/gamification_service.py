"""Gamification service: loads a user's progression, runs it through the
engine and writes the result back.

The engine works on ``Progression`` snapshots; this module owns the mapping
between those snapshots and the ``users`` / ``user_badges`` tables.
"""

import logging
import uuid
from collections import defaultdict
from datetime import UTC, date, datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from focusxp.config import settings
from focusxp.engine import progression as engine
from focusxp.engine.badges import BADGE_CATALOG, BADGE_CATEGORIES, BADGE_RARITIES
from focusxp.engine.scoring import round_half_up
from focusxp.engine.snapshots import (
    FocusSessionSnapshot,
    Progression,
    ProgressionUpdate,
)
from focusxp.models.focus_session import FocusSession
from focusxp.models.task import Task
from focusxp.models.user import User
from focusxp.models.user_badge import UserBadge

logger = logging.getLogger(__name__)

_PROGRESSION_FIELDS = (
    "level",
    "total_xp",
    "streak_days",
    "longest_streak",
    "last_active_date",
    "total_focus_time",
    "total_sessions",
    "completed_tasks",
    "total_tasks",
    "perfect_days",
)

LEADERBOARD_COLUMNS = {
    "xp": User.total_xp,
    "focus-time": User.total_focus_time,
    "tasks": User.completed_tasks,
    "streak": User.streak_days,
}


# ---------------------------------------------------------------------------
# Snapshot mapping
# ---------------------------------------------------------------------------


def user_timezone(user: User) -> tzinfo:
    try:
        return ZoneInfo(user.timezone or "UTC")
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning("Unknown timezone %r for user %s, using UTC", user.timezone, user.id)
        return UTC


def local_today(user: User, now: datetime) -> date:
    return now.astimezone(user_timezone(user)).date()


def load_progression(user: User) -> Progression:
    return Progression.model_validate(user, from_attributes=True)


def save_progression(user: User, progression: Progression) -> list[str]:
    """Copy a progression snapshot onto the user row. Returns newly added badge ids."""
    for field in _PROGRESSION_FIELDS:
        setattr(user, field, getattr(progression, field))

    held = {b.badge_id for b in user.badges}
    added = []
    for earned in progression.badges:
        if earned.badge_id not in held:
            user.badges.append(UserBadge(badge_id=earned.badge_id, earned_at=earned.earned_at))
            added.append(earned.badge_id)
    user.updated_at = datetime.now(UTC)
    return added


async def get_user(db: AsyncSession, user_id: uuid.UUID) -> User:
    result = await db.execute(select(User).where(User.id == user_id).with_for_update())
    return result.scalar_one()


async def get_category_counts(db: AsyncSession, user_id: uuid.UUID) -> dict[str, int]:
    """Completed task counts per task category."""
    result = await db.execute(
        select(Task.category, func.count(Task.id))
        .where(Task.user_id == user_id, Task.status == "completed")
        .group_by(Task.category)
    )
    return {category: count for category, count in result.all()}


def _badge_payload(badge_id: str, earned_at: datetime) -> dict:
    badge = BADGE_CATALOG[badge_id]
    if earned_at.tzinfo is None:
        earned_at = earned_at.replace(tzinfo=UTC)
    return {
        "id": badge.id,
        "name": badge.name,
        "description": badge.description,
        "icon": badge.icon,
        "earned_at": earned_at,
    }


def _log_update(user_id: uuid.UUID, update: ProgressionUpdate, source: str) -> None:
    if update.level_up:
        logger.info("User %s reached level %d after %s", user_id, update.new_level, source)
    if update.new_badges:
        logger.info("User %s earned badges %s after %s", user_id, ", ".join(update.new_badges), source)


# ---------------------------------------------------------------------------
# Completion events
# ---------------------------------------------------------------------------


async def apply_session_completion(
    db: AsyncSession,
    user_id: uuid.UUID,
    session: FocusSessionSnapshot,
    now: datetime,
) -> ProgressionUpdate:
    user = await get_user(db, user_id)
    update = engine.record_session_completion(
        load_progression(user),
        session,
        today=local_today(user, now),
        category_counts=await get_category_counts(db, user_id),
        tz=user_timezone(user),
    )
    save_progression(user, update.progression)
    await db.flush()
    _log_update(user_id, update, "session completion")
    return update


async def apply_task_completion(
    db: AsyncSession,
    user: User,
    xp: int,
    now: datetime,
    perfect_day: bool = False,
) -> ProgressionUpdate:
    update = engine.record_task_completion(
        load_progression(user),
        xp,
        now=now,
        today=local_today(user, now),
        category_counts=await get_category_counts(db, user.id),
        perfect_day=perfect_day,
    )
    save_progression(user, update.progression)
    await db.flush()
    _log_update(user.id, update, "task completion")
    return update


async def check_achievements(db: AsyncSession, user_id: uuid.UUID) -> dict:
    user = await get_user(db, user_id)
    now = datetime.now(UTC)
    progression, new_badges = engine.check_achievements(
        load_progression(user), now, await get_category_counts(db, user_id)
    )
    save_progression(user, progression)
    await db.flush()
    if new_badges:
        logger.info("User %s earned badges %s on achievement check", user_id, ", ".join(new_badges))

    return {
        "new_badges": [_badge_payload(badge_id, now) for badge_id in new_badges],
        "total_badges": len(progression.badges),
    }


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------


def _earned_badges(user: User) -> list[dict]:
    return [
        _badge_payload(b.badge_id, b.earned_at)
        for b in user.badges
        if b.badge_id in BADGE_CATALOG
    ]


def _count_by(user: User, attribute: str, keys: tuple[str, ...]) -> dict[str, int]:
    counts = dict.fromkeys(keys, 0)
    for b in user.badges:
        badge = BADGE_CATALOG.get(b.badge_id)
        if badge is not None:
            counts[getattr(badge, attribute)] += 1
    return counts


async def get_profile(db: AsyncSession, user_id: uuid.UUID) -> dict:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one()
    progression = load_progression(user)
    by_rarity = _count_by(user, "rarity", BADGE_RARITIES)

    return {
        "level": user.level,
        "total_xp": user.total_xp,
        "streak_days": user.streak_days,
        "longest_streak": user.longest_streak,
        "last_active_date": user.last_active_date,
        "level_progress": engine.level_progress(progression),
        "badges": _earned_badges(user),
        "stats": {
            "total_focus_time": user.total_focus_time,
            "total_sessions": user.total_sessions,
            "total_tasks": user.total_tasks,
            "completed_tasks": user.completed_tasks,
            "perfect_days": user.perfect_days,
            "distractions_logged": user.distractions_logged,
            "completion_rate": (
                round_half_up(user.completed_tasks / user.total_tasks * 100) if user.total_tasks else 0
            ),
        },
        "rare_badge_count": by_rarity["rare"] + by_rarity["epic"],
        "badges_by_category": _count_by(user, "category", BADGE_CATEGORIES),
    }


async def get_badges(db: AsyncSession, user_id: uuid.UUID) -> dict:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one()
    earned = {b.badge_id: b.earned_at for b in user.badges}
    progress = engine.badge_progress(
        load_progression(user), await get_category_counts(db, user_id)
    )

    badges = [
        {
            **badge.model_dump(include={"id", "name", "description", "icon", "category", "rarity"}),
            "earned": badge.id in earned,
            "earned_at": earned.get(badge.id),
            "progress": progress.get(badge.id),
        }
        for badge in BADGE_CATALOG.values()
    ]
    by_category = {category: [] for category in BADGE_CATEGORIES}
    for badge in badges:
        by_category[badge["category"]].append(badge)

    earned_count = sum(1 for badge_id in earned if badge_id in BADGE_CATALOG)
    return {
        "badges": badges,
        "by_category": by_category,
        "summary": {
            "total": len(BADGE_CATALOG),
            "earned": earned_count,
            "progress": round_half_up(earned_count / len(BADGE_CATALOG) * 100),
        },
    }


def _metric_value(user: User, metric: str) -> int:
    value = getattr(user, LEADERBOARD_COLUMNS[metric].key)
    if metric == "focus-time":
        return round_half_up(value / 60)
    return value


async def get_leaderboard(
    db: AsyncSession,
    user_id: uuid.UUID,
    metric: str = "xp",
    limit: int | None = None,
) -> dict:
    column = LEADERBOARD_COLUMNS[metric]
    limit = limit or settings.LEADERBOARD_DEFAULT_LIMIT

    result = await db.execute(
        select(User)
        .where(User.is_active == True)  # noqa: E712
        .order_by(column.desc(), User.created_at.asc())
        .limit(limit)
    )
    leaders = result.scalars().all()

    me = (await db.execute(select(User).where(User.id == user_id))).scalar_one()
    ahead = await db.execute(
        select(func.count(User.id)).where(
            User.is_active == True,  # noqa: E712
            column > getattr(me, column.key),
        )
    )
    total = await db.execute(
        select(func.count(User.id)).where(User.is_active == True)  # noqa: E712
    )

    return {
        "metric": metric,
        "leaderboard": [
            {
                "rank": index + 1,
                "user_id": u.id,
                "display_name": u.display_name,
                "avatar_url": u.avatar_url,
                "level": u.level,
                "value": _metric_value(u, metric),
                "is_current_user": u.id == user_id,
            }
            for index, u in enumerate(leaders)
        ],
        "current_user": {"rank": ahead.scalar_one() + 1, "value": _metric_value(me, metric)},
        "total_participants": total.scalar_one(),
    }


async def get_weekly_xp(db: AsyncSession, user: User, now: datetime) -> list[dict]:
    """XP earned from completed sessions on each of the last 7 local days.

    Grouped in Python so the user's timezone decides the day boundary.
    """
    tz = user_timezone(user)
    today = now.astimezone(tz).date()
    first_day = today - timedelta(days=6)

    result = await db.execute(
        select(FocusSession.end_time, FocusSession.xp_earned).where(
            FocusSession.user_id == user.id,
            FocusSession.status == "completed",
            FocusSession.end_time >= now - timedelta(days=8),
        )
    )
    per_day: dict[date, int] = defaultdict(int)
    for end_time, xp in result.all():
        if end_time.tzinfo is None:
            end_time = end_time.replace(tzinfo=UTC)
        per_day[end_time.astimezone(tz).date()] += xp

    return [
        {"date": first_day + timedelta(days=i), "xp": per_day.get(first_day + timedelta(days=i), 0)}
        for i in range(7)
    ]


async def get_stats(db: AsyncSession, user_id: uuid.UUID) -> dict:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one()
    now = datetime.now(UTC)
    progress = engine.level_progress(load_progression(user))

    recent = await db.execute(
        select(FocusSession.xp_earned)
        .where(FocusSession.user_id == user_id, FocusSession.status == "completed")
        .order_by(FocusSession.end_time.desc())
        .limit(settings.RECENT_SESSIONS_FOR_AVERAGE)
    )
    recent_xp = list(recent.scalars().all())

    recent_badges = sorted(_earned_badges(user), key=lambda b: b["earned_at"], reverse=True)[:3]

    return {
        "overview": {
            "level": user.level,
            "total_xp": user.total_xp,
            "xp_to_next_level": progress["required"] - progress["current"],
            "current_streak": user.streak_days,
            "longest_streak": user.longest_streak,
        },
        "total_badges": len(user.badges),
        "recent_badges": recent_badges,
        "badges_by_rarity": _count_by(user, "rarity", BADGE_RARITIES),
        "avg_session_xp": round_half_up(sum(recent_xp) / len(recent_xp)) if recent_xp else 0,
        "weekly_xp": await get_weekly_xp(db, user, now),
        "task_categories": await get_category_counts(db, user_id),
    }
