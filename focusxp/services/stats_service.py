import uuid
from datetime import UTC, datetime, timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from focusxp.engine.scoring import round_half_up
from focusxp.models.focus_session import FocusSession
from focusxp.models.user import User


def _period_start(now: datetime, period: str) -> datetime:
    if period == "daily":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "monthly":
        return now - timedelta(days=30)
    return now - timedelta(days=7)


async def get_stats(
    db: AsyncSession,
    user_id: uuid.UUID,
    period: str = "weekly",
) -> dict:
    start = _period_start(datetime.now(UTC), period)
    completed_since = (
        FocusSession.user_id == user_id,
        FocusSession.status == "completed",
        FocusSession.end_time >= start,
    )

    # Aggregate stats
    result = await db.execute(
        select(
            func.coalesce(func.sum(FocusSession.actual_duration), 0).label("focus_minutes"),
            func.count(FocusSession.id).label("session_count"),
            func.coalesce(func.sum(FocusSession.distraction_count), 0).label("distraction_count"),
            func.coalesce(func.sum(FocusSession.xp_earned), 0).label("xp_earned"),
        ).where(*completed_since)
    )
    row = result.one()

    # Daily breakdown using date() function (works on both SQLite and Postgres)
    date_expr = func.date(FocusSession.end_time)
    daily_result = await db.execute(
        select(
            date_expr.label("day"),
            func.sum(FocusSession.actual_duration).label("focus_minutes"),
            func.count(FocusSession.id).label("session_count"),
        )
        .where(*completed_since)
        .group_by(date_expr)
        .order_by(date_expr)
    )
    daily = [
        {
            "date": str(d.day),
            "focus_minutes": d.focus_minutes or 0,
            "session_count": d.session_count,
        }
        for d in daily_result.all()
    ]

    streak = await db.execute(select(User.streak_days).where(User.id == user_id))

    return {
        "period": period,
        "focus_minutes": row.focus_minutes,
        "session_count": row.session_count,
        "distraction_count": row.distraction_count,
        "xp_earned": row.xp_earned,
        "current_streak": streak.scalar_one(),
        "daily_breakdown": daily,
    }


async def get_productivity_stats(
    db: AsyncSession, user_id: uuid.UUID, days: int = 7
) -> list[dict]:
    """Per-day totals for completed sessions over the last ``days`` days."""
    start = datetime.now(UTC) - timedelta(days=days)
    date_expr = func.date(FocusSession.end_time)

    result = await db.execute(
        select(
            date_expr.label("day"),
            func.count(FocusSession.id).label("total_sessions"),
            func.coalesce(func.sum(FocusSession.actual_duration), 0).label("total_time"),
            func.avg(FocusSession.focus_score).label("avg_focus_score"),
            func.coalesce(func.sum(FocusSession.xp_earned), 0).label("total_xp"),
            func.coalesce(func.sum(FocusSession.distraction_count), 0).label("total_distractions"),
        )
        .where(
            FocusSession.user_id == user_id,
            FocusSession.status == "completed",
            FocusSession.end_time >= start,
        )
        .group_by(date_expr)
        .order_by(date_expr)
    )
    return [
        {
            "date": str(row.day),
            "total_sessions": row.total_sessions,
            "total_time": row.total_time,
            "avg_focus_score": round_half_up(float(row.avg_focus_score or 0)),
            "total_xp": row.total_xp,
            "total_distractions": row.total_distractions,
        }
        for row in result.all()
    ]
