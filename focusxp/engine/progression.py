"""Experience, levels, streaks and badge awards.

Functions take a ``Progression`` snapshot and return a new one; the caller
persists the result. Levels are linear: every 1000 XP is one level, so
``level == total_xp // 1000 + 1`` holds after every XP change.
"""

from collections.abc import Mapping
from datetime import UTC, date, datetime, tzinfo

from focusxp.engine.badges import BADGE_CATALOG, Badge, threshold_badges
from focusxp.engine.errors import InvalidArgument
from focusxp.engine.scoring import round_half_up
from focusxp.engine.snapshots import (
    EarnedBadge,
    FocusSessionSnapshot,
    Progression,
    ProgressionUpdate,
    XPResult,
)

XP_PER_LEVEL = 1000
EARLY_BIRD_BEFORE_HOUR = 7
NIGHT_OWL_FROM_HOUR = 22


def level_for_xp(total_xp: int) -> int:
    return total_xp // XP_PER_LEVEL + 1


# ---------------------------------------------------------------------------
# XP and streaks
# ---------------------------------------------------------------------------


def add_xp(progression: Progression, amount: int) -> XPResult:
    if amount < 0:
        raise InvalidArgument("XP amount cannot be negative")

    total = progression.total_xp + amount
    new_level = level_for_xp(total)
    return XPResult(
        progression=progression.model_copy(update={"total_xp": total, "level": new_level}),
        level_up=new_level > progression.level,
        new_level=new_level,
    )


def update_streak(progression: Progression, today: date) -> Progression:
    """Advance the daily streak for activity on ``today``.

    Activity dated before ``last_active_date`` is stale and leaves the streak
    alone.
    """
    last = progression.last_active_date
    if last is not None and today <= last:
        return progression

    if last is not None and (today - last).days == 1:
        streak = progression.streak_days + 1
    else:
        streak = 1

    return progression.model_copy(
        update={
            "streak_days": streak,
            "longest_streak": max(progression.longest_streak, streak),
            "last_active_date": today,
        }
    )


def level_progress(progression: Progression) -> dict:
    current = progression.total_xp - (progression.level - 1) * XP_PER_LEVEL
    return {
        "current": current,
        "required": XP_PER_LEVEL,
        "percentage": round_half_up(current / XP_PER_LEVEL * 100),
    }


# ---------------------------------------------------------------------------
# Badges
# ---------------------------------------------------------------------------


def metric_value(
    progression: Progression,
    metric: str,
    category_counts: Mapping[str, int] | None = None,
) -> int:
    if metric.startswith("category:"):
        return (category_counts or {}).get(metric.split(":", 1)[1], 0)
    if metric == "focus_hours":
        return round_half_up(progression.total_focus_time / 60)
    return getattr(progression, metric)


def evaluate_badges(
    progression: Progression,
    category_counts: Mapping[str, int] | None = None,
    catalog: Mapping[str, Badge] = BADGE_CATALOG,
) -> list[Badge]:
    """Threshold badges that are met and not yet held."""
    held = progression.badge_ids
    return [
        badge
        for badge in threshold_badges(catalog)
        if badge.id not in held
        and metric_value(progression, badge.metric, category_counts) >= badge.threshold
    ]


def badge_progress(
    progression: Progression,
    category_counts: Mapping[str, int] | None = None,
    catalog: Mapping[str, Badge] = BADGE_CATALOG,
) -> dict[str, dict]:
    progress = {}
    for badge in threshold_badges(catalog):
        value = metric_value(progression, badge.metric, category_counts)
        progress[badge.id] = {
            "current": min(value, badge.threshold),
            "required": badge.threshold,
            "percentage": min(round_half_up(value / badge.threshold * 100), 100),
        }
    return progress


def award_badge(
    progression: Progression,
    badge_id: str,
    earned_at: datetime,
    catalog: Mapping[str, Badge] = BADGE_CATALOG,
) -> Progression:
    """Add a badge to the progression. Awarding a held badge is a no-op."""
    if badge_id not in catalog:
        raise InvalidArgument(f"Unknown badge: {badge_id}")
    if badge_id in progression.badge_ids:
        return progression
    earned = EarnedBadge(badge_id=badge_id, earned_at=earned_at)
    return progression.model_copy(update={"badges": (*progression.badges, earned)})


def session_event_badges(session: FocusSessionSnapshot, tz: tzinfo = UTC) -> list[str]:
    """Badges triggered by the completed session itself, in the user's timezone."""
    if session.status != "completed":
        return []

    earned = []
    if session.start_time and session.start_time.astimezone(tz).hour < EARLY_BIRD_BEFORE_HOUR:
        earned.append("early-bird")
    if session.end_time and session.end_time.astimezone(tz).hour >= NIGHT_OWL_FROM_HOUR:
        earned.append("night-owl")
    if session.distraction_count == 0:
        earned.append("distraction-free")
    return earned


def perfect_day_earned(due_today: int, open_due_today: int) -> bool:
    """All tasks due today are done, and there was at least one."""
    return due_today > 0 and open_due_today == 0


def _award_all(
    progression: Progression,
    badge_ids: list[str],
    earned_at: datetime,
    catalog: Mapping[str, Badge],
) -> tuple[Progression, tuple[str, ...]]:
    awarded = []
    for badge_id in badge_ids:
        if badge_id in progression.badge_ids:
            continue
        progression = award_badge(progression, badge_id, earned_at, catalog)
        awarded.append(badge_id)
    return progression, tuple(awarded)


# ---------------------------------------------------------------------------
# Completion events
# ---------------------------------------------------------------------------


def record_session_completion(
    progression: Progression,
    session: FocusSessionSnapshot,
    today: date,
    category_counts: Mapping[str, int] | None = None,
    tz: tzinfo = UTC,
    catalog: Mapping[str, Badge] = BADGE_CATALOG,
) -> ProgressionUpdate:
    """Fold a completed session into the user's progression."""
    if session.status != "completed" or session.end_time is None:
        raise InvalidArgument("Only completed sessions count towards progression")

    progression = progression.model_copy(
        update={
            "total_sessions": progression.total_sessions + 1,
            "total_focus_time": progression.total_focus_time + (session.actual_duration or 0),
        }
    )
    result = add_xp(progression, session.xp_earned)
    progression = update_streak(result.progression, today)

    candidates = [b.id for b in evaluate_badges(progression, category_counts, catalog)]
    candidates += session_event_badges(session, tz)
    progression, new_badges = _award_all(
        progression, candidates, session.end_time, catalog
    )

    return ProgressionUpdate(
        progression=progression,
        xp_gained=session.xp_earned,
        level_up=result.level_up,
        new_level=result.new_level,
        new_badges=new_badges,
    )


def record_task_completion(
    progression: Progression,
    xp: int,
    now: datetime,
    today: date,
    category_counts: Mapping[str, int] | None = None,
    perfect_day: bool = False,
    catalog: Mapping[str, Badge] = BADGE_CATALOG,
) -> ProgressionUpdate:
    """Fold a task completion worth ``xp`` into the user's progression."""
    progression = progression.model_copy(
        update={
            "completed_tasks": progression.completed_tasks + 1,
            "perfect_days": progression.perfect_days + (1 if perfect_day else 0),
        }
    )
    result = add_xp(progression, xp)
    progression = update_streak(result.progression, today)

    candidates = [b.id for b in evaluate_badges(progression, category_counts, catalog)]
    if perfect_day:
        candidates.append("perfect-day")
    progression, new_badges = _award_all(progression, candidates, now, catalog)

    return ProgressionUpdate(
        progression=progression,
        xp_gained=xp,
        level_up=result.level_up,
        new_level=result.new_level,
        new_badges=new_badges,
    )


def check_achievements(
    progression: Progression,
    now: datetime,
    category_counts: Mapping[str, int] | None = None,
    catalog: Mapping[str, Badge] = BADGE_CATALOG,
) -> tuple[Progression, tuple[str, ...]]:
    """Award every threshold badge the progression currently qualifies for."""
    candidates = [b.id for b in evaluate_badges(progression, category_counts, catalog)]
    return _award_all(progression, candidates, now, catalog)
