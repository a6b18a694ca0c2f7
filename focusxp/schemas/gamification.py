import uuid
from datetime import date, datetime

from pydantic import BaseModel


class ProgressionResult(BaseModel):
    xp_gained: int
    level_up: bool
    new_level: int
    new_badges: list[str]


class LevelProgress(BaseModel):
    current: int
    required: int
    percentage: int


class EarnedBadgeResponse(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    earned_at: datetime


class LifetimeStats(BaseModel):
    total_focus_time: int
    total_sessions: int
    total_tasks: int
    completed_tasks: int
    perfect_days: int
    distractions_logged: int
    completion_rate: int


class ProfileResponse(BaseModel):
    level: int
    total_xp: int
    streak_days: int
    longest_streak: int
    last_active_date: date | None
    level_progress: LevelProgress
    badges: list[EarnedBadgeResponse]
    stats: LifetimeStats
    rare_badge_count: int
    badges_by_category: dict[str, int]


class BadgeProgress(BaseModel):
    current: int
    required: int
    percentage: int


class BadgeWithProgress(BaseModel):
    id: str
    name: str
    description: str
    icon: str
    category: str
    rarity: str
    earned: bool
    earned_at: datetime | None
    progress: BadgeProgress | None


class BadgeSummary(BaseModel):
    total: int
    earned: int
    progress: int


class BadgeCatalogResponse(BaseModel):
    badges: list[BadgeWithProgress]
    by_category: dict[str, list[BadgeWithProgress]]
    summary: BadgeSummary


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: uuid.UUID
    display_name: str | None
    avatar_url: str | None
    level: int
    value: int
    is_current_user: bool


class LeaderboardPosition(BaseModel):
    rank: int
    value: int


class LeaderboardResponse(BaseModel):
    metric: str
    leaderboard: list[LeaderboardEntry]
    current_user: LeaderboardPosition
    total_participants: int


class AchievementCheckResponse(BaseModel):
    new_badges: list[EarnedBadgeResponse]
    total_badges: int


class DailyXP(BaseModel):
    date: date
    xp: int


class GamificationOverview(BaseModel):
    level: int
    total_xp: int
    xp_to_next_level: int
    current_streak: int
    longest_streak: int


class GamificationStatsResponse(BaseModel):
    overview: GamificationOverview
    total_badges: int
    recent_badges: list[EarnedBadgeResponse]
    badges_by_rarity: dict[str, int]
    avg_session_xp: int
    weekly_xp: list[DailyXP]
    task_categories: dict[str, int]
