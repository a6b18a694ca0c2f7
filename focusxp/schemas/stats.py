from datetime import date

from pydantic import BaseModel


class DailyBreakdown(BaseModel):
    date: date
    focus_minutes: int
    session_count: int


class StatsResponse(BaseModel):
    period: str  # daily, weekly, monthly
    focus_minutes: int
    session_count: int
    distraction_count: int
    xp_earned: int
    current_streak: int
    daily_breakdown: list[DailyBreakdown]


class ProductivityDay(BaseModel):
    date: date
    total_sessions: int
    total_time: int  # minutes
    avg_focus_score: int
    total_xp: int
    total_distractions: int
