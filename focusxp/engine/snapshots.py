"""In-memory snapshots the engine reads and produces.

All snapshots are frozen; engine operations return new instances via
``model_copy(update=...)`` and never mutate their inputs.
"""

import uuid
from datetime import UTC, date, datetime
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, Field


def as_utc(value: datetime) -> datetime:
    """Read a naive datetime as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]

SessionStatus = Literal["scheduled", "active", "paused", "completed", "cancelled"]
SessionType = Literal["pomodoro", "custom", "deep-work", "study", "break"]
DistractionCategory = Literal["website", "notification", "manual", "other"]
Mood = Literal["very-bad", "bad", "neutral", "good", "very-good"]
Productivity = Literal["very-low", "low", "medium", "high", "very-high"]

TaskPriority = Literal["low", "medium", "high", "urgent"]
TaskDifficulty = Literal["easy", "medium", "hard"]
TaskStatus = Literal["pending", "in-progress", "completed", "cancelled"]
TaskCategory = Literal[
    "work", "study", "fitness", "personal", "health", "creative", "social", "other"
]

SESSION_TYPES: tuple[str, ...] = SessionType.__args__
DISTRACTION_CATEGORIES: tuple[str, ...] = DistractionCategory.__args__
MOODS: tuple[str, ...] = Mood.__args__
PRODUCTIVITY_LEVELS: tuple[str, ...] = Productivity.__args__
OPEN_STATUSES = ("active", "paused")
TERMINAL_STATUSES = ("completed", "cancelled")

_frozen = {"frozen": True, "from_attributes": True}


class DistractionRecord(BaseModel):
    timestamp: UTCDateTime
    category: DistractionCategory
    description: str | None = None
    duration_seconds: int = 0

    model_config = _frozen


class SessionTaskEntry(BaseModel):
    task_id: uuid.UUID
    time_spent: int = 0  # minutes
    completed: bool = False

    model_config = _frozen


class FocusSessionSnapshot(BaseModel):
    id: uuid.UUID | None = None
    user_id: uuid.UUID
    title: str = "Focus Session"
    session_type: SessionType = "pomodoro"
    planned_duration: int
    actual_duration: int | None = None
    status: SessionStatus = "scheduled"

    start_time: UTCDateTime | None = None
    end_time: UTCDateTime | None = None
    paused_at: UTCDateTime | None = None
    resumed_at: UTCDateTime | None = None

    distraction_count: int = 0
    distractions: tuple[DistractionRecord, ...] = ()
    focus_score: int = 100
    xp_earned: int = 0
    tasks: tuple[SessionTaskEntry, ...] = ()

    notes_before: str | None = None
    notes_after: str | None = None
    mood_after: Mood | None = None
    productivity: Productivity | None = None

    model_config = _frozen


class TaskSnapshot(BaseModel):
    id: uuid.UUID | None = None
    priority: TaskPriority = "medium"
    difficulty: TaskDifficulty = "medium"
    category: TaskCategory = "other"
    status: TaskStatus = "pending"
    due_date: UTCDateTime | None = None
    xp_value: int = 20

    model_config = _frozen


class EarnedBadge(BaseModel):
    badge_id: str
    earned_at: UTCDateTime

    model_config = _frozen


class Progression(BaseModel):
    """The gamification and lifetime-stat fields of a user."""

    level: int = Field(default=1, ge=1)
    total_xp: int = Field(default=0, ge=0)
    streak_days: int = 0
    longest_streak: int = 0
    last_active_date: date | None = None
    badges: tuple[EarnedBadge, ...] = ()

    total_focus_time: int = 0  # minutes
    total_sessions: int = 0
    completed_tasks: int = 0
    total_tasks: int = 0
    perfect_days: int = 0

    model_config = _frozen

    @property
    def badge_ids(self) -> frozenset[str]:
        return frozenset(b.badge_id for b in self.badges)


class XPResult(BaseModel):
    progression: Progression
    level_up: bool
    new_level: int

    model_config = {"frozen": True}


class ProgressionUpdate(BaseModel):
    """Outcome of folding one completion event into a progression."""

    progression: Progression
    xp_gained: int
    level_up: bool
    new_level: int
    new_badges: tuple[str, ...] = ()

    model_config = {"frozen": True}
