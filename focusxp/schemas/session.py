import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, computed_field

from focusxp.engine import scoring

SessionTypeField = Literal["pomodoro", "custom", "deep-work", "study", "break"]
SessionStatusField = Literal["scheduled", "active", "paused", "completed", "cancelled"]


class SessionCreate(BaseModel):
    title: str | None = Field(default=None, max_length=100)
    session_type: SessionTypeField = "pomodoro"
    planned_duration: int = Field(ge=1, le=480)
    task_ids: list[uuid.UUID] = Field(default_factory=list, max_length=50)
    notes_before: str | None = Field(default=None, max_length=500)


class SessionComplete(BaseModel):
    notes_after: str | None = Field(default=None, max_length=500)
    mood_after: Literal["very-bad", "bad", "neutral", "good", "very-good"] | None = None
    productivity: Literal["very-low", "low", "medium", "high", "very-high"] | None = None


class DistractionCreate(BaseModel):
    category: Literal["website", "notification", "manual", "other"]
    description: str | None = Field(default=None, max_length=200)
    duration_seconds: int = Field(default=0, ge=0, le=3600)


class SessionTaskUpdate(BaseModel):
    task_id: uuid.UUID
    time_spent: int = Field(default=0, ge=0, le=480)
    completed: bool = False


class DistractionResponse(BaseModel):
    timestamp: datetime
    category: str
    description: str | None
    duration_seconds: int

    model_config = {"from_attributes": True}


class SessionTaskResponse(BaseModel):
    task_id: uuid.UUID
    time_spent: int
    completed: bool

    model_config = {"from_attributes": True}


class SessionResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    session_type: str
    status: str
    planned_duration: int
    actual_duration: int | None
    start_time: datetime | None
    end_time: datetime | None
    paused_at: datetime | None
    resumed_at: datetime | None
    distraction_count: int
    distractions: list[DistractionResponse]
    focus_score: int
    xp_earned: int
    tasks: list[SessionTaskResponse]
    notes_before: str | None
    notes_after: str | None
    mood_after: str | None
    productivity: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @computed_field
    @property
    def efficiency(self) -> int:
        return scoring.session_metrics(self)["efficiency"]

    @computed_field
    @property
    def focus_percentage(self) -> int:
        return scoring.session_metrics(self)["focus_percentage"]

    @computed_field
    @property
    def rating(self) -> str:
        return scoring.session_metrics(self)["rating"]


class SessionCompleteResponse(BaseModel):
    session: SessionResponse
    xp_gained: int
    level_up: bool
    new_level: int
    new_badges: list[str]


class TodaySummary(BaseModel):
    total_sessions: int
    completed_sessions: int
    total_focus_time: int  # minutes
    average_focus_score: int


class TodaySessionsResponse(BaseModel):
    sessions: list[SessionResponse]
    stats: TodaySummary
