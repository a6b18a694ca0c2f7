import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from focusxp.schemas.gamification import ProgressionResult

TaskCategoryField = Literal[
    "work", "study", "fitness", "personal", "health", "creative", "social", "other"
]
TaskPriorityField = Literal["low", "medium", "high", "urgent"]
TaskDifficultyField = Literal["easy", "medium", "hard"]
TaskStatusField = Literal["pending", "in-progress", "completed", "cancelled"]


class TaskCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    category: TaskCategoryField = "other"
    priority: TaskPriorityField = "medium"
    difficulty: TaskDifficultyField = "medium"
    due_date: datetime | None = None
    estimate_minutes: int | None = Field(default=None, ge=1, le=1440)


class TaskUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=1000)
    category: TaskCategoryField | None = None
    priority: TaskPriorityField | None = None
    difficulty: TaskDifficultyField | None = None
    status: TaskStatusField | None = None
    due_date: datetime | None = None
    estimate_minutes: int | None = Field(default=None, ge=1, le=1440)


class TaskResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    title: str
    description: str | None
    category: str
    priority: str
    difficulty: str
    status: str
    due_date: datetime | None
    estimate_minutes: int | None
    xp_value: int
    completed_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class TaskUpdateResponse(BaseModel):
    task: TaskResponse
    completion: ProgressionResult | None = None
