import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text, func, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from focusxp.models.base import Base

_OPEN_STATUS_CLAUSE = text("status IN ('active', 'paused')")


class FocusSession(Base):
    __tablename__ = "focus_sessions"

    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False, default="Focus Session")
    session_type: Mapped[str] = mapped_column(String(20), nullable=False, default="pomodoro")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="scheduled")
    planned_duration: Mapped[int] = mapped_column(Integer, nullable=False)  # minutes
    actual_duration: Mapped[int | None] = mapped_column(Integer)  # minutes

    start_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    end_time: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    paused_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    resumed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    distraction_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    focus_score: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    xp_earned: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    notes_before: Mapped[str | None] = mapped_column(Text)
    notes_after: Mapped[str | None] = mapped_column(Text)
    mood_after: Mapped[str | None] = mapped_column(String(20))
    productivity: Mapped[str | None] = mapped_column(String(20))

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    user: Mapped["User"] = relationship(back_populates="sessions")  # noqa: F821
    distractions: Mapped[list["Distraction"]] = relationship(  # noqa: F821
        back_populates="session", cascade="all, delete-orphan", lazy="selectin",
        order_by="Distraction.timestamp",
    )
    tasks: Mapped[list["SessionTask"]] = relationship(  # noqa: F821
        back_populates="session", cascade="all, delete-orphan", lazy="selectin",
        order_by="SessionTask.position",
    )

    __table_args__ = (
        Index("ix_focus_sessions_user_created", "user_id", "created_at"),
        Index("ix_focus_sessions_user_status", "user_id", "status"),
        # At most one active or paused session per user
        Index(
            "uq_focus_sessions_open_per_user",
            "user_id",
            unique=True,
            postgresql_where=_OPEN_STATUS_CLAUSE,
            sqlite_where=_OPEN_STATUS_CLAUSE,
        ),
    )


class SessionTask(Base):
    __tablename__ = "session_tasks"

    session_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("focus_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    task_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    time_spent: Mapped[int] = mapped_column(Integer, nullable=False, default=0)  # minutes
    completed: Mapped[bool] = mapped_column(default=False)

    # Relationships
    session: Mapped["FocusSession"] = relationship(back_populates="tasks")
