import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from focusxp.models.base import Base


class Distraction(Base):
    __tablename__ = "session_distractions"

    session_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("focus_sessions.id", ondelete="CASCADE"), nullable=False
    )
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    category: Mapped[str] = mapped_column(String(20), nullable=False)  # website, notification, manual, other
    description: Mapped[str | None] = mapped_column(String(200))
    duration_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Relationships
    session: Mapped["FocusSession"] = relationship(back_populates="distractions")  # noqa: F821

    __table_args__ = (
        Index("ix_session_distractions_session_timestamp", "session_id", "timestamp"),
    )
