from focusxp.models.base import Base
from focusxp.models.distraction import Distraction
from focusxp.models.focus_session import FocusSession, SessionTask
from focusxp.models.task import Task
from focusxp.models.user import User
from focusxp.models.user_badge import UserBadge

__all__ = [
    "Base",
    "Distraction",
    "FocusSession",
    "SessionTask",
    "Task",
    "User",
    "UserBadge",
]
