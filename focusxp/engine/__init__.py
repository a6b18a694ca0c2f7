"""Focus-session lifecycle and gamification scoring.

Pure functions over immutable snapshots. Callers load snapshots from storage,
hand them to the engine together with the current time, and persist whatever
comes back.
"""

from focusxp.engine.errors import (
    AlreadyTerminal,
    EngineError,
    InvalidArgument,
    InvalidTransition,
)

__all__ = [
    "AlreadyTerminal",
    "EngineError",
    "InvalidArgument",
    "InvalidTransition",
]
