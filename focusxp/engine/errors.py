class EngineError(Exception):
    """Base class for errors raised by the engine."""


class InvalidArgument(EngineError, ValueError):
    """An argument is outside the accepted range."""


class InvalidTransition(EngineError):
    """The requested transition is not legal from the session's current state."""

    def __init__(self, current_state: str, transition: str, message: str | None = None):
        self.current_state = current_state
        self.transition = transition
        super().__init__(
            message or f"Cannot {transition} a session that is {current_state}"
        )


class AlreadyTerminal(InvalidTransition):
    """The session is completed or cancelled and accepts no further transitions."""

    def __init__(self, current_state: str, transition: str):
        super().__init__(
            current_state,
            transition,
            f"Cannot {transition} a session that is already {current_state}",
        )
