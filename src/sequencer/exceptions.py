class SequencerException(Exception):
    """Base exception type for sequencer errors."""


class SequencerClosedError(SequencerException, RuntimeError):
    """Raised when a call is issued to a sequencer that has been closed."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Sequencer '{name}' has been closed and no longer accepts calls.")


class InvalidRuntimeError(SequencerException, ValueError):
    """Raised when an unknown sequencer runtime is requested."""


class InvocationStateError(SequencerException, RuntimeError):
    """Raised when an invocation is moved through its states out of order."""


class MissingContextError(SequencerException, RuntimeError):
    """Raised when no invocation context can be found (but is required)."""
