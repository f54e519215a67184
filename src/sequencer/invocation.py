from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from datetime import timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from sequencer.exceptions import InvocationStateError


class InvocationState(str, Enum):
    """Lifecycle states of a single call through a sequencer."""

    QUEUED = "queued"
    EXECUTING = "executing"
    SETTLED = "settled"


@dataclass(eq=False)
class Invocation:
    """Data about one call issued through a sequencer."""

    sequencer: str
    """Name of the sequencer that received the call."""

    index: int
    """1-based position of the call within its sequencer."""

    args: tuple[Any, ...] = ()
    """Positional arguments, captured when the call was made."""

    kwargs: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    """Keyword arguments (read-only), captured when the call was made."""

    state: InvocationState = InvocationState.QUEUED
    """Current lifecycle state of the call."""

    enqueued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    started_at: datetime | None = None
    finished_at: datetime | None = None

    @property
    def call_id(self) -> str:
        """Unique identifier for the call within its sequencer."""
        return f"{self.sequencer}-{self.index}"

    def mark_executing(self) -> None:
        """Move the invocation from `QUEUED` to `EXECUTING`."""
        self._transition(InvocationState.QUEUED, InvocationState.EXECUTING)
        self.started_at = datetime.now(timezone.utc)

    def mark_settled(self) -> None:
        """Move the invocation from `EXECUTING` to `SETTLED`."""
        self._transition(InvocationState.EXECUTING, InvocationState.SETTLED)
        self.finished_at = datetime.now(timezone.utc)

    def _transition(self, expected: InvocationState, target: InvocationState) -> None:
        if self.state is not expected:
            raise InvocationStateError(
                f"Invocation '{self.call_id}' cannot move to '{target.value}' "
                f"from '{self.state.value}'."
            )
        self.state = target


def create_invocation(
    sequencer: str, index: int, args: tuple[Any, ...], kwargs: dict[str, Any]
) -> Invocation:
    """
    Create a new queued invocation, freezing the supplied arguments.

    Args:
        sequencer (str): Name of the sequencer receiving the call.
        index (int): 1-based position of the call within the sequencer.
        args (tuple[Any, ...]): Positional arguments of the call.
        kwargs (dict[str, Any]): Keyword arguments of the call; copied so that later
            changes by the caller are not observed.

    Returns:
        Invocation: A new invocation in the `QUEUED` state.
    """
    return Invocation(
        sequencer=sequencer,
        index=index,
        args=tuple(args),
        kwargs=MappingProxyType(dict(kwargs)),
    )
