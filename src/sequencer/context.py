from __future__ import annotations

from contextvars import ContextVar
from contextvars import Token
from typing import TYPE_CHECKING, Any, ClassVar

from pluggy import PluginManager
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import InstanceOf
from pydantic import PrivateAttr
from typing_extensions import Self

from sequencer.exceptions import MissingContextError
from sequencer.invocation import Invocation

# region Base


class ContextModel(BaseModel):
    """A base model for managing the context state."""

    if TYPE_CHECKING:
        # subclasses can pass through keyword arguments to the pydantic base model
        def __init__(self, **kwargs: Any) -> None: ...

    # The context variable for storing data must be defined by the child class
    __var__: ClassVar[ContextVar[Any]]
    _token: Token[Self] | None = PrivateAttr(None)
    model_config: ClassVar[ConfigDict] = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    def __enter__(self) -> Self:
        if self._token is not None:
            raise RuntimeError("Context already entered. Context enter calls cannot be nested.")
        self._token = self.__var__.set(self)
        return self

    def __exit__(self, *_: Any) -> None:
        if not self._token:
            raise RuntimeError("Asymmetric use of context. Context exit called without an enter.")
        self.__var__.reset(self._token)
        self._token = None

    @classmethod
    def get(cls: type[Self]) -> Self | None:
        """Gets the current context instance."""
        return cls.__var__.get(None)


# region API


class InvocationContext(ContextModel):
    """A context model for the invocation currently executing an operation."""

    __var__ = ContextVar("invocation", default=None)

    invocation: InstanceOf[Invocation]
    """Data related to the current call."""

    runtime: str
    """Type of the sequencer runtime executing the call."""


class HooksContext(ContextModel):
    """A context model for managing hooks."""

    __var__ = ContextVar("hooks", default=None)

    manager: PluginManager | None = None


# region Helpers


def get_current_invocation() -> Invocation:
    """
    Returns the invocation whose operation is currently executing.

    Only available from inside a sequenced operation (including code it calls).

    Raises:
        MissingContextError: If called outside of a sequenced operation.
    """
    context = InvocationContext.get()
    if context is None:
        raise MissingContextError("There is no active invocation context.")
    return context.invocation
