import abc
import threading
from typing import Any, Callable, ClassVar, Generic, Literal, TypeVar, final

from sequencer.exceptions import SequencerClosedError
from sequencer.invocation import Invocation
from sequencer.invocation import InvocationState
from sequencer.invocation import create_invocation
from sequencer.logging import get_logger
from sequencer.utils.callables import get_function_name

L = TypeVar("L")  # runtime specific link between an invocation and the chain


# NOTE: These are the default sequencer runtimes. Custom sequencers can use any string
# identifier they want, but these are the ones built into the library.
DefaultRuntime = Literal["threading", "asyncio"]
DefaultRuntimes: list[DefaultRuntime] = ["threading", "asyncio"]


class BaseSequencer(Generic[L], metaclass=abc.ABCMeta):
    """
    An abstract base class for sequencers.

    A sequencer wraps an operation and exposes a callable with the same call signature.
    Calls made through the sequencer return immediately with a future-like result slot,
    while the underlying operation is executed for one call at a time, in the order the
    calls were made. A failing call never prevents the calls queued behind it.

    The chain of pending calls is kept as a single reference to the settle signal of the
    most recently queued call (the tail). Each new call swaps itself in as the tail (under
    a lock) and starts once the previous tail has settled.

    Args:
        operation (Callable[..., Any]): The operation to serialize.
        name (str, optional): Name of the sequencer, defaults to the operation's name.
    """

    type: ClassVar[str]  # Used for looking up sequencers by runtime
    """A string identifier for the runtime of the sequencer."""

    def __init__(self, operation: Callable[..., Any], name: str | None = None) -> None:
        from sequencer.hooks.manager import get_hook_manager

        if not callable(operation):
            raise TypeError(f"Expected a callable operation, received {operation!r}.")

        self._operation = operation
        self._name = name or get_function_name(operation)
        self._lock = threading.Lock()
        self._count = 0
        self._pending = 0
        self._closed = False
        self.logger = get_logger(f"{self.type}.{self._name}")
        self._hook_manager = get_hook_manager()

    @final
    @property
    def name(self) -> str:
        """The name of the sequencer."""
        return self._name

    @final
    @property
    def operation(self) -> Callable[..., Any]:
        """The wrapped operation."""
        return self._operation

    @final
    @property
    def pending(self) -> int:
        """Number of calls that have been issued but have not settled yet."""
        with self._lock:
            return self._pending

    @final
    @property
    def is_closed(self) -> bool:
        """Returns true if the sequencer no longer accepts calls."""
        return self._closed

    @final
    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        """
        Issue a call to the wrapped operation.

        The call is queued behind every call issued before it and the result slot for this
        call is returned without waiting for any of them.

        Raises:
            SequencerClosedError: If the sequencer has been closed.
        """
        self._check_caller()

        with self._lock:
            if self._closed:
                raise SequencerClosedError(self._name)
            self._count += 1
            invocation = create_invocation(self._name, self._count, args, kwargs)
            ahead = self._pending
            self._pending += 1
            link = self._enqueue(invocation)

        try:
            self._hook_manager.hook.after_call_enqueue(
                invocation=invocation, runtime=self.type, ahead=ahead
            )
        finally:
            # A queued call must always be scheduled, otherwise the chain stalls
            result_slot = self._schedule(link)

        return result_slot

    def _check_caller(self) -> None:
        """Validate the calling environment before a call is queued."""

    @abc.abstractmethod
    def _enqueue(self, invocation: Invocation) -> L:
        """
        Make the invocation the new tail of the chain.

        Called with the sequencer lock held, so implementations must neither block nor
        call into user code.

        Args:
            invocation (Invocation): The newly created invocation.

        Returns:
            A runtime specific link holding the invocation, its result slot and the
            previous tail of the chain.
        """
        raise NotImplementedError

    @abc.abstractmethod
    def _schedule(self, link: L) -> Any:
        """
        Schedule execution of a linked invocation after its predecessor has settled.

        Args:
            link: The value returned by `_enqueue` for the invocation.

        Returns:
            The result slot handed to the caller.
        """
        raise NotImplementedError

    def _finish(self, invocation: Invocation, error: BaseException | None, result: Any) -> None:
        """Settle the invocation's bookkeeping before its result slot is resolved."""
        try:
            if invocation.state is InvocationState.EXECUTING:
                invocation.mark_settled()
                self._hook_manager.hook.after_call_run(
                    invocation=invocation, runtime=self.type, error=error, result=result
                )
        except Exception:
            self.logger.exception("Hook 'after_call_run' failed for '%s'", invocation.call_id)
        finally:
            with self._lock:
                self._pending -= 1

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, pending={self._pending})"
