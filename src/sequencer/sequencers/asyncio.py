import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Callable, ClassVar

from typing_extensions import Self, override

from sequencer.context import InvocationContext
from sequencer.invocation import Invocation
from sequencer.sequencers.base import BaseSequencer
from sequencer.sequencers.base import DefaultRuntimes


@dataclass(frozen=True)
class _TaskLink:
    invocation: Invocation
    slot: asyncio.Future[Any]
    signal: asyncio.Future[None]
    previous: asyncio.Future[None] | None


class AsyncioSequencer(BaseSequencer[_TaskLink]):
    """
    A sequencer that executes calls as tasks on the running event loop.

    Calls must be issued from a coroutine (or callback) running on the event loop. Each
    call returns an `asyncio.Future` right away; awaiting it yields the operation's result
    or raises its exception. The operation may be a coroutine function or a plain
    callable, plain callables run directly on the event loop.

    Cancelling a returned future only discards the result for that caller: the call still
    executes in its turn and the calls behind it are unaffected.

    Args:
        operation (Callable[..., Any]): The operation to serialize.
        name (str, optional): Name of the sequencer, defaults to the operation's name.
    """

    type: ClassVar[str] = DefaultRuntimes[1]

    def __init__(self, operation: Callable[..., Any], name: str | None = None) -> None:
        super().__init__(operation, name)
        self._tail: asyncio.Future[None] | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.aclose()

    async def drain(self) -> None:
        """Wait until every call issued so far has settled."""
        tail = self._tail
        if tail is not None:
            # NOTE: `asyncio.wait` never cancels the awaited signal if the waiter is cancelled
            await asyncio.wait([tail])

    async def aclose(self) -> None:
        """
        Stop accepting calls and wait for the queued calls to settle.

        Queued calls are never dropped. Closing an already closed sequencer is a no-op.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True

        self.logger.debug("Closing '%s' sequencer with %d pending call(s)", self.name, self.pending)
        await self.drain()

    @override
    def _check_caller(self) -> None:
        # Raises a RuntimeError when called outside of a running event loop
        asyncio.get_running_loop()

    @override
    def _enqueue(self, invocation: Invocation) -> _TaskLink:
        loop = asyncio.get_running_loop()
        signal = loop.create_future()
        previous, self._tail = self._tail, signal
        if previous is not None and previous.done():
            previous = None
        return _TaskLink(invocation, loop.create_future(), signal, previous)

    @override
    def _schedule(self, link: _TaskLink) -> asyncio.Future[Any]:
        task = asyncio.get_running_loop().create_task(
            self._execute(link), name=f"sequencer-{link.invocation.call_id}"
        )
        # Hold a strong reference, the loop only keeps weak references to tasks
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return link.slot

    async def _execute(self, link: _TaskLink) -> None:
        error: BaseException | None = None
        result: Any = None
        try:
            if link.previous is not None:
                await asyncio.wait([link.previous])
            result = await self._run(link.invocation)
        except asyncio.CancelledError as exc:
            # The event loop is shutting down, the caller will never see a result
            error = exc
            link.slot.cancel()
            raise
        except BaseException as exc:
            # NOTE: Mirrors the threading runtime, anything raised belongs to the caller
            error = exc
        finally:
            try:
                self._finish(link.invocation, error, result)
            finally:
                self._release(link)

        if not link.slot.done():  # otherwise cancelled by the caller
            if error is None:
                link.slot.set_result(result)
            else:
                link.slot.set_exception(error)

        if isinstance(error, (KeyboardInterrupt, SystemExit)):
            # Still stops the event loop, as asyncio does for any task
            raise error

    async def _run(self, invocation: Invocation) -> Any:
        invocation.mark_executing()
        with InvocationContext(invocation=invocation, runtime=self.type):
            self._hook_manager.hook.before_call_run(invocation=invocation, runtime=self.type)
            result = self.operation(*invocation.args, **invocation.kwargs)
            if inspect.isawaitable(result):
                result = await result
        return result

    def _release(self, link: _TaskLink) -> None:
        # Only the settled call itself is removed, and only if nothing queued behind it
        with self._lock:
            if self._tail is link.signal:
                self._tail = None
        if not link.signal.done():
            link.signal.set_result(None)
