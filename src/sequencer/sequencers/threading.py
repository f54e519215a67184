import concurrent.futures
from contextvars import Context
from contextvars import copy_context
from dataclasses import dataclass
from typing import Any, Callable, ClassVar

from typing_extensions import Self, override

from sequencer.context import InvocationContext
from sequencer.futures import CallFuture
from sequencer.invocation import Invocation
from sequencer.sequencers.base import BaseSequencer
from sequencer.sequencers.base import DefaultRuntimes
from sequencer.utils.callables import run_to_completion


@dataclass(frozen=True)
class _ThreadLink:
    invocation: Invocation
    future: concurrent.futures.Future[Any]
    previous: concurrent.futures.Future[Any] | None
    context: Context


class ThreadingSequencer(BaseSequencer[_ThreadLink]):
    """
    A sequencer that executes calls on a dedicated worker thread.

    Calls may be issued from any thread. Each call returns a `CallFuture` right away and
    the operation runs on the sequencer's worker thread, inside a copy of the caller's
    context variables taken when the call was made. Coroutine functions (or operations
    returning any awaitable) are run to completion with `asyncio.run` on the worker.

    The sequencer owns a thread pool that is released by `close`, or by leaving the
    sequencer's context manager.

    Args:
        operation (Callable[..., Any]): The operation to serialize.
        name (str, optional): Name of the sequencer, defaults to the operation's name.
    """

    type: ClassVar[str] = DefaultRuntimes[0]

    def __init__(self, operation: Callable[..., Any], name: str | None = None) -> None:
        super().__init__(operation, name)
        self._tail: concurrent.futures.Future[Any] | None = None
        # NOTE: The chain already guarantees one call at a time, a single worker simply
        # keeps the operation on one thread for its whole lifetime.
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=1, thread_name_prefix=f"sequencer-{self.name}"
        )

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()

    def drain(self, timeout: float | None = None) -> bool:
        """
        Wait until every call issued so far has settled.

        Must not be called from inside the operation, which would wait on itself.

        Args:
            timeout (float, optional):
                Maximum number of seconds to wait. If None, there is no limit on the wait time.

        Returns:
            True if the chain drained, False if the timeout expired first.
        """
        with self._lock:
            tail = self._tail
        if tail is None:
            return True
        done, _ = concurrent.futures.wait([tail], timeout=timeout)
        return bool(done)

    def close(self) -> None:
        """
        Stop accepting calls, wait for the queued calls to settle and release the worker.

        Queued calls are never dropped. Closing an already closed sequencer is a no-op.
        """
        with self._lock:
            if self._closed:
                return
            self._closed = True

        self.logger.debug("Closing '%s' sequencer with %d pending call(s)", self.name, self.pending)
        self.drain()
        self._executor.shutdown(wait=True)

    @override
    def _enqueue(self, invocation: Invocation) -> _ThreadLink:
        future = concurrent.futures.Future[Any]()
        previous, self._tail = self._tail, future
        return _ThreadLink(invocation, future, previous, copy_context())

    @override
    def _schedule(self, link: _ThreadLink) -> CallFuture[Any]:
        # NOTE: Registered before the caller sees the future, so it always runs first
        link.future.add_done_callback(self._release)

        if link.previous is None:
            self._start(link)
        else:
            # Runs immediately if the previous call has already settled
            link.previous.add_done_callback(lambda _: self._start(link))

        return CallFuture(link.future)

    def _start(self, link: _ThreadLink) -> None:
        try:
            self._executor.submit(link.context.run, self._execute, link)
        except RuntimeError as exc:  # pragma: no cover
            # Only possible during interpreter shutdown
            self.logger.error("Unable to start '%s': %s", link.invocation.call_id, exc)
            with self._lock:
                self._pending -= 1
            link.future.set_exception(exc)

    def _execute(self, link: _ThreadLink) -> None:
        if not link.future.set_running_or_notify_cancel():  # pragma: no cover
            return

        error: BaseException | None = None
        result: Any = None
        try:
            result = self._run(link.invocation)
        except BaseException as exc:
            # NOTE: Mirrors `concurrent.futures`, anything raised belongs to the caller
            error = exc
        finally:
            try:
                self._finish(link.invocation, error, result)
            finally:
                if error is None:
                    link.future.set_result(result)
                else:
                    link.future.set_exception(error)

    def _run(self, invocation: Invocation) -> Any:
        invocation.mark_executing()
        with InvocationContext(invocation=invocation, runtime=self.type):
            self._hook_manager.hook.before_call_run(invocation=invocation, runtime=self.type)
            return run_to_completion(self.operation, *invocation.args, **invocation.kwargs)

    def _release(self, future: concurrent.futures.Future[Any]) -> None:
        # Only the settled call itself is removed, and only if nothing queued behind it
        with self._lock:
            if self._tail is future:
                self._tail = None
