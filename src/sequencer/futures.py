"""
Call futures returned by the threading sequencer.

This module intends to provide an interface similar to `concurrent.futures.Future`.
Note that the classes defined here are not subclasses of `concurrent.futures.Future`
and cannot be used with other libraries that expect a `Future` object. In particular
a `CallFuture` cannot be cancelled: once a call is queued it always executes.
"""

import concurrent.futures
from typing import Any, Callable, Generic, Iterable, Iterator, Literal, TypeVar, cast, overload

R = TypeVar("R")
_WAIT_STATES = Literal["FIRST_COMPLETED", "ALL_COMPLETED", "FIRST_EXCEPTION"]


class CallFuture(Generic[R]):
    """
    Represents the result of a single call issued through a sequencer.

    This class acts as a proxy to a `concurrent.futures.Future` object, allowing the
    caller to check the status of the call and retrieve its result without gaining the
    ability to cancel it.

    Args:
        raw_future (concurrent.futures.Future): Raw future object to be wrapped.
    """

    _raw_future: concurrent.futures.Future[Any]

    def __init__(self, raw_future: concurrent.futures.Future[R]) -> None:
        self._raw_future = raw_future

    def result(self, timeout: float | None = None) -> R:
        """
        Return the result of the call.

        Args:
            timeout (float, optional):
                Maximum number of seconds to wait. If None, there is no limit on the wait time.

        Returns:
            The value produced by the underlying operation. If the operation failed, its
            exception is raised instead.
        """
        return cast(R, self._raw_future.result(timeout))

    def exception(self, timeout: float | None = None) -> BaseException | None:
        """
        Return the exception raised by the call.

        Args:
            timeout (float, optional):
                Maximum number of seconds to wait. If None, there is no limit on the wait time.

        Returns:
            The exception raised by the operation, or None if it completed successfully.
        """
        return self._raw_future.exception(timeout)

    def running(self) -> bool:
        """Return True if the call is currently executing."""
        return self._raw_future.running()

    def done(self) -> bool:
        """Return True if the call has settled (successfully or not)."""
        return self._raw_future.done()

    def add_done_callback(self, fn: Callable[["CallFuture[R]"], None]) -> None:
        """
        Attaches a callable that will be called when the call has settled.

        The callable will be called with this `CallFuture` object as its only argument.
        If the call has already settled the callable is invoked immediately.

        Args:
            fn (Callable[[CallFuture], None]):
                Callable to be called when the call has settled.
        """
        self._raw_future.add_done_callback(lambda _: fn(self))

    def __hash__(self) -> int:
        return hash(self._raw_future)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CallFuture):
            return NotImplemented
        return self._raw_future is other._raw_future

    def __repr__(self) -> str:
        return f"<{type(self).__name__} wrapping {self._raw_future!r}>"


@overload
def as_completed(
    futures: Iterable[CallFuture[R]], timeout: float | None = None
) -> Iterator[CallFuture[R]]: ...


@overload
def as_completed(
    futures: Iterable[CallFuture[Any]], timeout: float | None = None
) -> Iterator[CallFuture[Any]]: ...


def as_completed(
    futures: Iterable[CallFuture[Any]], timeout: float | None = None
) -> Iterator[CallFuture[Any]]:
    """
    An iterator over the given `CallFuture` that yields each as it settles.

    Args:
        futures (Iterable[CallFuture[Any]]):
            An iterable of futures. Futures need not come from the same sequencer. If
            any futures are duplicated, they will be treated as a single future.
        timeout (float, optional):
            Maximum number of seconds to wait. If None, there is no limit on the wait time.

    Returns:
        An iterator that yields the given futures as they settle. For futures from a
        single sequencer this is the order in which the calls were issued.
    """
    future_lookup = {future._raw_future: future for future in futures}
    for raw_future in concurrent.futures.as_completed(future_lookup.keys(), timeout=timeout):
        yield future_lookup[raw_future]


@overload
def wait(
    futures: Iterable[CallFuture[R]],
    *,
    timeout: float | None = None,
    return_when: _WAIT_STATES = "ALL_COMPLETED",
) -> tuple[set[CallFuture[R]], set[CallFuture[R]]]: ...


@overload
def wait(
    futures: Iterable[CallFuture[Any]],
    *,
    timeout: float | None = None,
    return_when: _WAIT_STATES = "ALL_COMPLETED",
) -> tuple[set[CallFuture[Any]], set[CallFuture[Any]]]: ...


def wait(
    futures: Iterable[CallFuture[Any]],
    *,
    timeout: float | None = None,
    return_when: _WAIT_STATES = "ALL_COMPLETED",
) -> tuple[set[CallFuture[Any]], set[CallFuture[Any]]]:
    """
    Wait for the given `CallFuture` objects to settle.

    Args:
        futures (Iterable[CallFuture[Any]]):
            An iterable of futures. Futures need not come from the same sequencer. If
            any futures are duplicated, they will be treated as a single future.
        timeout (float, optional):
            Maximum number of seconds to wait. If None, there is no limit on the wait time.
        return_when (Literal["FIRST_COMPLETED", "ALL_COMPLETED", "FIRST_EXCEPTION"]):
            Indicates when this function should return. The options are
            - FIRST_COMPLETED: Return when any future settles.
            - FIRST_EXCEPTION: Return when any future settles by raising an exception.
            - ALL_COMPLETED: Return when all futures settle.

    Returns:
        A 2-tuple of sets. The first set contains the futures that settled before the
        wait completed, the second contains the futures that did not.
    """
    raw_futures: dict[concurrent.futures.Future, CallFuture[Any]] = {
        future._raw_future: future for future in futures
    }
    if not raw_futures:
        return set(), set()

    done_raw, not_done_raw = concurrent.futures.wait(
        raw_futures.keys(), timeout=timeout, return_when=return_when
    )
    done_futures = {raw_futures[raw_future] for raw_future in done_raw}
    not_done_futures = {raw_futures[raw_future] for raw_future in not_done_raw}

    return (done_futures, not_done_futures)
