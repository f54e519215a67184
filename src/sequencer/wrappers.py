from __future__ import annotations

from functools import update_wrapper
from typing import TYPE_CHECKING, Any, Callable, overload

from sequencer.utils.callables import is_asynchronous

if TYPE_CHECKING:
    from sequencer.sequencers import DefaultRuntime
    from sequencer.sequencers.base import BaseSequencer
else:
    BaseSequencer = Any
    DefaultRuntime = Any


@overload
def sequence(__func: Callable[..., Any]) -> BaseSequencer: ...


@overload
def sequence(
    __func: None = None,
    *,
    name: str | None = None,
    runtime: DefaultRuntime | str | type[BaseSequencer] | None = None,
) -> Callable[[Callable[..., Any]], BaseSequencer]: ...


def sequence(
    __func: Callable[..., Any] | None = None,
    *,
    name: str | None = None,
    runtime: DefaultRuntime | str | type[BaseSequencer] | None = None,
) -> BaseSequencer | Callable[[Callable[..., Any]], BaseSequencer]:
    """
    Wraps a callable so that concurrent calls execute one at a time, in call order.

    Can be used as a plain function (`sequence(fn)`) or as a decorator, with or without
    arguments. Every call to the returned sequencer returns a future immediately; the
    future settles with the result (or exception) of that specific call once all calls
    issued before it have settled.

    Example:
        ```python
        @sequence
        async def greet(name: str) -> str:
            await asyncio.sleep(0.1)
            return f"hello, {name}"


        async def main():
            futures = [greet(name) for name in ("A", "B", "C")]
            print(await asyncio.gather(*futures))
        ```

    Args:
        __func (Callable[..., Any]):
            Callable (sync or async) to be serialized.
        name (str, optional):
            Name for the sequencer. If not provided, the function's name is used.
        runtime (DefaultRuntime | str | type[BaseSequencer], optional):
            Runtime executing the calls, either "threading" or "asyncio" (or a custom
            sequencer type). Defaults to "asyncio" for coroutine functions and
            "threading" for anything else.
    """
    from sequencer.sequencers import get_sequencer_type

    def decorator(fn: Callable[..., Any]) -> BaseSequencer:
        if runtime is None:
            sequencer_type = get_sequencer_type("asyncio" if is_asynchronous(fn) else "threading")
        else:
            sequencer_type = get_sequencer_type(runtime)
        sequencer = sequencer_type(fn, name=name)
        # Metadata only, the operation's own attributes would clobber the sequencer's
        update_wrapper(sequencer, fn, updated=())
        return sequencer

    if __func is not None:
        return decorator(__func)
    return decorator
