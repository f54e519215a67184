import asyncio
import inspect
from typing import Any, Awaitable, Callable, TypeVar

R = TypeVar("R")


def is_asynchronous(fn: Callable[..., Any]) -> bool:
    """
    Check if a function is asynchronous.

    Wrappers created with `functools.wraps` are unwrapped first and callable
    objects are checked through their `__call__` method.

    Args:
        fn: The function to check.

    Returns:
        bool: True if the function is a coroutine function, False otherwise.
    """
    fn = inspect.unwrap(fn)
    if inspect.iscoroutinefunction(fn):
        return True
    if inspect.isfunction(fn) or inspect.ismethod(fn):
        return False
    return inspect.iscoroutinefunction(getattr(fn, "__call__", None))


def get_function_name(fn: Callable[..., Any]) -> str:
    """
    Get a human-readable name for a function.

    This will return the `__qualname__` of the function if it exists, otherwise
    it will return the `__name__`. If neither exists (e.g. `functools.partial`),
    the name of the callable's type is used.

    Args:
        fn: The function to get the name of.

    Returns:
        str: The name of the function.
    """
    if hasattr(fn, "__qualname__"):
        return fn.__qualname__
    elif hasattr(fn, "__name__"):  # pragma: no cover
        return fn.__name__
    else:
        return type(fn).__name__


async def await_result(value: Awaitable[R]) -> R:
    """Await an arbitrary awaitable (`asyncio.run` only accepts coroutines)."""
    return await value


def run_to_completion(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    """
    Call a function and, if it produced an awaitable, run it to completion.

    Intended for worker threads without an event loop of their own; a fresh loop
    is created with `asyncio.run` for every awaitable result.
    """
    result = fn(*args, **kwargs)
    if inspect.isawaitable(result):
        return asyncio.run(await_result(result))
    return result
