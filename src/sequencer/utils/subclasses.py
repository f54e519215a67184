from typing import Callable, Iterator, TypeVar

T = TypeVar("T")


def iter_subclasses(cls: type[T]) -> Iterator[type[T]]:
    """Iterate (depth first) over all subclasses of a class."""
    for sub in cls.__subclasses__():
        yield sub
        yield from iter_subclasses(sub)


def get_subclass(cls: type[T], key: Callable[[type[T]], bool]) -> type[T]:
    """
    Get the first subclass of a class that matches a key function.

    Raises:
        TypeError: If no subclass of `cls` satisfies `key`.
    """
    for sub in iter_subclasses(cls):
        if key(sub):
            return sub
    raise TypeError(f"No subclass found for {cls.__name__!r}.")
