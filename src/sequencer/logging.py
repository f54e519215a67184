"""sequencer logging configuration and logger management."""

import logging
import logging.handlers
import sys
from collections.abc import Iterable
from functools import lru_cache
from pathlib import Path
from typing import Any, Final, MutableMapping, cast

from sequencer.exceptions import MissingContextError

# Define base logger names
_BASE_LOGGER = "sequencer"
_CALL_LOGGER = f"{_BASE_LOGGER}.call"
_APP_LOGGERS: Final[tuple[str, ...]] = (_BASE_LOGGER, _CALL_LOGGER)

# Define the log formats for different loggers
_CONSOLE_FORMATS: dict[str, str] = {
    _BASE_LOGGER: "%(message)s",
    _CALL_LOGGER: "Call '%(call_id)s' - %(message)s",
}

# Base file format for logging
_BASE_FILE_FORMAT = "%(asctime)s | %(levelname)-7s |"

# Define the file formats for different loggers
_FILE_FORMATS: dict[str, str] = {
    _BASE_LOGGER: _BASE_FILE_FORMAT + " %(name)s - %(message)s",
    _CALL_LOGGER: _BASE_FILE_FORMAT + " %(name)s '%(call_id)s' - %(message)s",
}


class EnhancedLoggerAdapter(logging.LoggerAdapter):
    """
    Adapter that ensures extra kwargs are passed through correctly.

    Without this, the `extra` fields set on the adapter would overshadow any provided
    on a log-by-log basis.

    See https://bugs.python.org/issue32732, subclassing is the intended workaround.
    """

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        """Process the logging call to merge extra context correctly."""
        # Merge adapter's extra with call-specific extra, preferring call-specific
        kwargs["extra"] = {**(self.extra or {}), **(kwargs.get("extra") or {})}
        return (msg, kwargs)


@lru_cache()
def get_logger(name: str | None = None) -> logging.Logger:
    """
    Returns a named logger, or the base "sequencer" logger if no name is specified.

    See `get_call_logger` for retrieving loggers for use within a sequenced operation.

    Args:
        name: The name of the logger to retrieve. If the name is relative, it will be
            prefixed with the "sequencer" logger name. If the name is absolute, it will
            be used as is.
    """
    parent_logger = logging.getLogger(_BASE_LOGGER)

    if name:
        if not name.startswith(parent_logger.name + "."):
            logger = parent_logger.getChild(name)
        else:
            logger = logging.getLogger(name)
    else:
        logger = parent_logger

    return logger


def get_call_logger(default: str | None = None) -> logging.Logger:
    """
    Returns a logger bound to the currently executing call or the default (if supplied).

    Args:
        default: Default logger to use if there is no active invocation context. If not
            supplied, an error will be raised if there is no active invocation context.
    """
    from sequencer.context import InvocationContext

    context = InvocationContext.get()

    if context is not None:
        return bind_call_logger(context.invocation.call_id)
    elif default is not None:
        return get_logger(default)
    else:
        raise MissingContextError("There is no active invocation context.")


def bind_call_logger(call_id: str) -> logging.Logger:
    """Returns the call logger with every record tagged by the given call identifier."""
    logger = EnhancedLoggerAdapter(logging.getLogger(_CALL_LOGGER), {"call_id": call_id})
    return cast(logging.Logger, logger)


def setup_console_logging(
    level: int = logging.INFO,
    traceback: bool = False,
    use_rich: bool = False,
    loggers: Iterable[str] | None = None,
) -> None:
    """
    Sets up console logging with specified traceback.

    Args:
        level (int): Logging level to use for the console handler.
        traceback (bool): Indicates whether to include tracebacks in the console output.
        use_rich (bool): Indicates whether to use the Rich library for console logging. Library
            must be installed for this to work (use `sequencer[rich]`). Defaults to False.
        loggers (Iterable[str]): Additional logger names to configure beyond the default loggers.
    """
    _setup_loggers(level=level, loggers=loggers)

    for name, fmt in _CONSOLE_FORMATS.items():
        handler = _console_handler(fmt, traceback, use_rich)
        handler.set_name(f"{name} - console")
        handler.setLevel(level)
        _add_handler(logging.getLogger(name), handler)


def setup_file_logging(
    path: Path | str, level: int = logging.INFO, loggers: Iterable[str] | None = None
) -> None:
    """
    Sets up (rotating) file logging for the specified file path.

    Args:
        path (pathlib.Path): Path of the log file; parent directories are created.
        level (int): Logging level to use for the file handler.
        loggers (Iterable[str]): Additional logger names to configure beyond the default loggers.
    """
    _setup_loggers(level=level, loggers=loggers)

    # Because we are altering the logging configuration at runtime, we need to
    # ensure that the log file exists before we start logging to it.
    file_path = Path(path).resolve()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_path.touch(exist_ok=True)

    for name, fmt in _FILE_FORMATS.items():
        handler = _file_handler(str(file_path), fmt)
        handler.set_name(f"{name} - {file_path}")
        handler.setLevel(level)
        _add_handler(logging.getLogger(name), handler)


def _add_handler(logger: logging.Logger, handler: logging.Handler) -> None:
    # Setup functions may run more than once per process; handler names are unique
    if not any(handler.name == h.name for h in logger.handlers):
        logger.addHandler(handler)


def _setup_loggers(level: Any = logging.DEBUG, loggers: Iterable[str] | None = None) -> None:
    """Updates base loggers (and any extra loggers) for the application."""
    loggers = loggers or []
    for name in _APP_LOGGERS + tuple(loggers):
        logger = logging.getLogger(name)
        logger.propagate = False
        logger.setLevel(level)


def _console_handler(format: str, traceback: bool, use_rich: bool) -> logging.Handler:
    """Creates a console handler for the specified console and format."""
    handler: logging.Handler

    if not use_rich:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(format))
        return handler

    try:  # pragma: no cover
        import rich.logging
        from rich import get_console
    except ImportError:  # pragma: no cover
        raise ImportError("Rich library is required for rich console logging.") from None

    handler = rich.logging.RichHandler(
        rich_tracebacks=traceback, omit_repeated_times=False, console=get_console()
    )
    handler.setFormatter(logging.Formatter(format))
    return handler


def _file_handler(filename: str, format: str) -> logging.Handler:
    """Creates a file handler for the specified filename and format."""
    handler = logging.handlers.RotatingFileHandler(
        filename,
        mode="a",
        maxBytes=10485760,
        encoding="utf-8",
        delay=True,
    )
    handler.setFormatter(logging.Formatter(format))
    return handler
