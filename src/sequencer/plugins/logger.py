import logging
from pathlib import Path
from typing import TYPE_CHECKING

from sequencer.hooks import hook_impl
from sequencer.logging import bind_call_logger
from sequencer.logging import setup_console_logging
from sequencer.logging import setup_file_logging
from sequencer.utils.timing import format_duration

if TYPE_CHECKING:
    from sequencer.invocation import Invocation
else:
    Invocation = object


class SequencerLogger:
    """
    A hook plugin that logs the lifecycle of every call issued through a sequencer.

    Register an instance with `sequencer.register_hooks` to enable it.

    Args:
        console_level (int, optional):
            Logging level for the console handler. Defaults to `logging.INFO`.
        disable_console (bool, optional):
            If True, no console handler is set up. Defaults to False.
        file_path (Path | str | None, optional):
            If provided, sets up file logging to the specified path. Defaults to None, which
            means no file logging will be set up.
        file_level (int, optional):
            Logging level for the file handler. Defaults to `logging.INFO`.
        traceback (bool, optional):
            If True, rich tracebacks are included in the console output. Defaults to False.
        use_rich (bool, optional):
            If True, the console handler is rendered with Rich (`sequencer[rich]`).
            Defaults to False.
    """

    def __init__(
        self,
        console_level: int = logging.INFO,
        disable_console: bool = False,
        file_path: Path | str | None = None,
        file_level: int = logging.INFO,
        traceback: bool = False,
        use_rich: bool = False,
    ):
        file_path = Path(file_path) if file_path else None

        if not disable_console:
            setup_console_logging(level=console_level, traceback=traceback, use_rich=use_rich)

        if file_path:
            setup_file_logging(file_path, level=file_level)

    @hook_impl
    def after_call_enqueue(self, invocation: Invocation, runtime: str, ahead: int) -> None:
        """Hook that is called once a call has been queued."""
        logger = bind_call_logger(invocation.call_id)
        if ahead:
            logger.debug(f"Queued on '{runtime}' sequencer behind {ahead} pending call(s)")
        else:
            logger.debug(f"Queued on '{runtime}' sequencer with no pending calls")

    @hook_impl
    def before_call_run(self, invocation: Invocation, runtime: str) -> None:
        """Hook that is called before the operation runs for a call."""
        logger = bind_call_logger(invocation.call_id)
        waited = format_duration(invocation.enqueued_at, invocation.started_at)
        logger.info(f"Beginning call after waiting {waited}")

    @hook_impl
    def after_call_run(
        self,
        invocation: Invocation,
        runtime: str,
        error: BaseException | None,
    ) -> None:
        """Hook that is called after the operation settles for a call."""
        logger = bind_call_logger(invocation.call_id)
        duration = format_duration(invocation.started_at, invocation.finished_at)
        if error:
            logger.error(f"Call failed after {duration} with error: {error!r}")
        else:
            logger.info(f"Finished call in {duration} [OK]")
