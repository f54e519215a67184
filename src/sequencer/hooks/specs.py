"""
Contains the specifications for all callable hooks of a sequencer.

For more information, please see https://pluggy.readthedocs.io/en/stable/#specs
"""

from typing import TYPE_CHECKING

from .markers import hook_spec

if TYPE_CHECKING:
    from sequencer.invocation import Invocation
else:
    Invocation = object


class CallSpec:
    """Specifies the hooks related to calls issued through a sequencer."""

    @hook_spec
    def after_call_enqueue(self, invocation: Invocation, runtime: str, ahead: int) -> None:
        """
        Hook called once a call has joined the chain, before its execution is scheduled.

        Args:
            invocation (sequencer.invocation.Invocation): Details about the call.
            runtime (str): Type of the sequencer runtime that received the call.
            ahead (int): Number of unsettled calls the new call has to wait behind.
        """
        ...

    @hook_spec
    def before_call_run(self, invocation: Invocation, runtime: str) -> None:
        """
        Hook called when a call reaches the head of the chain, before the operation runs.

        Args:
            invocation (sequencer.invocation.Invocation): Details about the call.
            runtime (str): Type of the sequencer runtime executing the call.
        """
        ...

    @hook_spec
    def after_call_run(
        self,
        invocation: Invocation,
        runtime: str,
        error: BaseException | None,
        result: object | None,
    ) -> None:
        """
        Hook called after the operation settles, before the caller is notified.

        Args:
            invocation (sequencer.invocation.Invocation): Details about the call.
            runtime (str): Type of the sequencer runtime executing the call.
            error (BaseException, optional): Exception raised by the operation, if any.
            result (Any): The value produced by the operation.
        """
        ...
