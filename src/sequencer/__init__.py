"""Sequencer: serialize concurrent calls to an operation, one at a time and in order."""

from sequencer import futures
from sequencer.context import get_current_invocation
from sequencer.futures import CallFuture
from sequencer.hooks import initialize_hooks as _initialize_hooks
from sequencer.hooks import register_hooks
from sequencer.logging import get_call_logger
from sequencer.sequencers.asyncio import AsyncioSequencer
from sequencer.sequencers.base import BaseSequencer
from sequencer.sequencers.threading import ThreadingSequencer
from sequencer.wrappers import sequence

__version__ = "0.1.0"

# NOTE: Must call first in order to establish an initial hook context.
_initialize_hooks()

__all__ = [
    "AsyncioSequencer",
    "BaseSequencer",
    "CallFuture",
    "ThreadingSequencer",
    "futures",
    "get_call_logger",
    "get_current_invocation",
    "register_hooks",
    "sequence",
]
