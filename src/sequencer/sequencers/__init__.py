from __future__ import annotations

from typing import TYPE_CHECKING

from sequencer.sequencers.base import DefaultRuntime
from sequencer.sequencers.base import DefaultRuntimes

if TYPE_CHECKING:
    from sequencer.sequencers.base import BaseSequencer
else:
    BaseSequencer = object


def get_sequencer_type(type_: DefaultRuntime | str | type[BaseSequencer]) -> type[BaseSequencer]:
    """Look up a sequencer class based on its runtime type attribute."""
    # NOTE: We must import the sequencers here in order for them to be discovered.
    from sequencer.exceptions import InvalidRuntimeError
    from sequencer.sequencers.asyncio import AsyncioSequencer  # noqa: F401
    from sequencer.sequencers.base import BaseSequencer
    from sequencer.sequencers.threading import ThreadingSequencer  # noqa: F401
    from sequencer.utils.subclasses import get_subclass

    if isinstance(type_, type) and issubclass(type_, BaseSequencer):
        return type_

    try:
        return get_subclass(BaseSequencer, lambda x: getattr(x, "type", None) == type_)
    except TypeError:
        raise InvalidRuntimeError(
            f"Unknown sequencer runtime {type_!r}, expected one of {DefaultRuntimes}."
        ) from None


__all__ = [
    "DefaultRuntime",
    "DefaultRuntimes",
    "get_sequencer_type",
]
