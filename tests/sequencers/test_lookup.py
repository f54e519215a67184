"""Tests for sequencer discovery and the `sequence` decorator."""

import asyncio
from functools import partial

import pytest

from sequencer import sequence
from sequencer.exceptions import InvalidRuntimeError
from sequencer.sequencers import get_sequencer_type
from sequencer.sequencers.asyncio import AsyncioSequencer
from sequencer.sequencers.threading import ThreadingSequencer


class CustomSequencer(ThreadingSequencer):
    type = "custom"


class TestSequencerDiscovery:
    """Test sequencer lookup by runtime type."""

    @pytest.mark.parametrize(
        "type_str, expected_cls",
        [
            ("threading", ThreadingSequencer),
            ("asyncio", AsyncioSequencer),
            ("custom", CustomSequencer),
        ],
    )
    def test_get_sequencer_type_by_string(self, type_str, expected_cls):
        """Test getting sequencer classes by their type string."""
        assert get_sequencer_type(type_str) is expected_cls
        assert expected_cls.type == type_str

    def test_get_sequencer_type_by_class(self):
        """Test that passing a sequencer class returns the same class."""
        assert get_sequencer_type(CustomSequencer) is CustomSequencer

    def test_get_sequencer_type_invalid_type(self):
        """Test that unknown runtimes raise an InvalidRuntimeError."""
        with pytest.raises(InvalidRuntimeError, match="nonexistent"):
            get_sequencer_type("nonexistent")

    def test_invalid_runtime_is_value_error(self):
        """Test that InvalidRuntimeError can be handled as a ValueError."""
        with pytest.raises(ValueError):
            get_sequencer_type("nonexistent")


class TestSequenceDecorator:
    """Test the `sequence` decorator and factory."""

    def test_plain_function_defaults_to_threading(self):
        """Test that plain callables get the threading runtime."""

        def greet(name):
            return f"hello, {name}"

        sequencer = sequence(greet)
        try:
            assert isinstance(sequencer, ThreadingSequencer)
            assert sequencer("A").result(timeout=5) == "hello, A"
        finally:
            sequencer.close()

    def test_coroutine_function_defaults_to_asyncio(self):
        """Test that coroutine functions get the asyncio runtime."""

        @sequence
        async def greet(name):
            await asyncio.sleep(0)
            return f"hello, {name}"

        async def main():
            return await asyncio.gather(greet("A"), greet("B"))

        assert isinstance(greet, AsyncioSequencer)
        assert asyncio.run(main()) == ["hello, A", "hello, B"]

    def test_partial_of_coroutine_function_defaults_to_asyncio(self):
        """Test runtime detection through `functools.partial`."""

        async def greet(greeting, name):
            return f"{greeting}, {name}"

        assert isinstance(sequence(partial(greet, "hi")), AsyncioSequencer)

    def test_explicit_runtime(self):
        """Test overriding the runtime for a coroutine function."""

        @sequence(runtime="threading", name="threaded")
        async def greet(name):
            return f"hello, {name}"

        try:
            assert isinstance(greet, ThreadingSequencer)
            assert greet.name == "threaded"
            assert greet("A").result(timeout=5) == "hello, A"
        finally:
            greet.close()

    def test_explicit_runtime_class(self):
        """Test passing a sequencer class as runtime."""
        sequencer = sequence(lambda: None, runtime=CustomSequencer)
        try:
            assert type(sequencer) is CustomSequencer
        finally:
            sequencer.close()

    def test_unknown_runtime_raises(self):
        """Test that unknown runtimes are rejected when decorating."""
        with pytest.raises(InvalidRuntimeError):
            sequence(lambda: None, runtime="nonexistent")

    def test_wrapper_metadata(self):
        """Test that the sequencer carries the metadata of the wrapped function."""

        async def greet(name):
            """Greet someone."""
            return name

        sequencer = sequence(greet)

        assert sequencer.__name__ == "greet"
        assert sequencer.__doc__ == "Greet someone."
        assert sequencer.__wrapped__ is greet
        assert sequencer.name.endswith("greet")

    def test_sequencers_are_independent(self):
        """Test that decorating twice yields independent sequencers."""

        async def greet(name):
            return name

        first, second = sequence(greet), sequence(greet)

        async def main():
            return await first("a"), await second("b"), first.pending, second.pending

        assert first is not second
        assert asyncio.run(main()) == ("a", "b", 0, 0)

    def test_callable_object_attributes_are_not_copied(self):
        """Test that attributes of a callable object never overwrite the sequencer's state."""

        class Device:
            def __init__(self):
                self._operation = "reset"
                self._closed = True
                self.logger = None

            def __call__(self, chunk):
                return f"wrote {chunk}"

        device = Device()
        sequencer = sequence(device)
        try:
            assert sequencer.operation is device
            assert not sequencer.is_closed
            assert sequencer("A").result(timeout=5) == "wrote A"
            assert sequencer.__wrapped__ is device
        finally:
            sequencer.close()
