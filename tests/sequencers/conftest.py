import pytest

from .recorders import AsyncRecorder
from .recorders import Recorder


@pytest.fixture
def recorder():
    """Synchronous instrumented operation without delay."""
    return Recorder()


@pytest.fixture
def async_recorder():
    """Asynchronous instrumented operation without delay."""
    return AsyncRecorder()
