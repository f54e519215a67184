import logging

import pytest

from sequencer.exceptions import MissingContextError
from sequencer.logging import EnhancedLoggerAdapter
from sequencer.logging import bind_call_logger
from sequencer.logging import get_call_logger
from sequencer.logging import get_logger
from sequencer.logging import setup_console_logging
from sequencer.logging import setup_file_logging
from sequencer.sequencers.threading import ThreadingSequencer


@pytest.fixture
def restore_loggers():
    """Restore handlers, levels and propagation of the sequencer loggers after a test."""
    names = ("sequencer", "sequencer.call")
    saved = {
        name: (list(logger.handlers), logger.level, logger.propagate)
        for name in names
        for logger in [logging.getLogger(name)]
    }
    yield
    for name, (handlers, level, propagate) in saved.items():
        logger = logging.getLogger(name)
        for handler in logger.handlers:
            if handler not in handlers:
                handler.close()
        logger.handlers = handlers
        logger.setLevel(level)
        logger.propagate = propagate


class TestGetLogger:
    def test_get_logger_default(self) -> None:
        """Test getting the default logger."""
        logger = get_logger()
        assert isinstance(logger, logging.Logger)
        assert logger.name == "sequencer"

    def test_get_logger_with_explicit_name(self) -> None:
        """Test getting a logger with an explicit name."""
        logger = get_logger("sequencer.test_logger")
        assert logger.name == "sequencer.test_logger"

    def test_get_logger_with_implicit_name(self) -> None:
        """Test getting a logger with an implicit name."""
        logger = get_logger("test_logger")
        assert logger.name == "sequencer.test_logger"

    def test_sequencer_logger_name(self) -> None:
        """Test that each sequencer logs under its runtime and name."""
        with ThreadingSequencer(lambda: None, name="greeter") as sequencer:
            assert sequencer.logger.name == "sequencer.threading.greeter"


class TestCallLogger:
    def test_get_call_logger_with_default(self) -> None:
        """Test getting the call logger with no active invocation but with a default."""
        logger = get_call_logger(default="sequencer.test_default_logger")
        assert isinstance(logger, logging.Logger)
        assert logger.name == "sequencer.test_default_logger"

    def test_get_call_logger_without_context_or_default_raises(self) -> None:
        """Test getting the call logger outside of a call without a default."""
        with pytest.raises(MissingContextError):
            get_call_logger()

    def test_get_call_logger_inside_operation(self) -> None:
        """Test that the call logger is bound to the executing call."""

        def operation():
            return get_call_logger().extra  # type: ignore[attr-defined]

        with ThreadingSequencer(operation, name="op") as sequencer:
            sequencer()
            assert sequencer().result(timeout=5) == {"call_id": "op-2"}

    def test_bind_call_logger_merges_extra(self) -> None:
        """Test that per-record extras are merged with the bound call identifier."""
        logger = bind_call_logger("op-1")
        assert isinstance(logger, EnhancedLoggerAdapter)
        _, kwargs = logger.process("message", {"extra": {"attempt": 2}})
        assert kwargs["extra"] == {"call_id": "op-1", "attempt": 2}


class TestSetupLogging:
    def test_setup_console_logging(self, restore_loggers, capsys) -> None:
        """Test console handlers are attached once and records are formatted."""
        setup_console_logging(level=logging.DEBUG)
        setup_console_logging(level=logging.DEBUG)

        logger = logging.getLogger("sequencer.call")
        console_handlers = [h for h in logger.handlers if h.name == "sequencer.call - console"]
        assert len(console_handlers) == 1
        assert logger.propagate is False

        bind_call_logger("op-7").info("hello")
        assert "Call 'op-7' - hello" in capsys.readouterr().out

    def test_setup_file_logging(self, restore_loggers, tmp_path) -> None:
        """Test that file logging creates the file and writes formatted records."""
        log_file = tmp_path / "logs" / "sequencer.log"
        setup_file_logging(log_file, level=logging.INFO)

        assert log_file.exists()
        bind_call_logger("op-1").warning("something happened")
        get_logger().info("library message")

        content = log_file.read_text(encoding="utf-8")
        assert "sequencer.call 'op-1' - something happened" in content
        assert "| INFO    | sequencer - library message" in content

    def test_setup_file_logging_with_extra_loggers(self, restore_loggers, tmp_path) -> None:
        """Test configuring additional loggers."""
        setup_file_logging(tmp_path / "app.log", level=logging.ERROR, loggers=["my_app"])
        try:
            assert logging.getLogger("my_app").level == logging.ERROR
            assert logging.getLogger("my_app").propagate is False
        finally:
            logging.getLogger("my_app").propagate = True
            logging.getLogger("my_app").setLevel(logging.NOTSET)
