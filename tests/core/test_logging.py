# tests/core/test_logging.py
"""Tests for structured logging configuration."""

import json
import logging

import pytest


class TestLoggingConfig:
    """Tests for logging configuration."""

    def test_get_logger_returns_logger(self) -> None:
        """get_logger returns a bound logger."""
        from flowscribe.core.logging import get_logger

        logger = get_logger("test")
        assert hasattr(logger, "info")
        assert hasattr(logger, "bind")

    def test_json_output_goes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Generated code owns stdout; logs must not land there."""
        from flowscribe.core.logging import configure_logging, get_logger

        configure_logging(json_output=True)
        get_logger("test").info("test message", key="value")

        captured = capsys.readouterr()
        assert captured.out == ""
        data = json.loads(captured.err.strip().split("\n")[-1])
        assert data["event"] == "test message"
        assert data["key"] == "value"
        assert data["level"] == "info"
        assert "_record" not in data

    def test_console_output(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Console mode renders human-readable text."""
        from flowscribe.core.logging import configure_logging, get_logger

        configure_logging(json_output=False)
        get_logger("test").warning("route_without_start_or_end", route="/a")

        err = capsys.readouterr().err
        assert "route_without_start_or_end" in err
        assert not err.strip().startswith("{")

    def test_level_filters_debug(self, capsys: pytest.CaptureFixture[str]) -> None:
        """DEBUG events are dropped at INFO level."""
        from flowscribe.core.logging import configure_logging, get_logger

        configure_logging(json_output=True, level="INFO")
        get_logger("test").debug("hidden")

        assert "hidden" not in capsys.readouterr().err

    def test_stdlib_loggers_share_format(self, capsys: pytest.CaptureFixture[str]) -> None:
        """stdlib loggers render through the same JSON formatter."""
        from flowscribe.core.logging import configure_logging

        configure_logging(json_output=True)
        logging.getLogger("flowscribe.test").warning("plain stdlib")

        data = json.loads(capsys.readouterr().err.strip().split("\n")[-1])
        assert data["event"] == "plain stdlib"

    def test_noisy_http_loggers_silenced(self) -> None:
        """The remote engine's HTTP client stays quiet even in DEBUG mode."""
        from flowscribe.core.logging import configure_logging

        configure_logging(level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("httpcore").level == logging.WARNING

    def test_explicit_stream_and_logger_name(self) -> None:
        """Logs go to an explicit stream and carry the logger name."""
        import io

        from flowscribe.core.logging import configure_logging, get_logger

        buffer = io.StringIO()
        configure_logging(json_output=True, stream=buffer)
        get_logger("flowscribe.core.graph.paths").warning("permissive_edge_fallback", route="/")

        data = json.loads(buffer.getvalue().strip().split("\n")[-1])
        assert data["event"] == "permissive_edge_fallback"
        assert data["logger"] == "flowscribe.core.graph.paths"
        assert data["route"] == "/"
