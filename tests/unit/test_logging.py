"""Tests for logging configuration."""

import logging

import structlog

from video_studio.core.logging import (
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    open_run_log,
)


class TestLoggingConfiguration:
    """Tests for logging setup."""

    def test_configure_logging_writes_run_file(self, tmp_path):
        """configure_logging() creates one log file per run and returns it."""
        log_file = configure_logging(logs_dir=tmp_path)

        assert log_file.exists()
        assert list(tmp_path.glob("studio_*.log")) == [log_file]

    def test_configure_logging_culls_old_runs(self, tmp_path):
        """Only the most recent runs are kept."""
        for i in range(6):
            (tmp_path / f"studio_2020010{i}_000000.log").write_text("")

        configure_logging(logs_dir=tmp_path, log_runs_to_keep=3)

        remaining = sorted(p.name for p in tmp_path.glob("studio_*.log"))
        assert len(remaining) == 3
        # The two newest old runs survive next to the new one
        assert remaining[:2] == [
            "studio_20200104_000000.log",
            "studio_20200105_000000.log",
        ]

    def test_level_applies_to_root_logger(self, tmp_path):
        configure_logging(logs_dir=tmp_path, level="warning")

        assert logging.getLogger().level == logging.WARNING

        configure_logging(logs_dir=tmp_path)
        assert logging.getLogger().level == logging.INFO

    def test_get_logger_returns_bound_logger(self):
        """get_logger() returns a BoundLogger (or proxy)."""
        logger = get_logger("test_module")

        assert callable(logger.info)
        assert callable(logger.error)
        assert callable(logger.debug)

    def test_logger_can_bind_context(self):
        """Logger can bind context variables."""
        logger = get_logger("test")
        bound_logger = logger.bind(turn_id="turn-123", stage="enhancing")
        bound_logger.info("test_message")


def test_open_run_log_creates_directory(tmp_path):
    logs_dir = tmp_path / "nested" / "logs"

    log_file = open_run_log(logs_dir, keep=5)

    assert logs_dir.is_dir()
    assert log_file.parent == logs_dir
    assert log_file.name.startswith("studio_")
    assert not log_file.exists()


def test_bind_and_clear_context():
    """bind_context() adds contextvars; clear_context() removes them."""
    bind_context(request_id="req-1")
    assert structlog.contextvars.get_contextvars()["request_id"] == "req-1"

    clear_context()
    assert "request_id" not in structlog.contextvars.get_contextvars()
