"""Tests for settings and logging setup."""

import json
import logging

import pytest

from picfetch.config import FetcherSettings
from picfetch.logging_config import configure_logging


class TestFetcherSettings:
    def test_defaults(self, monkeypatch):
        """Defaults match the service's documented behavior."""
        monkeypatch.delenv("PORT", raising=False)
        s = FetcherSettings()

        assert s.port == 8000
        assert s.timeout == 30.0
        assert s.idle_connections == 2
        assert s.idle_window == 0.5
        assert s.max_concurrent_pages is None
        assert s.verify_image_bytes is False
        assert s.cache_max_age == 3600
        assert "Chrome/" in s.user_agent

    def test_env_prefix(self, monkeypatch):
        """Settings are read from PICFETCH_ variables."""
        monkeypatch.setenv("PICFETCH_TIMEOUT", "5")
        monkeypatch.setenv("PICFETCH_MAX_CONCURRENT_PAGES", "4")

        s = FetcherSettings()

        assert s.timeout == 5.0
        assert s.max_concurrent_pages == 4

    def test_plain_port_variable(self, monkeypatch):
        """The conventional PORT variable is honored."""
        monkeypatch.delenv("PICFETCH_PORT", raising=False)
        monkeypatch.setenv("PORT", "9123")

        assert FetcherSettings().port == 9123


@pytest.fixture(autouse=True)
def reset_picfetch_logger():
    yield
    logger = logging.getLogger("picfetch")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


class TestConfigureLogging:
    def test_writes_combined_and_error_logs(self, tmp_path):
        """Everything goes to combined.log, errors also to error.log."""
        logger = configure_logging("INFO", tmp_path)
        child = logging.getLogger("picfetch.core.fetcher")

        child.info("downloaded something")
        child.error("failed something")
        for handler in logger.handlers:
            handler.flush()

        combined = (tmp_path / "combined.log").read_text()
        errors = (tmp_path / "error.log").read_text()
        assert "downloaded something" in combined
        assert "failed something" in combined
        assert "downloaded something" not in errors
        assert "failed something" in errors

    def test_log_files_are_json_lines(self, tmp_path):
        """Each file line is a JSON object with timestamp, level, logger and message."""
        logger = configure_logging("INFO", tmp_path)
        logging.getLogger("picfetch.api").error("download failed for %s", "https://example.com/a.png")
        for handler in logger.handlers:
            handler.flush()

        lines = (tmp_path / "error.log").read_text().splitlines()
        assert len(lines) == 1
        record = json.loads(lines[0])
        assert record["event"] == "download failed for https://example.com/a.png"
        assert record["level"] == "error"
        assert record["logger"] == "picfetch.api"
        assert "timestamp" in record

    def test_reconfigure_replaces_handlers(self, tmp_path):
        """Calling twice does not duplicate handlers."""
        configure_logging("INFO", tmp_path)
        logger = configure_logging("DEBUG", None)

        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG
