"""Tests for the structlog-based logging setup."""

from __future__ import annotations

import json
import logging
import os
import warnings
from io import StringIO
from unittest.mock import patch

import structlog

from pipedrive_tasks.utils.logging import (
    LogContext,
    _get_log_renderer,
    _is_local_environment,
    add_log_context,
    clear_log_context,
    configure_logging,
    get_logger,
)


class TestEnvironmentDetection:
    """Test environment-based configuration."""

    def test_is_local_environment(self):
        with patch.dict(os.environ, {"PIPEDRIVE_TASKS_ENVIRONMENT": "local"}):
            assert _is_local_environment() is True

        with patch.dict(os.environ, {"PIPEDRIVE_TASKS_ENVIRONMENT": "production"}):
            assert _is_local_environment() is False

    def test_renderer_follows_environment(self):
        with patch.dict(os.environ, {"PIPEDRIVE_TASKS_ENVIRONMENT": "local", "LOG_RENDERER": ""}):
            assert isinstance(_get_log_renderer(), structlog.dev.ConsoleRenderer)

        with patch.dict(os.environ, {"PIPEDRIVE_TASKS_ENVIRONMENT": "prod", "LOG_RENDERER": ""}):
            assert isinstance(_get_log_renderer(), structlog.processors.JSONRenderer)

    def test_console_renderer_builds_without_deprecation_warnings(self):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            with patch.dict(os.environ, {"LOG_RENDERER": "console"}):
                assert isinstance(_get_log_renderer(), structlog.dev.ConsoleRenderer)

    def test_renderer_override(self):
        env = {"PIPEDRIVE_TASKS_ENVIRONMENT": "local", "LOG_RENDERER": "json"}
        with patch.dict(os.environ, env):
            assert isinstance(_get_log_renderer(), structlog.processors.JSONRenderer)

        env = {"PIPEDRIVE_TASKS_ENVIRONMENT": "prod", "LOG_RENDERER": "console"}
        with patch.dict(os.environ, env):
            assert isinstance(_get_log_renderer(), structlog.dev.ConsoleRenderer)


def test_httpx_request_logging_is_capped():
    """httpx puts the full URL, api_token included, in its INFO lines."""
    with patch.dict(os.environ, {"LOG_LEVEL": "DEBUG"}):
        configure_logging()

    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("httpcore").level == logging.WARNING
    configure_logging()


@patch("pipedrive_tasks.utils.logging._is_local_environment", return_value=False)
class TestLogOutput:
    """Test actual JSON log output."""

    def setup_method(self):
        clear_log_context()
        self.log_stream = StringIO()
        self.handler = logging.StreamHandler(self.log_stream)

    def teardown_method(self):
        clear_log_context()
        logging.getLogger().removeHandler(self.handler)

    def _capture_json_logs(self):
        with patch.dict(os.environ, {"LOG_RENDERER": ""}):
            configure_logging()

        # Keep the ProcessorFormatter, swap the stream
        root_logger = logging.getLogger()
        self.handler.setFormatter(root_logger.handlers[0].formatter)
        root_logger.handlers.clear()
        root_logger.addHandler(self.handler)

    def _logged(self) -> list[dict]:
        lines = self.log_stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line.strip()]

    def test_context_appears_in_json_logs(self, _):
        self._capture_json_logs()

        add_log_context(step_id="create_person")
        get_logger(__name__).info("Creating person", name="Jane Doe")

        [log_data] = self._logged()
        assert log_data["step_id"] == "create_person"
        assert log_data["name"] == "Jane Doe"
        assert log_data["message"] == "Creating person"

    def test_log_context_manager_is_scoped(self, _):
        self._capture_json_logs()
        logger = get_logger(__name__)

        with LogContext(task_type="pipedrive.deals.Update"):
            logger.info("Inside")
        logger.info("After")

        inside, after = self._logged()
        assert inside["task_type"] == "pipedrive.deals.Update"
        assert "task_type" not in after

    def test_log_context_cleaned_up_after_exception(self, _):
        self._capture_json_logs()
        logger = get_logger(__name__)

        try:
            with LogContext(task_type="pipedrive.notes.Add"):
                raise ValueError("boom")
        except ValueError:
            pass
        logger.info("After exception")

        [log_data] = self._logged()
        assert "task_type" not in log_data

    def test_clear_log_context(self, _):
        self._capture_json_logs()
        logger = get_logger(__name__)

        add_log_context(step_file="step.json")
        logger.info("First")
        clear_log_context()
        logger.info("Second")

        first, second = self._logged()
        assert first["step_file"] == "step.json"
        assert "step_file" not in second

    def test_stdlib_loggers_route_through_structlog(self, _):
        self._capture_json_logs()

        with LogContext(step_id="s2"):
            logging.getLogger("some.library").warning("Library warning")

        [log_data] = self._logged()
        assert log_data["message"] == "Library warning"
        assert log_data["step_id"] == "s2"
        assert log_data["level"] == "warning"
