# =============================================================================
# tests/unit/test_errors_and_logging.py
# Unit Tests for the Exception Hierarchy, Task Callbacks and Logging Setup
# =============================================================================

import asyncio
import logging

import pytest

from gymtrack_core.errors import (
    CacheError,
    ConfigurationError,
    GymTrackError,
    RemoteBackendError,
    SessionStateError,
    log_task_failure,
)
from gymtrack_core.logging import LogContext, get_logger, setup_logging


class TestExceptionHierarchy:
    """Test codes and serialization"""

    @pytest.mark.parametrize("error,code", [
        (CacheError("x"), "CACHE_001"),
        (RemoteBackendError("x"), "REMOTE_001"),
        (ConfigurationError("x"), "CONFIG_001"),
        (SessionStateError("x"), "STATE_001"),
    ])
    def test_codes(self, error, code):
        assert isinstance(error, GymTrackError)
        assert error.code == code

    def test_configuration_error_not_recoverable_by_default(self):
        assert ConfigurationError("missing key").recoverable is False

    def test_configuration_error_recoverable_override(self):
        error = ConfigurationError("optional section missing", config_key="firebase", recoverable=True)

        assert error.recoverable is True
        assert error.details["config_key"] == "firebase"

    def test_to_dict(self):
        error = RemoteBackendError("timeout", backend="supabase", operation="list")
        data = error.to_dict()

        assert data["error_type"] == "RemoteBackendError"
        assert data["message"] == "timeout"
        assert data["details"]["backend"] == "supabase"
        assert data["recoverable"] is True


class TestLogTaskFailure:
    """Test the done-callback for background writes"""

    async def test_failure_is_logged(self, caplog):
        async def failing():
            raise ConnectionError("socket closed")

        task = asyncio.get_running_loop().create_task(failing(), name="upsert-goals")
        await asyncio.wait([task])

        with caplog.at_level(logging.WARNING, logger="gymtrack_core"):
            log_task_failure(task)

        assert "upsert-goals failed: socket closed" in caplog.text

    async def test_cancelled_task_is_quiet(self, caplog):
        task = asyncio.get_running_loop().create_task(asyncio.sleep(10))
        task.cancel()
        await asyncio.wait([task])

        with caplog.at_level(logging.WARNING, logger="gymtrack_core"):
            log_task_failure(task)

        assert "failed" not in caplog.text


class TestLogContext:
    """Test operation timing"""

    def test_success_logged(self, caplog):
        logger = get_logger("gymtrack_core.test")
        with caplog.at_level(logging.INFO, logger="gymtrack_core"):
            with LogContext(logger, "Hydrating"):
                pass

        assert "Hydrating... started" in caplog.text
        assert "Hydrating... completed" in caplog.text

    def test_failure_not_suppressed(self, caplog):
        logger = get_logger("gymtrack_core.test")
        with caplog.at_level(logging.INFO, logger="gymtrack_core"):
            with pytest.raises(ValueError):
                with LogContext(logger, "Hydrating"):
                    raise ValueError("bad json")

        assert "Hydrating... failed" in caplog.text


class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def restore_root(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        for handler in root.handlers:
            if handler not in handlers:
                handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_file_handler(self, tmp_path):
        setup_logging(level=logging.DEBUG, log_to_file=True, log_filename="app.log", log_dir=tmp_path)

        assert (tmp_path / "app.log").exists()
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING
