"""Tests for logging setup and latency tracking."""
import json
import logging

import pytest
import structlog
from structlog.testing import capture_logs

from docqa.logging_config import configure_logging, log_latency


@pytest.fixture
def restore_structlog():
    yield
    structlog.reset_defaults()


def test_json_format_renders_one_json_object_per_event(restore_structlog, caplog):
    configure_logging(level="INFO", fmt="json")

    with caplog.at_level(logging.INFO):
        structlog.get_logger("docqa.test").info("passages_indexed", count=3)

    record = json.loads(caplog.records[-1].getMessage())
    assert record["event"] == "passages_indexed"
    assert record["count"] == 3
    assert record["level"] == "info"
    assert "timestamp" in record


def test_sync_latency_is_logged():
    @log_latency("unit.sync")
    def add(a, b):
        return a + b

    with capture_logs() as logs:
        assert add(2, 3) == 5

    (entry,) = logs
    assert entry["event"] == "operation_completed"
    assert entry["operation"] == "unit.sync"


async def test_async_failure_is_logged_and_reraised():
    @log_latency("unit.async")
    async def boom():
        raise RuntimeError("nope")

    with capture_logs() as logs:
        with pytest.raises(RuntimeError):
            await boom()

    (entry,) = logs
    assert entry["event"] == "operation_failed"
    assert entry["error_type"] == "RuntimeError"
    assert entry["log_level"] == "error"
