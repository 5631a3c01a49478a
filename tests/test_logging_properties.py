"""Property-based tests for logging functionality.

This module tests that sync log entries contain the fields needed for
monitoring: timestamp, severity level, event name and context.
"""

import json
import logging
from datetime import datetime

import pytest
import structlog
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from recordsync.models.config import LoggingConfig
from recordsync.utils.logging_config import (
    configure_logging,
    configure_logging_from_config,
    get_logger,
    sync_run_context,
)


@pytest.fixture(autouse=True)
def restore_structlog():
    yield
    structlog.reset_defaults()


def last_json_entry(caplog: pytest.LogCaptureFixture) -> dict:
    assert caplog.records, "No log records captured"
    message = caplog.records[-1].getMessage()
    try:
        return json.loads(message)
    except json.JSONDecodeError as e:
        raise AssertionError(f"Log output is not valid JSON: {message}") from e


@given(
    log_level=st.sampled_from(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    error_message=st.text(min_size=1, max_size=200),
)
@settings(max_examples=50, suppress_health_check=[HealthCheck.function_scoped_fixture])
def test_log_entries_contain_required_fields(
    caplog: pytest.LogCaptureFixture,
    log_level: str,
    error_message: str,
) -> None:
    """
    For any logged event, the JSON entry contains timestamp, level, event
    name and the error context.
    """
    caplog.clear()
    caplog.set_level(logging.DEBUG)
    configure_logging(log_level="DEBUG", json_logs=True)

    log = get_logger("test_logger")
    getattr(log, log_level.lower())("sync_page_failed", error=error_message)

    entry = last_json_entry(caplog)

    assert "timestamp" in entry
    datetime.fromisoformat(entry["timestamp"].replace("Z", "+00:00"))
    assert entry["level"].upper() == log_level
    assert entry["event"] == "sync_page_failed"
    assert entry["error"] == error_message
    assert entry["logger"] == "test_logger"


def test_log_entries_include_callsite(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)
    configure_logging(log_level="INFO", json_logs=True)

    get_logger("test_logger").info("page_synced", page_index=0, record_count=2)

    entry = last_json_entry(caplog)
    assert entry["page_index"] == 0
    assert entry["record_count"] == 2
    assert entry["filename"] == "test_logging_properties.py"
    assert entry["func_name"] == "test_log_entries_include_callsite"


def test_configure_from_config_writes_log_file(tmp_path, caplog: pytest.LogCaptureFixture) -> None:
    log_file = tmp_path / "sync.log"
    caplog.set_level(logging.INFO)

    configure_logging_from_config(
        LoggingConfig(log_level="INFO", json_logs=True, log_file=str(log_file))
    )
    try:
        get_logger("test_logger").info("sync_run_completed", deliveries=3)
    finally:
        for handler in list(logging.root.handlers):
            if getattr(handler, "baseFilename", None) == str(log_file):
                logging.root.removeHandler(handler)
                handler.close()

    lines = log_file.read_text().strip().splitlines()
    assert json.loads(lines[-1])["deliveries"] == 3


def test_run_context_is_bound_to_events_inside_block(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO)
    configure_logging(log_level="INFO", json_logs=True)
    log = get_logger("test_logger")

    with sync_run_context(run_id="run-abc", page_size=2) as run_id:
        log.info("page_synced", page_index=0)
        inside = last_json_entry(caplog)
    log.info("sync_run_completed")
    after = last_json_entry(caplog)

    assert run_id == "run-abc"
    assert inside["run_id"] == "run-abc"
    assert inside["page_size"] == 2
    assert "run_id" not in after
    assert "page_size" not in after


def test_run_context_generates_distinct_run_ids() -> None:
    with sync_run_context() as first:
        assert structlog.contextvars.get_contextvars()["run_id"] == first
    with sync_run_context() as second:
        pass

    assert first
    assert first != second
