"""Unit tests for the structured logger."""

import io
import json
import logging

import pytest

from service_wrapper.telemetry.logger import (
    StructuredFormatter,
    get_logger,
    get_request_id,
    request_context,
    set_request_context,
    setup_logging,
)


@pytest.fixture
def stream():
    buf = io.StringIO()
    handler = setup_logging(level="DEBUG", json_output=True, stream=buf)
    yield buf
    package_logger = logging.getLogger("service_wrapper")
    package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)


class TestStructuredLogger:

    def test_json_line_with_fields(self, stream):
        get_logger("service_wrapper.test").info("queue_entry_fired", depth=2, kind="pending")
        entry = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert entry["message"] == "queue_entry_fired"
        assert entry["level"] == "INFO"
        assert entry["data"] == {"depth": 2, "kind": "pending"}

    def test_request_id_injected(self, stream):
        with request_context("1__abc123"):
            get_logger("service_wrapper.test").warning("service_validation_failed")
        entry = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert entry["request_id"] == "1__abc123"
        assert get_request_id() is None

    def test_error_with_exception(self, stream):
        try:
            raise ValueError("boom")
        except ValueError as exc:
            get_logger("service_wrapper.test").error("service_call_failed", exc=exc)
        entry = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert entry["exception"]["type"] == "ValueError"

    def test_setup_replaces_previous_handler(self, stream):
        package_logger = logging.getLogger("service_wrapper")
        before = len(package_logger.handlers)
        handler = setup_logging(json_output=True, stream=stream)
        assert len(package_logger.handlers) == before
        package_logger.removeHandler(handler)

    def test_disabled_level_is_skipped(self, stream):
        logging.getLogger("service_wrapper").setLevel(logging.WARNING)
        get_logger("service_wrapper.test").debug("queue_entry_added")
        assert stream.getvalue() == ""


class TestHumanFormat:

    def test_readable_line(self):
        record = logging.LogRecord(
            "service_wrapper.runtime.queue", logging.INFO, __file__, 10,
            "queue_entry_added", None, None,
        )
        record.depth = 1
        set_request_context(request_id="users")
        try:
            line = StructuredFormatter(json_output=False).format(record)
        finally:
            set_request_context(request_id=None)
        assert "| users |" in line
        assert line.endswith("queue_entry_added depth=1")
