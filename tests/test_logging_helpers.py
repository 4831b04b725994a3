"""Tests for logging integration."""

import json
import logging

import pytest
from loguru import logger as loguru_logger

from otel_decorator.logging_helpers import (
    JsonTraceContextFormatter,
    TraceContextFormatter,
    current_request_id,
    inject_trace_context,
    request_context,
)
from otel_decorator.logging_helpers.integrations import restore_record_factory


@pytest.fixture
def trace_context():
    inject_trace_context()
    yield
    restore_record_factory()


def make_record(message="hello"):
    return logging.getLogger("tests").makeRecord(
        "tests", logging.INFO, __file__, 1, message, (), None
    )


def test_request_context_sets_and_resets():
    assert current_request_id() is None

    with request_context("req-1") as request_id:
        assert request_id == "req-1"
        assert current_request_id() == "req-1"

    assert current_request_id() is None


def test_request_context_reaches_loguru():
    messages = []
    handler_id = loguru_logger.add(messages.append, format="{extra[request_id]} {message}")
    try:
        with request_context("req-7"):
            loguru_logger.info("processing")
    finally:
        loguru_logger.remove(handler_id)

    assert messages[0].startswith("req-7 processing")


def test_records_carry_trace_ids_inside_a_span(trace_context, tracer):
    with tracer.start_as_current_span("work") as span:
        record = make_record()

    assert record.trace_id == format(span.get_span_context().trace_id, "032x")
    assert record.span_id == format(span.get_span_context().span_id, "016x")


def test_records_outside_a_span(trace_context):
    record = make_record()

    assert record.trace_id == "N/A"
    assert record.request_id is None


def test_text_formatter_tolerates_plain_records():
    output = TraceContextFormatter().format(make_record())

    assert "hello" in output
    assert "trace_id=N/A" in output


def test_json_formatter(trace_context):
    with request_context("req-9"):
        record = make_record("payload")

    data = json.loads(JsonTraceContextFormatter().format(record))

    assert data["message"] == "payload"
    assert data["request_id"] == "req-9"
    assert data["trace_id"] == "N/A"
    assert data["level"] == "INFO"
