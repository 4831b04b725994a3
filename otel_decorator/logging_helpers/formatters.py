"""
Created on: 2026-09-12
Log formatters with trace context integration.

This module provides formatters that include OpenTelemetry trace context
and the ambient request id in log messages, in both text and JSON formats.
Records get their ``trace_id``/``span_id`` fields from
``inject_trace_context()``.
"""

import json
import logging

DEFAULT_FORMAT = (
    "%(asctime)s [%(levelname)s] %(name)s - %(message)s "
    "[trace_id=%(trace_id)s span_id=%(span_id)s]"
)


class TraceContextFormatter(logging.Formatter):
    """
    A log formatter that includes trace and span IDs in log messages.
    """
    def __init__(self, fmt=None, datefmt=None, style='%'):
        super().__init__(fmt=fmt or DEFAULT_FORMAT, datefmt=datefmt, style=style)

    def format(self, record):
        # Records created before inject_trace_context() lack the fields
        for field in ("trace_id", "span_id"):
            if not hasattr(record, field):
                setattr(record, field, "N/A")
        return super().format(record)


class JsonTraceContextFormatter(logging.Formatter):
    """
    A log formatter that outputs one JSON object per record, with trace context.
    """
    def format(self, record):
        log_data = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "trace_id": getattr(record, "trace_id", "N/A"),
            "span_id": getattr(record, "span_id", "N/A"),
        }

        request_id = getattr(record, "request_id", None)
        if request_id is not None:
            log_data["request_id"] = request_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)
