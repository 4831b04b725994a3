"""
Created on: 2026-09-12

Logging setup for applications using otel_decorator.

Standard logging gets trace context on every record and an optional
console handler; loguru output can be bridged into standard logging so
both end up with the same handlers and formatters.
"""

import logging
import sys
from typing import Dict, List, Optional

from loguru import logger as loguru_logger
from opentelemetry.trace import get_current_span

from otel_decorator.logging_helpers.context import current_request_id
from otel_decorator.logging_helpers.formatters import JsonTraceContextFormatter, TraceContextFormatter

_original_factory = logging.getLogRecordFactory()
_loguru_handler_id: Optional[int] = None


class InterceptHandler(logging.Handler):
    """
    Loguru sink forwarding records to the standard logger of the same name.
    """
    def emit(self, record):
        if not getattr(record, "_intercepted", False):
            record._intercepted = True
            logging.getLogger(record.name).handle(record)


def inject_trace_context() -> None:
    """
    Add ``trace_id``, ``span_id`` and ``request_id`` to every stdlib log record.
    """
    def trace_context_factory(*args, **kwargs):
        record = _original_factory(*args, **kwargs)
        ctx = get_current_span().get_span_context()
        record.trace_id = format(ctx.trace_id, "032x") if ctx.is_valid else "N/A"
        record.span_id = format(ctx.span_id, "016x") if ctx.is_valid else "N/A"
        record.request_id = current_request_id()
        return record

    logging.setLogRecordFactory(trace_context_factory)


def restore_record_factory() -> None:
    logging.setLogRecordFactory(_original_factory)


def bridge_loguru_to_std_logging(level: str = "DEBUG") -> int:
    """
    Forward loguru messages to standard logging.

    Existing loguru sinks are left alone. Calling this twice does not add
    a second bridge.

    Returns:
        int: The loguru handler id of the bridge
    """
    global _loguru_handler_id
    if _loguru_handler_id is None:
        _loguru_handler_id = loguru_logger.add(InterceptHandler(), level=level, format="{message}")
    return _loguru_handler_id


def setup_logging(
    level: str = "INFO",
    format_string: Optional[str] = None,
    json_format: bool = False,
    add_trace_context: bool = True,
    loggers: Optional[List[str]] = None,
    ensure_console_output: bool = True,
    enable_loguru: bool = False
) -> Dict[str, logging.Logger]:
    """
    Set up logging with OpenTelemetry trace context integration.

    Existing handlers are never removed.

    Args:
        level: Logging level name
        format_string: Format for the text formatter
        json_format: Emit JSON lines instead of text
        add_trace_context: Add trace and span ids to every record
        loggers: Additional logger names to set the level on
        ensure_console_output: Add a console handler if the root logger has none
        enable_loguru: Bridge loguru output into standard logging

    Returns:
        dict: Configured loggers keyed by name ("" is the root logger)
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    has_console_handler = any(
        isinstance(h, logging.StreamHandler) and
        getattr(h, 'stream', None) in (sys.stdout, sys.stderr)
        for h in root_logger.handlers
    )

    if ensure_console_output and not has_console_handler:
        if json_format:
            formatter = JsonTraceContextFormatter()
        else:
            formatter = TraceContextFormatter(fmt=format_string)

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(formatter)
        console_handler.setLevel(numeric_level)
        root_logger.addHandler(console_handler)

    configured_loggers = {"": root_logger}
    for logger_name in loggers or []:
        logger_instance = logging.getLogger(logger_name)
        logger_instance.setLevel(numeric_level)
        logger_instance.propagate = True
        configured_loggers[logger_name] = logger_instance

    if add_trace_context:
        inject_trace_context()

    if enable_loguru:
        bridge_loguru_to_std_logging()

    return configured_loggers
