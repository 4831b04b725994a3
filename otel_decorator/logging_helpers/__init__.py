"""
Logging integration for otel_decorator.

Trace-aware formatters, loguru bridging and the ambient request context.
"""

from otel_decorator.logging_helpers.context import current_request_id, request_context
from otel_decorator.logging_helpers.formatters import JsonTraceContextFormatter, TraceContextFormatter
from otel_decorator.logging_helpers.integrations import (
    bridge_loguru_to_std_logging,
    inject_trace_context,
    setup_logging,
)

__all__ = [
    'JsonTraceContextFormatter',
    'TraceContextFormatter',
    'bridge_loguru_to_std_logging',
    'current_request_id',
    'inject_trace_context',
    'request_context',
    'setup_logging',
]
