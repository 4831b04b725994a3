"""
otel_decorator: OpenTelemetry spans for Python functions.

Usage:
    from otel_decorator import bind, with_span

    @with_span("orders.find", include=["id", ["user", "name"], "result"])
    def find(id):
        user = load_user(id)
        bind(user=user)
        return ("ok", user)
"""

from otel_decorator.bootstrap import bootstrap
from otel_decorator.core import (
    ConfigError,
    SpanInstrumentor,
    bind,
    get_tracer,
    init_tracing,
    set_tracer,
    simple_trace,
    trace,
    with_span,
)
from otel_decorator.logging_helpers.context import request_context

__version__ = "0.1.0"

__all__ = [
    'ConfigError',
    'SpanInstrumentor',
    'bind',
    'bootstrap',
    'get_tracer',
    'init_tracing',
    'request_context',
    'set_tracer',
    'simple_trace',
    'trace',
    'with_span',
]
