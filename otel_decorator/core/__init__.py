"""
Instrumentation engine for otel_decorator.

This package provides attribute resolution, outcome classification and
the span lifecycle behind the tracing decorators.
"""

from otel_decorator.core.bindings import bind
from otel_decorator.core.instrumentation import SpanInstrumentor, simple_trace, trace, with_span
from otel_decorator.core.tracer import get_tracer, init_tracing, set_tracer
from otel_decorator.core.validator import ConfigError

__all__ = [
    'ConfigError',
    'SpanInstrumentor',
    'bind',
    'get_tracer',
    'init_tracing',
    'set_tracer',
    'simple_trace',
    'trace',
    'with_span',
]
