"""
Thin helpers over the OpenTelemetry span API.

The instrumentation engine only talks to the tracing SDK through these
functions: starting spans with links, switching the current span,
writing attributes and statuses, and ending spans.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping

from opentelemetry import context, trace
from opentelemetry.trace import Link, Span, SpanContext, Status, StatusCode

logger = logging.getLogger(__name__)


def _as_link(value: Any):
    if isinstance(value, Link):
        return value
    if isinstance(value, Span):
        value = value.get_span_context()
    if isinstance(value, SpanContext) and value.is_valid:
        return Link(value)
    return None


def build_links(environment: Mapping[str, Any], link_sources: Iterable[str]) -> List[Link]:
    """
    Build span links from named entry bindings.

    Args:
        environment: Entry binding environment
        link_sources: Names of bindings holding a Span, SpanContext or Link

    Returns:
        list: Links for the bindings that hold a valid span reference
    """
    links = []
    for name in link_sources:
        if name not in environment:
            continue
        link = _as_link(environment[name])
        if link is None:
            logger.debug(f"Binding {name!r} does not reference a span, not linking")
            continue
        links.append(link)
    return links


def start_span(tracer, name: str, links: List[Link]) -> Span:
    """Start a span whose parent is the currently active span."""
    ctx = context.get_current()
    return tracer.start_span(name, context=ctx, links=links)


def activate(span: Span) -> object:
    """Make ``span`` the current span; returns the token for ``deactivate``."""
    return context.attach(trace.set_span_in_context(span))


def deactivate(token: object) -> None:
    context.detach(token)


def is_current(span: Span) -> bool:
    return trace.get_current_span() is span


def set_attributes(span: Span, attributes: Dict[str, Any]) -> None:
    if not attributes:
        return
    try:
        span.set_attributes(attributes)
    except Exception as e:
        logger.debug(f"Could not set span attributes: {e}")


def record_exception(span: Span, exc: BaseException) -> None:
    """Add an ``exception`` event (type, message, stacktrace) and mark the span failed."""
    span.record_exception(exc)
    span.set_status(Status(StatusCode.ERROR, f"{type(exc).__name__}: {exc}"))


def set_error(span: Span, message: str) -> None:
    span.set_status(Status(StatusCode.ERROR, message))


def end_span(span: Span) -> None:
    span.end()
