"""Pytest configuration and fixtures."""

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from otel_decorator.config.settings import reset_settings
from otel_decorator.core.tracer import set_tracer
from otel_decorator.utils.security import configure_redactor


@pytest.fixture(autouse=True)
def restore_settings():
    """Every test starts from the default decorator settings."""
    reset_settings()
    configure_redactor()
    yield
    reset_settings()
    configure_redactor()


@pytest.fixture
def tracer_provider():
    # Local provider; the global one is never touched
    return TracerProvider()


@pytest.fixture
def tracer(tracer_provider):
    return tracer_provider.get_tracer("tests")


@pytest.fixture
def span_exporter(tracer_provider, tracer):
    """Capture finished spans for the duration of a test."""
    exporter = InMemorySpanExporter()
    tracer_provider.add_span_processor(SimpleSpanProcessor(exporter))
    set_tracer(tracer)

    yield exporter

    set_tracer(None)
    exporter.clear()


def finished(exporter, name):
    """Return the finished spans called ``name``."""
    return [s for s in exporter.get_finished_spans() if s.name == name]


def only_span(exporter, name):
    spans = finished(exporter, name)
    assert len(spans) == 1, f"expected one {name!r} span, got {len(spans)}"
    return spans[0]
