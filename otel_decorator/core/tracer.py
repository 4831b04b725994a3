"""
Created on: 2026-09-12

Tracer setup for otel_decorator.

This module provides functions for initializing and accessing the
OpenTelemetry tracer used by the tracing decorators.
"""

import logging
from typing import Dict, List, Optional, Union

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter

try:
    from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
    OTLP_AVAILABLE = True
except ImportError:
    OTLP_AVAILABLE = False

logger = logging.getLogger(__name__)

TRACER_NAME = "otel_decorator"

_tracer = None
_initialized = False


def get_tracer():
    """
    Get the tracer used by the decorators.

    Falls back to a tracer from the global provider when neither
    init_tracing() nor set_tracer() has been called, so decorated code
    runs (with no-op spans) in processes that never configure tracing.

    Returns:
        Tracer: The current OpenTelemetry tracer instance.
    """
    if _tracer is None:
        return trace.get_tracer(TRACER_NAME)
    return _tracer


def set_tracer(tracer) -> None:
    """
    Install a specific tracer, or None to go back to the global provider.

    Args:
        tracer: An OpenTelemetry tracer, typically from a local TracerProvider
    """
    global _tracer, _initialized
    _tracer = tracer
    _initialized = tracer is not None


def create_otlp_exporter(endpoint: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
    """
    Create an OTLP exporter for tracing.

    Args:
        endpoint: The OTLP endpoint URL.
        headers: Headers to include with OTLP requests.

    Returns:
        OTLPSpanExporter: An OTLP exporter instance, or None if unavailable.
    """
    if not OTLP_AVAILABLE:
        logger.warning("OTLP exporter is not available. Install opentelemetry-exporter-otlp-proto-grpc")
        return None

    kwargs = {}
    if endpoint:
        kwargs["endpoint"] = endpoint
    if headers:
        kwargs["headers"] = headers

    return OTLPSpanExporter(**kwargs)


def init_tracing(
    service_name: str,
    version: str = "1.0.0",
    environment: str = "dev",
    exporters: Optional[Union[str, List[str]]] = None,
    force_reinit: bool = False,
    exporter_endpoints: Optional[Dict[str, str]] = None,
    additional_attributes: Optional[Dict[str, str]] = None
):
    """
    Initialize OpenTelemetry tracing.

    Args:
        service_name: Name of the service (required).
        version: Service version.
        environment: Deployment environment.
        exporters: Exporter names, "console" and/or "otlp", as a list or a
            comma-separated string. Default is ["console"].
        force_reinit: Force reinitialization if already initialized.
        exporter_endpoints: Endpoints for the exporters, keyed by exporter name.
        additional_attributes: Additional resource attributes.

    Returns:
        Tracer: The initialized OpenTelemetry tracer.
    """
    global _tracer, _initialized

    if _initialized and not force_reinit:
        logger.info("Tracing already initialized. Returning existing tracer.")
        return _tracer

    resource_attrs = {
        "service.name": service_name,
        "service.version": version,
        "deployment.environment": environment,
    }
    if additional_attributes:
        resource_attrs.update(additional_attributes)

    provider = TracerProvider(resource=Resource.create(resource_attrs))
    trace.set_tracer_provider(provider)

    exporters = exporters if exporters is not None else ["console"]
    if isinstance(exporters, str):
        exporters = [name.strip() for name in exporters.split(",") if name.strip()]
    exporter_endpoints = exporter_endpoints or {}

    for exporter_name in exporters:
        exporter_name = exporter_name.lower()

        if exporter_name == "console":
            provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
            logger.info("Added console span exporter")

        elif exporter_name == "otlp":
            exporter = create_otlp_exporter(endpoint=exporter_endpoints.get("otlp"))
            if exporter is not None:
                provider.add_span_processor(BatchSpanProcessor(exporter))
                logger.info(f"Added OTLP span exporter with endpoint {exporter_endpoints.get('otlp', 'default')}")

        else:
            logger.warning(f"Unknown exporter: {exporter_name}")

    _tracer = provider.get_tracer(TRACER_NAME)
    _initialized = True

    logger.info(f"Tracing initialized for service: {service_name}")
    return _tracer
