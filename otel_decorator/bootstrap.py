"""
Created on: 2026-09-17

One-call setup of tracing, logging and decorator settings.
"""

import logging
from typing import Any, Dict, List, Optional

from otel_decorator.config.loader import apply_instrumentation_config, find_and_load_config, load_config
from otel_decorator.core.tracer import init_tracing
from otel_decorator.logging_helpers.integrations import setup_logging

logger = logging.getLogger(__name__)


def bootstrap(
    service_name: Optional[str] = None,
    version: Optional[str] = None,
    environment: Optional[str] = None,
    config_path: Optional[str] = None,
    tracing_exporters: Optional[List[str]] = None,
    exporter_endpoints: Optional[Dict[str, str]] = None,
    log_level: Optional[str] = None,
    enable_loguru: Optional[bool] = None,
    env_prefix: str = "OTEL_DECORATOR_",
    merge_env: bool = True
) -> Dict[str, Any]:
    """
    Configure tracing, logging and the span decorators.

    Explicit arguments override values from the configuration file and
    environment.

    Args:
        service_name: Name of the service
        version: Service version
        environment: Deployment environment (dev, staging, prod, etc.)
        config_path: Path to configuration file; searched for when omitted
        tracing_exporters: Span exporters ("console", "otlp")
        exporter_endpoints: Exporter endpoints keyed by exporter name
        log_level: Logging level
        enable_loguru: Whether to bridge loguru into standard logging
        env_prefix: Prefix for environment variables
        merge_env: Whether to merge environment variables

    Returns:
        dict: The effective configuration and the initialized components

    Example:
        from otel_decorator import bootstrap

        bootstrap(service_name="billing", tracing_exporters=["otlp"],
                  exporter_endpoints={"otlp": "http://collector:4317"})
    """
    if config_path:
        config = load_config(config_path, env_prefix, merge_env)
    else:
        config = find_and_load_config(env_prefix=env_prefix, merge_env=merge_env)

    service = config["service"]
    if service_name:
        service["name"] = service_name
    if version:
        service["version"] = version
    if environment:
        service["environment"] = environment

    tracing_config = config["tracing"]
    if tracing_exporters is not None:
        tracing_config["exporters"] = tracing_exporters

    logging_config = config["logging"]
    if log_level:
        logging_config["level"] = log_level
    if enable_loguru is not None:
        logging_config["loguru"] = enable_loguru

    result: Dict[str, Any] = {"config": config, "service": service["name"]}

    if logging_config.get("enabled", True):
        result["loggers"] = setup_logging(
            level=logging_config.get("level", "INFO"),
            json_format=logging_config.get("json", False),
            enable_loguru=logging_config.get("loguru", False)
        )

    if tracing_config.get("enabled", True):
        endpoints = dict(exporter_endpoints or {})
        otlp_endpoint = (tracing_config.get("otlp") or {}).get("endpoint")
        if otlp_endpoint and "otlp" not in endpoints:
            endpoints["otlp"] = otlp_endpoint

        result["tracer"] = init_tracing(
            service_name=service["name"],
            version=service["version"],
            environment=service["environment"],
            exporters=tracing_config.get("exporters"),
            exporter_endpoints=endpoints
        )

    apply_instrumentation_config(config)

    logger.info(f"otel_decorator bootstrapped for service: {service['name']}")
    return result
