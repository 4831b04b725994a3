"""
Configuration management for otel_decorator.

This package provides functionality for loading configuration and for
the runtime settings read by the span decorators.
"""

from otel_decorator.config.loader import (
    ConfigurationError,
    apply_instrumentation_config,
    find_and_load_config,
    load_config,
)
from otel_decorator.config.settings import configure, get_settings, reset_settings

__all__ = [
    'ConfigurationError',
    'apply_instrumentation_config',
    'configure',
    'find_and_load_config',
    'get_settings',
    'load_config',
    'reset_settings',
]
