"""
Created on: 2026-09-13

Configuration loading and management for otel_decorator.

This module loads settings for tracing setup, logging and the span
decorators from defaults, a JSON/YAML file and environment variables.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from otel_decorator.config.settings import configure
from otel_decorator.utils.security import DEFAULT_REDACTION_VALUE, configure_redactor

DEFAULT_ENV_PREFIX = "OTEL_DECORATOR_"

DEFAULT_CONFIG = {
    "service": {
        "name": "unnamed-service",
        "version": "1.0.0",
        "environment": "development"
    },
    "tracing": {
        "enabled": True,
        "exporters": ["console"],
        "otlp": {
            "endpoint": None
        }
    },
    "instrumentation": {
        "attribute_prefix": "app",
        "error_markers": ["error"],
        "abnormal_exit_is_error": True
    },
    "logging": {
        "enabled": True,
        "level": "INFO",
        "json": False,
        "loguru": True
    },
    "security": {
        "enabled": True,
        "sensitive_keys": None,
        "redaction_value": DEFAULT_REDACTION_VALUE
    }
}

# Keys holding lists; a comma-separated string from the environment is split.
LIST_KEYS = (
    ("tracing", "exporters"),
    ("instrumentation", "error_markers"),
    ("security", "sensitive_keys"),
)

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Exception raised for configuration errors."""
    pass


def deep_merge(source: Dict[str, Any], destination: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dictionaries.

    Args:
        source: Source dictionary; its values win
        destination: Destination dictionary (will be modified)

    Returns:
        dict: Merged dictionary
    """
    for key, value in source.items():
        if isinstance(value, dict):
            node = destination.setdefault(key, {})
            if isinstance(node, dict):
                deep_merge(value, node)
            else:
                destination[key] = value
        else:
            destination[key] = value

    return destination


def _parse_env_value(value: str) -> Any:
    lowered = value.lower()
    if lowered in ("true", "yes", "on"):
        return True
    if lowered in ("false", "no", "off"):
        return False
    if lowered in ("null", "none"):
        return None
    if value.lstrip("-").isdigit():
        return int(value)
    if value.replace(".", "", 1).lstrip("-").isdigit():
        return float(value)
    return value


def _split_list(value: Any) -> Any:
    """Split a comma-separated string into a list of stripped, non-empty items."""
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


def _normalize_lists(config: Dict[str, Any]) -> Dict[str, Any]:
    for section, key in LIST_KEYS:
        node = config.get(section)
        if isinstance(node, dict) and key in node:
            node[key] = _split_list(node[key])
    return config


def _load_from_env(prefix: str = DEFAULT_ENV_PREFIX) -> Dict[str, Any]:
    """
    Load configuration from environment variables.

    Nested keys are separated by double underscores:

        OTEL_DECORATOR_SERVICE__NAME=my-service
        OTEL_DECORATOR_INSTRUMENTATION__ATTRIBUTE_PREFIX=billing
        OTEL_DECORATOR_TRACING__ENABLED=false
        OTEL_DECORATOR_TRACING__EXPORTERS=console,otlp

    Args:
        prefix: Prefix for environment variables

    Returns:
        dict: Configuration from environment variables
    """
    config: Dict[str, Any] = {}

    for key, value in os.environ.items():
        if not key.startswith(prefix) or key == f"{prefix}CONFIG":
            continue

        key_path = key[len(prefix):].lower().split("__")
        current = config
        for part in key_path[:-1]:
            current = current.setdefault(part, {})
        current[key_path[-1]] = _parse_env_value(value)

    return config


def _load_from_file(file_path: str) -> Dict[str, Any]:
    """
    Load configuration from a JSON or YAML file.

    Raises:
        ConfigurationError: If the file is missing, unreadable or of an unsupported format
    """
    path = Path(file_path)

    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {file_path}")

    suffix = path.suffix.lower()
    if suffix not in (".json", ".yaml", ".yml"):
        raise ConfigurationError(f"Unsupported configuration file format: {suffix}")

    try:
        with open(path) as f:
            data = json.load(f) if suffix == ".json" else yaml.safe_load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Error loading configuration from {file_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration in {file_path} must be a mapping")
    return data


def load_config(
    config_path: Optional[str] = None,
    env_prefix: str = DEFAULT_ENV_PREFIX,
    merge_env: bool = True
) -> Dict[str, Any]:
    """
    Load configuration from multiple sources.

    Priority (highest to lowest):
    1. Environment variables (if merge_env is True)
    2. Configuration file (if provided)
    3. Default configuration

    Args:
        config_path: Path to configuration file
        env_prefix: Prefix for environment variables
        merge_env: Whether to merge environment variables

    Returns:
        dict: Merged configuration
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if config_path:
        try:
            config = deep_merge(_load_from_file(config_path), config)
            logger.info(f"Loaded configuration from file: {config_path}")
        except ConfigurationError as e:
            logger.warning(str(e))

    if merge_env:
        env_config = _load_from_env(env_prefix)
        if env_config:
            config = deep_merge(env_config, config)
            logger.info("Merged configuration from environment variables")

    return _normalize_lists(config)


def find_and_load_config(
    search_paths: Optional[List[str]] = None,
    filenames: Optional[List[str]] = None,
    env_prefix: str = DEFAULT_ENV_PREFIX,
    merge_env: bool = True
) -> Dict[str, Any]:
    """
    Search for and load a configuration file.

    The file named by ``<prefix>CONFIG`` wins; otherwise the first of
    ``otel_decorator.json``, ``otel_decorator.yaml`` or
    ``otel_decorator.yml`` found in the current directory or the user's
    home directory is used. Without a file, defaults and environment
    variables are returned.
    """
    env_config_path = os.environ.get(f"{env_prefix}CONFIG")
    if env_config_path:
        return load_config(env_config_path, env_prefix, merge_env)

    search_paths = search_paths or [".", str(Path.home())]
    filenames = filenames or ["otel_decorator.json", "otel_decorator.yaml", "otel_decorator.yml"]

    for path in search_paths:
        for name in filenames:
            config_path = os.path.join(path, name)
            if os.path.exists(config_path):
                return load_config(config_path, env_prefix, merge_env)

    return load_config(None, env_prefix, merge_env)


def apply_instrumentation_config(config: Dict[str, Any]) -> None:
    """
    Install the ``instrumentation`` and ``security`` sections as the
    settings used by the span decorators.
    """
    instrumentation = config.get("instrumentation", {})
    overrides = {
        key: instrumentation[key]
        for key in ("attribute_prefix", "error_markers", "abnormal_exit_is_error")
        if key in instrumentation
    }
    if overrides:
        configure(**overrides)

    security = config.get("security", {})
    configure_redactor(
        enabled=security.get("enabled", True),
        sensitive_keys=security.get("sensitive_keys"),
        redaction_value=security.get("redaction_value", DEFAULT_REDACTION_VALUE)
    )
    logger.info("Applied instrumentation configuration")
