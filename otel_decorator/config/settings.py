"""
Runtime settings consulted by the instrumentation engine.

The engine reads these on every call, so changes made through
``configure()`` (or ``apply_instrumentation_config()``) apply to functions
that were decorated before the change.
"""

import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS = {
    # Namespace put in front of every resolved attribute name ("" disables it)
    "attribute_prefix": "app",
    # Return values (or leading tuple elements) that mark a domain error
    "error_markers": ("error",),
    # Whether exits other than normal/shutdown set an ERROR status
    "abnormal_exit_is_error": True,
}

_settings: Dict[str, Any] = dict(DEFAULT_SETTINGS)


def get_settings() -> Dict[str, Any]:
    """Return the live settings mapping."""
    return _settings


def configure(**overrides) -> Dict[str, Any]:
    """
    Override one or more engine settings.

    Args:
        **overrides: Setting names from DEFAULT_SETTINGS and their new values

    Returns:
        dict: The settings after the update

    Raises:
        KeyError: If an unknown setting name is passed
    """
    unknown = set(overrides) - set(DEFAULT_SETTINGS)
    if unknown:
        raise KeyError(f"Unknown instrumentation settings: {sorted(unknown)}")

    if "error_markers" in overrides:
        markers = overrides["error_markers"]
        if isinstance(markers, str):
            markers = [m.strip() for m in markers.split(",") if m.strip()]
        overrides["error_markers"] = tuple(markers)

    if "attribute_prefix" in overrides and overrides["attribute_prefix"] is None:
        overrides["attribute_prefix"] = ""

    _settings.update(overrides)
    logger.debug(f"Instrumentation settings updated: {overrides}")
    return _settings


def reset_settings() -> None:
    """Restore the built-in defaults."""
    _settings.clear()
    _settings.update(DEFAULT_SETTINGS)
