"""
Security utilities for span attributes.

Attribute names are derived from variable names and include paths, so a
binding called ``password`` or a path like ``["creds", "token"]`` would
otherwise leak its value into the trace backend.
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Optional, Set

logger = logging.getLogger(__name__)

DEFAULT_SENSITIVE_KEYS = {
    "password", "passwd", "secret", "token", "api_key", "authorization",
    "credential", "credentials", "ssn", "private_key", "access_token", "refresh_token",
    "session_token", "client_secret"
}

DEFAULT_REDACTION_VALUE = "***REDACTED***"

_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_SEPARATORS = re.compile(r"[._\-\s]+")


def _segments(name: str) -> List[str]:
    spaced = _CAMEL_BOUNDARY.sub(r"\1_\2", name)
    return [s for s in _SEPARATORS.split(spaced.lower()) if s]


def _contains_run(segments: List[str], key: List[str]) -> bool:
    width = len(key)
    if not width:
        return False
    return any(segments[i:i + width] == key for i in range(len(segments) - width + 1))


class DataRedactor:
    """
    Replaces the values of attributes whose names look sensitive.
    """

    def __init__(
        self,
        sensitive_keys: Optional[Iterable[str]] = None,
        redaction_value: str = DEFAULT_REDACTION_VALUE
    ):
        """
        Initialize the DataRedactor.

        Args:
            sensitive_keys: Keys to consider sensitive (whole-segment match, case-insensitive)
            redaction_value: Value to use when redacting sensitive data
        """
        keys = DEFAULT_SENSITIVE_KEYS if sensitive_keys is None else sensitive_keys
        self.sensitive_keys: Set[str] = {k.lower() for k in keys}
        self._key_segments = [_segments(k) for k in self.sensitive_keys]
        self.redaction_value = redaction_value

    def is_sensitive(self, name: str) -> bool:
        """
        Whether any sensitive key appears as whole segments of ``name``.

        Names are split on ``.``, ``_``, ``-`` and camelCase boundaries, so
        ``app.creds_api_key`` and ``apiKey`` match ``api_key`` while
        ``max_tokens`` does not match ``token``.
        """
        segments = _segments(name)
        return any(_contains_run(segments, key) for key in self._key_segments)

    def redact_attribute(self, name: str, value: Any) -> Any:
        """Return the redaction value if the attribute name is sensitive."""
        return self.redaction_value if self.is_sensitive(name) else value

    def redact_attributes(self, attributes: Dict[str, Any]) -> Dict[str, Any]:
        return {k: self.redact_attribute(k, v) for k, v in attributes.items()}


_redactor: Optional[DataRedactor] = DataRedactor()


def get_redactor() -> Optional[DataRedactor]:
    """Return the active redactor, or None when redaction is disabled."""
    return _redactor


def configure_redactor(
    enabled: bool = True,
    sensitive_keys: Optional[Iterable[str]] = None,
    redaction_value: str = DEFAULT_REDACTION_VALUE
) -> Optional[DataRedactor]:
    """
    Replace the process-wide redactor.

    Args:
        enabled: Whether attribute values should be redacted at all
        sensitive_keys: Keys to consider sensitive (None keeps the defaults)
        redaction_value: Value to use when redacting

    Returns:
        The new redactor, or None when disabled
    """
    global _redactor
    if isinstance(sensitive_keys, str):
        sensitive_keys = [k.strip() for k in sensitive_keys.split(",") if k.strip()]

    _redactor = DataRedactor(sensitive_keys, redaction_value) if enabled else None
    logger.debug(f"Attribute redaction {'enabled' if enabled else 'disabled'}")
    return _redactor
