"""
Declaration checks for the tracing decorators.

These run once, when a function is decorated. A malformed declaration
fails the import of the module that defines it instead of failing calls.
"""

from typing import Any, Iterable, Optional


class ConfigError(ValueError):
    """Raised for a malformed span name, include list or link list."""
    pass


def _is_identifier(value: Any) -> bool:
    return isinstance(value, str) and value.isidentifier()


def _validate_path(path: Any) -> None:
    if isinstance(path, str):
        if not _is_identifier(path):
            raise ConfigError(f"include entry {path!r} is not a valid identifier")
        return

    if not isinstance(path, (list, tuple)) or not path:
        raise ConfigError(
            f"include entry {path!r} must be an identifier or a non-empty list of identifiers"
        )

    for segment in path:
        if not _is_identifier(segment):
            raise ConfigError(f"include path {path!r} contains invalid segment {segment!r}")


def _validate_sequence(name: str, value: Any) -> None:
    if isinstance(value, (str, bytes)) or not isinstance(value, (list, tuple)):
        raise ConfigError(f"{name} must be a list, got {type(value).__name__}")


def validate_args(
    span_name: Optional[str],
    include: Iterable[Any] = (),
    links: Iterable[Any] = ()
) -> None:
    """
    Validate a decorator declaration.

    Args:
        span_name: Explicit span name, or None to derive one
        include: Include paths
        links: Names of entry bindings holding spans to link to

    Raises:
        ConfigError: If any part of the declaration is malformed
    """
    if span_name is not None and (not isinstance(span_name, str) or not span_name.strip()):
        raise ConfigError(f"span name must be a non-empty string, got {span_name!r}")

    _validate_sequence("include", include)
    for path in include:
        _validate_path(path)

    _validate_sequence("links", links)
    for link in links:
        if not _is_identifier(link):
            raise ConfigError(f"link source {link!r} is not a valid identifier")
