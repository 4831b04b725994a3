"""
Created on: 2026-09-14

Attribute resolution for instrumented functions.

Turns an include list into a flat, namespaced attribute map drawn from a
name -> value binding environment. A path is either a bare name, which
selects a binding, or a list of names, which selects a binding and then
indexes into it one key at a time:

    include=["id", ["user", "name"], "result"]

    {"app.id": 1, "app.user_name": "my user", "app.result": "('ok', 1)"}

Bindings that are missing and paths that cannot be followed are left out.
Nothing in this module raises because of the data it is given.
"""

import dataclasses
import logging
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union

from otel_decorator.config.settings import get_settings
from otel_decorator.utils.security import get_redactor

logger = logging.getLogger(__name__)

IncludePath = Union[str, Sequence[str]]

SCALAR_TYPES = (str, bool, int, float)

# Nested mappings deeper than this are rendered with str()
MAX_FLATTEN_DEPTH = 4

_MISSING = object()


def attribute_prefix() -> str:
    """Namespace prepended to every resolved attribute name."""
    return get_settings().get("attribute_prefix") or ""


def namespaced(name: str, prefix: Optional[str] = None) -> str:
    if prefix is None:
        prefix = attribute_prefix()
    return f"{prefix}.{name}" if prefix else name


def normalize_path(path: IncludePath) -> Tuple[str, ...]:
    if isinstance(path, str):
        return (path,)
    return tuple(path)


def _index(value: Any, key: str) -> Any:
    """Take one step into a mapping or record, raising on a miss."""
    if isinstance(value, Mapping):
        return value[key]

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        if key not in {f.name for f in dataclasses.fields(value)}:
            raise KeyError(key)
        return getattr(value, key)

    # namedtuples
    fields = getattr(value, "_fields", None)
    if isinstance(value, tuple) and fields is not None:
        if key not in fields:
            raise KeyError(key)
        return getattr(value, key)

    # Built-in values are leaves; ``count.real`` or ``name.upper`` is not a field.
    if type(value).__module__ == "builtins" or key.startswith("__"):
        raise KeyError(key)

    # Plain objects, including __slots__ classes and properties; methods are skipped
    found = getattr(value, key)
    if callable(found):
        raise KeyError(key)
    return found


def lookup(environment: Mapping[str, Any], path: Sequence[str]) -> Any:
    """
    Follow a path through the environment.

    Args:
        environment: Binding environment (name -> value)
        path: Non-empty sequence of names

    Returns:
        The value at the end of the path, or the module's missing sentinel
    """
    head, *rest = path
    if head not in environment:
        return _MISSING

    value = environment[head]
    for key in rest:
        try:
            value = _index(value, key)
        except (KeyError, AttributeError, TypeError, IndexError):
            return _MISSING
    return value


def coerce_value(value: Any) -> Any:
    """
    Coerce a leaf value into something OpenTelemetry accepts as an attribute.

    Scalars pass through, enum members become their value (or name), and
    homogeneous sequences of one scalar type become tuples. Everything else
    is rendered with str().
    """
    if isinstance(value, Enum):
        inner = value.value
        return inner if isinstance(inner, SCALAR_TYPES) else value.name

    if isinstance(value, SCALAR_TYPES):
        return value

    if isinstance(value, (list, tuple)) and value:
        kinds = {type(item) for item in value}
        if len(kinds) == 1 and kinds.pop() in SCALAR_TYPES:
            return tuple(value)

    return str(value)


def _flatten(name: str, value: Any, depth: int, out: Dict[str, Any]) -> None:
    if isinstance(value, Mapping) and value and depth < MAX_FLATTEN_DEPTH:
        for key, item in value.items():
            _flatten(f"{name}_{key}", item, depth + 1, out)
    else:
        out[name] = coerce_value(value)


def resolve(
    environment: Mapping[str, Any],
    include: Iterable[IncludePath],
    prefix: Optional[str] = None
) -> Dict[str, Any]:
    """
    Resolve an include list against a binding environment.

    Args:
        environment: Binding environment (name -> value); never modified
        include: Bare names or lists of names
        prefix: Attribute namespace; defaults to the configured prefix

    Returns:
        dict: Flat mapping of namespaced attribute name to coerced value
    """
    if prefix is None:
        prefix = attribute_prefix()
    redactor = get_redactor()

    attributes: Dict[str, Any] = {}
    for path in include:
        segments = normalize_path(path)
        try:
            value = lookup(environment, segments)
            if value is _MISSING:
                continue

            flat: Dict[str, Any] = {}
            _flatten("_".join(str(s) for s in segments), value, 0, flat)
        except Exception as e:
            logger.debug(f"Skipping attribute {segments!r}: {e}")
            continue

        for name, item in flat.items():
            if redactor is not None:
                item = redactor.redact_attribute(name, item)
            attributes[namespaced(name, prefix)] = item

    return attributes


def merge(entry: Mapping[str, Any], exit: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge exit-time attributes over entry-time ones; exit values win."""
    merged = dict(entry)
    merged.update(exit)
    return merged
