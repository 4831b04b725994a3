"""
Default span names derived from the decorated function.
"""

import inspect
from typing import Callable

_COUNTED_KINDS = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.KEYWORD_ONLY,
)


def default_name(caller_module: str, function_name: str, arity: int) -> str:
    """Build a name such as ``"Math.add/2"``."""
    return f"{caller_module}.{function_name}/{arity}"


def function_arity(func: Callable) -> int:
    """Number of named parameters; ``*args`` and ``**kwargs`` are not counted."""
    try:
        parameters = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return 0
    return sum(1 for p in parameters if p.kind in _COUNTED_KINDS)


def from_function(func: Callable) -> str:
    module = getattr(func, "__module__", None) or "unknown"
    name = getattr(func, "__qualname__", None) or getattr(func, "__name__", "anonymous")
    return default_name(module, name, function_arity(func))
