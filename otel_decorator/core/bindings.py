"""
Binding environments for instrumented calls.

The entry environment is built from the call's arguments. Values computed
inside the body are published with ``bind()``, which writes into the scope
of the innermost instrumented call running in the current context:

    @with_span("orders.find", include=["id", ["user", "name"], "result"])
    def find(id):
        user = load_user(id)
        bind(user=user)
        return ("ok", user)

Scopes live in a ContextVar, so threads and asyncio tasks each see their
own innermost call.
"""

import inspect
import logging
from contextvars import ContextVar, Token
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

RESULT = "result"

_NO_RESULT = object()

_current_scope: ContextVar[Optional["BindingScope"]] = ContextVar(
    "otel_decorator_binding_scope", default=None
)


class BindingScope:
    """
    Bindings of one instrumented invocation.
    """

    def __init__(self, entry: Mapping[str, Any]):
        self.entry: Dict[str, Any] = dict(entry)
        self.bound: Dict[str, Any] = {}

    def bind(self, values: Mapping[str, Any]) -> None:
        for name, value in values.items():
            if name == RESULT:
                logger.debug("Ignoring bind() of reserved name 'result'")
                continue
            self.bound[name] = value

    def exit_environment(self, result: Any = _NO_RESULT) -> Dict[str, Any]:
        """
        Build the exit environment.

        Body bindings shadow entry bindings of the same name. ``result`` is
        only present when the call returned normally.
        """
        environment = dict(self.entry)
        environment.update(self.bound)
        if result is not _NO_RESULT:
            environment[RESULT] = result
        return environment


def entry_environment(
    signature: inspect.Signature,
    args: tuple,
    kwargs: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Bind call arguments to parameter names, defaults included.

    Arguments that do not fit the signature give an empty environment; the
    wrapped function raises its own TypeError once it is called.
    """
    try:
        bound = signature.bind(*args, **kwargs)
    except TypeError:
        return {}

    bound.apply_defaults()
    environment = dict(bound.arguments)
    environment.pop(RESULT, None)
    return environment


def enter_scope(scope: BindingScope) -> Token:
    return _current_scope.set(scope)


def exit_scope(token: Token) -> None:
    _current_scope.reset(token)


def current_scope() -> Optional[BindingScope]:
    return _current_scope.get()


def bind(**values) -> None:
    """
    Publish local values to the innermost instrumented call.

    Outside an instrumented call this does nothing.

    Example:
        total = order.count * price
        bind(total=total)
    """
    scope = _current_scope.get()
    if scope is None:
        logger.debug(f"bind() called outside an instrumented function: {sorted(values)}")
        return
    scope.bind(values)
