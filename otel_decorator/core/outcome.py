"""
Created on: 2026-09-15

Outcome classification for instrumented calls.

A call ends in one of four ways:

- success: any ordinary return value
- domain error: the function returned an error marker (``"error"`` by
  default) or a tuple led by one, e.g. ``("error", "not found")``
- exception: an ``Exception`` escaped the body
- abnormal exit: a ``BaseException`` that is not an ``Exception``
  (``SystemExit``, ``asyncio.CancelledError``, ``KeyboardInterrupt``...)

Classification only chooses what gets recorded on the span. The caller
always gets the original return value or exception.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional

from opentelemetry.trace import Span

from otel_decorator.config.settings import get_settings
from otel_decorator.core import spans
from otel_decorator.core.attributes import namespaced

logger = logging.getLogger(__name__)

DOMAIN_ERROR_DESCRIPTION = "Error"


class OutcomeKind(Enum):
    SUCCESS = "success"
    DOMAIN_ERROR = "domain_error"
    EXCEPTION = "exception"
    ABNORMAL_EXIT = "abnormal_exit"


@dataclass(frozen=True)
class Outcome:
    kind: OutcomeKind
    is_error: bool = False
    description: Optional[str] = None
    error: Optional[BaseException] = None
    # "normal" or "shutdown" for benign exits
    exit: Optional[str] = None
    shutdown_reason: Optional[str] = None


SUCCESS = Outcome(OutcomeKind.SUCCESS)


def _is_marker(value: Any, markers: Iterable[str]) -> bool:
    if isinstance(value, Enum):
        value = value.value
    return isinstance(value, str) and value in markers


def classify_result(result: Any, markers: Optional[Iterable[str]] = None) -> Outcome:
    """
    Classify a normal return value.

    Args:
        result: The value returned by the wrapped function
        markers: Domain error markers; defaults to the configured ones

    Returns:
        Outcome: DOMAIN_ERROR for a marker or a tuple led by one, else SUCCESS
    """
    if markers is None:
        markers = get_settings()["error_markers"]

    if _is_marker(result, markers):
        return Outcome(OutcomeKind.DOMAIN_ERROR, True, DOMAIN_ERROR_DESCRIPTION)

    if isinstance(result, tuple) and result and _is_marker(result[0], markers):
        return Outcome(OutcomeKind.DOMAIN_ERROR, True, DOMAIN_ERROR_DESCRIPTION)

    return SUCCESS


def classify_exception(
    exc: BaseException,
    abnormal_exit_is_error: Optional[bool] = None
) -> Outcome:
    """
    Classify an exception or non-local exit escaping the body.

    Args:
        exc: The exception in flight
        abnormal_exit_is_error: Severity for exits that are neither normal
            nor a shutdown; defaults to the configured value

    Returns:
        Outcome: EXCEPTION or ABNORMAL_EXIT
    """
    if abnormal_exit_is_error is None:
        abnormal_exit_is_error = get_settings()["abnormal_exit_is_error"]

    if isinstance(exc, SystemExit):
        if exc.code is None or exc.code == 0:
            return Outcome(OutcomeKind.ABNORMAL_EXIT, exit="normal")
        return Outcome(
            OutcomeKind.ABNORMAL_EXIT,
            is_error=abnormal_exit_is_error,
            description=f"exited: {exc.code!r}",
            error=exc
        )

    if isinstance(exc, asyncio.CancelledError):
        reason = exc.args[0] if exc.args else None
        if reason is None:
            return Outcome(OutcomeKind.ABNORMAL_EXIT, exit="shutdown")
        return Outcome(OutcomeKind.ABNORMAL_EXIT, exit="shutdown", shutdown_reason=str(reason))

    if isinstance(exc, Exception):
        return Outcome(
            OutcomeKind.EXCEPTION,
            is_error=True,
            description=f"{type(exc).__name__}: {exc}",
            error=exc
        )

    return Outcome(
        OutcomeKind.ABNORMAL_EXIT,
        is_error=abnormal_exit_is_error,
        description=f"uncaught: {exc!r}",
        error=exc
    )


def record_outcome(span: Span, outcome: Outcome) -> None:
    """Write the status, events and exit attributes for an outcome."""
    if outcome.kind is OutcomeKind.SUCCESS:
        return

    if outcome.kind is OutcomeKind.DOMAIN_ERROR:
        spans.set_error(span, outcome.description)
        return

    if outcome.kind is OutcomeKind.EXCEPTION:
        spans.record_exception(span, outcome.error)
        return

    if outcome.exit is not None:
        attributes = {namespaced("exit"): outcome.exit}
        if outcome.shutdown_reason is not None:
            attributes[namespaced("shutdown_reason")] = outcome.shutdown_reason
        spans.set_attributes(span, attributes)
    elif outcome.is_error:
        spans.set_error(span, outcome.description)
    else:
        spans.set_attributes(span, {namespaced("exit"): outcome.description})
