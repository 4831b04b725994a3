"""
Created on: 2026-09-16

Span lifecycle for decorated functions.

This module provides the ``with_span`` / ``trace`` and ``simple_trace``
decorators and the SpanInstrumentor that does the work for both:

1. start a span (child of the current span, linked to any spans named in
   ``links``) and make it current
2. put the entry-time attributes on it straight away
3. run the function
4. make the span current again, resolve the exit-time attributes, classify
   the outcome and record its status
5. end the span and restore the previous context, on every exit path

Generator and async generator functions keep their span open until they
are exhausted, raise or are closed; the span is current only while their
body runs.
"""

import inspect
import logging
from functools import wraps
from typing import Any, Callable, Dict, Iterable, Optional, Sequence

from opentelemetry.trace import Span

from otel_decorator.core import spans
from otel_decorator.core.attributes import IncludePath, merge, resolve
from otel_decorator.core.bindings import (
    BindingScope,
    entry_environment,
    enter_scope,
    exit_scope,
)
from otel_decorator.core.outcome import classify_exception, classify_result, record_outcome
from otel_decorator.core.span_name import from_function
from otel_decorator.core.tracer import get_tracer
from otel_decorator.core.validator import ConfigError, validate_args
from otel_decorator.logging_helpers.context import request_attributes

logger = logging.getLogger(__name__)


class _Invocation:
    """State of one call between span start and span end."""

    __slots__ = ("span", "token", "scope", "scope_token", "entry_attributes", "reassert_token")

    def __init__(self, span: Span, token: object, scope: BindingScope):
        self.span = span
        self.token = token
        self.scope = scope
        self.scope_token = None
        self.entry_attributes: Dict[str, Any] = {}
        self.reassert_token = None


class SpanInstrumentor:
    """
    Opens, annotates and closes a span around every call of one function.
    """

    def __init__(
        self,
        span_name: str,
        include: Sequence[IncludePath] = (),
        links: Sequence[str] = (),
        start_attributes: Optional[Callable[[], Dict[str, Any]]] = None,
        tracer=None
    ):
        """
        Initialize a span instrumentor.

        Args:
            span_name: Name of the spans created for the function
            include: Include paths resolved against the call's bindings
            links: Names of entry bindings holding spans to link to
            start_attributes: Callable returning extra attributes set at span start
            tracer: OpenTelemetry tracer; resolved per call when not given
        """
        self.span_name = span_name
        self.include = tuple(include)
        self.links = tuple(links)
        self.start_attributes = start_attributes
        self._tracer = tracer

    @property
    def tracer(self):
        return self._tracer or get_tracer()

    def _resolve(self, environment: Dict[str, Any]) -> Dict[str, Any]:
        if not self.include:
            return {}
        try:
            return resolve(environment, self.include)
        except Exception as e:
            logger.debug(f"Attribute resolution failed for {self.span_name}: {e}")
            return {}

    def _begin(self, signature: inspect.Signature, args: tuple, kwargs: dict) -> _Invocation:
        entry = entry_environment(signature, args, kwargs)
        span = spans.start_span(self.tracer, self.span_name, spans.build_links(entry, self.links))
        call = _Invocation(span, spans.activate(span), BindingScope(entry))
        call.scope_token = enter_scope(call.scope)

        if self.start_attributes is not None:
            spans.set_attributes(span, self.start_attributes())

        call.entry_attributes = self._resolve(entry)
        spans.set_attributes(span, call.entry_attributes)
        return call

    def _succeed(self, call: _Invocation, result: Any) -> None:
        try:
            # Called functions can leave another span current, so write to ours
            if not spans.is_current(call.span):
                call.reassert_token = spans.activate(call.span)

            exit_attributes = self._resolve(call.scope.exit_environment(result))
            spans.set_attributes(call.span, merge(call.entry_attributes, exit_attributes))
            record_outcome(call.span, classify_result(result))
        except Exception as e:
            logger.warning(f"Could not finalize span {self.span_name}: {e}")

    def _fail(self, call: _Invocation, exc: BaseException) -> None:
        try:
            exit_attributes = self._resolve(call.scope.exit_environment())
            spans.set_attributes(call.span, merge(call.entry_attributes, exit_attributes))
            record_outcome(call.span, classify_exception(exc))
        except Exception as e:
            logger.warning(f"Could not record failure on span {self.span_name}: {e}")

    def _suspend(self, call: _Invocation) -> None:
        exit_scope(call.scope_token)
        spans.deactivate(call.token)

    def _resume(self, call: _Invocation) -> None:
        call.token = spans.activate(call.span)
        call.scope_token = enter_scope(call.scope)

    def _closed(self, call: _Invocation) -> None:
        try:
            exit_attributes = self._resolve(call.scope.exit_environment())
            spans.set_attributes(call.span, merge(call.entry_attributes, exit_attributes))
        except Exception as e:
            logger.warning(f"Could not finalize span {self.span_name}: {e}")

    def _end(self, call: _Invocation) -> None:
        spans.end_span(call.span)
        exit_scope(call.scope_token)
        if call.reassert_token is not None:
            spans.deactivate(call.reassert_token)
        spans.deactivate(call.token)

    def instrument_sync(self, func: Callable) -> Callable:
        """Instrument a synchronous function."""
        signature = inspect.signature(func)

        @wraps(func)
        def sync_wrapper(*args, **kwargs):
            call = self._begin(signature, args, kwargs)
            try:
                result = func(*args, **kwargs)
            except BaseException as e:
                self._fail(call, e)
                raise
            else:
                self._succeed(call, result)
                return result
            finally:
                self._end(call)

        return sync_wrapper

    def instrument_async(self, func: Callable) -> Callable:
        """Instrument a coroutine function."""
        signature = inspect.signature(func)

        @wraps(func)
        async def async_wrapper(*args, **kwargs):
            call = self._begin(signature, args, kwargs)
            try:
                result = await func(*args, **kwargs)
            except BaseException as e:
                self._fail(call, e)
                raise
            else:
                self._succeed(call, result)
                return result
            finally:
                self._end(call)

        return async_wrapper

    def instrument_generator(self, func: Callable) -> Callable:
        """
        Instrument a generator function.

        The span opens on the first ``next()`` and stays open until the
        generator returns, raises or is closed. The span and the call's
        bindings are current only while the generator body runs, not while
        the consumer handles a yielded value.
        """
        signature = inspect.signature(func)

        @wraps(func)
        def generator_wrapper(*args, **kwargs):
            call = self._begin(signature, args, kwargs)
            try:
                generator = func(*args, **kwargs)
                step, payload = generator.send, None
                while True:
                    try:
                        value = step(payload)
                    except StopIteration as stop:
                        result = stop.value
                        break

                    self._suspend(call)
                    try:
                        payload = yield value
                    except GeneratorExit:
                        self._resume(call)
                        generator.close()
                        raise
                    except BaseException as e:
                        self._resume(call)
                        step, payload = generator.throw, e
                    else:
                        self._resume(call)
                        step = generator.send
            except GeneratorExit:
                self._closed(call)
                raise
            except BaseException as e:
                self._fail(call, e)
                raise
            else:
                self._succeed(call, result)
                return result
            finally:
                self._end(call)

        return generator_wrapper

    def instrument_async_generator(self, func: Callable) -> Callable:
        """Instrument an async generator function, as ``instrument_generator`` does."""
        signature = inspect.signature(func)

        @wraps(func)
        async def async_generator_wrapper(*args, **kwargs):
            call = self._begin(signature, args, kwargs)
            try:
                generator = func(*args, **kwargs)
                step, payload = generator.asend, None
                while True:
                    try:
                        value = await step(payload)
                    except StopAsyncIteration:
                        break

                    self._suspend(call)
                    try:
                        payload = yield value
                    except GeneratorExit:
                        self._resume(call)
                        await generator.aclose()
                        raise
                    except BaseException as e:
                        self._resume(call)
                        step, payload = generator.athrow, e
                    else:
                        self._resume(call)
                        step = generator.asend
            except GeneratorExit:
                self._closed(call)
                raise
            except BaseException as e:
                self._fail(call, e)
                raise
            else:
                self._succeed(call, None)
            finally:
                self._end(call)

        return async_generator_wrapper

    def instrument(self, func: Callable) -> Callable:
        """Instrument a function, generator, coroutine or async generator."""
        if inspect.isasyncgenfunction(func):
            wrapped = self.instrument_async_generator(func)
        elif inspect.isgeneratorfunction(func):
            wrapped = self.instrument_generator(func)
        elif inspect.iscoroutinefunction(func):
            wrapped = self.instrument_async(func)
        else:
            wrapped = self.instrument_sync(func)

        wrapped._otel_span_name = self.span_name
        return wrapped


def _declaration_target(func: Callable, decorator: str) -> str:
    return f"{from_function(func)} @{decorator}"


def with_span(
    span_name: Optional[str] = None,
    *,
    include: Iterable[IncludePath] = (),
    links: Iterable[str] = ()
):
    """
    Decorate a function to add to or create a trace with a named span.

    Span attributes are picked with ``include``, which can name:

    - any argument of the function,
    - any value published from the body with ``bind()``,
    - the return value, with ``"result"``,
    - mapping keys or record fields, with a list of names.

    Usage:
        @with_span("my_app.worker.do_work", include=["arg1", ["arg2", "count"], "total", "result"])
        def do_work(arg1, arg2):
            total = arg1.count + arg2.count
            bind(total=total)
            return ("ok", total)

    Args:
        span_name: Span name; derived from module, name and arity when omitted
        include: Include paths
        links: Names of arguments holding spans (or span contexts) to link to

    Returns:
        Decorator

    Raises:
        ConfigError: At decoration time, if the declaration is malformed
    """
    if callable(span_name):
        return with_span()(span_name)

    def decorator(func):
        try:
            validate_args(span_name, include, links)
        except ConfigError as e:
            raise ConfigError(f"{_declaration_target(func, 'with_span')} {e}") from None

        instrumentor = SpanInstrumentor(
            span_name or from_function(func),
            include=include,
            links=links
        )
        return instrumentor.instrument(func)

    return decorator


trace = with_span


def simple_trace(span_name: Optional[str] = None):
    """
    Decorate a function with a span named after it, or after ``span_name``.

    No bindings are recorded. The ambient request id (see
    ``request_context``) is attached, and a returned error marker marks
    the span as failed.

    Usage:
        @simple_trace
        def add(a, b):
            return a + b

        @simple_trace("math.subtraction")
        def subtract(a, b):
            return a - b
    """
    if callable(span_name):
        return simple_trace()(span_name)

    def decorator(func):
        try:
            validate_args(span_name)
        except ConfigError as e:
            raise ConfigError(f"{_declaration_target(func, 'simple_trace')} {e}") from None

        instrumentor = SpanInstrumentor(
            span_name or from_function(func),
            start_attributes=request_attributes
        )
        return instrumentor.instrument(func)

    return decorator
