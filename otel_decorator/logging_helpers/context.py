"""
Ambient request context.

The request id set here is copied onto spans by ``simple_trace`` and onto
loguru records through ``logger.contextualize``.
"""

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Dict, Iterator, Optional

from loguru import logger

_request_id: ContextVar[Optional[str]] = ContextVar("otel_decorator_request_id", default=None)


@contextmanager
def request_context(request_id: str) -> Iterator[str]:
    """
    Set the request id for everything run inside the block.

    Usage:
        with request_context(request.headers["x-request-id"]):
            handle(request)
    """
    token = _request_id.set(request_id)
    try:
        with logger.contextualize(request_id=request_id):
            yield request_id
    finally:
        _request_id.reset(token)


def current_request_id() -> Optional[str]:
    return _request_id.get()


def request_attributes() -> Dict[str, Any]:
    request_id = _request_id.get()
    return {"request_id": request_id} if request_id is not None else {}
