"""Per-request identifiers for log correlation.

``request_id`` is always present while a request is handled. ``trace_id``
and ``correlation_id`` are only set when the caller forwards them.
"""

from contextvars import ContextVar, Token
from typing import Any
from uuid import uuid4


request_id_var: ContextVar[str] = ContextVar("request_id", default="")
trace_id_var: ContextVar[str | None] = ContextVar("trace_id", default=None)
correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)

_LOG_FIELDS: tuple[tuple[str, ContextVar[Any]], ...] = (
    ("request_id", request_id_var),
    ("trace_id", trace_id_var),
    ("correlation_id", correlation_id_var),
)


def generate_request_id() -> str:
    return uuid4().hex


def get_request_id() -> str:
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """Bind ``request_id``, generating one when the caller sent none.

    Returns:
        The bound request ID.
    """
    bound = request_id or generate_request_id()
    request_id_var.set(bound)
    return bound


def get_trace_id() -> str | None:
    return trace_id_var.get()


def set_trace_id(trace_id: str | None) -> None:
    trace_id_var.set(trace_id)


def get_correlation_id() -> str | None:
    return correlation_id_var.get()


def set_correlation_id(correlation_id: str | None) -> None:
    correlation_id_var.set(correlation_id)


def get_context() -> dict[str, Any]:
    """Identifiers bound to the current request, empty ones omitted."""
    return {name: var.get() for name, var in _LOG_FIELDS if var.get()}


def clear_context() -> None:
    request_id_var.set("")
    trace_id_var.set(None)
    correlation_id_var.set(None)


class RequestContext:
    """Bind identifiers for work done outside an HTTP request.

    Previous values are restored on exit::

        with RequestContext(request_id="startup"):
            await init_mongo(settings)
    """

    def __init__(
        self,
        request_id: str | None = None,
        trace_id: str | None = None,
        correlation_id: str | None = None,
    ) -> None:
        self._values = {
            request_id_var: request_id or generate_request_id(),
            trace_id_var: trace_id,
            correlation_id_var: correlation_id,
        }
        self._tokens: list[Token[Any]] = []

    def __enter__(self) -> "RequestContext":
        self._tokens = [
            var.set(value)
            for var, value in self._values.items()
            if value is not None
        ]
        return self

    def __exit__(self, *_: object) -> None:
        while self._tokens:
            token = self._tokens.pop()
            token.var.reset(token)
