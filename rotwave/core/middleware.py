"""HTTP middleware.

``RequestContextMiddleware`` binds the request identifiers used by every log
line and writes one access record per request. ``OriginAuditMiddleware``
records cross-origin calls that the CORS policy does not grant.
"""

import re
import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import Request, Response
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from rotwave.core.context import (
    clear_context,
    set_correlation_id,
    set_request_id,
    set_trace_id,
)


logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_ID_HEADER = "X-Correlation-ID"


def trace_id_from_headers(headers: Headers) -> str | None:
    """Trace ID from X-Trace-ID, B3 or a W3C ``traceparent`` header."""
    direct = headers.get("x-trace-id") or headers.get("x-b3-traceid")
    if direct:
        return direct

    # traceparent: {version}-{trace-id}-{parent-id}-{flags}
    parts = headers.get("traceparent", "").split("-")
    return parts[1] if len(parts) >= 2 and parts[1] else None


def client_ip(request: Request) -> str | None:
    """Caller address, preferring the proxy-supplied one."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",", 1)[0].strip()
    return request.headers.get("x-real-ip") or (
        request.client.host if request.client else None
    )


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind request identifiers and log each request with its duration."""

    def __init__(
        self,
        app: ASGIApp,
        log_requests: bool = True,
        exclude_paths: list[str] | None = None,
    ) -> None:
        """
        Args:
            app: The ASGI application.
            log_requests: Emit request_started/request_completed events.
            exclude_paths: Path prefixes that are never logged.
        """
        super().__init__(app)
        self.log_requests = log_requests
        self.exclude_paths = tuple(exclude_paths or ["/health"])

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        started = time.perf_counter()
        path = request.url.path

        request_id = set_request_id(request.headers.get(REQUEST_ID_HEADER))
        request.state.request_id = request_id
        if trace_id := trace_id_from_headers(request.headers):
            set_trace_id(trace_id)
        if correlation_id := request.headers.get(CORRELATION_ID_HEADER):
            set_correlation_id(correlation_id)

        log = self.log_requests and not path.startswith(self.exclude_paths)
        if log:
            logger.info(
                "request_started",
                method=request.method,
                path=path,
                client_ip=client_ip(request),
                origin=request.headers.get("origin"),
            )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                "request_failed",
                method=request.method,
                path=path,
                error_type=type(e).__name__,
                duration_ms=_elapsed_ms(started),
            )
            raise
        finally:
            clear_context()

        if log:
            emit = logger.warning if response.status_code >= 400 else logger.info
            emit(
                "request_completed",
                method=request.method,
                path=path,
                status_code=response.status_code,
                duration_ms=_elapsed_ms(started),
                request_id=request_id,
            )

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


def is_origin_allowed(
    origin: str,
    allowed_origins: list[str],
    origin_regex: str | None = None,
) -> bool:
    """Apply the same allow-list and regex test as ``CORSMiddleware``."""
    if "*" in allowed_origins or origin in allowed_origins:
        return True
    return bool(origin_regex and re.fullmatch(origin_regex, origin))


class OriginAuditMiddleware(BaseHTTPMiddleware):
    """Warn about requests from origins the CORS policy rejects."""

    def __init__(
        self,
        app: ASGIApp,
        allowed_origins: list[str],
        origin_regex: str | None = None,
    ) -> None:
        super().__init__(app)
        self.allowed_origins = allowed_origins
        self.origin_regex = origin_regex

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        origin = request.headers.get("origin")
        if origin and not is_origin_allowed(
            origin, self.allowed_origins, self.origin_regex
        ):
            logger.warning(
                "cors_origin_rejected",
                origin=origin,
                method=request.method,
                path=request.url.path,
            )
        return await call_next(request)


__all__ = [
    "OriginAuditMiddleware",
    "RequestContextMiddleware",
    "client_ip",
    "is_origin_allowed",
    "trace_id_from_headers",
]
