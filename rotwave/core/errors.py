"""Application-wide exception handlers.

Every error leaves the API as::

    {"error": str, "message"?: str, "details"?: [str], "requestId": str}

Internal failures are logged with their traceback and returned without
internal details.
"""

from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel, Field
from starlette.exceptions import HTTPException as StarletteHTTPException

from rotwave.core.context import get_request_id
from rotwave.core.logging import get_logger


logger = get_logger(__name__)

AVAILABLE_ENDPOINTS = {
    "GET /": "API info",
    "GET /health": "Health check",
    "GET /comments/{contentId}": "Get comments",
    "POST /comments": "Create comment",
    "DELETE /comments/{commentId}": "Delete comment",
    "POST /comments/reply": "Add reply",
    "DELETE /comments/reply/{commentId}/{replyId}": "Delete reply",
}


class ErrorResponse(BaseModel):
    """Shape of every error body returned by the API."""

    error: str
    message: str | None = None
    details: list[str] | None = None
    request_id: str | None = Field(default=None, serialization_alias="requestId")


def _get_request_id_safe(request: Request) -> str | None:
    """Get request_id from request state or context."""
    if hasattr(request.state, "request_id"):
        return request.state.request_id
    return get_request_id() or None


def error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str | None = None,
    details: list[str] | None = None,
) -> ORJSONResponse:
    body = ErrorResponse(
        error=error,
        message=message,
        details=details,
        request_id=_get_request_id_safe(request),
    )
    return ORJSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


def format_validation_error(err: dict[str, Any]) -> str:
    """Render one pydantic error as ``"<field>: <message>"``."""
    loc = [str(part) for part in err.get("loc", ())]
    if loc and loc[0] in ("body", "path", "query"):
        loc = loc[1:]
    message = str(err.get("msg", "Invalid value")).removeprefix("Value error, ")
    field = ".".join(loc) or "body"
    return f"{field}: {message}"


def register_exception_handlers(app: FastAPI) -> None:
    """Install the global exception handlers on ``app``."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> ORJSONResponse:
        """Handle HTTP exceptions, including unmatched routes."""
        if exc.status_code == status.HTTP_404_NOT_FOUND and "endpoint" not in request.scope:
            logger.info(
                "route_not_found", path=request.url.path, method=request.method
            )
            return ORJSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content={
                    "error": "Endpoint not found",
                    "path": request.url.path,
                    "method": request.method,
                    "availableEndpoints": AVAILABLE_ENDPOINTS,
                    "requestId": _get_request_id_safe(request),
                },
            )

        logger.warning(
            "http_exception",
            status_code=exc.status_code,
            detail=exc.detail,
            path=request.url.path,
            method=request.method,
        )

        details = None
        detail = exc.detail
        if isinstance(detail, dict):
            details = [str(d) for d in detail.get("details", [])] or None
            detail = detail.get("message", "Error")

        if exc.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR:
            return error_response(request, exc.status_code, "Internal server error")
        return error_response(request, exc.status_code, str(detail), details=details)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        """Report request validation errors as 400 Invalid input."""
        details = [format_validation_error(err) for err in exc.errors()]
        logger.warning(
            "validation_error",
            details=details,
            path=request.url.path,
            method=request.method,
        )
        return error_response(
            request,
            status.HTTP_400_BAD_REQUEST,
            "Invalid input",
            message=details[0] if details else None,
            details=details,
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request, exc: Exception
    ) -> ORJSONResponse:
        """Catch-all handler for unhandled exceptions."""
        logger.exception(
            "unhandled_exception",
            error_type=type(exc).__name__,
            error_message=str(exc),
            path=request.url.path,
            method=request.method,
        )
        return error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal server error",
            message="Something went wrong",
        )
