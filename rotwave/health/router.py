"""Health check endpoints."""

from fastapi import APIRouter, Request, status
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from rotwave.comments.service import CommentError, CommentService
from rotwave.config import get_settings
from rotwave.core.logging import get_logger


logger = get_logger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


class HealthResponse(BaseModel):
    """Health check result."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    status: str
    database: str
    comment_count: int | None = None
    version: str | None = None
    environment: str | None = None


@router.get("/live")
async def liveness() -> dict[str, str]:
    """Liveness probe - checks if the application is running."""
    return {"status": "alive"}


@router.get("", response_model=HealthResponse)
async def health(request: Request) -> ORJSONResponse:
    """Report database connectivity and the number of stored comments.

    Responds 503 when the database is not initialized or not reachable.
    """
    settings = get_settings()
    service: CommentService | None = getattr(
        request.app.state, "comment_service", None
    )

    if service is None:
        result = HealthResponse(status="unhealthy", database="not_initialized")
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:
        try:
            count = await service.count_comments()
        except CommentError as e:
            logger.warning("health_check_failed", error=e.message, code=e.code)
            result = HealthResponse(status="unhealthy", database="disconnected")
            status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        else:
            result = HealthResponse(
                status="healthy", database="connected", comment_count=count
            )
            status_code = status.HTTP_200_OK

    result.version = settings.app_version
    result.environment = settings.environment
    return ORJSONResponse(
        status_code=status_code,
        content=result.model_dump(by_alias=True, exclude_none=True),
    )
