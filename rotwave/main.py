"""ROTWAVE Comments API - Main Application."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from rotwave.comments.repository import MongoCommentRepository
from rotwave.comments.router import router as comments_router
from rotwave.comments.service import CommentService
from rotwave.config import Settings, get_settings
from rotwave.core.context import RequestContext
from rotwave.core.database import (
    MissingDatabaseURIError,
    init_mongo,
    shutdown_mongo,
)
from rotwave.core.errors import AVAILABLE_ENDPOINTS, register_exception_handlers
from rotwave.core.logging import configure_structlog, get_logger
from rotwave.core.middleware import OriginAuditMiddleware, RequestContextMiddleware
from rotwave.health import router as health_router


# Configure logging early (before creating logger)
settings = get_settings()
configure_structlog(settings)

logger = get_logger(__name__)


def build_comment_service(collection: Any, settings: Settings) -> CommentService:
    """Wire a CommentService over a MongoDB collection using settings."""
    return CommentService(
        repository=MongoCommentRepository(collection),
        comment_max_length=settings.comment_max_length,
        reply_max_length=settings.reply_max_length,
        content_id_max_length=settings.content_id_max_length,
        default_email=settings.default_author_email,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Startup fails when no MongoDB URI is configured; the process exits
    instead of serving requests it can never fulfil.
    """
    settings = get_settings()
    logger.info(
        "starting_application",
        app_name=settings.app_name,
        version=settings.app_version,
        environment=settings.environment,
        port=settings.api_port,
        cors_origins=len(settings.cors_origins),
        cors_allow_localhost=settings.cors_allow_localhost,
    )

    try:
        with RequestContext(request_id="startup"):
            client = await init_mongo(settings)
    except MissingDatabaseURIError:
        logger.critical("mongodb_uri_missing", message="Set MONGODB_URI to start")
        raise

    collection = client[settings.mongodb_database][settings.mongodb_collection]
    app.state.comment_service = build_comment_service(collection, settings)
    logger.info("comment_service_initialized")

    yield

    # Shutdown
    logger.info("shutting_down_application")
    app.state.comment_service = None
    await shutdown_mongo()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="ROTWAVE Comments API",
        debug=False,
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        openapi_url="/openapi.json" if settings.is_development else None,
    )

    app.add_middleware(
        RequestContextMiddleware,
        log_requests=settings.log_requests,
        exclude_paths=settings.log_exclude_paths,
    )

    app.add_middleware(
        OriginAuditMiddleware,
        allowed_origins=settings.cors_origins,
        origin_regex=settings.cors_origin_regex,
    )

    # Origins outside the allow-list get no CORS headers
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        max_age=settings.cors_max_age,
    )

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(comments_router)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, Any]:
        """Root endpoint."""
        return {
            "message": "ROTWAVE Comments API is running!",
            "version": settings.app_version,
            "endpoints": AVAILABLE_ENDPOINTS,
        }

    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    uvicorn.run(
        "rotwave.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_config=None,
    )


if __name__ == "__main__":
    run()
