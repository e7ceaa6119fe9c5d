# Core infrastructure
from rotwave.core.context import (
    RequestContext,
    clear_context,
    get_context,
    get_correlation_id,
    get_request_id,
    get_trace_id,
    set_correlation_id,
    set_request_id,
    set_trace_id,
)
from rotwave.core.database import (
    MissingDatabaseURIError,
    get_mongo_client,
    init_mongo,
    shutdown_mongo,
)
from rotwave.core.logging import configure_structlog, get_logger
from rotwave.core.middleware import (
    OriginAuditMiddleware,
    RequestContextMiddleware,
    is_origin_allowed,
)


__all__ = [
    "MissingDatabaseURIError",
    "OriginAuditMiddleware",
    "RequestContext",
    "RequestContextMiddleware",
    "clear_context",
    "configure_structlog",
    "get_context",
    "get_correlation_id",
    "get_logger",
    "get_mongo_client",
    "get_request_id",
    "get_trace_id",
    "init_mongo",
    "is_origin_allowed",
    "set_correlation_id",
    "set_request_id",
    "set_trace_id",
    "shutdown_mongo",
]
