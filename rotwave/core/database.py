# ruff: noqa: PLW0603
"""MongoDB connection management.

Owns the process-wide ``AsyncMongoClient`` (and its connection pool) and
ensures the comment collection indexes exist.
"""

from typing import TYPE_CHECKING, Any

from pymongo import ASCENDING, DESCENDING, AsyncMongoClient
from pymongo.errors import PyMongoError

from rotwave.core.logging import get_logger


if TYPE_CHECKING:
    from pymongo.asynchronous.collection import AsyncCollection

    from rotwave.config.settings import Settings


logger = get_logger(__name__)

# Global MongoDB client
_mongo_client: AsyncMongoClient | None = None

COMMENTS_INDEX_NAME = "contentId_1_date_-1"


class MissingDatabaseURIError(RuntimeError):
    """Raised at startup when no MongoDB connection string is configured."""


def create_client(settings: "Settings") -> AsyncMongoClient:
    """Build a client from settings without touching the network."""
    if not settings.mongodb_uri:
        msg = "MONGODB_URI is not set"
        raise MissingDatabaseURIError(msg)

    return AsyncMongoClient(
        settings.mongodb_uri,
        serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
        connectTimeoutMS=settings.mongodb_connect_timeout_ms,
        socketTimeoutMS=settings.mongodb_socket_timeout_ms,
        maxPoolSize=settings.mongodb_max_pool_size,
        tz_aware=True,
        appname=settings.app_name,
    )


async def ensure_indexes(collection: "AsyncCollection[dict[str, Any]]") -> None:
    """Create the (contentId, date desc) index used by comment listing."""
    await collection.create_index(
        [("contentId", ASCENDING), ("date", DESCENDING)],
        name=COMMENTS_INDEX_NAME,
    )


async def init_mongo(settings: "Settings") -> AsyncMongoClient:
    """Initialize the MongoDB client.

    A missing URI is fatal. An unreachable server is only logged: the driver
    keeps retrying server selection and requests fail with 503 meanwhile.

    Args:
        settings: Application settings.

    Returns:
        The connected client.

    Raises:
        MissingDatabaseURIError: If ``mongodb_uri`` is not configured.
    """
    global _mongo_client

    _mongo_client = create_client(settings)
    collection = _mongo_client[settings.mongodb_database][settings.mongodb_collection]

    try:
        await _mongo_client.admin.command("ping")
        await ensure_indexes(collection)
        logger.info(
            "mongodb_connected",
            uri=settings.mongodb_uri,
            database=settings.mongodb_database,
            collection=settings.mongodb_collection,
        )
    except PyMongoError as e:
        logger.warning(
            "mongodb_connection_failed",
            error=str(e),
            error_type=type(e).__name__,
        )

    return _mongo_client


async def shutdown_mongo() -> None:
    """Close the MongoDB client and its pool."""
    global _mongo_client

    if _mongo_client is not None:
        await _mongo_client.close()
        logger.info("mongodb_disconnected")
        _mongo_client = None


def get_mongo_client() -> AsyncMongoClient | None:
    """Get the MongoDB client instance."""
    return _mongo_client
