"""Storage access for comment documents.

``CommentRepository`` is the capability the service depends on. The MongoDB
implementation performs every mutation of ``replies`` with a single atomic
update (``$push`` / ``$pull``), so concurrent reply writes to the same
comment never overwrite each other.
"""

from typing import TYPE_CHECKING, Any, Protocol

from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import ConnectionFailure, ExecutionTimeout, PyMongoError

from rotwave.core.database import ensure_indexes
from rotwave.core.logging import get_logger

from .models import Comment, Reply
from .service import CommentError, StoreError, StoreUnavailableError


if TYPE_CHECKING:
    from pymongo.asynchronous.collection import AsyncCollection


logger = get_logger(__name__)


class CommentRepository(Protocol):
    """Find/insert/update/delete operations on comment documents."""

    async def find_by_content(self, content_id: str) -> list[Comment]:
        """Return comments for a content item, newest first."""
        ...

    async def insert(self, comment: Comment) -> Comment:
        """Persist a new comment."""
        ...

    async def delete_by_id(self, comment_id: ObjectId) -> Comment | None:
        """Delete a comment, returning its last state or None if absent."""
        ...

    async def push_reply(self, comment_id: ObjectId, reply: Reply) -> Comment | None:
        """Append a reply, returning the updated comment or None if absent."""
        ...

    async def pull_reply(
        self, comment_id: ObjectId, reply_id: ObjectId
    ) -> Comment | None:
        """Remove a reply, returning the updated comment.

        Returns None when the comment or the reply does not exist.
        """
        ...

    async def exists(self, comment_id: ObjectId) -> bool:
        """Check whether a comment exists."""
        ...

    async def count(self) -> int:
        """Count stored comments."""
        ...

    async def ping(self) -> None:
        """Raise StoreUnavailableError if the store cannot be reached."""
        ...


def translate_store_error(error: PyMongoError, operation: str) -> CommentError:
    """Map a driver error onto the service error taxonomy."""
    if isinstance(error, ConnectionFailure | ExecutionTimeout):
        logger.error(
            "store_unavailable",
            operation=operation,
            error=str(error),
            error_type=type(error).__name__,
        )
        return StoreUnavailableError()

    logger.error(
        "store_error",
        operation=operation,
        error=str(error),
        error_type=type(error).__name__,
    )
    return StoreError()

class MongoCommentRepository:
    """CommentRepository backed by a MongoDB collection.

    The listing index is created after the first operation that reaches the
    server, so a process that booted while MongoDB was down still gets it.
    """

    def __init__(self, collection: "AsyncCollection[dict[str, Any]]") -> None:
        self.collection = collection
        self.indexes_ready = False

    async def _ensure_indexes(self) -> None:
        if self.indexes_ready:
            return
        try:
            await ensure_indexes(self.collection)
        except PyMongoError as e:
            # Retried after the next successful operation
            logger.warning(
                "comment_indexes_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return
        self.indexes_ready = True
        logger.info("comment_indexes_ensured")

    async def find_by_content(self, content_id: str) -> list[Comment]:
        try:
            cursor = self.collection.find({"contentId": content_id}).sort(
                [("date", DESCENDING), ("_id", DESCENDING)]
            )
            comments = [Comment.from_document(doc) async for doc in cursor]
        except PyMongoError as e:
            raise translate_store_error(e, "find_by_content") from e
        await self._ensure_indexes()
        return comments

    async def insert(self, comment: Comment) -> Comment:
        try:
            await self.collection.insert_one(comment.to_document())
        except PyMongoError as e:
            raise translate_store_error(e, "insert") from e
        await self._ensure_indexes()
        return comment

    async def delete_by_id(self, comment_id: ObjectId) -> Comment | None:
        try:
            doc = await self.collection.find_one_and_delete({"_id": comment_id})
        except PyMongoError as e:
            raise translate_store_error(e, "delete_by_id") from e
        await self._ensure_indexes()
        return Comment.from_document(doc) if doc else None

    async def push_reply(self, comment_id: ObjectId, reply: Reply) -> Comment | None:
        try:
            doc = await self.collection.find_one_and_update(
                {"_id": comment_id},
                {"$push": {"replies": reply.to_document()}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise translate_store_error(e, "push_reply") from e
        await self._ensure_indexes()
        return Comment.from_document(doc) if doc else None

    async def pull_reply(
        self, comment_id: ObjectId, reply_id: ObjectId
    ) -> Comment | None:
        # Matching on replies._id makes a missing reply a no-match
        try:
            doc = await self.collection.find_one_and_update(
                {"_id": comment_id, "replies._id": reply_id},
                {"$pull": {"replies": {"_id": reply_id}}},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise translate_store_error(e, "pull_reply") from e
        await self._ensure_indexes()
        return Comment.from_document(doc) if doc else None

    async def exists(self, comment_id: ObjectId) -> bool:
        try:
            count = await self.collection.count_documents({"_id": comment_id}, limit=1)
        except PyMongoError as e:
            raise translate_store_error(e, "exists") from e
        return count > 0

    async def count(self) -> int:
        """Approximate comment count from collection metadata."""
        try:
            count = await self.collection.estimated_document_count()
        except PyMongoError as e:
            raise translate_store_error(e, "count") from e
        await self._ensure_indexes()
        return count

    async def ping(self) -> None:
        try:
            await self.collection.database.client.admin.command("ping")
        except PyMongoError as e:
            raise translate_store_error(e, "ping") from e
        await self._ensure_indexes()
