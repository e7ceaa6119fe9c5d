"""Comment service layer.

Business logic for:
- Listing comments of a content item, newest first
- Creating and deleting comments
- Appending and removing threaded replies

Each operation validates its input, performs exactly one store operation
(plus an existence probe to tell a missing reply from a missing comment)
and returns domain entities. Failures surface as ``CommentError``
subclasses carrying a machine-readable ``code``.
"""

from typing import TYPE_CHECKING

from bson import ObjectId

from rotwave.core.logging import get_logger

from .models import Comment, create_comment, create_reply


if TYPE_CHECKING:
    from .repository import CommentRepository


logger = get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class CommentError(Exception):
    """Base comment error."""

    def __init__(self, message: str, code: str = "comment_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class InvalidInputError(CommentError):
    """Missing, empty or oversized field, or malformed identifier."""

    def __init__(self, message: str = "Invalid input", details: list[str] | None = None):
        super().__init__(message, "invalid_input")
        self.details = details or []


class CommentNotFoundError(CommentError):
    """Comment not found."""

    def __init__(self, message: str = "Comment not found"):
        super().__init__(message, "comment_not_found")


class ReplyNotFoundError(CommentError):
    """Reply not found within an existing comment."""

    def __init__(self, message: str = "Reply not found"):
        super().__init__(message, "reply_not_found")


class StoreUnavailableError(CommentError):
    """The document store could not be reached in time."""

    def __init__(self, message: str = "Database unavailable"):
        super().__init__(message, "store_unavailable")


class StoreError(CommentError):
    """Unexpected failure reported by the document store."""

    def __init__(self, message: str = "Database error"):
        super().__init__(message, "store_error")


# ==============================================================================
# Validation Helpers
# ==============================================================================


def parse_object_id(value: str | None, field_name: str) -> ObjectId:
    """Parse a 24-hex-digit identifier or raise InvalidInputError."""
    value = (value or "").strip()
    if not value:
        raise InvalidInputError(
            f"{field_name} is required", details=[f"{field_name}: required"]
        )
    if not ObjectId.is_valid(value):
        raise InvalidInputError(
            f"Invalid {field_name}",
            details=[f"{field_name}: not a valid identifier"],
        )
    return ObjectId(value)


def require_text(value: str | None, field_name: str, max_length: int) -> str:
    """Trim text and enforce that it is non-empty and within ``max_length``."""
    text = (value or "").strip()
    if not text:
        raise InvalidInputError(
            f"{field_name} cannot be empty", details=[f"{field_name}: required"]
        )
    if len(text) > max_length:
        raise InvalidInputError(
            f"{field_name} exceeds {max_length} characters",
            details=[f"{field_name}: at most {max_length} characters"],
        )
    return text


# ==============================================================================
# Comment Service
# ==============================================================================


class CommentService:
    """Service for comment and reply management."""

    def __init__(
        self,
        repository: "CommentRepository",
        comment_max_length: int = 1000,
        reply_max_length: int = 500,
        content_id_max_length: int = 200,
        default_email: str = "Guest",
    ):
        """Initialize with the store capability and the validation policy."""
        self.repository = repository
        self.comment_max_length = comment_max_length
        self.reply_max_length = reply_max_length
        self.content_id_max_length = content_id_max_length
        self.default_email = default_email

    def _resolve_email(self, email: str | None) -> str:
        return (email or "").strip() or self.default_email

    # ==========================================================================
    # Comments
    # ==========================================================================

    async def list_comments(self, content_id: str) -> list[Comment]:
        """Get all comments for a content item, sorted by date descending.

        Returns an empty list when the content item has no comments.
        """
        content_id = require_text(content_id, "contentId", self.content_id_max_length)

        comments = await self.repository.find_by_content(content_id)

        logger.info("comments_listed", content_id=content_id, count=len(comments))
        return comments

    async def create_comment(
        self,
        content_id: str,
        text: str,
        email: str | None = None,
    ) -> Comment:
        """Create a new comment with no replies.

        Args:
            content_id: Content item the comment belongs to.
            text: Comment text, trimmed before storing.
            email: Author; falls back to the default author when blank.

        Returns:
            The stored comment with its id and timestamp.
        """
        comment = create_comment(
            content_id=require_text(
                content_id, "contentId", self.content_id_max_length
            ),
            email=self._resolve_email(email),
            text=require_text(text, "text", self.comment_max_length),
        )

        await self.repository.insert(comment)

        logger.info(
            "comment_created",
            comment_id=str(comment.comment_id),
            content_id=comment.content_id,
        )
        return comment

    async def delete_comment(self, comment_id: str) -> Comment:
        """Delete a comment and all of its replies.

        Returns:
            Snapshot of the comment as it was before deletion.
        """
        oid = parse_object_id(comment_id, "commentId")

        deleted = await self.repository.delete_by_id(oid)
        if deleted is None:
            logger.warning("comment_not_found", comment_id=comment_id)
            raise CommentNotFoundError

        logger.info(
            "comment_deleted",
            comment_id=comment_id,
            content_id=deleted.content_id,
            replies_removed=len(deleted.replies),
        )
        return deleted

    # ==========================================================================
    # Replies
    # ==========================================================================

    async def add_reply(
        self,
        parent_comment_id: str,
        text: str,
        email: str | None = None,
    ) -> Comment:
        """Append a reply to an existing comment.

        The append is a single atomic store update, so concurrent replies to
        the same comment are all kept.

        Returns:
            The parent comment including the new reply.
        """
        oid = parse_object_id(parent_comment_id, "parentCommentId")
        reply = create_reply(
            email=self._resolve_email(email),
            text=require_text(text, "text", self.reply_max_length),
        )

        updated = await self.repository.push_reply(oid, reply)
        if updated is None:
            logger.warning("parent_comment_not_found", comment_id=parent_comment_id)
            raise CommentNotFoundError("Parent comment not found")

        logger.info(
            "reply_added",
            comment_id=parent_comment_id,
            reply_id=str(reply.reply_id),
            reply_count=len(updated.replies),
        )
        return updated

    async def delete_reply(self, comment_id: str, reply_id: str) -> Comment:
        """Remove exactly one reply from a comment.

        Returns:
            The parent comment without the removed reply.
        """
        comment_oid = parse_object_id(comment_id, "commentId")
        reply_oid = parse_object_id(reply_id, "replyId")

        updated = await self.repository.pull_reply(comment_oid, reply_oid)
        if updated is None:
            if not await self.repository.exists(comment_oid):
                logger.warning("comment_not_found", comment_id=comment_id)
                raise CommentNotFoundError
            logger.warning(
                "reply_not_found", comment_id=comment_id, reply_id=reply_id
            )
            raise ReplyNotFoundError

        logger.info(
            "reply_deleted",
            comment_id=comment_id,
            reply_id=reply_id,
            reply_count=len(updated.replies),
        )
        return updated

    # ==========================================================================
    # Health
    # ==========================================================================

    async def count_comments(self) -> int:
        """Check the store is reachable and count stored comments."""
        await self.repository.ping()
        return await self.repository.count()
