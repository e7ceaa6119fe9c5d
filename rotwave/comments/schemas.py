"""Pydantic schemas for the comment API.

Attributes are snake_case in Python and camelCase on the wire
(``contentId``, ``parentCommentId``, ``deletedComment``).
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import Comment, Reply


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


def _strip_required(value: str, message: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(message)
    return value


def _strip_optional(value: Any) -> Any:
    # Runs before type and length checks; non-strings fall through to them
    if not isinstance(value, str):
        return value
    return value.strip() or None


# ==============================================================================
# Request Schemas
# ==============================================================================


class CreateCommentRequest(CamelModel):
    """Request to create a new comment."""

    content_id: str
    email: str | None = Field(default=None, max_length=320)
    text: str

    @field_validator("content_id")
    @classmethod
    def validate_content_id(cls, v: str) -> str:
        return _strip_required(v, "contentId cannot be empty")

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Strip whitespace and reject empty text."""
        return _strip_required(v, "Comment text cannot be empty")

    @field_validator("email", mode="before")
    @classmethod
    def validate_email(cls, v: Any) -> Any:
        return _strip_optional(v)


class CreateReplyRequest(CamelModel):
    """Request to add a reply to an existing comment.

    ``content_id`` is accepted for compatibility with existing clients and is
    not used to locate the parent comment.
    """

    content_id: str | None = None
    parent_comment_id: str
    email: str | None = Field(default=None, max_length=320)
    text: str

    @field_validator("parent_comment_id")
    @classmethod
    def validate_parent_comment_id(cls, v: str) -> str:
        return _strip_required(v, "parentCommentId cannot be empty")

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Strip whitespace and reject empty text."""
        return _strip_required(v, "Reply text cannot be empty")

    @field_validator("email", "content_id", mode="before")
    @classmethod
    def validate_optional(cls, v: Any) -> Any:
        return _strip_optional(v)


# ==============================================================================
# Response Schemas
# ==============================================================================


class ReplyResponse(CamelModel):
    """A reply as returned to clients."""

    id: str
    email: str
    text: str
    date: datetime

    @classmethod
    def from_reply(cls, reply: Reply) -> "ReplyResponse":
        return cls(
            id=str(reply.reply_id),
            email=reply.email,
            text=reply.text,
            date=reply.date,
        )


class CommentResponse(CamelModel):
    """A comment with its replies in append order."""

    id: str
    content_id: str
    email: str
    text: str
    date: datetime
    replies: list[ReplyResponse] = Field(default_factory=list)

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentResponse":
        """Create response from a Comment entity."""
        return cls(
            id=str(comment.comment_id),
            content_id=comment.content_id,
            email=comment.email,
            text=comment.text,
            date=comment.date,
            replies=[ReplyResponse.from_reply(r) for r in comment.replies],
        )


class DeleteCommentResponse(CamelModel):
    """Response for a deleted comment."""

    message: str = "Comment deleted successfully"
    deleted_comment: CommentResponse


class DeleteReplyResponse(CamelModel):
    """Response for a deleted reply, carrying the updated parent."""

    message: str = "Reply deleted successfully"
    comment: CommentResponse

