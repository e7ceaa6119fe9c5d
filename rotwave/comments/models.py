"""Document models for comments and their embedded replies.

MongoDB layout: one ``comments`` collection. Each document is a comment
holding its replies as an embedded, append-ordered array:

    {
        "_id": ObjectId,
        "contentId": str,
        "email": str,
        "text": str,
        "date": datetime (UTC),
        "replies": [{"_id": ObjectId, "email": str, "text": str, "date": datetime}]
    }

Indexed by ``(contentId ASC, date DESC)``.
"""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Any

from bson import ObjectId


def utcnow() -> datetime:
    """Current time in UTC, rounded up to the millisecond precision BSON stores.

    Rounding up keeps stored timestamps from reading back earlier than the
    moment the request arrived.
    """
    now = datetime.now(UTC)
    remainder = now.microsecond % 1000
    if remainder:
        now += timedelta(microseconds=1000 - remainder)
    return now


def _as_utc(value: datetime) -> datetime:
    # Documents read without tz_aware come back naive but are UTC
    return value if value.tzinfo else value.replace(tzinfo=UTC)


@dataclass
class Reply:
    """A reply embedded in a comment's ``replies`` array."""

    reply_id: ObjectId
    email: str
    text: str
    date: datetime

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Reply":
        return cls(
            reply_id=doc["_id"],
            email=doc["email"],
            text=doc["text"],
            date=_as_utc(doc["date"]),
        )

    def to_document(self) -> dict[str, Any]:
        return {
            "_id": self.reply_id,
            "email": self.email,
            "text": self.text,
            "date": self.date,
        }


@dataclass
class Comment:
    """Top-level comment attached to a content item."""

    comment_id: ObjectId
    content_id: str
    email: str
    text: str
    date: datetime
    replies: list[Reply] = field(default_factory=list)

    @classmethod
    def from_document(cls, doc: dict[str, Any]) -> "Comment":
        """Build a Comment from a MongoDB document."""
        return cls(
            comment_id=doc["_id"],
            content_id=doc["contentId"],
            email=doc["email"],
            text=doc["text"],
            date=_as_utc(doc["date"]),
            replies=[Reply.from_document(r) for r in doc.get("replies") or []],
        )

    def to_document(self) -> dict[str, Any]:
        """Serialize to the stored document shape."""
        return {
            "_id": self.comment_id,
            "contentId": self.content_id,
            "email": self.email,
            "text": self.text,
            "date": self.date,
            "replies": [r.to_document() for r in self.replies],
        }


# ==============================================================================
# Factory Functions
# ==============================================================================


def create_comment(content_id: str, email: str, text: str) -> Comment:
    """Create a new comment with a fresh id, the current time and no replies."""
    return Comment(
        comment_id=ObjectId(),
        content_id=content_id,
        email=email,
        text=text,
        date=utcnow(),
        replies=[],
    )


def create_reply(email: str, text: str) -> Reply:
    """Create a new reply with a fresh id and the current time."""
    return Reply(
        reply_id=ObjectId(),
        email=email,
        text=text,
        date=utcnow(),
    )
