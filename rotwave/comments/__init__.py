"""Comment system module.

Provides comments attached to a ``contentId`` with one level of embedded
replies, stored as MongoDB documents.

The router is imported from ``rotwave.comments.router`` by the app factory.
"""

from .models import Comment, Reply, create_comment, create_reply
from .repository import CommentRepository, MongoCommentRepository
from .service import (
    CommentError,
    CommentNotFoundError,
    CommentService,
    InvalidInputError,
    ReplyNotFoundError,
    StoreError,
    StoreUnavailableError,
)


__all__ = [
    "Comment",
    "CommentError",
    "CommentNotFoundError",
    "CommentRepository",
    "CommentService",
    "InvalidInputError",
    "MongoCommentRepository",
    "Reply",
    "ReplyNotFoundError",
    "StoreError",
    "StoreUnavailableError",
    "create_comment",
    "create_reply",
]
