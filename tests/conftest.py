"""Shared fixtures.

Environment defaults are set before the application is imported so the
cached settings pick them up.
"""

import copy
import os
from collections.abc import Iterator

import pytest
from bson import ObjectId
from fastapi import FastAPI
from fastapi.testclient import TestClient


os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017/rotwave-test")
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from rotwave.comments.models import Comment, Reply  # noqa: E402
from rotwave.comments.service import (  # noqa: E402
    CommentService,
    StoreError,
    StoreUnavailableError,
)
from rotwave.main import create_app  # noqa: E402


class InMemoryCommentRepository:
    """CommentRepository keeping documents in a dict.

    Set ``unavailable`` or ``broken`` to make every call fail the way an
    unreachable or misbehaving MongoDB would after error translation.
    """

    def __init__(self) -> None:
        self.comments: dict[ObjectId, Comment] = {}
        self.unavailable = False
        self.broken = False

    def _check(self) -> None:
        if self.unavailable:
            raise StoreUnavailableError
        if self.broken:
            raise StoreError

    async def find_by_content(self, content_id: str) -> list[Comment]:
        self._check()
        found = [c for c in self.comments.values() if c.content_id == content_id]
        found.sort(key=lambda c: (c.date, c.comment_id), reverse=True)
        return [copy.deepcopy(c) for c in found]

    async def insert(self, comment: Comment) -> Comment:
        self._check()
        self.comments[comment.comment_id] = copy.deepcopy(comment)
        return comment

    async def delete_by_id(self, comment_id: ObjectId) -> Comment | None:
        self._check()
        return self.comments.pop(comment_id, None)

    async def push_reply(self, comment_id: ObjectId, reply: Reply) -> Comment | None:
        self._check()
        comment = self.comments.get(comment_id)
        if comment is None:
            return None
        comment.replies.append(copy.deepcopy(reply))
        return copy.deepcopy(comment)

    async def pull_reply(
        self, comment_id: ObjectId, reply_id: ObjectId
    ) -> Comment | None:
        self._check()
        comment = self.comments.get(comment_id)
        if comment is None or all(r.reply_id != reply_id for r in comment.replies):
            return None
        comment.replies = [r for r in comment.replies if r.reply_id != reply_id]
        return copy.deepcopy(comment)

    async def exists(self, comment_id: ObjectId) -> bool:
        self._check()
        return comment_id in self.comments

    async def count(self) -> int:
        self._check()
        return len(self.comments)

    async def ping(self) -> None:
        self._check()


@pytest.fixture
def repository() -> InMemoryCommentRepository:
    """Empty in-memory comment store."""
    return InMemoryCommentRepository()


@pytest.fixture
def comment_service(repository: InMemoryCommentRepository) -> CommentService:
    """CommentService over the in-memory store with the default policy."""
    return CommentService(
        repository=repository,
        comment_max_length=1000,
        reply_max_length=500,
        content_id_max_length=200,
        default_email="Guest",
    )


@pytest.fixture
def app(comment_service: CommentService) -> FastAPI:
    """Application with the in-memory comment service installed.

    The lifespan is not run, so no MongoDB connection is attempted.
    """
    application = create_app()
    application.state.comment_service = comment_service
    return application


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    """Test client for the application."""
    yield TestClient(app)
