"""Tests for MongoCommentRepository with a mocked collection."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo import DESCENDING, ReturnDocument
from pymongo.errors import (
    NetworkTimeout,
    OperationFailure,
    ServerSelectionTimeoutError,
)

from rotwave.comments.models import create_comment, create_reply
from rotwave.comments.repository import MongoCommentRepository
from rotwave.comments.service import StoreError, StoreUnavailableError
from rotwave.core.database import COMMENTS_INDEX_NAME


class FakeCursor:
    """Async cursor double supporting ``sort`` and ``async for``."""

    def __init__(self, docs, error=None):
        self.docs = docs
        self.error = error
        self.sort_spec = None

    def sort(self, spec):
        self.sort_spec = spec
        return self

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        if self.error:
            raise self.error
        for doc in self.docs:
            yield doc


def comment_document(content_id="post-1", replies=None):
    return {
        "_id": ObjectId(),
        "contentId": content_id,
        "email": "a@x.com",
        "text": "hi",
        "date": datetime(2026, 1, 1, tzinfo=UTC),
        "replies": replies or [],
    }


@pytest.fixture
def collection():
    """Mock AsyncCollection."""
    mock = MagicMock()
    mock.insert_one = AsyncMock()
    mock.find_one_and_delete = AsyncMock(return_value=None)
    mock.find_one_and_update = AsyncMock(return_value=None)
    mock.count_documents = AsyncMock(return_value=0)
    mock.estimated_document_count = AsyncMock(return_value=0)
    mock.create_index = AsyncMock()
    mock.database.client.admin.command = AsyncMock(return_value={"ok": 1})
    return mock


@pytest.fixture
def repo(collection):
    return MongoCommentRepository(collection)


class TestFindByContent:
    @pytest.mark.asyncio
    async def test_queries_and_sorts_newest_first(self, repo, collection):
        doc = comment_document()
        cursor = FakeCursor([doc])
        collection.find = MagicMock(return_value=cursor)

        comments = await repo.find_by_content("post-1")

        collection.find.assert_called_once_with({"contentId": "post-1"})
        assert cursor.sort_spec == [("date", DESCENDING), ("_id", DESCENDING)]
        assert [c.comment_id for c in comments] == [doc["_id"]]

    @pytest.mark.asyncio
    async def test_selection_timeout_is_unavailable(self, repo, collection):
        collection.find = MagicMock(
            return_value=FakeCursor([], error=ServerSelectionTimeoutError("no servers"))
        )
        with pytest.raises(StoreUnavailableError):
            await repo.find_by_content("post-1")


class TestInsert:
    @pytest.mark.asyncio
    async def test_inserts_document(self, repo, collection):
        comment = create_comment(content_id="post-1", email="a@x.com", text="hi")

        await repo.insert(comment)

        [doc] = collection.insert_one.await_args.args
        assert doc["_id"] == comment.comment_id
        assert doc["contentId"] == "post-1"
        assert doc["replies"] == []

    @pytest.mark.asyncio
    async def test_network_timeout_is_unavailable(self, repo, collection):
        collection.insert_one.side_effect = NetworkTimeout("timed out")
        comment = create_comment(content_id="post-1", email="a@x.com", text="hi")
        with pytest.raises(StoreUnavailableError):
            await repo.insert(comment)

    @pytest.mark.asyncio
    async def test_operation_failure_is_store_error(self, repo, collection):
        collection.insert_one.side_effect = OperationFailure("bad")
        comment = create_comment(content_id="post-1", email="a@x.com", text="hi")
        with pytest.raises(StoreError):
            await repo.insert(comment)


class TestDelete:
    @pytest.mark.asyncio
    async def test_returns_deleted_snapshot(self, repo, collection):
        doc = comment_document()
        collection.find_one_and_delete.return_value = doc

        deleted = await repo.delete_by_id(doc["_id"])

        collection.find_one_and_delete.assert_awaited_once_with({"_id": doc["_id"]})
        assert deleted.comment_id == doc["_id"]

    @pytest.mark.asyncio
    async def test_missing_returns_none(self, repo):
        assert await repo.delete_by_id(ObjectId()) is None


class TestReplies:
    @pytest.mark.asyncio
    async def test_push_is_atomic_append(self, repo, collection):
        reply = create_reply(email="b@x.com", text="r")
        doc = comment_document(replies=[reply.to_document()])
        collection.find_one_and_update.return_value = doc

        updated = await repo.push_reply(doc["_id"], reply)

        collection.find_one_and_update.assert_awaited_once_with(
            {"_id": doc["_id"]},
            {"$push": {"replies": reply.to_document()}},
            return_document=ReturnDocument.AFTER,
        )
        assert updated.replies[0].reply_id == reply.reply_id

    @pytest.mark.asyncio
    async def test_push_missing_parent(self, repo):
        reply = create_reply(email="b@x.com", text="r")
        assert await repo.push_reply(ObjectId(), reply) is None

    @pytest.mark.asyncio
    async def test_pull_matches_reply_id(self, repo, collection):
        comment_id, reply_id = ObjectId(), ObjectId()
        collection.find_one_and_update.return_value = comment_document()

        await repo.pull_reply(comment_id, reply_id)

        collection.find_one_and_update.assert_awaited_once_with(
            {"_id": comment_id, "replies._id": reply_id},
            {"$pull": {"replies": {"_id": reply_id}}},
            return_document=ReturnDocument.AFTER,
        )

    @pytest.mark.asyncio
    async def test_exists(self, repo, collection):
        collection.count_documents.return_value = 1
        assert await repo.exists(ObjectId()) is True


class TestPing:
    @pytest.mark.asyncio
    async def test_ping_ok(self, repo, collection):
        await repo.ping()
        collection.database.client.admin.command.assert_awaited_once_with("ping")

    @pytest.mark.asyncio
    async def test_ping_unreachable(self, repo, collection):
        collection.database.client.admin.command.side_effect = (
            ServerSelectionTimeoutError("down")
        )
        with pytest.raises(StoreUnavailableError):
            await repo.ping()

    @pytest.mark.asyncio
    async def test_count_uses_collection_metadata(self, repo, collection):
        collection.estimated_document_count.return_value = 7
        assert await repo.count() == 7
        collection.count_documents.assert_not_awaited()


class TestIndexes:
    @pytest.mark.asyncio
    async def test_created_once_store_becomes_reachable(self, repo, collection):
        collection.database.client.admin.command.side_effect = [
            ServerSelectionTimeoutError("down"),
            {"ok": 1},
            {"ok": 1},
        ]

        with pytest.raises(StoreUnavailableError):
            await repo.ping()
        collection.create_index.assert_not_awaited()

        await repo.ping()
        await repo.ping()

        collection.create_index.assert_awaited_once()
        assert collection.create_index.await_args.kwargs["name"] == COMMENTS_INDEX_NAME
        assert repo.indexes_ready is True

    @pytest.mark.asyncio
    async def test_index_failure_retried_on_next_operation(self, repo, collection):
        collection.create_index.side_effect = [OperationFailure("not yet"), None]
        comment = create_comment(content_id="post-1", email="a@x.com", text="hi")

        await repo.insert(comment)
        assert repo.indexes_ready is False

        await repo.insert(comment)
        assert repo.indexes_ready is True
        assert collection.create_index.await_count == 2
