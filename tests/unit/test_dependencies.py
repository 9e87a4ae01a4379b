"""
Unit tests for the database dependencies.

Tests cover:
- Index creation retried by the repository dependencies after a failure
- Index creation running only once after it succeeds
- Startup preparation tolerating an unreachable MongoDB
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from api.src import dependencies
from api.src.dependencies import get_post_repository, get_user_repository
from api.src.errors import StoreError
from api.src.main import prepare_database
from api.src.repositories.post_repo import PostRepository
from api.src.repositories.user_repo import UserRepository


@pytest.fixture(autouse=True)
def indexes_not_ready(monkeypatch):
    monkeypatch.setattr(dependencies, "_indexes_ready", False)


@pytest.fixture
def collection() -> MagicMock:
    collection = MagicMock()
    collection.create_index = AsyncMock()
    return collection


@pytest.fixture
def database(collection: MagicMock) -> MagicMock:
    database = MagicMock()
    database.__getitem__.return_value = collection
    return database


class TestIndexCreation:
    """Tests for lazy index creation."""

    async def test_retried_after_failure(self, database, collection):
        """Test a request after a failed attempt creates the unique email index."""
        collection.create_index.side_effect = [
            ServerSelectionTimeoutError("no servers"),
            None,
            None,
            None,
        ]

        with pytest.raises(StoreError):
            await get_user_repository(database)
        assert dependencies._indexes_ready is False

        repo = await get_user_repository(database)

        assert isinstance(repo, UserRepository)
        assert dependencies._indexes_ready is True
        email_index = collection.create_index.await_args_list[1]
        assert email_index.kwargs["unique"] is True

    async def test_created_once(self, database, collection):
        await get_user_repository(database)
        post_repo = await get_post_repository(database)
        await get_user_repository(database)

        assert isinstance(post_repo, PostRepository)
        # users.email, posts.userId, posts.createdAt
        assert collection.create_index.await_count == 3


class TestPrepareDatabase:
    """Tests for startup preparation."""

    async def test_unreachable_database_tolerated(self, monkeypatch):
        client = MagicMock()
        client.admin.command = AsyncMock(side_effect=ServerSelectionTimeoutError("no servers"))
        monkeypatch.setattr(dependencies, "_client", client)

        await prepare_database()

        assert dependencies._indexes_ready is False

    async def test_indexes_created_at_startup(self, monkeypatch, database, collection):
        client = MagicMock()
        client.admin.command = AsyncMock(return_value={"ok": 1})
        client.__getitem__.return_value = database
        monkeypatch.setattr(dependencies, "_client", client)

        await prepare_database()

        assert dependencies._indexes_ready is True
        assert collection.create_index.await_count == 3
