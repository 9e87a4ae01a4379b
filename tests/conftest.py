"""
Shared fixtures for API tests.

Contract tests drive the ASGI app through httpx with both repositories
replaced by ``AsyncMock`` objects; the lifespan (and therefore MongoDB) is
never started.
"""

from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from api.src.dependencies import get_post_repository, get_user_repository
from api.src.main import app
from api.src.repositories.post_repo import PostRepository
from api.src.repositories.user_repo import UserRepository


@pytest.fixture
def user_repo() -> AsyncMock:
    return AsyncMock(spec=UserRepository)


@pytest.fixture
def post_repo() -> AsyncMock:
    return AsyncMock(spec=PostRepository)


@pytest_asyncio.fixture(name="client")
async def client_fixture(user_repo: AsyncMock, post_repo: AsyncMock):
    app.dependency_overrides[get_user_repository] = lambda: user_repo
    app.dependency_overrides[get_post_repository] = lambda: post_repo

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
