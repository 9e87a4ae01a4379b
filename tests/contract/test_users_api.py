"""
Contract tests for the users endpoints.

Tests verify the API contract for:
- POST /users
- GET /users/{id}
"""

from unittest.mock import MagicMock

import pytest
from bson import ObjectId
from httpx import AsyncClient

from api.src.errors import DuplicateKeyError, StoreError, ValidationError
from api.src.routers import users as users_router
from tests.support.documents import make_user

pytestmark = pytest.mark.contract

USER_BODY = {"firstName": "A", "lastName": "B", "email": "a@x.com"}


class TestCreateUser:
    """Contract tests for POST /users."""

    async def test_create_user(self, client: AsyncClient, user_repo):
        """Test successful creation returns 201 with the stored user."""
        stored = make_user()
        user_repo.create_user.return_value = stored

        response = await client.post("/users", json=USER_BODY)

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "User created"
        assert data["user"]["id"] == str(stored["_id"])
        assert data["user"]["email"] == "a@x.com"
        assert data["user"]["firstName"] == "A"
        assert "createdAt" in data["user"]
        assert "_id" not in data["user"]

        user_repo.create_user.assert_awaited_once_with(USER_BODY)

    async def test_missing_email(self, client: AsyncClient, user_repo):
        response = await client.post("/users", json={"firstName": "A", "lastName": "B"})

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "Validation failed"
        assert data["details"][0]["field"] == "email"
        user_repo.create_user.assert_not_awaited()

    async def test_empty_first_name(self, client: AsyncClient, user_repo):
        response = await client.post("/users", json={**USER_BODY, "firstName": ""})

        assert response.status_code == 400
        user_repo.create_user.assert_not_awaited()

    async def test_duplicate_email(self, client: AsyncClient, user_repo):
        """Test a second user with the same email is rejected."""
        user_repo.create_user.side_effect = DuplicateKeyError(
            {"message": "Email already exists", "keyValue": {"email": "a@x.com"}}
        )

        response = await client.post("/users", json=USER_BODY)

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "Error creating user"
        assert data["details"]["keyValue"] == {"email": "a@x.com"}

    async def test_store_failure(self, client: AsyncClient, user_repo):
        user_repo.create_user.side_effect = StoreError("no servers")

        response = await client.post("/users", json=USER_BODY)

        assert response.status_code == 400
        assert response.json() == {"error": "Error creating user", "details": "no servers"}


class TestGetUser:
    """Contract tests for GET /users/{id}."""

    async def test_get_user(self, client: AsyncClient, user_repo):
        stored = make_user(email="c@x.com")
        user_repo.get_user_by_id.return_value = stored

        response = await client.get(f"/users/{stored['_id']}")

        assert response.status_code == 200
        assert response.json()["user"]["email"] == "c@x.com"
        user_repo.get_user_by_id.assert_awaited_once_with(str(stored["_id"]))

    async def test_missing_user(self, client: AsyncClient, user_repo):
        user_repo.get_user_by_id.return_value = None
        user_id = str(ObjectId())

        response = await client.get(f"/users/{user_id}")

        assert response.status_code == 404
        assert response.json() == {"error": "User not found", "details": {"id": user_id}}

    async def test_malformed_id(self, client: AsyncClient, user_repo):
        user_repo.get_user_by_id.side_effect = ValidationError({"id": "'abc' is not a valid identifier"})

        response = await client.get("/users/abc")

        assert response.status_code == 400
        assert response.json()["error"] == "Error fetching user"

    async def test_missing_user_logged(self, client: AsyncClient, user_repo, monkeypatch):
        route_logger = MagicMock()
        monkeypatch.setattr(users_router, "logger", route_logger)
        user_repo.get_user_by_id.return_value = None
        user_id = str(ObjectId())

        await client.get(f"/users/{user_id}")

        route_logger.warning.assert_called_once_with("user_not_found", user_id=user_id)
