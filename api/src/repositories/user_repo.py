"""
User repository for database operations.

Provides async create/read operations for users on the ``users``
collection using pymongo's asyncio client, translating driver errors into
the API error taxonomy.
"""

import structlog
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pymongo import ASCENDING
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import DuplicateKeyError as MongoDuplicateKeyError, PyMongoError

from api.src.errors import DuplicateKeyError, StoreError
from api.src.models.common import parse_object_id

logger = structlog.get_logger(__name__)


class UserRepository:
    """Repository for user database operations."""

    def __init__(self, database: AsyncDatabase, collection_name: str = "users"):
        """
        Initialize user repository.

        Args:
            database: pymongo async database handle
            collection_name: Name of the users collection
        """
        self.collection = database[collection_name]

    async def ensure_indexes(self) -> None:
        """Create the unique email index."""
        try:
            await self.collection.create_index(
                [("email", ASCENDING)], unique=True, name="email_unique"
            )
        except PyMongoError as e:
            logger.error("user_index_create_failed", error=str(e))
            raise StoreError(str(e)) from e

    async def create_user(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a new user.

        Args:
            document: ``firstName``, ``lastName`` and ``email``

        Returns:
            Stored user document including ``_id`` and timestamps

        Raises:
            DuplicateKeyError: If the email is already registered
            StoreError: On any other database error
        """
        now = datetime.now(timezone.utc)
        user = {**document, "createdAt": now, "updatedAt": now}

        try:
            result = await self.collection.insert_one(user)
        except MongoDuplicateKeyError as e:
            logger.warning("email_already_exists", email=document.get("email"))
            raise DuplicateKeyError(
                {"message": "Email already exists", "keyValue": (e.details or {}).get("keyValue")}
            ) from e
        except PyMongoError as e:
            logger.error("user_create_failed", error=str(e))
            raise StoreError(str(e)) from e

        user["_id"] = result.inserted_id
        logger.info("user_created", user_id=str(result.inserted_id))
        return user

    async def get_user_by_id(self, user_id: str) -> Optional[Dict[str, Any]]:
        """
        Get user by ID.

        Args:
            user_id: Hex string id

        Returns:
            User document or None if not found

        Raises:
            ValidationError: If the id is malformed
            StoreError: On database error
        """
        oid = parse_object_id(user_id)

        try:
            user = await self.collection.find_one({"_id": oid})
        except PyMongoError as e:
            logger.error("user_get_by_id_failed", error=str(e), user_id=user_id)
            raise StoreError(str(e)) from e

        if user is None:
            logger.debug("user_not_found", user_id=user_id)
        return user
