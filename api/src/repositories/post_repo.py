"""
Post repository for database operations.

Provides async CRUD operations for posts and the enriched, paginated
listing that joins each post to its user through an aggregation pipeline.
"""

import asyncio
import structlog
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from pymongo import ASCENDING, ReturnDocument
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from api.src.errors import StoreError, ValidationError
from api.src.models.common import parse_object_id
from api.src.repositories.post_pipeline import build_description_filter, build_list_pipeline

logger = structlog.get_logger(__name__)


class PostRepository:
    """Repository for post database operations."""

    def __init__(
        self,
        database: AsyncDatabase,
        collection_name: str = "posts",
        users_collection_name: str = "users",
    ):
        """
        Initialize post repository.

        Args:
            database: pymongo async database handle
            collection_name: Name of the posts collection
            users_collection_name: Collection joined for ``user_details``
        """
        self.collection = database[collection_name]
        self.users_collection_name = users_collection_name

    async def ensure_indexes(self) -> None:
        """Index the user reference and the default sort key."""
        try:
            await self.collection.create_index([("userId", ASCENDING)], name="userId")
            await self.collection.create_index([("createdAt", ASCENDING)], name="createdAt")
        except PyMongoError as e:
            logger.error("post_index_create_failed", error=str(e))
            raise StoreError(str(e)) from e

    async def create_post(self, document: Dict[str, Any]) -> Dict[str, Any]:
        """
        Insert a new post.

        The referenced user is not required to exist.

        Args:
            document: ``title``, ``description``, ``photo`` and ``userId`` (ObjectId)

        Returns:
            Stored post document including ``_id`` and timestamps

        Raises:
            StoreError: On database error
        """
        now = datetime.now(timezone.utc)
        post = {**document, "createdAt": now, "updatedAt": now}

        try:
            result = await self.collection.insert_one(post)
        except PyMongoError as e:
            logger.error("post_create_failed", error=str(e))
            raise StoreError(str(e)) from e

        post["_id"] = result.inserted_id
        logger.info("post_created", post_id=str(result.inserted_id), user_id=str(post["userId"]))
        return post

    async def get_post_by_id(self, post_id: str) -> Optional[Dict[str, Any]]:
        """Get post by ID, or None if not found."""
        oid = parse_object_id(post_id)

        try:
            return await self.collection.find_one({"_id": oid})
        except PyMongoError as e:
            logger.error("post_get_by_id_failed", error=str(e), post_id=post_id)
            raise StoreError(str(e)) from e

    async def list_posts(
        self,
        sort_by: str,
        order: str,
        page: int,
        limit: int,
        min_value: Optional[float] = None,
        max_value: Optional[float] = None,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """
        Fetch one page of posts joined with their users.

        Args:
            sort_by: Sort field (see ``post_pipeline.SORTABLE_FIELDS``)
            order: ``asc`` or ``desc``
            page: 1-based page number
            limit: Page size
            min_value: Lower bound on the numeric description
            max_value: Upper bound on the numeric description

        Returns:
            Tuple of (posts on the page, total posts matching the filter)

        Raises:
            StoreError: On database error
        """
        match = build_description_filter(min_value, max_value)
        pipeline = build_list_pipeline(
            match,
            sort_by=sort_by,
            order=order,
            page=page,
            limit=limit,
            users_collection=self.users_collection_name,
        )

        # Both queries run to completion; the first failure is raised.
        results = await asyncio.gather(
            self._aggregate(pipeline),
            self.collection.count_documents(match),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, PyMongoError):
                logger.error("post_list_failed", error=str(result), page=page, limit=limit)
                raise StoreError(str(result)) from result
            if isinstance(result, BaseException):
                raise result

        posts, total = results

        logger.debug("posts_listed", count=len(posts), total=total, page=page)
        return posts, total

    async def _aggregate(self, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        cursor = await self.collection.aggregate(pipeline)
        return await cursor.to_list(length=None)

    async def update_post(self, post_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Apply a partial update.

        Args:
            post_id: Hex string id
            changes: Fields to ``$set``

        Returns:
            Post after the update, or None if no post has that id

        Raises:
            ValidationError: If the id is malformed or there is nothing to update
            StoreError: On database error
        """
        oid = parse_object_id(post_id)
        if not changes:
            raise ValidationError({"body": "No updatable fields supplied"})

        update = {"$set": {**changes, "updatedAt": datetime.now(timezone.utc)}}

        try:
            post = await self.collection.find_one_and_update(
                {"_id": oid},
                update,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error("post_update_failed", error=str(e), post_id=post_id)
            raise StoreError(str(e)) from e

        if post is None:
            logger.debug("post_not_found", post_id=post_id)
        else:
            logger.info("post_updated", post_id=post_id, fields=sorted(changes))
        return post

    async def delete_post(self, post_id: str) -> Optional[Dict[str, Any]]:
        """
        Delete a post.

        Returns:
            The deleted post, or None if no post has that id
        """
        oid = parse_object_id(post_id)

        try:
            post = await self.collection.find_one_and_delete({"_id": oid})
        except PyMongoError as e:
            logger.error("post_delete_failed", error=str(e), post_id=post_id)
            raise StoreError(str(e)) from e

        if post is None:
            logger.debug("post_not_found", post_id=post_id)
        else:
            logger.info("post_deleted", post_id=post_id)
        return post
