"""
FastAPI dependency injection for the database and repositories.

Provides injectable dependencies for:
- The MongoDB client (one pooled ``AsyncMongoClient`` per process)
- Repository instances
- Validated list parameters for ``GET /posts``

All dependencies use FastAPI's dependency injection system and can be
replaced through ``app.dependency_overrides`` in tests.
"""

import math
import structlog
from typing import Optional
from fastapi import Depends, Query
from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase

from api.src.config import get_settings, Settings
from api.src.errors import ValidationError
from api.src.repositories.post_pipeline import SORTABLE_FIELDS, SORT_ORDERS
from api.src.repositories.post_repo import PostRepository
from api.src.repositories.user_repo import UserRepository

logger = structlog.get_logger(__name__)

LIST_ERROR = "Error fetching posts"

# Largest $skip BSON can encode (signed 64-bit).
MAX_SKIP = 2**63 - 1


# ============================================================================
# DATABASE CLIENT
# ============================================================================

_client: Optional[AsyncMongoClient] = None


def init_mongo_client(settings: Optional[Settings] = None) -> AsyncMongoClient:
    """
    Initialize the MongoDB client.

    Should be called during application startup. The driver connects
    lazily, so this never blocks on the network.

    Returns:
        AsyncMongoClient
    """
    global _client

    if _client is not None:
        return _client

    settings = settings or get_settings()
    mongodb = settings.mongodb

    _client = AsyncMongoClient(
        mongodb.connection_string,
        serverSelectionTimeoutMS=mongodb.server_selection_timeout_ms,
        maxPoolSize=mongodb.max_pool_size,
        tz_aware=True,
        appname=settings.app_name,
    )

    logger.info(
        "mongo_client_initialized",
        database=mongodb.database,
        max_pool_size=mongodb.max_pool_size,
    )

    return _client


async def close_mongo_client():
    """
    Close the MongoDB client.

    Should be called during application shutdown.
    """
    global _client, _indexes_ready

    if _client is not None:
        await _client.close()
        logger.info("mongo_client_closed")
        _client = None
        _indexes_ready = False


def get_mongo_client() -> AsyncMongoClient:
    """
    Get the MongoDB client.

    Raises:
        RuntimeError: If the client is not initialized
    """
    if _client is None:
        logger.error("mongo_client_not_initialized")
        raise RuntimeError(
            "MongoDB client not initialized. Call init_mongo_client() during startup."
        )
    return _client


def get_database() -> AsyncDatabase:
    """Get the application database."""
    return get_mongo_client()[get_settings().mongodb_database]


# ============================================================================
# REPOSITORY DEPENDENCIES
# ============================================================================

_indexes_ready = False


def _user_repository(database: AsyncDatabase) -> UserRepository:
    settings = get_settings()
    return UserRepository(database, collection_name=settings.users_collection)


def _post_repository(database: AsyncDatabase) -> PostRepository:
    settings = get_settings()
    return PostRepository(
        database,
        collection_name=settings.posts_collection,
        users_collection_name=settings.users_collection,
    )


async def ensure_indexes(database: AsyncDatabase) -> None:
    """
    Create the users and posts indexes once per process.

    Called at startup and again by every repository dependency until it
    succeeds, so a MongoDB that was unreachable at startup still gets its
    unique email index before the first write.

    Raises:
        StoreError: If MongoDB cannot create the indexes
    """
    global _indexes_ready

    if _indexes_ready:
        return

    await _user_repository(database).ensure_indexes()
    await _post_repository(database).ensure_indexes()

    _indexes_ready = True
    logger.info("database_indexes_ready")


async def get_user_repository(database: AsyncDatabase = Depends(get_database)) -> UserRepository:
    """Get user repository instance."""
    await ensure_indexes(database)
    return _user_repository(database)


async def get_post_repository(database: AsyncDatabase = Depends(get_database)) -> PostRepository:
    """Get post repository instance."""
    await ensure_indexes(database)
    return _post_repository(database)


# ============================================================================
# LIST PARAMETERS
# ============================================================================


class PostListParams:
    """Validated parameters of ``GET /posts``."""

    def __init__(
        self,
        sort_by: str = "createdAt",
        order: str = "asc",
        page: int = 1,
        limit: Optional[int] = None,
        min_value: Optional[str] = None,
        max_value: Optional[str] = None,
    ):
        """
        Initialize list parameters.

        Args:
            sort_by: Field to sort on
            order: ``asc`` or ``desc``
            page: 1-based page number
            limit: Page size (1 to ``pagination_max_limit``)
            min_value: Lower bound on the numeric description
            max_value: Upper bound on the numeric description

        Raises:
            ValidationError: If any parameter is out of range or malformed
        """
        settings = get_settings()

        if limit is None:
            limit = settings.pagination_default_limit

        if sort_by not in SORTABLE_FIELDS:
            raise ValidationError(
                {"sortBy": f"must be one of {sorted(SORTABLE_FIELDS)}, got: {sort_by}"},
                error=LIST_ERROR,
            )
        if order not in SORT_ORDERS:
            raise ValidationError(
                {"order": f"must be 'asc' or 'desc', got: {order}"}, error=LIST_ERROR
            )
        if page < 1:
            raise ValidationError({"page": f"must be at least 1, got: {page}"}, error=LIST_ERROR)
        if limit < 1 or limit > settings.pagination_max_limit:
            raise ValidationError(
                {"limit": f"must be between 1 and {settings.pagination_max_limit}, got: {limit}"},
                error=LIST_ERROR,
            )

        max_page = MAX_SKIP // limit + 1
        if page > max_page:
            raise ValidationError(
                {"page": f"must be at most {max_page} for limit {limit}, got: {page}"},
                error=LIST_ERROR,
            )

        self.sort_by = sort_by
        self.order = order
        self.page = page
        self.limit = limit
        self.min_value = self._parse_bound("min", min_value)
        self.max_value = self._parse_bound("max", max_value)

    @staticmethod
    def _parse_bound(name: str, raw: Optional[str]) -> Optional[float]:
        if raw is None or raw == "":
            return None
        try:
            value = float(raw)
        except ValueError:
            value = math.nan
        if not math.isfinite(value):
            raise ValidationError(
                {name: f"must be a number, got: {raw}"}, error=LIST_ERROR
            )
        return value


async def get_post_list_params(
    sort_by: str = Query("createdAt", alias="sortBy"),
    order: str = Query("asc"),
    page: int = Query(1),
    limit: Optional[int] = Query(None),
    min_value: Optional[str] = Query(None, alias="min"),
    max_value: Optional[str] = Query(None, alias="max"),
) -> PostListParams:
    """
    Get list parameters from the query string.

    Example:
        @router.get("/posts")
        async def list_posts(params: PostListParams = Depends(get_post_list_params)):
            ...
    """
    return PostListParams(
        sort_by=sort_by,
        order=order,
        page=page,
        limit=limit,
        min_value=min_value,
        max_value=max_value,
    )
