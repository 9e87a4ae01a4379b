"""
Posts router.

Provides REST API endpoints for:
- Post creation
- Enriched, paginated post listing
- Post lookup, partial update and deletion by id

Failures are returned as ``{"error": ..., "details": ...}`` with status 400,
or 404 when the id has no matching post.
"""

import structlog
from fastapi import APIRouter, Depends, status

from api.src.errors import ApiError, NotFoundError
from api.src.models.common import ErrorResponse
from api.src.models.post import (
    CreatePostRequest,
    EnrichedPost,
    PostCreatedResponse,
    PostDeletedResponse,
    PostEnvelope,
    PostListResponse,
    PostResponse,
    PostUpdatedResponse,
    UpdatePostRequest,
)
from api.src.repositories.post_pipeline import total_pages
from api.src.repositories.post_repo import PostRepository
from api.src.dependencies import (
    LIST_ERROR,
    PostListParams,
    get_post_list_params,
    get_post_repository,
)

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/posts",
    tags=["Posts"],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request or database error"},
    }
)

NOT_FOUND = {404: {"model": ErrorResponse, "description": "Post not found"}}


def _not_found(post_id: str, operation: str) -> NotFoundError:
    logger.warning("post_not_found", post_id=post_id, operation=operation)
    return NotFoundError({"id": post_id}, error="Post not found")


@router.post(
    "",
    response_model=PostCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Post",
    description="""
    Create a post.

    **Request Body:**
    - title, description, photo: required, non-empty
    - userId: id of the owning user (existence is not checked)
    """,
)
async def create_post(
    post_request: CreatePostRequest,
    post_repo: PostRepository = Depends(get_post_repository),
) -> PostCreatedResponse:
    """Create a new post."""
    try:
        post = await post_repo.create_post(post_request.to_document())
    except ApiError as e:
        logger.warning("post_create_rejected", user_id=post_request.userId, error=str(e))
        raise e.with_error("Error creating post")

    return PostCreatedResponse(post=PostResponse.model_validate(post))


@router.get(
    "",
    response_model=PostListResponse,
    summary="List Posts",
    description="""
    List posts joined with their users' firstName, lastName and email.

    **Query Parameters:**
    - sortBy: createdAt (default), updatedAt, title, description, photo, userId, id
    - order: asc (default) or desc
    - page: 1-based page number (default 1)
    - limit: page size (default 10)
    - min / max: inclusive bounds on the numeric value of description;
      posts with a non-numeric description are excluded when either is set

    totalPosts counts every post matching min/max regardless of paging.
    """,
)
async def list_posts(
    params: PostListParams = Depends(get_post_list_params),
    post_repo: PostRepository = Depends(get_post_repository),
) -> PostListResponse:
    """List one page of enriched posts."""
    try:
        posts, total = await post_repo.list_posts(
            sort_by=params.sort_by,
            order=params.order,
            page=params.page,
            limit=params.limit,
            min_value=params.min_value,
            max_value=params.max_value,
        )
    except ApiError as e:
        logger.warning("post_list_rejected", page=params.page, limit=params.limit, error=str(e))
        raise e.with_error(LIST_ERROR)

    logger.info("posts_page_served", page=params.page, count=len(posts), total=total)

    return PostListResponse(
        posts=[EnrichedPost.model_validate(post) for post in posts],
        totalPosts=total,
        totalPages=total_pages(total, params.limit),
        currentPage=params.page,
    )


@router.get(
    "/{post_id}",
    response_model=PostEnvelope,
    summary="Get Post",
    responses=NOT_FOUND,
)
async def get_post(
    post_id: str,
    post_repo: PostRepository = Depends(get_post_repository),
) -> PostEnvelope:
    """Get a post by id."""
    try:
        post = await post_repo.get_post_by_id(post_id)
    except ApiError as e:
        logger.warning("post_get_rejected", post_id=post_id, error=str(e))
        raise e.with_error("Error fetching post")

    if post is None:
        raise _not_found(post_id, "get")

    return PostEnvelope(post=PostResponse.model_validate(post))


@router.put(
    "/{post_id}",
    response_model=PostUpdatedResponse,
    summary="Update Post",
    description="""
    Apply a partial update. Only submitted fields change; unknown fields
    are ignored. Returns the post after the update.
    """,
    responses=NOT_FOUND,
)
async def update_post(
    post_id: str,
    update_request: UpdatePostRequest,
    post_repo: PostRepository = Depends(get_post_repository),
) -> PostUpdatedResponse:
    """Update a post."""
    try:
        post = await post_repo.update_post(post_id, update_request.to_update())
    except ApiError as e:
        logger.warning("post_update_rejected", post_id=post_id, error=str(e))
        raise e.with_error("Error updating post")

    if post is None:
        raise _not_found(post_id, "update")

    return PostUpdatedResponse(updatedPost=PostResponse.model_validate(post))


@router.delete(
    "/{post_id}",
    response_model=PostDeletedResponse,
    summary="Delete Post",
    responses=NOT_FOUND,
)
async def delete_post(
    post_id: str,
    post_repo: PostRepository = Depends(get_post_repository),
) -> PostDeletedResponse:
    """Delete a post and return its last state."""
    try:
        post = await post_repo.delete_post(post_id)
    except ApiError as e:
        logger.warning("post_delete_rejected", post_id=post_id, error=str(e))
        raise e.with_error("Error deleting post")

    if post is None:
        raise _not_found(post_id, "delete")

    return PostDeletedResponse(deletedPost=PostResponse.model_validate(post))
