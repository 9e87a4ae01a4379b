"""
Users router.

Provides REST API endpoints for:
- User creation
- User lookup by id
"""

import structlog
from fastapi import APIRouter, Depends, status

from api.src.errors import ApiError, NotFoundError
from api.src.models.common import ErrorResponse
from api.src.models.user import CreateUserRequest, UserCreatedResponse, UserEnvelope, UserResponse
from api.src.repositories.user_repo import UserRepository
from api.src.dependencies import get_user_repository

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request or database error"},
    }
)


@router.post(
    "",
    response_model=UserCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create User",
    description="""
    Create a user.

    **Request Body:**
    - firstName, lastName, email: required, non-empty

    **Error Responses:**
    - 400: Missing field or email already registered
    """,
)
async def create_user(
    user_request: CreateUserRequest,
    user_repo: UserRepository = Depends(get_user_repository),
) -> UserCreatedResponse:
    """
    Create a new user.

    Raises:
        DuplicateKeyError: If the email is already registered
        StoreError: On database error
    """
    try:
        user = await user_repo.create_user(user_request.to_document())
    except ApiError as e:
        logger.warning("user_create_rejected", error=str(e))
        raise e.with_error("Error creating user")

    return UserCreatedResponse(user=UserResponse.model_validate(user))


@router.get(
    "/{user_id}",
    response_model=UserEnvelope,
    summary="Get User",
    responses={404: {"model": ErrorResponse, "description": "User not found"}},
)
async def get_user(
    user_id: str,
    user_repo: UserRepository = Depends(get_user_repository),
) -> UserEnvelope:
    """Get a user by id."""
    try:
        user = await user_repo.get_user_by_id(user_id)
    except ApiError as e:
        logger.warning("user_get_rejected", user_id=user_id, error=str(e))
        raise e.with_error("Error fetching user")

    if user is None:
        logger.warning("user_not_found", user_id=user_id)
        raise NotFoundError({"id": user_id}, error="User not found")

    return UserEnvelope(user=UserResponse.model_validate(user))
