"""
User request and response models.

Users are stored in the ``users`` collection as::

    {_id, firstName, lastName, email, createdAt, updatedAt}

with a unique index on ``email``.
"""

from typing import Any, Dict

from pydantic import BaseModel, Field

from api.src.models.common import TimestampedModel


class CreateUserRequest(BaseModel):
    """Body of ``POST /users``."""

    firstName: str = Field(..., min_length=1, description="First name")
    lastName: str = Field(..., min_length=1, description="Last name")
    email: str = Field(..., min_length=1, description="Email address, unique across users")

    def to_document(self) -> Dict[str, Any]:
        return self.model_dump()


class UserResponse(TimestampedModel):
    """User as returned to clients."""

    firstName: str
    lastName: str
    email: str


class UserCreatedResponse(BaseModel):
    message: str = "User created"
    user: UserResponse


class UserEnvelope(BaseModel):
    user: UserResponse
