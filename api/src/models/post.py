"""
Post request and response models.

Posts are stored in the ``posts`` collection as::

    {_id, title, description, photo, userId, createdAt, updatedAt}

``userId`` holds the ObjectId of the owning user. It is a soft reference:
nothing checks that the user exists, and deleting a user leaves its posts
in place.
"""

from typing import Any, Dict, List, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from api.src.models.common import DocumentModel, ObjectIdStr, TimestampedModel, parse_object_id


def _validate_user_id(v: Optional[str]) -> Optional[str]:
    if v is not None and not ObjectId.is_valid(v):
        raise ValueError(f"'{v}' is not a valid identifier")
    return v


class CreatePostRequest(BaseModel):
    """Body of ``POST /posts``."""

    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    photo: str = Field(..., min_length=1, description="Photo URL")
    userId: str = Field(..., description="Id of the owning user")

    @field_validator("userId")
    @classmethod
    def validate_user_id(cls, v: Optional[str]) -> Optional[str]:
        return _validate_user_id(v)

    def to_document(self) -> Dict[str, Any]:
        document = self.model_dump()
        document["userId"] = parse_object_id(self.userId, field="userId")
        return document


class UpdatePostRequest(BaseModel):
    """Body of ``PUT /posts/{id}``; every field is optional, unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    photo: Optional[str] = Field(None, min_length=1)
    userId: Optional[str] = None

    @field_validator("userId")
    @classmethod
    def validate_user_id(cls, v: Optional[str]) -> Optional[str]:
        return _validate_user_id(v)

    @model_validator(mode="after")
    def reject_null_fields(self) -> "UpdatePostRequest":
        # Required fields may be changed but never cleared.
        cleared = [name for name in self.model_fields_set if getattr(self, name) is None]
        if cleared:
            raise ValueError(f"fields cannot be null: {', '.join(sorted(cleared))}")
        return self

    def to_update(self) -> Dict[str, Any]:
        """Return only the submitted fields, ready for ``$set``."""
        changes = self.model_dump(exclude_unset=True)
        if "userId" in changes:
            changes["userId"] = parse_object_id(changes["userId"], field="userId")
        return changes


class PostResponse(TimestampedModel):
    """Post as returned to clients."""

    title: str
    description: str
    photo: str
    userId: ObjectIdStr


class UserDetails(BaseModel):
    """Owning user's fields attached by the list join; all null when the user is missing."""

    firstName: Optional[str] = None
    lastName: Optional[str] = None
    email: Optional[str] = None


class EnrichedPost(DocumentModel):
    """Post row of ``GET /posts``."""

    title: str
    description: str
    photo: str
    userId: Optional[ObjectIdStr] = None
    user_details: UserDetails = Field(default_factory=UserDetails)


class PostListResponse(BaseModel):
    posts: List[EnrichedPost]
    totalPosts: int
    totalPages: int
    currentPage: int


class PostCreatedResponse(BaseModel):
    message: str = "Post created"
    post: PostResponse


class PostEnvelope(BaseModel):
    post: PostResponse


class PostUpdatedResponse(BaseModel):
    message: str = "Post updated"
    updatedPost: PostResponse


class PostDeletedResponse(BaseModel):
    message: str = "Post deleted"
    deletedPost: PostResponse
