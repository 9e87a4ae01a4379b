"""
Identifier handling shared by the user and post models.

MongoDB generates ``ObjectId`` primary keys; clients see them as 24-character
hex strings. All conversion goes through ``parse_object_id`` and
``format_object_id`` so malformed ids are rejected before reaching the
database.
"""

from datetime import datetime
from typing import Annotated, Any, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field

from api.src.errors import ValidationError


def parse_object_id(value: Any, field: str = "id") -> ObjectId:
    """
    Parse a client-supplied identifier.

    Args:
        value: Hex string (or an ObjectId, returned unchanged)
        field: Field name reported in the error details

    Returns:
        ObjectId

    Raises:
        ValidationError: If the value is not a valid ObjectId
    """
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str):
        raise ValidationError({field: f"'{value}' is not a valid identifier"})
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise ValidationError({field: f"'{value}' is not a valid identifier"})


def format_object_id(value: Any) -> Optional[str]:
    """Format a stored identifier for the wire."""
    if value is None:
        return None
    return str(value)


ObjectIdStr = Annotated[str, BeforeValidator(format_object_id)]


class DocumentModel(BaseModel):
    """Base response model for stored documents.

    Reads ``_id`` from MongoDB documents and exposes it as ``id``.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: ObjectIdStr = Field(..., validation_alias=AliasChoices("_id", "id"))


class TimestampedModel(DocumentModel):
    """Stored document carrying creation and update timestamps."""

    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class ErrorResponse(BaseModel):
    """Error body returned by every failing endpoint."""

    error: str
    details: Any = None
