"""
Error taxonomy for the posts API.

Every error raised by repositories or request parsing derives from
``ApiError`` and carries:
- ``status_code``: HTTP status the error maps to
- ``error``: route-level summary shown to the client ("Error creating post")
- ``details``: the underlying cause (message, offending fields, key values)

The exception handlers in ``api.src.main`` render these as
``{"error": ..., "details": ...}``.
"""

from typing import Any, Dict, Optional

from fastapi import status


class ApiError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_error: str = "Request failed"

    def __init__(self, details: Any = None, error: Optional[str] = None):
        self.details = details
        self.error = error
        super().__init__(error or (str(details) if details is not None else self.default_error))

    def with_error(self, error: str) -> "ApiError":
        """Attach a route-level message unless one is already set."""
        if self.error is None:
            self.error = error
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Render the JSON error body."""
        return {"error": self.error or self.default_error, "details": self.details}


class ValidationError(ApiError):
    """A required field is missing or a value is malformed."""

    default_error = "Validation failed"


class NotFoundError(ApiError):
    """No record matches the requested id."""

    status_code = status.HTTP_404_NOT_FOUND
    default_error = "Not found"


class DuplicateKeyError(ApiError):
    """A unique index rejected the write."""

    default_error = "Duplicate key"


class StoreError(ApiError):
    """MongoDB could not be reached or rejected the query."""

    default_error = "Database error"
