"""Custom exception hierarchy for post-version."""

from enum import Enum
from typing import Optional, Dict, Any, Union


class ErrorCode(str, Enum):
    """Standardized error codes for API responses and operation results."""

    # Not-found family
    ITEM_NOT_FOUND = "ITEM_NOT_FOUND"
    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"
    NOT_VERSIONED = "NOT_VERSIONED"

    # Lifecycle errors
    INVALID_STATE = "INVALID_STATE"

    # Substrate errors
    SUBSTRATE_FAILURE = "SUBSTRATE_FAILURE"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Generic errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class PostVersionError(Exception):
    """
    Base exception for all post-version errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class ItemNotFoundError(PostVersionError):
    """Content item not found."""

    def __init__(self, item_id: int):
        super().__init__(
            f"Item not found: {item_id}",
            ErrorCode.ITEM_NOT_FOUND,
            status_code=404,
            details={"item_id": item_id}
        )


class VersionNotFoundError(PostVersionError):
    """Requested version does not exist for the item."""

    def __init__(self, item_id: int, selector: Union[int, str]):
        super().__init__(
            f"Version {selector!r} not found for item {item_id}",
            ErrorCode.VERSION_NOT_FOUND,
            status_code=404,
            details={"item_id": item_id, "version": selector}
        )


class NotVersionedError(PostVersionError):
    """Item exists but its type is not under version control."""

    def __init__(self, item_id: int, item_type: str):
        super().__init__(
            f"Item type '{item_type}' is not versioned",
            ErrorCode.NOT_VERSIONED,
            status_code=404,
            details={"item_id": item_id, "item_type": item_type}
        )


class InvalidStateError(PostVersionError):
    """Operation not permitted in the item's current lifecycle state."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message,
            ErrorCode.INVALID_STATE,
            status_code=409,
            details=details
        )


class ValidationError(PostVersionError):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class SubstrateError(PostVersionError):
    """A storage operation failed."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message,
            ErrorCode.SUBSTRATE_FAILURE,
            status_code=500,
            details=details
        )
