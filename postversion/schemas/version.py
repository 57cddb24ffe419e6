"""Version schemas."""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from ..exceptions import ErrorCode, PostVersionError
from .item import ItemResponse


class VersionStatus(str, Enum):
    """Display status of a version."""
    LIVE = "Live"
    HIDDEN = "Hidden"
    UNRELEASED = "Unreleased"
    UNKNOWN = "Unknown"


class VersionRecord(BaseModel):
    """Version number, label and status of one head or snapshot.

    Derived from ``version_<N>`` metadata; never stored on its own.
    """
    content_item_id: int
    version_number: int
    label: str
    status: VersionStatus = VersionStatus.UNKNOWN


class VersionedItemResponse(BaseModel):
    """An item as resolved by the versioning layer."""
    item: ItemResponse
    version: Optional[VersionRecord] = None
    is_head: bool = True


class VersionListResponse(BaseModel):
    """Versions of one item, newest first."""
    item_id: int
    current: Optional[VersionRecord] = None
    versions: List[VersionedItemResponse] = Field(default_factory=list)


class VersionOperationResult(BaseModel):
    """Outcome of a lifecycle operation.

    Truthy on success. Failures carry the error code of the exception that
    stopped the operation so callers can decide how to react.
    """
    ok: bool
    message: str = ""
    error_code: Optional[ErrorCode] = None
    status_code: int = 200
    details: Dict[str, Any] = Field(default_factory=dict)

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, message: str = "", **details: Any) -> "VersionOperationResult":
        return cls(ok=True, message=message, details=details)

    @classmethod
    def failure(cls, exc: PostVersionError) -> "VersionOperationResult":
        return cls(
            ok=False,
            message=exc.message,
            error_code=exc.error_code,
            status_code=exc.status_code,
            details=exc.details,
        )

    def raise_for_error(self) -> None:
        """Re-raise a failure as a PostVersionError (used by the HTTP layer)."""
        if self.ok:
            return
        raise PostVersionError(
            self.message,
            self.error_code or ErrorCode.INTERNAL_ERROR,
            status_code=self.status_code,
            details=self.details,
        )
