"""Pydantic schemas for API validation."""

from .item import (
    TermRef,
    ItemBase,
    ItemCreate,
    ItemUpdate,
    ItemResponse,
    slugify,
)
from .version import (
    VersionStatus,
    VersionRecord,
    VersionedItemResponse,
    VersionListResponse,
    VersionOperationResult,
)
from .options import VersioningOptions, VersioningOptionsUpdate

__all__ = [
    "TermRef",
    "ItemBase",
    "ItemCreate",
    "ItemUpdate",
    "ItemResponse",
    "slugify",
    "VersionStatus",
    "VersionRecord",
    "VersionedItemResponse",
    "VersionListResponse",
    "VersionOperationResult",
    "VersioningOptions",
    "VersioningOptionsUpdate",
]
