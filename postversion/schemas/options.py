"""Options schemas."""

from typing import List

from pydantic import BaseModel, Field


class VersioningOptions(BaseModel):
    """Effective versioning options."""
    item_types: List[str] = Field(default_factory=list)


class VersioningOptionsUpdate(BaseModel):
    """Replace the list of versioned item types."""
    item_types: List[str]
