"""Item schemas."""

import re
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

_SLUG_STRIP = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """Lowercase, hyphen-separated slug."""
    return _SLUG_STRIP.sub("-", value.lower()).strip("-")


class TermRef(BaseModel):
    """A taxonomy term reference, created on demand."""
    taxonomy: str = "category"
    name: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Term name cannot be empty")
        return v


class ItemBase(BaseModel):
    """Base item schema."""
    title: str
    content: str = ""
    excerpt: str = ""
    slug: str = ""


class ItemCreate(ItemBase):
    """Schema for creating a content item."""
    item_type: str = "post"
    status: str = "draft"
    meta: Dict[str, List[str]] = Field(default_factory=dict)
    terms: List[TermRef] = Field(default_factory=list)

    @field_validator('item_type')
    @classmethod
    def validate_item_type(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("item_type cannot be empty")
        return v

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "item_type": "post",
                    "title": "Release notes",
                    "content": "First public release.",
                    "status": "published",
                    "meta": {"subtitle": ["What changed"]},
                    "terms": [{"taxonomy": "category", "name": "News"}],
                }
            ]
        }
    }


class ItemUpdate(BaseModel):
    """Schema for updating an item. Omitted fields are left alone.

    ``meta`` replaces the values of the keys it names; ``terms`` replaces the
    whole term set when given.
    """
    title: Optional[str] = None
    content: Optional[str] = None
    excerpt: Optional[str] = None
    slug: Optional[str] = None
    status: Optional[str] = None
    meta: Optional[Dict[str, List[str]]] = None
    terms: Optional[List[TermRef]] = None


class ItemResponse(BaseModel):
    """Schema for item response (heads and snapshots)."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    item_type: str
    status: str
    parent_id: Optional[int] = None
    title: str
    content: str
    excerpt: str
    slug: str
    created_at: Optional[datetime] = None
    modified_at: Optional[datetime] = None
