"""Content item model.

Heads and their snapshots share one table: a snapshot is a row whose
``item_type`` is ``revision`` and whose ``parent_id`` points at the head.
"""

from enum import Enum

from sqlalchemy import Column, ForeignKey, Index, Integer, String, Text, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base

# Item type reserved for snapshots. Never versionable itself.
SNAPSHOT_TYPE = "revision"


class ItemStatus(str, Enum):
    """Statuses the versioning core knows about.

    The column is a plain string; other substrate statuses pass through.
    """
    DRAFT = "draft"
    PUBLISHED = "published"
    UNRELEASED = "unreleased"
    INHERIT = "inherit"
    TRASH = "trash"


# A version snapshot set to draft is a hidden version.
HIDDEN_STATUS = ItemStatus.DRAFT.value


class Item(Base):
    """Content items and their snapshots."""

    __tablename__ = "items"
    __table_args__ = (
        Index("ix_items_parent_id", "parent_id"),
        Index("ix_items_item_type_status", "item_type", "status"),
    )

    # Primary key
    id = Column(Integer, primary_key=True, autoincrement=True)

    # Classification
    item_type = Column(String(50), nullable=False, default="post")
    status = Column(String(20), nullable=False, default=ItemStatus.DRAFT.value)

    # Snapshot chain (NULL for heads)
    parent_id = Column(Integer, ForeignKey("items.id", ondelete="CASCADE"), nullable=True)

    # Content
    title = Column(String(255), nullable=False, default="")
    content = Column(Text, nullable=False, default="")
    excerpt = Column(Text, nullable=False, default="")
    slug = Column(String(200), nullable=False, default="")

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    modified_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    snapshots = relationship(
        "Item",
        back_populates="parent",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    parent = relationship("Item", back_populates="snapshots", remote_side=[id])
    meta = relationship("ItemMeta", back_populates="item", cascade="all, delete-orphan", passive_deletes=True)
    term_links = relationship("TermRelationship", back_populates="item", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def is_snapshot(self) -> bool:
        return self.item_type == SNAPSHOT_TYPE

    def __repr__(self) -> str:
        return f"<Item id={self.id} type={self.item_type} status={self.status}>"
