"""Item repository for database operations.

Owns item and snapshot queries. Snapshot ordering is always
(created_at, id) so rows created within the same clock tick keep their
insertion order.
"""

from typing import Iterable, List, Optional

from ..models import Item, ItemStatus, SNAPSHOT_TYPE
from ..schemas.item import ItemCreate, slugify
from ..exceptions import ItemNotFoundError
from .base import BaseRepository

# Fields copied from a head onto each of its snapshots.
SNAPSHOT_FIELDS = ("title", "content", "excerpt", "slug")


class ItemRepository(BaseRepository[Item]):
    """Repository for item CRUD operations (heads and snapshots)."""

    model_class = Item
    not_found_error = ItemNotFoundError

    def create(self, item: ItemCreate) -> Item:
        """Create a new head item."""
        db_item = Item(
            item_type=item.item_type,
            status=item.status,
            title=item.title,
            content=item.content,
            excerpt=item.excerpt,
            slug=item.slug or slugify(item.title),
        )
        self.db.add(db_item)
        self.db.flush()
        self.db.refresh(db_item)
        return db_item

    def get_heads(
        self,
        item_type: Optional[str] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Item]:
        """List head items (never snapshots), newest first."""
        query = self.db.query(Item).filter(Item.item_type != SNAPSHOT_TYPE)
        if item_type:
            query = query.filter(Item.item_type == item_type)
        if status:
            query = query.filter(Item.status == status)
        return query.order_by(Item.id.desc()).offset(skip).limit(limit).all()

    def update_fields(self, item: Item, **fields) -> Item:
        """Set the given columns and flush."""
        for name, value in fields.items():
            setattr(item, name, value)
        self.db.flush()
        self.db.refresh(item)
        return item

    def update_status(self, item_id: int, status: str) -> Item:
        item = self.get_by_id(item_id)
        item.status = status
        self.db.flush()
        return item

    def delete(self, item: Item) -> None:
        self.db.delete(item)
        self.db.flush()

    # --- Snapshots ---

    def create_snapshot(self, head: Item) -> Item:
        """Copy the head's fields into a new ``inherit`` snapshot row."""
        snapshot = Item(
            item_type=SNAPSHOT_TYPE,
            status=ItemStatus.INHERIT.value,
            parent_id=head.id,
            **{name: getattr(head, name) for name in SNAPSHOT_FIELDS},
        )
        self.db.add(snapshot)
        self.db.flush()
        self.db.refresh(snapshot)
        return snapshot

    def get_snapshots(
        self,
        parent_id: int,
        statuses: Optional[Iterable[str]] = None,
        descending: bool = True,
    ) -> List[Item]:
        """Snapshots of a head, optionally filtered by status."""
        query = self.db.query(Item).filter(
            Item.parent_id == parent_id,
            Item.item_type == SNAPSHOT_TYPE,
        )
        if statuses is not None:
            query = query.filter(Item.status.in_(list(statuses)))
        if descending:
            query = query.order_by(Item.created_at.desc(), Item.id.desc())
        else:
            query = query.order_by(Item.created_at.asc(), Item.id.asc())
        return query.all()

    def get_latest_snapshot(self, parent_id: int) -> Optional[Item]:
        """Most recently created snapshot regardless of status."""
        return self.db.query(Item).filter(
            Item.parent_id == parent_id,
            Item.item_type == SNAPSHOT_TYPE,
        ).order_by(Item.created_at.desc(), Item.id.desc()).first()
