"""Item service: the save path of content items.

Owns create, update and delete of heads and the versioning side effects of
each save: version 1 on creation, a missing version number restored on
update, an ``inherit`` snapshot after every change, and protection of
version snapshots on the generic delete path.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from ..exceptions import InvalidStateError, ValidationError
from ..models import Item, ItemStatus, HIDDEN_STATUS, SNAPSHOT_TYPE
from ..repositories import SnapshotRepositoryAdapter
from ..schemas.item import ItemCreate, ItemUpdate, TermRef, slugify
from .hooks import VersioningHooks, resolve_hooks
from .options_service import OptionsService
from .status_service import StatusController
from .version_meta import is_version_key
from .version_service import VersionService

logger = logging.getLogger(__name__)

# Statuses the save path never writes on a head: snapshots own ``inherit``
# and only a new version may enter ``unreleased``.
_RESERVED_HEAD_STATUSES = frozenset({ItemStatus.INHERIT.value, ItemStatus.UNRELEASED.value})

# Snapshot statuses that mark a version's permanent record.
_VERSION_SNAPSHOT_STATUSES = frozenset({ItemStatus.PUBLISHED.value, HIDDEN_STATUS})


class ItemService:
    """Deep module for the item save path.

    Callers create, update and delete items in one call; versioning and
    snapshot bookkeeping happen inside.
    """

    def __init__(
        self,
        db: Session,
        options: Optional[OptionsService] = None,
        hooks: Optional[VersioningHooks] = None,
    ):
        self.db = db
        self.options = options or OptionsService(db)
        self.hooks = resolve_hooks(hooks)
        self.adapter = SnapshotRepositoryAdapter(db)
        self.versions = VersionService(db, options=self.options, hooks=self.hooks)
        self.status = StatusController(self.options, self.hooks)

    def create_item(self, data: ItemCreate) -> Item:
        """Persist a new head with its metadata and terms."""
        if data.item_type == SNAPSHOT_TYPE:
            raise ValidationError("Snapshots cannot be created directly", field="item_type")
        if data.status in _RESERVED_HEAD_STATUSES:
            raise ValidationError(f"Items cannot be created as '{data.status}'", field="status")
        self._check_meta_keys(data.meta)

        item = self.adapter.items.create(data)
        self._write_meta(item.id, data.meta)
        if data.terms:
            self._write_terms(item.id, data.terms)

        version = self.versions.ensure_version(item, is_new=True)
        self.db.commit()
        self.db.refresh(item)

        logger.info(
            "Item created",
            extra={"item_id": item.id, "item_type": item.item_type, "version_number": version},
        )
        return item

    def get_item(self, item_id: int) -> Item:
        return self.adapter.items.get_by_id(item_id)

    def list_items(
        self,
        item_type: Optional[str] = None,
        status: Optional[str] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Item]:
        return self.adapter.items.get_heads(item_type=item_type, status=status, skip=skip, limit=limit)

    def update_item(self, item_id: int, data: ItemUpdate) -> Item:
        """Apply an update and record it as a snapshot.

        An ``unreleased`` versioned head keeps its status unless the update
        publishes it.
        """
        item = self.adapter.items.get_by_id(item_id)
        if item.is_snapshot:
            raise ValidationError("Snapshots cannot be edited", field="item_id")
        if data.meta:
            self._check_meta_keys(data.meta)

        fields = {
            name: value
            for name, value in data.model_dump(exclude_unset=True, exclude={"meta", "terms", "status"}).items()
            if value is not None
        }
        if "slug" in fields and not fields["slug"]:
            fields["slug"] = slugify(fields.get("title") or item.title)

        if data.status is not None:
            target = self.status.guard(item, data.status)
            if target in _RESERVED_HEAD_STATUSES and target != item.status:
                raise ValidationError(f"Items cannot be saved as '{target}'", field="status")
            fields["status"] = target

        if fields:
            self.adapter.items.update_fields(item, **fields)
        if data.meta:
            self._write_meta(item.id, data.meta, replace=True)
        if data.terms is not None:
            self._write_terms(item.id, data.terms)

        self.versions.ensure_version(item, is_new=False)
        snapshot_id = self._save_snapshot(item)

        self.db.commit()
        self.db.refresh(item)
        logger.info("Item updated", extra={"item_id": item.id, "snapshot_id": snapshot_id})
        return item

    def delete_item(self, item_id: int) -> None:
        """Delete a head with all its snapshots, or a single unprotected snapshot."""
        item = self.adapter.items.get_by_id(item_id)

        if item.is_snapshot and self.is_protected_snapshot(item):
            if not self.hooks.allow_snapshot_delete(item):
                raise InvalidStateError(
                    "Version snapshots cannot be deleted directly; delete the version instead",
                    details={"item_id": item_id, "parent_id": item.parent_id},
                )
            logger.info("Protected snapshot deletion allowed by hook", extra={"item_id": item_id})

        is_snapshot = item.is_snapshot
        self.adapter.items.delete(item)
        self.db.commit()
        logger.info("Item deleted", extra={"item_id": item_id, "is_snapshot": is_snapshot})

    def is_protected_snapshot(self, snapshot: Item) -> bool:
        """Latest snapshot of a versioned head, or one recording a version."""
        if snapshot.parent_id is None:
            return False
        head = self.adapter.get_item(snapshot.parent_id)
        if head is None or not self.options.is_versioned(head.item_type):
            return False
        if snapshot.status in _VERSION_SNAPSHOT_STATUSES:
            return True
        latest = self.adapter.get_latest_snapshot(head.id)
        return latest is not None and latest.id == snapshot.id

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _save_snapshot(self, item: Item) -> Optional[int]:
        snapshot_id = self.adapter.create_snapshot(item.id, force=False)
        if snapshot_id is None:
            return None

        if self.options.is_versioned(item.item_type):
            snapshot = self.adapter.get_item(snapshot_id)
            if self.hooks.duplicate_meta_terms(snapshot):
                self.versions.copy_meta_terms(item, snapshot)
        return snapshot_id

    @staticmethod
    def _check_meta_keys(meta: Dict[str, List[str]]) -> None:
        """Reject empty keys and version keys, which only versioning writes."""
        for key in meta:
            if not key:
                raise ValidationError("Metadata keys cannot be empty", field="meta")
            if is_version_key(key):
                raise ValidationError(f"Version keys are managed by versioning: {key}", field="meta")

    def _write_meta(self, item_id: int, meta: Dict[str, List[str]], replace: bool = False) -> None:
        for key, values in meta.items():
            if replace:
                self.adapter.meta.replace(item_id, key, [str(v) for v in values])
            else:
                for value in values:
                    self.adapter.add_metadata(item_id, key, str(value))

    def _write_terms(self, item_id: int, terms: List[TermRef]) -> None:
        term_ids = [self.adapter.terms.get_or_create(t.taxonomy, t.name).id for t in terms]
        self.adapter.terms.set_terms(item_id, term_ids)
