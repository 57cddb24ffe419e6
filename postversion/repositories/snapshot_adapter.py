"""Snapshot repository adapter: the narrow storage interface of the versioning core.

The resolver and the lifecycle engine never touch the ORM directly; they go
through this adapter. Database errors surface as SubstrateError so the engine
can turn them into failure results.
"""

import functools
import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import SubstrateError
from ..models import Item
from .item_repository import ItemRepository, SNAPSHOT_FIELDS
from .meta_repository import MetaRepository
from .term_repository import TermRepository

logger = logging.getLogger(__name__)


def _substrate_call(method):
    """Wrap SQLAlchemy failures of an adapter method into SubstrateError."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except SQLAlchemyError as e:
            logger.error("Substrate call %s failed: %s", method.__name__, e)
            raise SubstrateError(f"Storage operation '{method.__name__}' failed", original_error=e) from e

    return wrapper


class SnapshotRepositoryAdapter:
    """Item, snapshot, metadata and term operations used by the versioning core."""

    def __init__(self, db: Session):
        self.db = db
        self.items = ItemRepository(db)
        self.meta = MetaRepository(db)
        self.terms = TermRepository(db)

    @_substrate_call
    def get_item(self, item_id: int) -> Optional[Item]:
        return self.items.get_by_id_optional(item_id)

    @_substrate_call
    def get_metadata(self, item_id: int) -> Dict[str, List[str]]:
        return self.meta.get_all(item_id)

    @_substrate_call
    def add_metadata(self, item_id: int, key: str, value: str, unique: bool = False) -> bool:
        return self.meta.add(item_id, key, value, unique=unique)

    @_substrate_call
    def delete_metadata(self, item_id: int, key: str, value: Optional[str] = None) -> int:
        return self.meta.delete(item_id, key, value)

    @_substrate_call
    def create_snapshot(self, parent_id: int, force: bool = False) -> Optional[int]:
        """Snapshot the head's current fields.

        Unless ``force`` is set, nothing is created (and None returned) when
        the head matches its latest snapshot in fields and terms.
        """
        head = self.items.get_by_id(parent_id)
        if not force:
            latest = self.items.get_latest_snapshot(parent_id)
            if latest is not None and not self._has_changes(head, latest):
                logger.debug("No changes since snapshot %s, skipping", latest.id)
                return None

        snapshot = self.items.create_snapshot(head)
        return snapshot.id

    @_substrate_call
    def get_snapshots(
        self,
        parent_id: int,
        statuses: Optional[Iterable[str]] = None,
        descending: bool = True,
    ) -> List[Item]:
        return self.items.get_snapshots(parent_id, statuses, descending)

    @_substrate_call
    def get_latest_snapshot(self, parent_id: int) -> Optional[Item]:
        return self.items.get_latest_snapshot(parent_id)

    @_substrate_call
    def update_item_status(self, item_id: int, status: str) -> Item:
        return self.items.update_status(item_id, status)

    @_substrate_call
    def delete_snapshot(self, snapshot_id: int) -> bool:
        snapshot = self.items.get_by_id_optional(snapshot_id)
        if snapshot is None or not snapshot.is_snapshot:
            return False
        self.items.delete(snapshot)
        return True

    @_substrate_call
    def copy_term_associations(self, from_id: int, to_id: int) -> int:
        return self.terms.copy_associations(from_id, to_id)

    @_substrate_call
    def term_ids(self, item_id: int) -> List[int]:
        return self.terms.term_ids(item_id)

    def _has_changes(self, head: Item, snapshot: Item) -> bool:
        if any(getattr(head, name) != getattr(snapshot, name) for name in SNAPSHOT_FIELDS):
            return True
        # A term added to the head counts as a change.
        return not set(self.terms.term_ids(head.id)) <= set(self.terms.term_ids(snapshot.id))
