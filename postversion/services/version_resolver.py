"""Version resolver: which versions of an item exist and which one is current.

Entries come in two shapes: the head item itself (``HeadVersion``) and a
version snapshot (``HistoricalVersion``). Both expose the same projection so
callers can treat them uniformly.
"""

import logging
from dataclasses import dataclass
from typing import ClassVar, Dict, Optional, Union

from sqlalchemy.orm import Session

from ..models import Item, ItemStatus, HIDDEN_STATUS
from ..repositories import SnapshotRepositoryAdapter
from ..schemas.item import ItemResponse
from ..schemas.version import VersionRecord, VersionedItemResponse
from .hooks import VersioningHooks, resolve_hooks
from .options_service import OptionsService
from .version_meta import build_record

logger = logging.getLogger(__name__)

VersionSelector = Union[int, str]


def parse_selector(raw: str) -> VersionSelector:
    """Decimal-digit strings select by number, anything else by label."""
    raw = raw.strip()
    return int(raw) if raw.isdecimal() else raw


VISIBLE_STATUSES = (ItemStatus.PUBLISHED.value,)
VISIBLE_AND_HIDDEN_STATUSES = (ItemStatus.PUBLISHED.value, HIDDEN_STATUS)


@dataclass
class HeadVersion:
    """The content item itself."""
    item: Item
    record: Optional[VersionRecord] = None

    is_head: ClassVar[bool] = True

    @property
    def id(self) -> int:
        return self.item.id

    @property
    def status(self) -> str:
        return self.item.status

    @property
    def parent_id(self) -> Optional[int]:
        return None

    @property
    def slug(self) -> str:
        return self.item.slug


@dataclass
class HistoricalVersion:
    """A published or hidden snapshot standing for a past version."""
    item: Item
    record: VersionRecord
    head: Item

    is_head: ClassVar[bool] = False

    @property
    def id(self) -> int:
        return self.item.id

    @property
    def status(self) -> str:
        return self.item.status

    @property
    def parent_id(self) -> Optional[int]:
        return self.item.parent_id

    @property
    def slug(self) -> str:
        # Versions are addressed through the head's slug.
        return self.head.slug


VersionedEntry = Union[HeadVersion, HistoricalVersion]


def to_response(entry: VersionedEntry) -> VersionedItemResponse:
    item = ItemResponse.model_validate(entry.item).model_copy(update={"slug": entry.slug})
    return VersionedItemResponse(item=item, version=entry.record, is_head=entry.is_head)


class VersionResolver:
    """Computes version listings and the current version of an item."""

    def __init__(
        self,
        db: Session,
        options: Optional[OptionsService] = None,
        hooks: Optional[VersioningHooks] = None,
    ):
        self.db = db
        self.adapter = SnapshotRepositoryAdapter(db)
        self.options = options or OptionsService(db)
        self.hooks = resolve_hooks(hooks)

    def is_versioned(self, item: Item) -> bool:
        return not item.is_snapshot and self.options.is_versioned(item.item_type)

    def record_for(self, item: Item) -> Optional[VersionRecord]:
        """Version record derived from the item's metadata right now."""
        return build_record(item, self.adapter.get_metadata(item.id))

    def derive_version(self, item_id: int) -> Optional[VersionRecord]:
        item = self.adapter.get_item(item_id)
        if item is None:
            return None
        return self.record_for(item)

    def list_versions(self, item_id: int, include_hidden: Optional[bool] = None) -> Dict[int, VersionedEntry]:
        """Visible versions keyed by number, newest first.

        The head is included only while published. ``include_hidden=None``
        defers to the ``show_hidden_versions`` hook.
        """
        versions: Dict[int, VersionedEntry] = {}

        head = self.adapter.get_item(item_id)
        if head is None or not self.is_versioned(head):
            return versions

        if include_hidden is None:
            include_hidden = self.hooks.show_hidden_versions(item_id)

        if head.status == ItemStatus.PUBLISHED.value:
            record = self.record_for(head)
            if record is not None:
                versions[record.version_number] = HeadVersion(item=head, record=record)

        statuses = VISIBLE_AND_HIDDEN_STATUSES if include_hidden else VISIBLE_STATUSES
        for snapshot in self.adapter.get_snapshots(item_id, statuses=statuses, descending=True):
            record = self.record_for(snapshot)
            if record is None:
                logger.warning(
                    "Version snapshot without version metadata",
                    extra={"anomaly": "missing_version_meta", "item_id": item_id, "snapshot_id": snapshot.id},
                )
                continue
            if record.version_number in versions:
                logger.warning(
                    "Duplicate version number, keeping the newest",
                    extra={
                        "anomaly": "duplicate_version_number",
                        "item_id": item_id,
                        "snapshot_id": snapshot.id,
                        "version_number": record.version_number,
                    },
                )
                continue
            versions[record.version_number] = HistoricalVersion(item=snapshot, record=record, head=head)

        return versions

    def get_version(
        self,
        item_id: int,
        selector: VersionSelector,
        include_hidden: Optional[bool] = False,
    ) -> Optional[VersionedEntry]:
        """Find a version by number (int) or label (str). None when absent."""
        versions = self.list_versions(item_id, include_hidden=include_hidden)

        if isinstance(selector, int):
            return versions.get(selector)

        for entry in versions.values():
            if entry.record.label == selector:
                return entry
        return None

    def resolve_current(self, item_id: int) -> Optional[VersionedEntry]:
        """The version readers should see. None only when the item does not exist.

        A snapshot id resolves through its head.
        """
        item = self.adapter.get_item(item_id)
        if item is None:
            return None

        if item.is_snapshot:
            if item.parent_id is None:
                return HeadVersion(item=item)
            return self.resolve_current(item.parent_id)

        if not self.is_versioned(item):
            return HeadVersion(item=item)

        if item.status == ItemStatus.PUBLISHED.value:
            return HeadVersion(item=item, record=self.record_for(item))

        versions = self.list_versions(item_id, include_hidden=False)
        if not versions:
            return HeadVersion(item=item, record=self.record_for(item))

        return max(versions.values(), key=lambda entry: entry.record.version_number)

    def next_version_number(self, item_id: int) -> int:
        """One past the highest visible or hidden version, 1 when there is none."""
        versions = self.list_versions(item_id, include_hidden=True)
        if not versions:
            return 1
        return 1 + max(versions)
