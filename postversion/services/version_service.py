"""Version lifecycle engine: create, hide, unhide and delete versions.

Every public operation validates first and fails fast without side effects.
Mutations return a ``VersionOperationResult`` instead of raising, so callers
can show the reason and offer a retry.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..exceptions import (
    InvalidStateError,
    ItemNotFoundError,
    NotVersionedError,
    PostVersionError,
    SubstrateError,
    VersionNotFoundError,
)
from ..models import Item, ItemStatus, HIDDEN_STATUS
from ..repositories import SnapshotRepositoryAdapter
from ..schemas.version import VersionOperationResult, VersionRecord
from .hooks import VersioningHooks, resolve_hooks
from .options_service import OptionsService
from .saga import Saga
from .version_meta import (
    is_version_key,
    meta_diff,
    prune_version_meta,
    select_version_entry,
    version_meta_key,
)
from .version_resolver import HistoricalVersion, VersionResolver, VersionSelector

logger = logging.getLogger(__name__)


def _matches(record: VersionRecord, selector: VersionSelector) -> bool:
    if isinstance(selector, int):
        return record.version_number == selector
    return record.label == selector


class VersionService:
    """Deep module for the version lifecycle of content items."""

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
        self.resolver = VersionResolver(db, options=self.options, hooks=self.hooks)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create_new_version(self, item_id: int) -> VersionOperationResult:
        """Freeze the current version into a published snapshot and start the next one.

        On success the head carries ``version_<N+1>`` and is ``unreleased``,
        while a new published snapshot carries ``version_<N>``.
        """
        try:
            head = self._require_versioned_head(item_id)
            current = self.resolver.record_for(head)
            if current is None:
                raise InvalidStateError(
                    "Item has no current version to branch from",
                    details={"item_id": item_id},
                )
        except PostVersionError as e:
            return VersionOperationResult.failure(e)

        new_number = current.version_number + 1
        new_label = str(self.hooks.new_version_label(new_number, head, current))

        saga = Saga(self.db, "create_new_version", item_id=item_id)
        saga.step(
            "snapshot",
            lambda results: self._snapshot_current_version(head),
            compensate=lambda snapshot_id: self.adapter.delete_snapshot(snapshot_id),
        )
        saga.step(
            "publish_snapshot",
            lambda results: self.adapter.update_item_status(results["snapshot"], ItemStatus.PUBLISHED.value),
        )
        saga.step(
            "advance_version_meta",
            lambda results: self._replace_version_meta(head.id, new_number, new_label),
            compensate=lambda removed: self._restore_version_meta(head.id, new_number, removed),
        )
        saga.step(
            "mark_unreleased",
            lambda results: self.adapter.update_item_status(head.id, ItemStatus.UNRELEASED.value),
        )

        try:
            results = saga.run()
        except PostVersionError as e:
            self.db.commit()
            if saga.failed_compensations:
                e.details["inconsistent_steps"] = saga.failed_compensations
            return VersionOperationResult.failure(e)

        self.db.commit()
        logger.info(
            "Created new version",
            extra={
                "item_id": item_id,
                "version_number": new_number,
                "snapshot_id": results["snapshot"],
                "snapshot_version": current.version_number,
            },
        )
        return VersionOperationResult.success(
            f"Version {new_label} ({new_number}) created",
            item_id=item_id,
            version_number=new_number,
            label=new_label,
            snapshot_id=results["snapshot"],
            snapshot_version=current.version_number,
        )

    def _snapshot_current_version(self, head: Item) -> int:
        snapshot_id = self.adapter.create_snapshot(head.id, force=True)
        if snapshot_id is None:
            raise SubstrateError("Snapshot could not be created")

        snapshot = self.adapter.get_item(snapshot_id)
        self.copy_meta_terms(head, snapshot)
        return snapshot_id

    def _replace_version_meta(self, item_id: int, new_number: int, new_label: str) -> Dict[str, List[str]]:
        """Drop every version key of the head and write the new one.

        Returns the removed entries for compensation.
        """
        meta = self.adapter.get_metadata(item_id)
        removed = {key: values for key, values in meta.items() if is_version_key(key)}
        for key in removed:
            self.adapter.delete_metadata(item_id, key)
        self.adapter.add_metadata(item_id, version_meta_key(new_number), new_label, unique=True)
        return removed

    def _restore_version_meta(self, item_id: int, new_number: int, removed: Dict[str, List[str]]) -> None:
        self.adapter.delete_metadata(item_id, version_meta_key(new_number))
        for key, values in (removed or {}).items():
            for value in values:
                self.adapter.add_metadata(item_id, key, value)

    # ------------------------------------------------------------------
    # Metadata and terms propagation
    # ------------------------------------------------------------------

    def copy_meta_terms(self, head: Item, snapshot: Item) -> None:
        """Diff-copy the head's metadata and terms onto one of its snapshots.

        Only values the snapshot lacks are added, so metadata written by other
        writers is left alone. The snapshot also receives the head's
        authoritative version entry when it has none of its own.
        """
        ignore = set(settings.get_meta_keys_to_ignore())
        ignore.update(self.hooks.meta_keys_to_ignore(head, snapshot))

        head_meta = self.adapter.get_metadata(head.id)
        snapshot_meta = self.adapter.get_metadata(snapshot.id)

        diff = meta_diff(head_meta, snapshot_meta, ignore)
        diff = self.hooks.meta_to_copy(diff, head, snapshot)
        for key, values in diff.items():
            for value in values:
                self.adapter.add_metadata(snapshot.id, key, value)

        if select_version_entry(snapshot_meta, item_id=snapshot.id) is None:
            version_meta = {k: v for k, v in prune_version_meta(head_meta).items() if is_version_key(k)}
            for key, values in version_meta.items():
                self.adapter.add_metadata(snapshot.id, key, values[0], unique=True)

        self.adapter.copy_term_associations(head.id, snapshot.id)

    def ensure_version(self, head: Item, is_new: bool) -> Optional[int]:
        """Give a saved versioned head a version number when it has none.

        New items start at 1; existing ones continue after their highest
        (visible or hidden) version. Returns the number added, if any.
        """
        if head.is_snapshot or not self.options.is_versioned(head.item_type):
            return None

        if is_new:
            self.adapter.add_metadata(head.id, version_meta_key(1), "1", unique=True)
            return 1

        meta = self.adapter.get_metadata(head.id)
        if any(is_version_key(key) and any(values) for key, values in meta.items()):
            return None

        next_number = self.resolver.next_version_number(head.id)
        self.adapter.add_metadata(head.id, version_meta_key(next_number), str(next_number), unique=True)
        logger.info("Assigned missing version", extra={"item_id": head.id, "version_number": next_number})
        return next_number

    # ------------------------------------------------------------------
    # Hide / unhide / delete
    # ------------------------------------------------------------------

    def hide_version(self, item_id: int, selector: VersionSelector) -> VersionOperationResult:
        """Set a visible past version to hidden.

        Only visible versions are searched, so hiding a hidden version reports
        it as not found.
        """
        try:
            entry = self._locate_past_version(item_id, selector, include_hidden=False, action="hidden")
            self.adapter.update_item_status(entry.id, HIDDEN_STATUS)
            self.db.commit()
        except PostVersionError as e:
            self.db.rollback()
            return VersionOperationResult.failure(e)

        logger.info("Version hidden", extra={"item_id": item_id, "version_number": entry.record.version_number})
        return VersionOperationResult.success(
            f"Version {selector} hidden", item_id=item_id, version_number=entry.record.version_number
        )

    def unhide_version(self, item_id: int, selector: VersionSelector) -> VersionOperationResult:
        """Publish a hidden past version again."""
        try:
            entry = self._locate_past_version(item_id, selector, include_hidden=True, action="unhidden")
            if entry.status == ItemStatus.PUBLISHED.value:
                return VersionOperationResult.success(f"Version {selector} is already live", item_id=item_id)
            self.adapter.update_item_status(entry.id, ItemStatus.PUBLISHED.value)
            self.db.commit()
        except PostVersionError as e:
            self.db.rollback()
            return VersionOperationResult.failure(e)

        logger.info("Version unhidden", extra={"item_id": item_id, "version_number": entry.record.version_number})
        return VersionOperationResult.success(
            f"Version {selector} unhidden", item_id=item_id, version_number=entry.record.version_number
        )

    def delete_version(self, item_id: int, selector: VersionSelector) -> VersionOperationResult:
        """Permanently remove a past version's snapshot."""
        try:
            entry = self._locate_past_version(item_id, selector, include_hidden=True, action="deleted")
            if not self.adapter.delete_snapshot(entry.id):
                raise SubstrateError("Snapshot could not be deleted")
            self.db.commit()
        except PostVersionError as e:
            self.db.rollback()
            return VersionOperationResult.failure(e)

        logger.info("Version deleted", extra={"item_id": item_id, "version_number": entry.record.version_number})
        return VersionOperationResult.success(
            f"Version {selector} deleted", item_id=item_id, version_number=entry.record.version_number
        )

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def _require_versioned_head(self, item_id: int) -> Item:
        item = self.adapter.get_item(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        if item.is_snapshot or not self.options.is_versioned(item.item_type):
            raise NotVersionedError(item_id, item.item_type)
        return item

    def _locate_past_version(
        self,
        item_id: int,
        selector: VersionSelector,
        include_hidden: bool,
        action: str,
    ) -> HistoricalVersion:
        """Resolve ``selector`` to a snapshot version, refusing the head's own version."""
        head = self._require_versioned_head(item_id)

        head_record = self.resolver.record_for(head)
        if head_record is not None and _matches(head_record, selector):
            raise InvalidStateError(
                f"The latest version cannot be {action}",
                details={"item_id": item_id, "version": selector},
            )

        entry = self.resolver.get_version(item_id, selector, include_hidden=include_hidden)
        if entry is None:
            raise VersionNotFoundError(item_id, selector)
        if entry.is_head:
            raise InvalidStateError(
                f"The latest version cannot be {action}",
                details={"item_id": item_id, "version": selector},
            )
        return entry

