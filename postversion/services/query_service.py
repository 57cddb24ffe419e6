"""Query/selection layer.

Sits on every read path and swaps versioned heads for the version readers
should see, or for an explicitly requested version.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from ..core.config import settings
from ..exceptions import ItemNotFoundError, NotVersionedError, VersionNotFoundError
from ..models import Item
from ..schemas.version import VersionedItemResponse
from .hooks import VersioningHooks, resolve_hooks
from .options_service import OptionsService
from .version_resolver import HeadVersion, VersionedEntry, VersionResolver, to_response

logger = logging.getLogger(__name__)


@dataclass
class QueryContext:
    """Per-request read flags."""
    show_unreleased: bool = False
    requested_version: Optional[int] = None


class QuerySelection:
    """Rewrites read results to resolved versions."""

    def __init__(
        self,
        db: Session,
        options: Optional[OptionsService] = None,
        hooks: Optional[VersioningHooks] = None,
    ):
        self.db = db
        self.options = options or OptionsService(db)
        self.hooks = resolve_hooks(hooks)
        self.resolver = VersionResolver(db, options=self.options, hooks=self.hooks)

    def map_results(self, items: Sequence[Item], context: Optional[QueryContext] = None) -> List[VersionedEntry]:
        """Replace each versioned head with its current version.

        The list passes through untouched when the context, or the
        ``show_unreleased`` hook, asks for raw items.
        """
        context = context or QueryContext()
        if context.show_unreleased or self.hooks.show_unreleased(items, context):
            return [HeadVersion(item=item, record=self.resolver.record_for(item)) for item in items]

        mapped: List[VersionedEntry] = []
        for item in items:
            if not self.resolver.is_versioned(item):
                mapped.append(HeadVersion(item=item))
                continue
            current = self.resolver.resolve_current(item.id)
            mapped.append(current if current is not None else HeadVersion(item=item))
        return mapped

    def get_item(self, item_id: int, context: Optional[QueryContext] = None) -> VersionedItemResponse:
        """Single-item read honouring an explicitly requested version."""
        context = context or QueryContext()
        if context.requested_version is not None:
            return to_response(self.get_requested_version(item_id, context.requested_version))

        if context.show_unreleased:
            item = self.resolver.adapter.get_item(item_id)
            if item is None:
                raise ItemNotFoundError(item_id)
            return to_response(HeadVersion(item=item, record=self.resolver.record_for(item)))

        current = self.resolver.resolve_current(item_id)
        if current is None:
            raise ItemNotFoundError(item_id)
        return to_response(current)

    def get_requested_version(self, item_id: int, number: int) -> VersionedEntry:
        """Explicitly requested version. Never falls back to the head."""
        item = self.resolver.adapter.get_item(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        if not self.resolver.is_versioned(item):
            raise NotVersionedError(item_id, item.item_type)

        entry = self.resolver.get_version(item_id, number, include_hidden=False)
        if entry is None:
            logger.debug("Requested version missing", extra={"item_id": item_id, "version_number": number})
            raise VersionNotFoundError(item_id, number)
        return entry

    @staticmethod
    def version_permalink(item: Item, number: int) -> str:
        base = settings.public_base_url.rstrip("/")
        return f"{base}/{item.slug}/?version={number}"
