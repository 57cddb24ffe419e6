"""Content-item status controller.

An ``unreleased`` head has a published past version and a newer version in
progress. Saves must not drop it out of that state except by publishing it.
"""

import logging
from typing import Optional

from ..models import Item, ItemStatus
from .hooks import VersioningHooks, resolve_hooks
from .options_service import OptionsService

logger = logging.getLogger(__name__)

# Statuses an unreleased head may be saved into.
UNRELEASED_EXITS = frozenset({ItemStatus.PUBLISHED.value, ItemStatus.UNRELEASED.value})

STATUS_LABELS = {
    ItemStatus.DRAFT.value: "Draft",
    ItemStatus.PUBLISHED.value: "Published",
    ItemStatus.UNRELEASED.value: "Unreleased",
    ItemStatus.INHERIT.value: "Inherit",
    ItemStatus.TRASH.value: "Trash",
}


def status_label(status: str) -> str:
    return STATUS_LABELS.get(status, status.replace("_", " ").title())


class StatusController:
    """Guards status changes of versioned heads."""

    def __init__(self, options: OptionsService, hooks: Optional[VersioningHooks] = None):
        self.options = options
        self.hooks = resolve_hooks(hooks)

    def applies_to(self, item: Item) -> bool:
        return (
            not item.is_snapshot
            and item.status == ItemStatus.UNRELEASED.value
            and self.options.is_versioned(item.item_type)
        )

    def guard(self, item: Item, target_status: str) -> str:
        """Status a save of ``item`` into ``target_status`` should really write."""
        if not self.applies_to(item):
            return target_status

        if not self.hooks.prevent_unreleased_change(item, target_status):
            return target_status

        if target_status in UNRELEASED_EXITS:
            return target_status

        logger.info(
            "Keeping item unreleased",
            extra={"item_id": item.id, "requested_status": target_status},
        )
        return ItemStatus.UNRELEASED.value
