"""Versioning options: which item types are under version control.

Resolution order: explicit overrides passed by the caller, then the stored
``post_version_options`` row, then the ``VERSIONED_TYPES`` setting. Every
source goes through the same validation.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..models import SNAPSHOT_TYPE
from ..repositories import OptionRepository
from ..schemas.options import VersioningOptions

logger = logging.getLogger(__name__)

OPTIONS_NAME = "post_version_options"


class OptionsService:
    """Reads, validates and stores versioning options."""

    def __init__(self, db: Session, overrides: Optional[Dict[str, Any]] = None):
        self.db = db
        self.repo = OptionRepository(db)
        self.overrides = overrides
        self._cached: Optional[VersioningOptions] = None

    def defaults(self) -> Dict[str, Any]:
        return {"item_types": settings.get_versioned_types()}

    def get(self) -> VersioningOptions:
        """Effective options. Cached for the lifetime of this service."""
        if self._cached is not None:
            return self._cached

        if isinstance(self.overrides, dict):
            raw = {**self.defaults(), **self.overrides}
        else:
            stored = self.repo.get(OPTIONS_NAME)
            raw = stored if isinstance(stored, dict) else self.defaults()

        self._cached = self.validate(raw)
        return self._cached

    def is_versioned(self, item_type: str) -> bool:
        return item_type in self.get().item_types

    def update(self, item_types: List[Any]) -> VersioningOptions:
        """Validate and store the versioned item types."""
        options = self.validate({"item_types": item_types})
        self.repo.set(OPTIONS_NAME, options.model_dump())
        self.db.commit()
        self._cached = None
        logger.info("Versioned item types updated", extra={"item_types": options.item_types})
        return options

    @staticmethod
    def validate(raw: Dict[str, Any]) -> VersioningOptions:
        """Drop entries that cannot be versioned.

        Non-strings and the snapshot type are removed, as are types that do
        not keep snapshot history.
        """
        history_types = set(settings.get_history_item_types())
        item_types: List[str] = []
        for item_type in raw.get("item_types") or []:
            if not isinstance(item_type, str) or item_type == SNAPSHOT_TYPE:
                continue
            if item_type not in history_types:
                logger.warning("Item type without history support cannot be versioned: %s", item_type)
                continue
            if item_type not in item_types:
                item_types.append(item_type)
        return VersioningOptions(item_types=item_types)
