"""Business logic services."""

from .hooks import VersioningHooks, DEFAULT_HOOKS
from .item_service import ItemService
from .options_service import OptionsService
from .query_service import QueryContext, QuerySelection
from .status_service import StatusController
from .version_resolver import HeadVersion, HistoricalVersion, VersionResolver
from .version_service import VersionService

__all__ = [
    "VersioningHooks",
    "DEFAULT_HOOKS",
    "ItemService",
    "OptionsService",
    "QueryContext",
    "QuerySelection",
    "StatusController",
    "HeadVersion",
    "HistoricalVersion",
    "VersionResolver",
    "VersionService",
]
