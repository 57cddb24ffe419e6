"""Data access repositories."""

from .base import BaseRepository
from .item_repository import ItemRepository
from .meta_repository import MetaRepository
from .term_repository import TermRepository
from .option_repository import OptionRepository
from .snapshot_adapter import SnapshotRepositoryAdapter

__all__ = [
    "BaseRepository",
    "ItemRepository",
    "MetaRepository",
    "TermRepository",
    "OptionRepository",
    "SnapshotRepositoryAdapter",
]
