"""Database models."""

from .item import Item, ItemStatus, HIDDEN_STATUS, SNAPSHOT_TYPE
from .item_meta import ItemMeta
from .term import Term, TermRelationship
from .option import Option

__all__ = [
    "Item", "ItemStatus", "HIDDEN_STATUS", "SNAPSHOT_TYPE",
    "ItemMeta", "Term", "TermRelationship", "Option",
]
