"""Item metadata repository."""

from typing import Dict, List, Optional

from ..models import ItemMeta


class MetaRepository:
    """Multi-valued metadata access for heads and snapshots."""

    def __init__(self, db):
        self.db = db

    def get_all(self, item_id: int) -> Dict[str, List[str]]:
        """All metadata of an item as ``key -> [values]`` in insertion order."""
        rows = self.db.query(ItemMeta).filter(
            ItemMeta.item_id == item_id
        ).order_by(ItemMeta.meta_id.asc()).all()

        meta: Dict[str, List[str]] = {}
        for row in rows:
            meta.setdefault(row.meta_key, []).append(row.meta_value)
        return meta

    def add(self, item_id: int, key: str, value: str, unique: bool = False) -> bool:
        """Add a value. With ``unique``, refuses when the key already exists."""
        if unique:
            exists = self.db.query(ItemMeta.meta_id).filter(
                ItemMeta.item_id == item_id,
                ItemMeta.meta_key == key,
            ).first()
            if exists:
                return False

        self.db.add(ItemMeta(item_id=item_id, meta_key=key, meta_value=value))
        self.db.flush()
        return True

    def delete(self, item_id: int, key: str, value: Optional[str] = None) -> int:
        """Delete all values of a key, or only those equal to ``value``."""
        query = self.db.query(ItemMeta).filter(
            ItemMeta.item_id == item_id,
            ItemMeta.meta_key == key,
        )
        if value is not None:
            query = query.filter(ItemMeta.meta_value == value)
        count = query.delete(synchronize_session=False)
        self.db.flush()
        return count

    def replace(self, item_id: int, key: str, values: List[str]) -> None:
        """Replace every value of a key."""
        self.delete(item_id, key)
        for value in values:
            self.db.add(ItemMeta(item_id=item_id, meta_key=key, meta_value=value))
        self.db.flush()
