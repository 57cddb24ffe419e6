"""Item metadata model: multi-valued key/value pairs per item."""

from sqlalchemy import Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from ..database import Base


class ItemMeta(Base):
    """One metadata value. A key may repeat on the same item."""

    __tablename__ = "item_meta"
    __table_args__ = (
        Index("ix_item_meta_item_key", "item_id", "meta_key"),
    )

    meta_id = Column(Integer, primary_key=True, autoincrement=True)
    item_id = Column(Integer, ForeignKey("items.id", ondelete="CASCADE"), nullable=False)
    meta_key = Column(String(255), nullable=False)
    meta_value = Column(Text, nullable=False, default="")

    item = relationship("Item", back_populates="meta")
