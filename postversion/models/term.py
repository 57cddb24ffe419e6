"""Taxonomy term models."""

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from ..database import Base


class Term(Base):
    """A term in a taxonomy (e.g. category "News")."""

    __tablename__ = "terms"
    __table_args__ = (
        UniqueConstraint("taxonomy", "name", name="uq_terms_taxonomy_name"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    taxonomy = Column(String(50), nullable=False, default="category")
    name = Column(String(200), nullable=False)

    links = relationship("TermRelationship", back_populates="term", cascade="all, delete-orphan", passive_deletes=True)


class TermRelationship(Base):
    """Association between an item (head or snapshot) and a term."""

    __tablename__ = "term_relationships"

    item_id = Column(Integer, ForeignKey("items.id", ondelete="CASCADE"), primary_key=True)
    term_id = Column(Integer, ForeignKey("terms.id", ondelete="CASCADE"), primary_key=True)
    term_order = Column(Integer, nullable=False, default=0)

    item = relationship("Item", back_populates="term_links")
    term = relationship("Term", back_populates="links")
