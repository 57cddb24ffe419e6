"""Taxonomy term repository."""

from typing import Iterable, List

from ..models import Term, TermRelationship


class TermRepository:
    """Terms and their associations with items."""

    def __init__(self, db):
        self.db = db

    def get_or_create(self, taxonomy: str, name: str) -> Term:
        term = self.db.query(Term).filter(
            Term.taxonomy == taxonomy,
            Term.name == name,
        ).first()
        if term is None:
            term = Term(taxonomy=taxonomy, name=name)
            self.db.add(term)
            self.db.flush()
        return term

    def term_ids(self, item_id: int) -> List[int]:
        rows = self.db.query(TermRelationship.term_id).filter(
            TermRelationship.item_id == item_id
        ).order_by(TermRelationship.term_order, TermRelationship.term_id).all()
        return [row.term_id for row in rows]

    def get_terms(self, item_id: int) -> List[Term]:
        return self.db.query(Term).join(TermRelationship).filter(
            TermRelationship.item_id == item_id
        ).order_by(TermRelationship.term_order, Term.id).all()

    def set_terms(self, item_id: int, term_ids: Iterable[int]) -> None:
        """Replace the item's associations with ``term_ids`` (in order)."""
        self.db.query(TermRelationship).filter(
            TermRelationship.item_id == item_id
        ).delete(synchronize_session=False)
        seen = set()
        for order, term_id in enumerate(term_ids):
            if term_id in seen:
                continue
            seen.add(term_id)
            self.db.add(TermRelationship(item_id=item_id, term_id=term_id, term_order=order))
        self.db.flush()

    def copy_associations(self, from_id: int, to_id: int) -> int:
        """Associate ``to_id`` with every term of ``from_id`` it lacks.

        Returns the number of associations added.
        """
        existing = set(self.term_ids(to_id))
        source = self.db.query(TermRelationship).filter(
            TermRelationship.item_id == from_id
        ).all()

        added = 0
        for link in source:
            if link.term_id in existing:
                continue
            self.db.add(TermRelationship(item_id=to_id, term_id=link.term_id, term_order=link.term_order))
            added += 1
        self.db.flush()
        return added
