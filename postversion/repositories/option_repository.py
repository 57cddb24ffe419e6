"""Options store repository."""

from typing import Any, Optional

from ..models import Option


class OptionRepository:
    """Read and write named JSON options."""

    def __init__(self, db):
        self.db = db

    def get(self, name: str) -> Optional[Any]:
        option = self.db.query(Option).filter(Option.name == name).first()
        return option.value if option else None

    def set(self, name: str, value: Any) -> None:
        option = self.db.query(Option).filter(Option.name == name).first()
        if option is None:
            self.db.add(Option(name=name, value=value))
        else:
            option.value = value
        self.db.flush()
