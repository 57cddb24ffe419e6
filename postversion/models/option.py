"""Options store model."""

from sqlalchemy import Column, String, JSON, DateTime
from sqlalchemy.sql import func
from ..database import Base


class Option(Base):
    """Named JSON option values (e.g. ``post_version_options``)."""

    __tablename__ = "options"

    name = Column(String(100), primary_key=True)
    value = Column(JSON, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
