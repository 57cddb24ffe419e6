"""Shared test fixtures for the post-version test suite.

All tests run against one in-memory SQLite database. The schema is dropped
and recreated before each test, ensuring complete isolation.
"""

import os

# Use the in-memory database and readable logs before any app imports.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["VERSIONED_TYPES"] = "post,page"
os.environ["HISTORY_ITEM_TYPES"] = "post,page"
os.environ["LOG_FORMAT"] = "text"

import pytest
from fastapi.testclient import TestClient

from postversion.database import Base, get_db, engine, SessionLocal
from postversion.main import app
from postversion.schemas import ItemCreate
from postversion.services import ItemService, OptionsService, VersionService
from postversion import models  # noqa: F401


@pytest.fixture(autouse=True)
def _clean_schema():
    """Recreate every table before each test.

    Runs before the test (not after) so test failures leave data
    available for debugging.
    """
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture()
def db():
    """Per-test database session."""
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture()
def client(db):
    """FastAPI TestClient with the DB dependency overridden to use the test session."""

    def _override_get_db():
        yield db

    app.dependency_overrides[get_db] = _override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture()
def options(db) -> OptionsService:
    return OptionsService(db)


@pytest.fixture()
def items(db, options) -> ItemService:
    return ItemService(db, options=options)


@pytest.fixture()
def versions(db, options) -> VersionService:
    return VersionService(db, options=options)


def make_item(
    title: str = "Release notes",
    item_type: str = "post",
    status: str = "published",
    content: str = "First public release.",
    **overrides,
) -> dict:
    """Factory for item creation payloads."""
    payload = {
        "title": title,
        "item_type": item_type,
        "status": status,
        "content": content,
    }
    payload.update(overrides)
    return payload


@pytest.fixture()
def make_post(items):
    """Create a head through the item service and return it."""

    def _make(**overrides):
        return items.create_item(ItemCreate(**make_item(**overrides)))

    return _make
