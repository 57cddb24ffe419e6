"""FastAPI dependencies shared by the routers.

Services are built per request from the request's session. Override
``get_hooks`` through ``app.dependency_overrides`` to customise versioning
behaviour without touching the routers.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..services import (
    DEFAULT_HOOKS,
    ItemService,
    OptionsService,
    QuerySelection,
    VersionResolver,
    VersionService,
    VersioningHooks,
)


def get_hooks() -> VersioningHooks:
    return DEFAULT_HOOKS


def get_options_service(db: Session = Depends(get_db)) -> OptionsService:
    return OptionsService(db)


def get_item_service(
    db: Session = Depends(get_db),
    options: OptionsService = Depends(get_options_service),
    hooks: VersioningHooks = Depends(get_hooks),
) -> ItemService:
    return ItemService(db, options=options, hooks=hooks)


def get_version_service(
    db: Session = Depends(get_db),
    options: OptionsService = Depends(get_options_service),
    hooks: VersioningHooks = Depends(get_hooks),
) -> VersionService:
    return VersionService(db, options=options, hooks=hooks)


def get_resolver(
    db: Session = Depends(get_db),
    options: OptionsService = Depends(get_options_service),
    hooks: VersioningHooks = Depends(get_hooks),
) -> VersionResolver:
    return VersionResolver(db, options=options, hooks=hooks)


def get_query_selection(
    db: Session = Depends(get_db),
    options: OptionsService = Depends(get_options_service),
    hooks: VersioningHooks = Depends(get_hooks),
) -> QuerySelection:
    return QuerySelection(db, options=options, hooks=hooks)
