"""Item API endpoints.

Endpoints are thin: ItemService owns the save path and QuerySelection
decides which version a read returns.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..schemas.item import ItemCreate, ItemResponse, ItemUpdate
from ..schemas.version import VersionedItemResponse
from ..services import ItemService, QueryContext, QuerySelection
from ..services.version_resolver import to_response
from .dependencies import get_item_service, get_query_selection

router = APIRouter(prefix="/api/items", tags=["items"])


@router.post("", response_model=ItemResponse, status_code=201)
def create_item(
    item: ItemCreate,
    service: ItemService = Depends(get_item_service),
):
    """Create a content item. Versioned types start at version 1."""
    return service.create_item(item)


@router.get("", response_model=List[VersionedItemResponse])
def list_items(
    item_type: Optional[str] = None,
    status: Optional[str] = None,
    show_unreleased: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    service: ItemService = Depends(get_item_service),
    selection: QuerySelection = Depends(get_query_selection),
):
    """List items, each replaced by the version readers should see."""
    items = service.list_items(item_type=item_type, status=status, skip=skip, limit=limit)
    context = QueryContext(show_unreleased=show_unreleased)
    return [to_response(entry) for entry in selection.map_results(items, context)]


@router.get("/{item_id}", response_model=VersionedItemResponse)
def get_item(
    item_id: int,
    version: Optional[int] = Query(None, ge=0, description="Explicit version number"),
    show_unreleased: bool = False,
    selection: QuerySelection = Depends(get_query_selection),
):
    """Get the current version of an item, or the version asked for."""
    context = QueryContext(show_unreleased=show_unreleased, requested_version=version)
    return selection.get_item(item_id, context)


@router.put("/{item_id}", response_model=ItemResponse)
def update_item(
    item_id: int,
    update: ItemUpdate,
    service: ItemService = Depends(get_item_service),
):
    """Update an item and record the change as a snapshot."""
    return service.update_item(item_id, update)


@router.delete("/{item_id}", status_code=204)
def delete_item(
    item_id: int,
    service: ItemService = Depends(get_item_service),
):
    """Delete an item with its history, or an unprotected snapshot."""
    service.delete_item(item_id)
