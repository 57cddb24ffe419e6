"""Version API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends

from ..exceptions import ItemNotFoundError, NotVersionedError
from ..schemas.version import VersionListResponse, VersionOperationResult
from ..services import VersionResolver, VersionService
from ..services.version_resolver import parse_selector, to_response
from .dependencies import get_resolver, get_version_service

router = APIRouter(prefix="/api/items/{item_id}/versions", tags=["versions"])


@router.get("", response_model=VersionListResponse)
def list_versions(
    item_id: int,
    include_hidden: Optional[bool] = None,
    resolver: VersionResolver = Depends(get_resolver),
):
    """List versions of an item, newest first."""
    item = resolver.adapter.get_item(item_id)
    if item is None:
        raise ItemNotFoundError(item_id)
    if not resolver.is_versioned(item):
        raise NotVersionedError(item_id, item.item_type)

    versions = resolver.list_versions(item_id, include_hidden=include_hidden)
    current = resolver.resolve_current(item_id)
    return VersionListResponse(
        item_id=item_id,
        current=current.record if current is not None else None,
        versions=[to_response(entry) for entry in versions.values()],
    )


@router.post("", response_model=VersionOperationResult, status_code=201)
def create_version(
    item_id: int,
    service: VersionService = Depends(get_version_service),
):
    """Freeze the current version and start the next one."""
    result = service.create_new_version(item_id)
    result.raise_for_error()
    return result


@router.post("/{selector}/hide", response_model=VersionOperationResult)
def hide_version(
    item_id: int,
    selector: str,
    service: VersionService = Depends(get_version_service),
):
    """Hide a past version. ``selector`` is a version number or label."""
    result = service.hide_version(item_id, parse_selector(selector))
    result.raise_for_error()
    return result


@router.post("/{selector}/unhide", response_model=VersionOperationResult)
def unhide_version(
    item_id: int,
    selector: str,
    service: VersionService = Depends(get_version_service),
):
    """Make a hidden past version live again."""
    result = service.unhide_version(item_id, parse_selector(selector))
    result.raise_for_error()
    return result


@router.delete("/{selector}", response_model=VersionOperationResult)
def delete_version(
    item_id: int,
    selector: str,
    service: VersionService = Depends(get_version_service),
):
    """Permanently delete a past version."""
    result = service.delete_version(item_id, parse_selector(selector))
    result.raise_for_error()
    return result
