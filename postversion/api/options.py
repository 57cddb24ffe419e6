"""Versioning options endpoints."""

from fastapi import APIRouter, Depends

from ..schemas.options import VersioningOptions, VersioningOptionsUpdate
from ..services import OptionsService
from .dependencies import get_options_service

router = APIRouter(prefix="/api/options", tags=["options"])


@router.get("", response_model=VersioningOptions)
def get_options(service: OptionsService = Depends(get_options_service)):
    """Item types currently under version control."""
    return service.get()


@router.put("", response_model=VersioningOptions)
def update_options(
    update: VersioningOptionsUpdate,
    service: OptionsService = Depends(get_options_service),
):
    """Replace the versioned item types. Unsupported types are dropped."""
    return service.update(update.item_types)
