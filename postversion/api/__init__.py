"""API routes."""

from .items import router as items_router
from .versions import router as versions_router
from .options import router as options_router

__all__ = [
    "items_router",
    "versions_router",
    "options_router",
]
