"""API Routes for the API builder."""

from .collections_router import router as collections_router
from .records_router import router as records_router
from .sync_router import router as sync_router

__all__ = [
    "collections_router",
    "records_router",
    "sync_router",
]
