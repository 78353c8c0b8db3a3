"""Pydantic schemas for full-state sync."""

from typing import Any

from pydantic import BaseModel, Field


class SyncDocument(BaseModel):
    """Both persisted documents: collections and items keyed by collection ID.

    Entries are kept as raw objects; the sync service parses and checks
    them before anything is written.
    """

    collections: list[dict[str, Any]]
    items: dict[str, list[dict[str, Any]]] = Field(default_factory=dict)


class SyncExportResponse(BaseModel):
    success: bool = True
    data: SyncDocument


class SyncImportResponse(BaseModel):
    success: bool = True
    message: str
    collections: int
    items: int
