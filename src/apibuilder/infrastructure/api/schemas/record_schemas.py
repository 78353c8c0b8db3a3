"""Pydantic schemas for the generated collection routes.

Record payloads are schema-less, so request bodies are plain JSON objects
and item data is an open mapping. These models describe the envelopes.
"""

from datetime import datetime
from typing import Any

from pydantic import SerializerFunctionWrapHandler, model_serializer

from apibuilder.domain.entities import CollectionItem
from apibuilder.infrastructure.api.schemas.common_schemas import CamelModel


class RecordResponse(CamelModel):
    """A stored item."""

    id: str
    collection_id: str
    data: dict[str, Any]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, item: CollectionItem) -> "RecordResponse":
        return cls.model_validate(item.to_dict())


class RecordListMeta(CamelModel):
    total: int
    collection: str
    populated: list[str] | None = None

    @model_serializer(mode="wrap")
    def _omit_unpopulated(self, handler: SerializerFunctionWrapHandler):
        data = handler(self)
        if self.populated is None:
            data.pop("populated", None)
        return data


class RecordListResponse(CamelModel):
    """Response for listing the items of a collection."""

    success: bool = True
    data: list[RecordResponse]
    meta: RecordListMeta


class RecordItemResponse(CamelModel):
    """Response carrying a single item."""

    success: bool = True
    data: RecordResponse
