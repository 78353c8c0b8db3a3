"""Collection item (record) entity."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from apibuilder.domain.entities.timestamps import format_timestamp, parse_timestamp, utcnow


@dataclass
class CollectionItem:
    """A schema-less data bag scoped to one collection.

    ``data`` keys are not guaranteed to match the current schema: schema
    edits never migrate existing records.

    Attributes:
        id: Globally unique identifier (UUID string).
        collection_id: Owning collection, immutable after creation.
        data: Mapping from field name to a JSON-compatible value.
        created_at: Creation timestamp.
        updated_at: Timestamp of the last write.
    """

    id: str
    collection_id: str
    data: dict[str, Any]
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "collectionId": self.collection_id,
            "data": self.data,
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CollectionItem":
        return cls(
            id=data["id"],
            collection_id=data["collectionId"],
            data=dict(data.get("data") or {}),
            created_at=parse_timestamp(data["createdAt"]),
            updated_at=parse_timestamp(data["updatedAt"]),
        )
