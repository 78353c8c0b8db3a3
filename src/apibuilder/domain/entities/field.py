"""Field entity for collection schemas.

A field is one named, typed attribute of a collection. Relation fields carry
a :class:`RelationConfig` pointing at another collection.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FieldType(str, Enum):
    """Closed set of supported field types."""

    STRING = "string"
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    EMAIL = "email"
    URL = "url"
    DATE = "date"
    DATETIME = "datetime"
    SELECT = "select"
    JSON = "json"
    RELATION = "relation"
    RELATION_MANY = "relation_many"

    @property
    def is_relation(self) -> bool:
        return self in (FieldType.RELATION, FieldType.RELATION_MANY)


@dataclass
class RelationConfig:
    """Relation metadata for ``relation`` / ``relation_many`` fields.

    Attributes:
        collection_id: ID of the target collection.
        display_field: Target field used as a human label. Defaults to the
            target's first field when unset.
        select_fields: Target fields to embed when populating. Empty means
            all fields.
    """

    collection_id: str
    display_field: str | None = None
    select_fields: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"collectionId": self.collection_id}
        if self.display_field:
            data["displayField"] = self.display_field
        if self.select_fields:
            data["selectFields"] = list(self.select_fields)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RelationConfig":
        return cls(
            collection_id=data["collectionId"],
            display_field=data.get("displayField") or None,
            select_fields=list(data.get("selectFields") or []),
        )


@dataclass
class Field:
    """A single schema attribute.

    Attributes:
        id: Opaque identifier, stable for the field's lifetime.
        name: Key into record data, unique within the owning collection.
        type: One of :class:`FieldType`.
        required: Whether absent/null/empty values fail validation.
        default_value: UI-level default; the store never applies it.
        options: Legal values for ``select`` fields.
        description: Documentation only.
        relation: Present only for relation types.
    """

    id: str
    name: str
    type: FieldType
    required: bool = False
    default_value: str | int | float | bool | None = None
    options: list[str] = field(default_factory=list)
    description: str | None = None
    relation: RelationConfig | None = None

    @property
    def is_relation(self) -> bool:
        return self.type.is_relation

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted camelCase document shape."""
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "required": self.required,
        }
        if self.default_value is not None:
            data["defaultValue"] = self.default_value
        if self.options:
            data["options"] = list(self.options)
        if self.description:
            data["description"] = self.description
        if self.relation is not None:
            data["relation"] = self.relation.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Field":
        """Build a field from its persisted document shape.

        Raises:
            KeyError: If ``id``, ``name`` or ``type`` is missing.
            ValueError: If ``type`` is not a known field type.
        """
        relation = data.get("relation")
        return cls(
            id=data["id"],
            name=data["name"],
            type=FieldType(data["type"]),
            required=bool(data.get("required", False)),
            default_value=data.get("defaultValue"),
            options=list(data.get("options") or []),
            description=data.get("description"),
            relation=RelationConfig.from_dict(relation) if relation else None,
        )
