"""Collection entity for user-defined schemas.

A collection is a named, ordered list of typed fields that also acts as a
REST resource. Records belonging to it are schema-less JSON bags; the schema
is applied on the way in, never retroactively.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from apibuilder.domain.entities.field import Field
from apibuilder.domain.entities.route_settings import RouteSettings
from apibuilder.domain.entities.timestamps import format_timestamp, parse_timestamp, utcnow


@dataclass
class Collection:
    """Collection entity representing a dynamic schema.

    Attributes:
        id: Unique identifier (UUID string).
        name: Human label.
        slug: Path segment derived from the name.
        fields: Ordered fields. Order drives default display fields.
        description: Optional free text.
        route_settings: Per-operation route configuration. ``None`` means
            all defaults.
        created_at: Timestamp when the collection was created.
        updated_at: Timestamp of the last schema mutation.
    """

    id: str
    name: str
    slug: str
    fields: list[Field]
    description: str | None = None
    route_settings: RouteSettings | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        """Validate collection data after initialization."""
        if not self.id:
            raise ValueError("Collection ID is required")
        if not self.name:
            raise ValueError("Collection name is required")

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    @property
    def routes(self) -> RouteSettings:
        """Effective route settings (defaults when none are configured)."""
        return self.route_settings or RouteSettings.defaults()

    def get_field(self, name: str) -> Field | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "slug": self.slug,
            "fields": [f.to_dict() for f in self.fields],
            "createdAt": format_timestamp(self.created_at),
            "updatedAt": format_timestamp(self.updated_at),
        }
        if self.description:
            data["description"] = self.description
        if self.route_settings is not None:
            data["routeSettings"] = self.route_settings.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Collection":
        route_settings = data.get("routeSettings")
        return cls(
            id=data["id"],
            name=data["name"],
            slug=data["slug"],
            fields=[Field.from_dict(f) for f in data.get("fields", [])],
            description=data.get("description"),
            route_settings=RouteSettings.from_dict(route_settings) if route_settings else None,
            created_at=parse_timestamp(data["createdAt"]),
            updated_at=parse_timestamp(data["updatedAt"]),
        )
