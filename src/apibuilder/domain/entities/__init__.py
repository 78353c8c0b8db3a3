"""Domain entities for the API builder.

Entities are pure Python dataclasses that represent core business concepts.
They have no dependencies on infrastructure or external frameworks.
"""

from apibuilder.domain.entities.collection import Collection
from apibuilder.domain.entities.collection_item import CollectionItem
from apibuilder.domain.entities.field import Field, FieldType, RelationConfig
from apibuilder.domain.entities.route_settings import (
    RouteConfig,
    RouteOperation,
    RouteSettings,
)

__all__ = [
    "Collection",
    "CollectionItem",
    "Field",
    "FieldType",
    "RelationConfig",
    "RouteConfig",
    "RouteOperation",
    "RouteSettings",
]
