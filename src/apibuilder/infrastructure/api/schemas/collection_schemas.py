"""Pydantic schemas for collection management endpoints."""

import dataclasses
from datetime import datetime
from typing import Any

from pydantic import Field as PydanticField

from apibuilder.domain.entities import (
    Collection,
    Field,
    FieldType,
    RelationConfig,
    RouteConfig,
    RouteOperation,
    RouteSettings,
)
from apibuilder.domain.services.documentation_generator import CollectionDocs
from apibuilder.infrastructure.api.schemas.common_schemas import CamelModel


class RelationConfigSchema(CamelModel):
    """Relation metadata of a ``relation`` / ``relation_many`` field."""

    collection_id: str = PydanticField(..., description="Target collection ID")
    display_field: str | None = PydanticField(
        default=None,
        description="Target field shown as a label (defaults to its first field)",
    )
    select_fields: list[str] = PydanticField(
        default_factory=list,
        description="Target fields embedded when populating (empty = all)",
    )

    def to_entity(self) -> RelationConfig:
        return RelationConfig(
            collection_id=self.collection_id,
            display_field=self.display_field or None,
            select_fields=list(self.select_fields),
        )


class FieldSchema(CamelModel):
    """Definition of a single field in a collection schema."""

    id: str | None = PydanticField(
        default=None,
        description="Field ID. Generated when omitted; kept for existing fields on update",
    )
    name: str = PydanticField(..., description="Payload key of the field")
    type: FieldType = PydanticField(..., description="One of the supported field types")
    required: bool = False
    default_value: str | int | float | bool | None = PydanticField(
        default=None,
        description="Default shown in forms and documentation; never applied by the store",
    )
    options: list[str] = PydanticField(default_factory=list, description="Options of select fields")
    description: str | None = None
    relation: RelationConfigSchema | None = None

    def to_entity(self) -> Field:
        return Field(
            id=self.id or "",
            name=self.name.strip(),
            type=self.type,
            required=self.required,
            default_value=self.default_value,
            options=[o.strip() for o in self.options],
            description=self.description or None,
            relation=self.relation.to_entity() if self.relation else None,
        )


class RouteConfigSchema(CamelModel):
    """Configuration of one generated operation."""

    enabled: bool = True
    is_private: bool = False
    api_key: str | None = None
    custom_path: str | None = None
    populate_fields: list[str] = PydanticField(default_factory=list)

    def to_entity(self) -> RouteConfig:
        return RouteConfig(
            enabled=self.enabled,
            is_private=self.is_private,
            api_key=self.api_key or None,
            custom_path=self.custom_path or None,
            populate_fields=list(self.populate_fields),
        )


def route_settings_to_entity(routes: dict[RouteOperation, RouteConfigSchema]) -> RouteSettings:
    return RouteSettings(
        routes={op: routes[op].to_entity() if op in routes else RouteConfig() for op in RouteOperation}
    )


class CreateCollectionRequest(CamelModel):
    """Request body for creating a new collection."""

    name: str = PydanticField(..., description="Collection name; the slug is derived from it")
    description: str | None = None
    fields: list[FieldSchema] = PydanticField(..., description="Field definitions (at least one)")


class UpdateCollectionRequest(CamelModel):
    """Request body for a partial collection update.

    Only keys present in the body are applied.
    """

    name: str | None = None
    description: str | None = None
    fields: list[FieldSchema] | None = None
    route_settings: dict[RouteOperation, RouteConfigSchema] | None = None

    def to_updates(self) -> dict[str, Any]:
        updates: dict[str, Any] = {}
        for key in self.model_fields_set:
            value = getattr(self, key)
            if key == "fields":
                value = [f.to_entity() for f in value] if value is not None else []
            elif key == "route_settings" and value is not None:
                value = route_settings_to_entity(value)
            updates[key] = value
        return updates


class UpdateRouteRequest(CamelModel):
    """Request body for changing one operation's route configuration."""

    enabled: bool | None = None
    is_private: bool | None = None
    custom_path: str | None = PydanticField(
        default=None,
        description="Single path segment replacing the slug; null restores the slug",
    )
    populate_fields: list[str] | None = None

    def to_changes(self) -> dict[str, Any]:
        changes: dict[str, Any] = {}
        for key in self.model_fields_set:
            value = getattr(self, key)
            if value is None and key != "custom_path":
                continue
            changes[key] = value
        return changes


class CollectionResponse(CamelModel):
    """Collection as returned by the management API."""

    id: str
    name: str
    slug: str
    description: str | None = None
    fields: list[FieldSchema]
    route_settings: dict[RouteOperation, RouteConfigSchema]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, collection: Collection) -> "CollectionResponse":
        data = collection.to_dict()
        data["routeSettings"] = collection.routes.to_dict()
        return cls.model_validate(data)


class CollectionListItem(CollectionResponse):
    """Collection with the number of items it holds."""

    item_count: int = 0


class CollectionListResponse(CamelModel):
    """Response for listing collections."""

    success: bool = True
    data: list[CollectionListItem]
    total: int


class FieldDocSchema(CamelModel):
    name: str
    type: str
    label: str
    required: bool
    description: str | None = None
    options: list[str] = PydanticField(default_factory=list)
    related_collection: str | None = None
    display_field: str | None = None


class EndpointDocSchema(CamelModel):
    operation: RouteOperation
    method: str
    path: str
    description: str
    enabled: bool
    is_private: bool
    auth_header: str | None = None
    populate_fields: list[str] = PydanticField(default_factory=list)
    curl: str


class CollectionDocsResponse(CamelModel):
    """Generated API documentation for one collection."""

    collection_id: str
    name: str
    slug: str
    description: str | None = None
    fields: list[FieldDocSchema]
    sample_payload: dict[str, Any]
    endpoints: list[EndpointDocSchema]

    @classmethod
    def from_docs(cls, docs: CollectionDocs) -> "CollectionDocsResponse":
        return cls.model_validate(dataclasses.asdict(docs))
