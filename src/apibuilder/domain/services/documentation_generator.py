"""API documentation generator.

Builds the per-collection documentation shown to API consumers: one entry
per operation with its method, path, access requirements, a sample payload
derived from the schema and a ready-to-run curl command.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from apibuilder.domain.entities.collection import Collection
from apibuilder.domain.entities.field import Field, RelationConfig
from apibuilder.domain.entities.route_settings import RouteOperation
from apibuilder.domain.services.field_types import get_field_type_rule
from apibuilder.domain.services.route_surface import RouteEndpoint, RouteSurface

OPERATION_DESCRIPTIONS = {
    RouteOperation.GET_ALL: "List all items",
    RouteOperation.GET_ONE: "Get a single item by ID",
    RouteOperation.POST: "Create a new item",
    RouteOperation.PUT: "Replace an item by ID",
    RouteOperation.DELETE: "Delete an item by ID",
}


@dataclass
class FieldDoc:
    name: str
    type: str
    label: str
    required: bool
    description: str | None = None
    options: list[str] = field(default_factory=list)
    related_collection: str | None = None
    display_field: str | None = None


@dataclass
class EndpointDoc:
    operation: RouteOperation
    method: str
    path: str
    description: str
    enabled: bool
    is_private: bool
    auth_header: str | None
    populate_fields: list[str]
    curl: str


@dataclass
class CollectionDocs:
    collection_id: str
    name: str
    slug: str
    description: str | None
    fields: list[FieldDoc]
    sample_payload: dict[str, Any]
    endpoints: list[EndpointDoc]


class DocumentationGenerator:
    """Generate documentation for a collection's REST surface."""

    def __init__(self, base_url: str, prefix: str, api_key_header: str) -> None:
        self.base_url = base_url.rstrip("/")
        self.prefix = prefix
        self.api_key_header = api_key_header

    @staticmethod
    def sample_payload(collection: Collection) -> dict[str, Any]:
        """Example request body, preferring each field's default value."""
        payload: dict[str, Any] = {}
        for f in collection.fields:
            if f.default_value is not None:
                payload[f.name] = f.default_value
            else:
                payload[f.name] = get_field_type_rule(f.type).example(f)
        return payload

    def _curl(self, endpoint: RouteEndpoint, payload: dict[str, Any]) -> str:
        url = self.base_url + endpoint.path.replace(RouteSurface.ITEM_PLACEHOLDER, "<item_id>")
        parts = [f"curl -X {endpoint.http_method} {url}"]
        if endpoint.is_private:
            parts.append(f'-H "{self.api_key_header}: <your-key>"')
        if endpoint.operation in (RouteOperation.POST, RouteOperation.PUT):
            parts.append('-H "Content-Type: application/json"')
            parts.append(f"-d '{json.dumps(payload)}'")
        return " \\\n  ".join(parts)

    @staticmethod
    def display_field(relation: RelationConfig, target: Collection | None) -> str | None:
        """Target field labelling a relation; the target's first field when unset."""
        if relation.display_field:
            return relation.display_field
        if target is not None and target.fields:
            return target.fields[0].name
        return None

    def _field_doc(self, f: Field, targets: Mapping[str, Collection]) -> FieldDoc:
        doc = FieldDoc(
            name=f.name,
            type=f.type.value,
            label=get_field_type_rule(f.type).label,
            required=f.required,
            description=f.description,
            options=list(f.options),
        )
        if f.relation is not None:
            target = targets.get(f.relation.collection_id)
            doc.related_collection = target.name if target else f.relation.collection_id
            doc.display_field = self.display_field(f.relation, target)
        return doc

    def generate(
        self, collection: Collection, targets: Mapping[str, Collection] | None = None
    ) -> CollectionDocs:
        """Build documentation for a collection.

        Args:
            collection: The collection to document.
            targets: Optional map of collection ID to collection, used to
                name relation targets and resolve their display fields.
        """
        targets = targets or {}
        payload = self.sample_payload(collection)

        fields = [self._field_doc(f, targets) for f in collection.fields]

        endpoints = [
            EndpointDoc(
                operation=endpoint.operation,
                method=endpoint.http_method,
                path=endpoint.path,
                description=OPERATION_DESCRIPTIONS[endpoint.operation],
                enabled=endpoint.enabled,
                is_private=endpoint.is_private,
                auth_header=self.api_key_header if endpoint.is_private else None,
                populate_fields=endpoint.populate_fields,
                curl=self._curl(endpoint, payload),
            )
            for endpoint in RouteSurface.endpoints(collection, self.prefix)
        ]

        return CollectionDocs(
            collection_id=collection.id,
            name=collection.name,
            slug=collection.slug,
            description=collection.description,
            fields=fields,
            sample_payload=payload,
            endpoints=endpoints,
        )
