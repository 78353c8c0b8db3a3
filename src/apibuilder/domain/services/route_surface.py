"""Route surface generator.

Turns a collection and its route settings into the REST contract clients
see: which of the five operations are reachable, the path segment each is
served under and whether it demands an API key.

A disabled operation behaves as if it did not exist (404, never 403), and a
custom path replaces the slug for that operation only.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from apibuilder.domain.entities.collection import Collection
from apibuilder.domain.entities.route_settings import RouteOperation
from apibuilder.domain.services.api_key_generator import ApiKeyGenerator


class RouteAccess(str, Enum):
    """Outcome of checking a request against an operation's configuration."""

    GRANTED = "granted"
    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"


@dataclass(frozen=True)
class RouteEndpoint:
    """One operation of a collection's generated API."""

    operation: RouteOperation
    http_method: str
    path_segment: str
    path: str
    enabled: bool
    is_private: bool
    populate_fields: list[str] = field(default_factory=list)


class RouteSurface:
    """Compute and resolve the generated routes of collections."""

    ITEM_PLACEHOLDER = "{id}"

    @staticmethod
    def effective_path(collection: Collection, operation: RouteOperation) -> str:
        """Path segment an operation is served under (custom path or slug)."""
        return collection.routes.get(operation).custom_path or collection.slug

    @classmethod
    def endpoints(cls, collection: Collection, prefix: str) -> list[RouteEndpoint]:
        """Describe all five operations of a collection.

        Args:
            collection: The collection.
            prefix: Mount point of the generated routes (e.g. ``/api``).
        """
        endpoints = []
        base = prefix.rstrip("/")
        for operation in RouteOperation:
            config = collection.routes.get(operation)
            segment = cls.effective_path(collection, operation)
            path = f"{base}/{segment}"
            if operation.targets_item:
                path = f"{path}/{cls.ITEM_PLACEHOLDER}"
            endpoints.append(
                RouteEndpoint(
                    operation=operation,
                    http_method=operation.http_method,
                    path_segment=segment,
                    path=path,
                    enabled=config.enabled,
                    is_private=config.is_private,
                    populate_fields=list(config.populate_fields) if operation.supports_populate else [],
                )
            )
        return endpoints

    @classmethod
    def resolve(
        cls,
        collections: Iterable[Collection],
        segment: str,
        operation: RouteOperation,
    ) -> Collection | None:
        """Find the collection serving ``operation`` at ``segment``.

        Custom paths take precedence over slugs when both match. An
        operation with a custom path is no longer served at the slug.
        """
        slug_match = None
        for collection in collections:
            config = collection.routes.get(operation)
            if config.custom_path:
                if config.custom_path == segment:
                    return collection
            elif slug_match is None and collection.slug == segment:
                slug_match = collection
        return slug_match

    @staticmethod
    def check_access(
        collection: Collection,
        operation: RouteOperation,
        provided_key: str | None,
    ) -> RouteAccess:
        """Gate a request on the operation's enabled and private flags.

        A private route without a configured key rejects every request.
        """
        config = collection.routes.get(operation)
        if not config.enabled:
            return RouteAccess.NOT_FOUND
        if config.is_private and not ApiKeyGenerator.matches(config.api_key, provided_key):
            return RouteAccess.UNAUTHORIZED
        return RouteAccess.GRANTED

    @classmethod
    def find_path_conflicts(
        cls,
        collection: Collection,
        others: Iterable[Collection],
    ) -> list[tuple[RouteOperation, str, Collection]]:
        """List operations whose effective path is already served by another collection."""
        conflicts = []
        others = [c for c in others if c.id != collection.id]
        for operation in RouteOperation:
            segment = cls.effective_path(collection, operation)
            for other in others:
                if cls.effective_path(other, operation) == segment:
                    conflicts.append((operation, segment, other))
                    break
        return conflicts
