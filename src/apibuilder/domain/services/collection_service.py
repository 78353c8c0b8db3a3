"""Collection service for business logic.

Handles collection creation, schema updates, route configuration and
deletion. Schema edits never touch existing records.
"""

import dataclasses
import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from apibuilder.core.config import get_settings
from apibuilder.core.logging import get_logger
from apibuilder.domain.entities import (
    Collection,
    Field,
    RouteConfig,
    RouteOperation,
    RouteSettings,
)
from apibuilder.domain.entities.timestamps import utcnow
from apibuilder.domain.services.api_key_generator import ApiKeyGenerator
from apibuilder.domain.services.collection_validator import (
    CollectionValidationError,
    CollectionValidator,
)
from apibuilder.domain.services.route_surface import RouteSurface
from apibuilder.domain.services.slug_generator import SlugGenerator
from apibuilder.infrastructure.persistence.repositories import CollectionRepository

logger = get_logger(__name__)

UPDATABLE_FIELDS = frozenset({"name", "description", "fields", "route_settings"})
ROUTE_CONFIG_FIELDS = frozenset({"enabled", "is_private", "custom_path", "populate_fields"})


class CollectionValidationFailed(Exception):
    """Raised when a collection definition breaks the schema rules."""

    def __init__(self, errors: list[CollectionValidationError]) -> None:
        self.errors = errors
        super().__init__("; ".join(f"{e.field}: {e.message}" for e in errors))


class CollectionConflictError(Exception):
    """Raised when a slug or route path is already served by another collection."""

    def __init__(self, message: str, field: str = "slug") -> None:
        self.field = field
        super().__init__(message)


class CollectionService:
    """Service for collection business logic."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the service.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session
        self.repository = CollectionRepository(session)
        self.settings = get_settings()

    def _new_api_key(self) -> str:
        return ApiKeyGenerator.generate(
            prefix=self.settings.api_key_prefix, length=self.settings.api_key_length
        )

    @staticmethod
    def _assign_field_ids(fields: Sequence[Field], existing: Sequence[Field] = ()) -> list[Field]:
        """Give every field an id, reusing the id of an existing field with the same name."""
        existing_ids = {f.name: f.id for f in existing}
        return [
            f if f.id else dataclasses.replace(f, id=existing_ids.get(f.name) or str(uuid.uuid4()))
            for f in fields
        ]

    async def _collections_by_id(self) -> dict[str, Collection]:
        return {c.id: c for c in await self.repository.list_all()}

    def _prepare_routes(self, collection: Collection, route_settings: RouteSettings) -> RouteSettings:
        """Normalize custom paths and issue keys for private routes that lack one.

        Raises:
            CollectionValidationFailed: If a custom path or populate field is invalid.
        """
        errors: list[CollectionValidationError] = []
        routes: dict[RouteOperation, RouteConfig] = {}

        for operation in RouteOperation:
            config = route_settings.get(operation)
            custom_path = SlugGenerator.normalize_path(config.custom_path)
            if custom_path is not None:
                for e in SlugGenerator.validate_path(
                    custom_path, field=f"routeSettings.{operation.value}.customPath"
                ):
                    errors.append(CollectionValidationError(field=e.field, message=e.message, code=e.code))

            for name in config.populate_fields:
                f = collection.get_field(name)
                if f is None or not f.is_relation:
                    errors.append(
                        CollectionValidationError(
                            field=f"routeSettings.{operation.value}.populateFields",
                            message=f"'{name}' is not a relation field of this collection",
                            code="populate_field_not_relation",
                        )
                    )

            api_key = config.api_key
            if config.is_private and not api_key:
                api_key = self._new_api_key()

            routes[operation] = dataclasses.replace(config, custom_path=custom_path, api_key=api_key)

        if errors:
            raise CollectionValidationFailed(errors)
        return RouteSettings(routes=routes)

    async def _check_conflicts(self, collection: Collection) -> None:
        """Reject a collection whose slug or effective paths are already served.

        Raises:
            CollectionConflictError: On a slug or route path collision.
        """
        if await self.repository.slug_exists(collection.slug, exclude_id=collection.id):
            raise CollectionConflictError(
                f"A collection with slug '{collection.slug}' already exists", field="slug"
            )

        others = await self.repository.list_all()
        conflicts = RouteSurface.find_path_conflicts(collection, others)
        if conflicts:
            operation, segment, other = conflicts[0]
            raise CollectionConflictError(
                f"Path '{segment}' for {operation.value} is already used by collection '{other.name}'",
                field=f"routeSettings.{operation.value}.customPath",
            )

    async def list_collections(self) -> list[Collection]:
        """All collections in creation order."""
        return await self.repository.list_all()

    async def list_collections_with_counts(self) -> list[tuple[Collection, int]]:
        """All collections paired with the number of items they hold."""
        collections = await self.repository.list_all()
        counts = await self.repository.item_counts()
        return [(c, counts.get(c.id, 0)) for c in collections]

    async def get_collection(self, collection_id: str) -> Collection | None:
        return await self.repository.get_by_id(collection_id)

    async def get_collection_by_slug(self, slug_or_path: str) -> Collection | None:
        """Find a collection by slug, falling back to any operation's custom path."""
        collection = await self.repository.get_by_slug(slug_or_path)
        if collection is not None:
            return collection
        for candidate in await self.repository.list_all():
            if any(candidate.routes.get(op).custom_path == slug_or_path for op in RouteOperation):
                return candidate
        return None

    async def resolve_route(self, segment: str, operation: RouteOperation) -> Collection | None:
        """Find the collection serving ``operation`` at a path segment."""
        return RouteSurface.resolve(await self.repository.list_all(), segment, operation)

    async def create_collection(
        self,
        name: str,
        fields: Sequence[Field],
        description: str | None = None,
    ) -> Collection:
        """Create a new collection.

        Args:
            name: Collection name.
            fields: Field definitions. Fields without an id get a new one.
            description: Optional description.

        Returns:
            The created collection.

        Raises:
            CollectionValidationFailed: If validation fails.
            CollectionConflictError: If the slug is already taken.
        """
        name = name.strip() if name else name
        collection_id = str(uuid.uuid4())
        fields = self._assign_field_ids(fields)

        errors = CollectionValidator.validate(
            name, fields, collection_id, await self._collections_by_id()
        )
        if errors:
            raise CollectionValidationFailed(errors)

        now = utcnow()
        collection = Collection(
            id=collection_id,
            name=name,
            slug=SlugGenerator.generate(name),
            fields=fields,
            description=description or None,
            created_at=now,
            updated_at=now,
        )
        await self._check_conflicts(collection)
        await self.repository.create(collection)

        logger.info(
            "Collection created",
            collection_id=collection.id,
            collection_name=collection.name,
            slug=collection.slug,
            field_count=len(fields),
        )
        return collection

    async def update_collection(self, collection_id: str, updates: dict[str, Any]) -> Collection | None:
        """Apply a partial update to a collection.

        Args:
            collection_id: The collection ID.
            updates: Any of ``name``, ``description``, ``fields`` and
                ``route_settings``. Keys not present are left unchanged.

        Returns:
            The updated collection, or None if it does not exist.

        Raises:
            CollectionValidationFailed: If validation fails.
            CollectionConflictError: If the new slug or paths collide.
        """
        unknown = set(updates) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unsupported collection update keys: {sorted(unknown)}")

        collection = await self.repository.get_by_id(collection_id)
        if collection is None:
            return None

        errors: list[CollectionValidationError] = []
        changes: dict[str, Any] = {}

        if "name" in updates:
            name = (updates["name"] or "").strip()
            errors.extend(CollectionValidator.validate_name(name))
            changes["name"] = name
            changes["slug"] = SlugGenerator.generate(name)

        if "description" in updates:
            changes["description"] = updates["description"] or None

        if "fields" in updates:
            fields = self._assign_field_ids(updates["fields"] or [], collection.fields)
            errors.extend(
                CollectionValidator.validate_fields(
                    fields, collection.id, await self._collections_by_id()
                )
            )
            changes["fields"] = fields

        if errors:
            raise CollectionValidationFailed(errors)

        updated = dataclasses.replace(collection, **changes, updated_at=utcnow())
        if "route_settings" in updates:
            route_settings = updates["route_settings"]
            updated.route_settings = (
                self._prepare_routes(updated, route_settings) if route_settings is not None else None
            )

        await self._check_conflicts(updated)
        await self.repository.update(updated)

        logger.info(
            "Collection updated",
            collection_id=collection_id,
            changed=sorted(updates),
        )
        return updated

    async def update_route(
        self,
        collection_id: str,
        operation: RouteOperation,
        changes: dict[str, Any],
    ) -> Collection | None:
        """Change the configuration of one operation.

        Making a route private without an API key issues a new key.

        Args:
            collection_id: The collection ID.
            operation: The operation to configure.
            changes: Any of ``enabled``, ``is_private``, ``custom_path`` and
                ``populate_fields``.

        Returns:
            The updated collection, or None if it does not exist.
        """
        unknown = set(changes) - ROUTE_CONFIG_FIELDS
        if unknown:
            raise ValueError(f"Unsupported route configuration keys: {sorted(unknown)}")

        collection = await self.repository.get_by_id(collection_id)
        if collection is None:
            return None

        config = dataclasses.replace(collection.routes.get(operation), **changes)
        route_settings = self._prepare_routes(collection, collection.routes.with_route(operation, config))
        updated = dataclasses.replace(collection, route_settings=route_settings, updated_at=utcnow())

        await self._check_conflicts(updated)
        await self.repository.update(updated)

        final = route_settings.get(operation)
        logger.info(
            "Route configuration updated",
            collection_id=collection_id,
            operation=operation.value,
            enabled=final.enabled,
            is_private=final.is_private,
            custom_path=final.custom_path,
        )
        return updated

    async def rotate_api_key(self, collection_id: str, operation: RouteOperation) -> Collection | None:
        """Issue a fresh API key for one operation.

        Returns:
            The updated collection, or None if it does not exist.
        """
        collection = await self.repository.get_by_id(collection_id)
        if collection is None:
            return None

        config = dataclasses.replace(collection.routes.get(operation), api_key=self._new_api_key())
        updated = dataclasses.replace(
            collection,
            route_settings=collection.routes.with_route(operation, config),
            updated_at=utcnow(),
        )
        await self.repository.update(updated)

        logger.info("Route API key rotated", collection_id=collection_id, operation=operation.value)
        return updated

    async def delete_collection(self, collection_id: str) -> bool:
        """Delete a collection and all of its items.

        Relation fields in other collections that point at it are left as
        they are.

        Returns:
            True if the collection existed.
        """
        deleted = await self.repository.delete(collection_id)
        if deleted:
            logger.info("Collection deleted", collection_id=collection_id)
        return deleted
