"""Repository for collection operations.

Provides CRUD operations for the collections table and maps rows to
``Collection`` entities. Field definitions and route settings round-trip
through JSON text columns.
"""

import json
from collections.abc import Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from apibuilder.domain.entities import Collection, Field, RouteSettings
from apibuilder.domain.entities.timestamps import ensure_utc
from apibuilder.infrastructure.persistence.models import CollectionItemModel, CollectionModel


def _to_entity(model: CollectionModel) -> Collection:
    route_settings = json.loads(model.route_settings) if model.route_settings else None
    return Collection(
        id=model.id,
        name=model.name,
        slug=model.slug,
        fields=[Field.from_dict(f) for f in json.loads(model.fields)],
        description=model.description,
        route_settings=RouteSettings.from_dict(route_settings) if route_settings else None,
        created_at=ensure_utc(model.created_at),
        updated_at=ensure_utc(model.updated_at),
    )


def _apply(model: CollectionModel, collection: Collection) -> None:
    model.name = collection.name
    model.slug = collection.slug
    model.description = collection.description
    model.fields = json.dumps([f.to_dict() for f in collection.fields])
    model.route_settings = (
        json.dumps(collection.route_settings.to_dict())
        if collection.route_settings is not None
        else None
    )
    model.created_at = collection.created_at
    model.updated_at = collection.updated_at


class CollectionRepository:
    """Repository for collection database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository with a database session.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def _next_position(self) -> int:
        result = await self.session.execute(select(func.max(CollectionModel.position)))
        current = result.scalar_one_or_none()
        return 0 if current is None else current + 1

    async def _get_model(self, collection_id: str) -> CollectionModel | None:
        result = await self.session.execute(
            select(CollectionModel).where(CollectionModel.id == collection_id)
        )
        return result.scalar_one_or_none()

    async def create(self, collection: Collection) -> Collection:
        """Insert a new collection after all existing ones.

        Args:
            collection: The collection to persist.

        Returns:
            The persisted collection.
        """
        model = CollectionModel(id=collection.id, position=await self._next_position())
        _apply(model, collection)
        self.session.add(model)
        await self.session.flush()
        return collection

    async def get_by_id(self, collection_id: str) -> Collection | None:
        """Get a collection by ID.

        Args:
            collection_id: The collection ID.

        Returns:
            The collection if found, None otherwise.
        """
        model = await self._get_model(collection_id)
        return _to_entity(model) if model else None

    async def get_by_slug(self, slug: str) -> Collection | None:
        """Get a collection by slug.

        Args:
            slug: The collection slug.

        Returns:
            The collection if found, None otherwise.
        """
        result = await self.session.execute(
            select(CollectionModel).where(CollectionModel.slug == slug)
        )
        model = result.scalar_one_or_none()
        return _to_entity(model) if model else None

    async def slug_exists(self, slug: str, exclude_id: str | None = None) -> bool:
        """Check if a slug is taken by another collection.

        Args:
            slug: The slug to check.
            exclude_id: Collection ID to ignore (the one being renamed).

        Returns:
            True if the slug exists, False otherwise.
        """
        query = select(CollectionModel.id).where(CollectionModel.slug == slug)
        if exclude_id is not None:
            query = query.where(CollectionModel.id != exclude_id)
        result = await self.session.execute(query.limit(1))
        return result.scalar_one_or_none() is not None

    async def list_all(self) -> list[Collection]:
        """List all collections in creation order."""
        result = await self.session.execute(
            select(CollectionModel).order_by(CollectionModel.position, CollectionModel.created_at)
        )
        return [_to_entity(m) for m in result.scalars().all()]

    async def list_by_ids(self, collection_ids: Iterable[str]) -> list[Collection]:
        """Load several collections at once, skipping unknown IDs."""
        ids = list(collection_ids)
        if not ids:
            return []
        result = await self.session.execute(
            select(CollectionModel).where(CollectionModel.id.in_(ids))
        )
        return [_to_entity(m) for m in result.scalars().all()]

    async def update(self, collection: Collection) -> Collection | None:
        """Overwrite a stored collection with the entity's state.

        Returns:
            The collection, or None if it does not exist.
        """
        model = await self._get_model(collection.id)
        if model is None:
            return None
        _apply(model, collection)
        await self.session.flush()
        return collection

    async def delete(self, collection_id: str) -> bool:
        """Delete a collection and every item it owns.

        Items are removed explicitly so the cascade does not depend on the
        database enforcing foreign keys.

        Returns:
            True if the collection existed.
        """
        model = await self._get_model(collection_id)
        if model is None:
            return False
        await self.session.execute(
            delete(CollectionItemModel).where(CollectionItemModel.collection_id == collection_id)
        )
        await self.session.delete(model)
        await self.session.flush()
        return True

    async def item_counts(self) -> dict[str, int]:
        """Number of items per collection ID (collections without items are absent)."""
        result = await self.session.execute(
            select(CollectionItemModel.collection_id, func.count(CollectionItemModel.id)).group_by(
                CollectionItemModel.collection_id
            )
        )
        return {collection_id: count for collection_id, count in result.all()}

    async def delete_all(self) -> None:
        """Remove every collection. Items must be cleared first."""
        await self.session.execute(delete(CollectionModel))
        await self.session.flush()

    async def add_all(self, collections: list[Collection]) -> None:
        """Bulk insert collections, keeping list order as position."""
        for position, collection in enumerate(collections):
            model = CollectionModel(id=collection.id, position=position)
            _apply(model, collection)
            self.session.add(model)
        await self.session.flush()
