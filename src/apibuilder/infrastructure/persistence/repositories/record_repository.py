"""Repository for collection item (record) operations.

Items of every collection live in the ``collection_items`` table with their
field values serialized as JSON. Reads preserve insertion order within a
collection.
"""

import json
from collections import defaultdict
from collections.abc import Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from apibuilder.domain.entities import CollectionItem
from apibuilder.domain.entities.timestamps import ensure_utc
from apibuilder.infrastructure.persistence.models import CollectionItemModel


def _to_entity(model: CollectionItemModel) -> CollectionItem:
    return CollectionItem(
        id=model.id,
        collection_id=model.collection_id,
        data=json.loads(model.data),
        created_at=ensure_utc(model.created_at),
        updated_at=ensure_utc(model.updated_at),
    )


class RecordRepository:
    """Repository for collection item database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository with a database session.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    async def _next_position(self, collection_id: str) -> int:
        result = await self.session.execute(
            select(func.max(CollectionItemModel.position)).where(
                CollectionItemModel.collection_id == collection_id
            )
        )
        current = result.scalar_one_or_none()
        return 0 if current is None else current + 1

    async def _get_model(self, collection_id: str, item_id: str) -> CollectionItemModel | None:
        result = await self.session.execute(
            select(CollectionItemModel).where(
                CollectionItemModel.collection_id == collection_id,
                CollectionItemModel.id == item_id,
            )
        )
        return result.scalar_one_or_none()

    async def create(self, item: CollectionItem) -> CollectionItem:
        """Append an item to its collection.

        Args:
            item: The item to persist.

        Returns:
            The persisted item.
        """
        model = CollectionItemModel(
            id=item.id,
            collection_id=item.collection_id,
            position=await self._next_position(item.collection_id),
            data=json.dumps(item.data),
            created_at=item.created_at,
            updated_at=item.updated_at,
        )
        self.session.add(model)
        await self.session.flush()
        return item

    async def get(self, collection_id: str, item_id: str) -> CollectionItem | None:
        """Get an item by ID within a collection.

        Args:
            collection_id: The owning collection ID.
            item_id: The item ID.

        Returns:
            The item if found, None otherwise.
        """
        model = await self._get_model(collection_id, item_id)
        return _to_entity(model) if model else None

    async def list_by_collection(self, collection_id: str) -> list[CollectionItem]:
        """All items of a collection in insertion order."""
        result = await self.session.execute(
            select(CollectionItemModel)
            .where(CollectionItemModel.collection_id == collection_id)
            .order_by(CollectionItemModel.position)
        )
        return [_to_entity(m) for m in result.scalars().all()]

    async def get_many(self, collection_id: str, item_ids: Iterable[str]) -> list[CollectionItem]:
        """Load the listed items of a collection, skipping unknown IDs."""
        ids = list(item_ids)
        if not ids:
            return []
        result = await self.session.execute(
            select(CollectionItemModel).where(
                CollectionItemModel.collection_id == collection_id,
                CollectionItemModel.id.in_(ids),
            )
        )
        return [_to_entity(m) for m in result.scalars().all()]

    async def update(self, item: CollectionItem) -> CollectionItem | None:
        """Replace the stored data of an item.

        Returns:
            The item, or None if it does not exist in its collection.
        """
        model = await self._get_model(item.collection_id, item.id)
        if model is None:
            return None
        model.data = json.dumps(item.data)
        model.updated_at = item.updated_at
        await self.session.flush()
        return item

    async def delete(self, collection_id: str, item_id: str) -> bool:
        """Delete an item.

        Returns:
            True if the item existed.
        """
        model = await self._get_model(collection_id, item_id)
        if model is None:
            return False
        await self.session.delete(model)
        await self.session.flush()
        return True

    async def list_all(self) -> dict[str, list[CollectionItem]]:
        """Every item grouped by collection ID, each group in insertion order."""
        result = await self.session.execute(
            select(CollectionItemModel).order_by(
                CollectionItemModel.collection_id, CollectionItemModel.position
            )
        )
        grouped: dict[str, list[CollectionItem]] = defaultdict(list)
        for model in result.scalars().all():
            grouped[model.collection_id].append(_to_entity(model))
        return dict(grouped)

    async def delete_all(self) -> None:
        """Remove every item of every collection."""
        await self.session.execute(delete(CollectionItemModel))
        await self.session.flush()

    async def add_all(self, collection_id: str, items: list[CollectionItem]) -> None:
        """Bulk insert items for a collection, keeping list order as position."""
        for position, item in enumerate(items):
            self.session.add(
                CollectionItemModel(
                    id=item.id,
                    collection_id=collection_id,
                    position=position,
                    data=json.dumps(item.data),
                    created_at=item.created_at,
                    updated_at=item.updated_at,
                )
            )
        await self.session.flush()
