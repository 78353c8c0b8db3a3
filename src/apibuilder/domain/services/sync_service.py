"""Full-state sync service.

Exports and imports the complete store as two documents: the ordered list of
collections and a mapping from collection ID to its ordered items. An import
replaces both in one transaction.
"""

from collections import Counter
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from apibuilder.core.logging import get_logger
from apibuilder.domain.entities import Collection, CollectionItem
from apibuilder.infrastructure.persistence.repositories import (
    CollectionRepository,
    RecordRepository,
)

logger = get_logger(__name__)


class SyncPayloadError(ValueError):
    """Raised when a sync document cannot be imported."""


class SyncService:
    """Service for exporting and importing the whole store."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the service.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session
        self.collections = CollectionRepository(session)
        self.records = RecordRepository(session)

    async def export_state(self) -> dict[str, Any]:
        """Return ``{"collections": [...], "items": {collectionId: [...]}}``."""
        collections = await self.collections.list_all()
        items = await self.records.list_all()
        return {
            "collections": [c.to_dict() for c in collections],
            "items": {
                c.id: [item.to_dict() for item in items.get(c.id, [])] for c in collections
            },
        }

    @staticmethod
    def parse_state(
        document: Any,
    ) -> tuple[list[Collection], dict[str, list[CollectionItem]]]:
        """Parse and check a sync document without touching the database.

        Raises:
            SyncPayloadError: If the document is malformed or inconsistent.
        """
        if not isinstance(document, dict):
            raise SyncPayloadError("Sync document must be an object")

        raw_collections = document.get("collections")
        raw_items = document.get("items", {})
        if not isinstance(raw_collections, list):
            raise SyncPayloadError("'collections' must be a list")
        if not isinstance(raw_items, dict):
            raise SyncPayloadError("'items' must be an object keyed by collection ID")

        collections: list[Collection] = []
        for index, raw in enumerate(raw_collections):
            try:
                collections.append(Collection.from_dict(raw))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise SyncPayloadError(f"collections[{index}] is invalid: {e}") from e

        for label, values in (
            ("collection ID", [c.id for c in collections]),
            ("collection slug", [c.slug for c in collections]),
        ):
            duplicates = [v for v, n in Counter(values).items() if n > 1]
            if duplicates:
                raise SyncPayloadError(f"Duplicate {label}: {duplicates[0]}")

        known_ids = {c.id for c in collections}
        items: dict[str, list[CollectionItem]] = {}
        seen_item_ids: set[str] = set()
        for collection_id, raw_list in raw_items.items():
            if collection_id not in known_ids:
                raise SyncPayloadError(f"Items reference unknown collection '{collection_id}'")
            if not isinstance(raw_list, list):
                raise SyncPayloadError(f"items['{collection_id}'] must be a list")

            parsed: list[CollectionItem] = []
            for index, raw in enumerate(raw_list):
                try:
                    item = CollectionItem.from_dict(raw)
                except (KeyError, TypeError, ValueError, AttributeError) as e:
                    raise SyncPayloadError(f"items['{collection_id}'][{index}] is invalid: {e}") from e
                if item.collection_id != collection_id:
                    raise SyncPayloadError(
                        f"Item '{item.id}' is filed under '{collection_id}' "
                        f"but belongs to '{item.collection_id}'"
                    )
                if item.id in seen_item_ids:
                    raise SyncPayloadError(f"Duplicate item ID: {item.id}")
                seen_item_ids.add(item.id)
                parsed.append(item)
            items[collection_id] = parsed

        return collections, items

    async def import_state(self, document: Any) -> dict[str, int]:
        """Replace the whole store with the content of a sync document.

        The document is fully parsed before anything is written. The caller
        commits the session.

        Returns:
            Counts of imported collections and items.

        Raises:
            SyncPayloadError: If the document is malformed.
        """
        collections, items = self.parse_state(document)

        await self.records.delete_all()
        await self.collections.delete_all()
        # Rows loaded earlier in this session must not shadow re-imported IDs.
        self.session.expunge_all()

        await self.collections.add_all(collections)
        for collection_id, collection_items in items.items():
            await self.records.add_all(collection_id, collection_items)

        counts = {
            "collections": len(collections),
            "items": sum(len(v) for v in items.values()),
        }
        logger.info("Store replaced from sync document", **counts)
        return counts
