"""Record service for collection item operations.

Writes go through the record validator against the collection's current
schema; reads can expand relation fields one level deep.
"""

import uuid
from collections.abc import Sequence
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from apibuilder.core.config import get_settings
from apibuilder.core.logging import get_logger
from apibuilder.domain.entities import Collection, CollectionItem
from apibuilder.domain.entities.timestamps import utcnow
from apibuilder.domain.services.field_types import MALFORMED_INPUT_POLICY, MalformedInputPolicy
from apibuilder.domain.services.record_validator import RecordValidationResult, RecordValidator
from apibuilder.domain.services.relation_populator import RelationPopulator
from apibuilder.infrastructure.persistence.repositories import (
    CollectionRepository,
    RecordRepository,
)

logger = get_logger(__name__)


class RecordValidationFailed(Exception):
    """Raised when a payload fails validation; carries the full result."""

    def __init__(self, result: RecordValidationResult) -> None:
        self.result = result
        super().__init__(f"Validation failed for fields: {', '.join(result.error_fields)}")


class RecordService:
    """Service for record business logic."""

    def __init__(
        self,
        session: AsyncSession,
        policy: MalformedInputPolicy = MALFORMED_INPUT_POLICY,
    ) -> None:
        """Initialize the service.

        Args:
            session: SQLAlchemy async session.
            policy: How unparsable number/JSON input is treated on write.
        """
        self.session = session
        self.policy = policy
        self.records = RecordRepository(session)
        self.collections = CollectionRepository(session)
        self.settings = get_settings()

    def _validate(self, collection: Collection, payload: dict[str, Any]) -> dict[str, Any]:
        result = RecordValidator.validate(collection.fields, payload, self.policy)
        if not result.is_valid:
            logger.info(
                "Record validation failed",
                collection_id=collection.id,
                fields=result.error_fields,
            )
            raise RecordValidationFailed(result)
        return result.data

    async def get_items(self, collection_id: str) -> list[CollectionItem]:
        """All items of a collection in creation order."""
        return await self.records.list_by_collection(collection_id)

    async def get_item(self, collection_id: str, item_id: str) -> CollectionItem | None:
        return await self.records.get(collection_id, item_id)

    async def create_item(self, collection: Collection, payload: dict[str, Any]) -> CollectionItem:
        """Validate a payload and store it as a new item.

        Args:
            collection: The owning collection.
            payload: Raw request body.

        Returns:
            The created item.

        Raises:
            RecordValidationFailed: If required fields are missing or a value
                is rejected by the malformed input policy.
        """
        data = self._validate(collection, payload)
        now = utcnow()
        item = CollectionItem(
            id=str(uuid.uuid4()),
            collection_id=collection.id,
            data=data,
            created_at=now,
            updated_at=now,
        )
        await self.records.create(item)

        logger.info("Record created", collection_id=collection.id, record_id=item.id)
        return item

    async def update_item(
        self, collection: Collection, item_id: str, payload: dict[str, Any]
    ) -> CollectionItem | None:
        """Validate a payload and replace an item's data with it.

        Fields omitted from the payload are dropped from the stored record.

        Returns:
            The updated item, or None if it does not exist. A missing item is
            reported before the payload is validated.

        Raises:
            RecordValidationFailed: If validation fails.
        """
        existing = await self.records.get(collection.id, item_id)
        if existing is None:
            return None
        data = self._validate(collection, payload)

        item = CollectionItem(
            id=existing.id,
            collection_id=existing.collection_id,
            data=data,
            created_at=existing.created_at,
            updated_at=utcnow(),
        )
        await self.records.update(item)

        logger.info("Record updated", collection_id=collection.id, record_id=item_id)
        return item

    async def delete_item(self, collection_id: str, item_id: str) -> bool:
        """Delete an item.

        Returns:
            True if the item existed.
        """
        deleted = await self.records.delete(collection_id, item_id)
        if deleted:
            logger.info("Record deleted", collection_id=collection_id, record_id=item_id)
        return deleted

    async def populate(
        self,
        collection: Collection,
        items: Sequence[CollectionItem],
        field_names: Sequence[str],
    ) -> list[CollectionItem]:
        """Expand the named relation fields of ``items``.

        Only the targets actually referenced are loaded. At most
        ``max_populate_fields`` names are honoured per request.

        Returns:
            New items with populated data, in the same order.
        """
        field_names = list(field_names)[: self.settings.max_populate_fields]
        references = RelationPopulator.collect_references(items, collection, field_names)
        if not references:
            return list(items)

        targets = {c.id: c for c in await self.collections.list_by_ids(references)}
        target_items: dict[str, dict[str, CollectionItem]] = {}
        for target_id, item_ids in references.items():
            if target_id not in targets:
                continue
            loaded = await self.records.get_many(target_id, item_ids)
            target_items[target_id] = {item.id: item for item in loaded}

        populator = RelationPopulator(targets, target_items)
        return populator.populate_many(items, collection, field_names)
