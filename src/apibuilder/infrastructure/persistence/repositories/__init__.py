"""Repositories for database operations."""

from apibuilder.infrastructure.persistence.repositories.collection_repository import (
    CollectionRepository,
)
from apibuilder.infrastructure.persistence.repositories.record_repository import (
    RecordRepository,
)

__all__ = [
    "CollectionRepository",
    "RecordRepository",
]
