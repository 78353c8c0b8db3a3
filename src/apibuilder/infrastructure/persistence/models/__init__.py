"""SQLAlchemy models for the API builder."""

from apibuilder.infrastructure.persistence.models.collection import CollectionModel
from apibuilder.infrastructure.persistence.models.collection_item import CollectionItemModel

__all__ = [
    "CollectionItemModel",
    "CollectionModel",
]
