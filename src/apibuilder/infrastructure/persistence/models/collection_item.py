"""SQLAlchemy model for the collection_items table."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from apibuilder.infrastructure.persistence.database import Base


class CollectionItemModel(Base):
    """SQLAlchemy model for collection items.

    Items of every collection share one table, partitioned by
    ``collection_id``. Deleting a collection cascades to its items.

    Attributes:
        id: Primary key, unique across all collections.
        collection_id: Owning collection.
        position: Creation order within the collection.
        data: JSON object of field values.
        created_at: Creation timestamp.
        updated_at: Timestamp of the last write.
    """

    __tablename__ = "collection_items"
    __table_args__ = (
        Index("ix_collection_items_collection_position", "collection_id", "position"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    collection_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("collections.id", ondelete="CASCADE"),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    data: Mapped[str] = mapped_column(Text, nullable=False, comment="JSON field values")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<CollectionItem(id={self.id}, collection_id={self.collection_id})>"
