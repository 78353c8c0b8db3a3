"""SQLAlchemy model for the collections table."""

from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from apibuilder.infrastructure.persistence.database import Base


class CollectionModel(Base):
    """SQLAlchemy model for the collections table.

    Field definitions and route settings are stored as JSON text in the
    same camelCase shape used by the sync documents.

    Attributes:
        id: Primary key.
        name: Human label.
        slug: Default route path segment, unique.
        description: Optional description.
        fields: JSON list of field definitions.
        route_settings: JSON object of per-operation route configuration.
        position: Creation order.
        created_at: Timestamp when the collection was created.
        updated_at: Timestamp of the last schema mutation.
    """

    __tablename__ = "collections"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    slug: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        index=True,
        comment="Route path segment derived from the name",
    )
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    fields: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="JSON list of field definitions",
    )
    route_settings: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="JSON per-operation route configuration (NULL = defaults)",
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def __repr__(self) -> str:
        return f"<Collection(id={self.id}, slug={self.slug})>"
