"""Declarative base and shared columns."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Enum
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from canopy.core.shared_models import CollectionPermission


def utc_now() -> datetime:
    """Timezone-aware current time, used for Python-side timestamp defaults."""
    return datetime.now(timezone.utc)


def permission_enum() -> Enum:
    """Column type for CollectionPermission, persisted by value."""
    return Enum(
        CollectionPermission,
        name="collection_permission",
        values_callable=lambda levels: [level.value for level in levels],
    )


class Base(DeclarativeBase):
    """Declarative base holding the shared metadata."""

    pass


class RecordBase(Base):
    """Abstract base for all tables: UUID primary key plus audit timestamps."""

    __abstract__ = True

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now
    )
    modified_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utc_now, onupdate=utc_now
    )
