"""Collection model."""

import uuid
from typing import Optional

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from canopy.core.shared_models import CollectionPermission
from canopy.models._base import RecordBase, permission_enum


class Collection(RecordBase):
    """A node in a team's collection tree.

    ``parent_collection_id`` is null for a root. The tree-mutation layer keeps
    the parent relation acyclic within a team.
    """

    __tablename__ = "collection"

    team_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    parent_collection_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        ForeignKey("collection.id", ondelete="RESTRICT"), nullable=True, index=True
    )
    # Collection-wide default; not maintained by inheritance recalculation
    permission: Mapped[Optional[CollectionPermission]] = mapped_column(
        permission_enum(), nullable=True
    )
    created_by_id: Mapped[Optional[uuid.UUID]] = mapped_column(nullable=True)

    __table_args__ = (
        # Listing children within a team
        Index("idx_collection_team_parent", "team_id", "parent_collection_id"),
    )
