"""Protocols for the permissions domain."""

from typing import Dict, List, Optional, Protocol, Sequence, Set
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from canopy.core.context import BaseContext
from canopy.core.shared_models import CollectionPermission, MembershipKind
from canopy.models.collection import Collection
from canopy.models.membership import MembershipMixin


class CollectionTreeReaderProtocol(Protocol):
    """Read-only view of the collection tree."""

    async def get_parent_id(self, db: AsyncSession, collection_id: UUID) -> Optional[UUID]:
        """Return the parent ID, or None for a root or a missing collection."""
        ...

    async def list_descendant_ids(self, db: AsyncSession, collection_id: UUID) -> Set[UUID]:
        """Return the IDs of every collection below ``collection_id``."""
        ...


class MembershipRepositoryProtocol(Protocol):
    """Data access for one kind of membership (user or group)."""

    kind: MembershipKind

    async def find_explicit_memberships(
        self, db: AsyncSession, collection_id: UUID
    ) -> List[MembershipMixin]:
        """Return explicit memberships (no source) on a collection."""
        ...

    async def find_explicit_memberships_for_collections(
        self, db: AsyncSession, collection_ids: Sequence[UUID]
    ) -> Dict[UUID, List[MembershipMixin]]:
        """Return explicit memberships keyed by collection, one key per requested ID."""
        ...

    async def find_membership(
        self, db: AsyncSession, collection_id: UUID, subject_id: UUID
    ) -> Optional[MembershipMixin]:
        """Return the membership of a subject on a collection, whatever its source."""
        ...

    async def list_memberships(self, db: AsyncSession, collection_id: UUID) -> List[MembershipMixin]:
        """Return every membership on a collection."""
        ...

    async def delete_inherited_memberships(self, db: AsyncSession, collection_id: UUID) -> int:
        """Delete every inherited membership on a collection."""
        ...

    async def delete_memberships(self, db: AsyncSession, ids: Sequence[UUID]) -> int:
        """Delete memberships by ID."""
        ...

    async def insert_membership(
        self,
        db: AsyncSession,
        *,
        collection_id: UUID,
        subject_id: UUID,
        permission: CollectionPermission,
        source_id: Optional[UUID],
        created_by_id: Optional[UUID],
    ) -> MembershipMixin:
        """Insert a membership and return it with its ID assigned."""
        ...


class PermissionRecalculatorProtocol(Protocol):
    """Recomputes inherited memberships for a collection subtree."""

    async def recalculate(
        self, db: AsyncSession, *, collection: Collection, ctx: BaseContext
    ) -> None:
        """Rebuild inherited memberships for ``collection`` and all its descendants.

        Must run inside the caller's transaction. Nothing is committed here.
        """
        ...
