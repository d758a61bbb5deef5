"""Repositories wrapping the collection and membership CRUD singletons."""

from typing import Dict, List, Optional, Sequence, Set
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from canopy import crud
from canopy.core.shared_models import CollectionPermission, MembershipKind
from canopy.crud.crud_membership import CRUDMembership
from canopy.domains.permissions.protocols import (
    CollectionTreeReaderProtocol,
    MembershipRepositoryProtocol,
)
from canopy.models.membership import MembershipMixin


class CollectionTreeRepository(CollectionTreeReaderProtocol):
    """Delegates to the crud.collection singleton."""

    async def get_parent_id(self, db: AsyncSession, collection_id: UUID) -> Optional[UUID]:
        """Get the parent ID of a collection."""
        return await crud.collection.get_parent_id(db, collection_id)

    async def list_descendant_ids(self, db: AsyncSession, collection_id: UUID) -> Set[UUID]:
        """Get all descendant IDs of a collection."""
        return await crud.collection.get_descendant_ids(db, collection_id)


class MembershipRepository(MembershipRepositoryProtocol):
    """Delegates to one membership CRUD singleton."""

    def __init__(self, kind: MembershipKind, crud_membership: CRUDMembership) -> None:
        """Bind to a membership kind and its CRUD object."""
        self.kind = kind
        self._crud = crud_membership

    async def find_explicit_memberships(
        self, db: AsyncSession, collection_id: UUID
    ) -> List[MembershipMixin]:
        """Get explicit memberships on a collection."""
        return await self._crud.get_explicit(db, collection_id)

    async def find_explicit_memberships_for_collections(
        self, db: AsyncSession, collection_ids: Sequence[UUID]
    ) -> Dict[UUID, List[MembershipMixin]]:
        """Get explicit memberships for several collections."""
        return await self._crud.get_explicit_for_collections(db, collection_ids)

    async def find_membership(
        self, db: AsyncSession, collection_id: UUID, subject_id: UUID
    ) -> Optional[MembershipMixin]:
        """Get a subject's membership on a collection."""
        return await self._crud.get_by_subject(db, collection_id, subject_id)

    async def list_memberships(self, db: AsyncSession, collection_id: UUID) -> List[MembershipMixin]:
        """Get every membership on a collection."""
        return await self._crud.get_by_collection(db, collection_id)

    async def delete_inherited_memberships(self, db: AsyncSession, collection_id: UUID) -> int:
        """Delete inherited memberships on a collection."""
        return await self._crud.delete_inherited(db, collection_id)

    async def delete_memberships(self, db: AsyncSession, ids: Sequence[UUID]) -> int:
        """Delete memberships by ID."""
        return await self._crud.bulk_delete(db, ids)

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
        """Insert a membership."""
        return await self._crud.create(
            db,
            collection_id=collection_id,
            subject_id=subject_id,
            permission=permission,
            source_id=source_id,
            created_by_id=created_by_id,
        )


def user_membership_repository() -> MembershipRepository:
    """Repository over the user_membership table."""
    return MembershipRepository(MembershipKind.USER, crud.user_membership)


def group_membership_repository() -> MembershipRepository:
    """Repository over the group_membership table."""
    return MembershipRepository(MembershipKind.GROUP, crud.group_membership)
