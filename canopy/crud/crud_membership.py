"""CRUD operations for user and group memberships.

One class serves both tables; each singleton is bound to a model and the
column holding its subject (``user_id`` or ``group_id``).

Nothing here commits. Writes are executed or flushed inside the caller's
transaction.
"""

from typing import Dict, Generic, List, Optional, Sequence, Type, TypeVar
from uuid import UUID

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from canopy.core.shared_models import CollectionPermission
from canopy.models.membership import GroupMembership, UserMembership

MembershipType = TypeVar("MembershipType", UserMembership, GroupMembership)


class CRUDMembership(Generic[MembershipType]):
    """CRUD operations for one membership table."""

    def __init__(
        self,
        model: Type[MembershipType],
        subject_column: InstrumentedAttribute,
    ):
        """Bind to a membership model and its subject column."""
        self.model = model
        self.subject_column = subject_column

    def _ordered(self, stmt: Select) -> Select:
        return stmt.order_by(self.model.created_at, self.model.id)

    async def get_explicit(self, db: AsyncSession, collection_id: UUID) -> List[MembershipType]:
        """Get explicit memberships (``source_id IS NULL``) on a collection."""
        stmt = self._ordered(
            select(self.model).where(
                self.model.collection_id == collection_id,
                self.model.source_id.is_(None),
            )
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def get_explicit_for_collections(
        self, db: AsyncSession, collection_ids: Sequence[UUID]
    ) -> Dict[UUID, List[MembershipType]]:
        """Get explicit memberships for several collections in one query.

        Every requested ID is present in the result, mapped to an empty list
        when it holds no explicit grants.
        """
        grouped: Dict[UUID, List[MembershipType]] = {cid: [] for cid in collection_ids}
        if not collection_ids:
            return grouped

        stmt = self._ordered(
            select(self.model).where(
                self.model.collection_id.in_(list(collection_ids)),
                self.model.source_id.is_(None),
            )
        )
        result = await db.execute(stmt)
        for membership in result.scalars().all():
            grouped[membership.collection_id].append(membership)
        return grouped

    async def get_by_subject(
        self, db: AsyncSession, collection_id: UUID, subject_id: UUID
    ) -> Optional[MembershipType]:
        """Get the membership of one subject on a collection, explicit or inherited."""
        stmt = self._ordered(
            select(self.model).where(
                self.model.collection_id == collection_id,
                self.subject_column == subject_id,
            )
        ).limit(1)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_collection(
        self, db: AsyncSession, collection_id: UUID
    ) -> List[MembershipType]:
        """Get every membership on a collection."""
        stmt = self._ordered(select(self.model).where(self.model.collection_id == collection_id))
        result = await db.execute(stmt)
        return list(result.scalars().all())

    async def delete_inherited(self, db: AsyncSession, collection_id: UUID) -> int:
        """Delete all inherited memberships (``source_id IS NOT NULL``) on a collection.

        Returns:
            Number of rows deleted
        """
        stmt = delete(self.model).where(
            self.model.collection_id == collection_id,
            self.model.source_id.is_not(None),
        )
        result = await db.execute(stmt)
        return result.rowcount

    async def bulk_delete(self, db: AsyncSession, ids: Sequence[UUID]) -> int:
        """Delete memberships by their database IDs.

        Returns:
            Number of rows deleted
        """
        if not ids:
            return 0

        stmt = delete(self.model).where(self.model.id.in_(list(ids)))
        result = await db.execute(stmt)
        return result.rowcount

    async def create(
        self,
        db: AsyncSession,
        *,
        collection_id: UUID,
        subject_id: UUID,
        permission: CollectionPermission,
        source_id: Optional[UUID],
        created_by_id: Optional[UUID],
    ) -> MembershipType:
        """Insert a membership and flush it so its ID is assigned."""
        db_obj = self.model(
            collection_id=collection_id,
            permission=permission,
            source_id=source_id,
            created_by_id=created_by_id,
            **{self.subject_column.key: subject_id},
        )
        db.add(db_obj)
        await db.flush()
        return db_obj


# Singleton instances
user_membership = CRUDMembership(UserMembership, UserMembership.user_id)
group_membership = CRUDMembership(GroupMembership, GroupMembership.group_id)
