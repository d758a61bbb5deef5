"""CRUD operations for the collection tree."""

from typing import Optional, Set
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from canopy.models.collection import Collection


class CRUDCollection:
    """Read access to collections and their parent links."""

    async def get(self, db: AsyncSession, id: UUID) -> Optional[Collection]:
        """Get a collection by ID."""
        result = await db.execute(select(Collection).where(Collection.id == id))
        return result.scalar_one_or_none()

    async def get_parent_id(self, db: AsyncSession, id: UUID) -> Optional[UUID]:
        """Get the parent ID of a collection.

        Returns None both for a root collection and for an ID that does not
        exist, so callers walking upward stop at a dangling reference.
        """
        result = await db.execute(
            select(Collection.parent_collection_id).where(Collection.id == id)
        )
        return result.scalar_one_or_none()

    async def get_descendant_ids(self, db: AsyncSession, id: UUID) -> Set[UUID]:
        """Get the IDs of every collection below ``id``, at any depth.

        Uses a recursive CTE seeded with the direct children. UNION rather than
        UNION ALL, so a corrupted parent cycle terminates instead of recursing.
        """
        descendants = (
            select(Collection.id)
            .where(Collection.parent_collection_id == id)
            .cte(name="descendants", recursive=True)
        )
        child = aliased(Collection, name="child")
        descendants = descendants.union(
            select(child.id).where(child.parent_collection_id == descendants.c.id)
        )
        result = await db.execute(select(descendants.c.id))
        return set(result.scalars().all())


# Singleton instance
collection = CRUDCollection()
