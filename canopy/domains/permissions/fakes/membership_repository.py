"""Fake membership repository for testing."""

from typing import Any, Dict, List, Optional, Sequence, Type, Union
from uuid import UUID, uuid4

from sqlalchemy.ext.asyncio import AsyncSession

from canopy.core.shared_models import CollectionPermission, MembershipKind
from canopy.models.membership import GroupMembership, MembershipMixin, UserMembership

_MODELS: Dict[MembershipKind, Union[Type[UserMembership], Type[GroupMembership]]] = {
    MembershipKind.USER: UserMembership,
    MembershipKind.GROUP: GroupMembership,
}
_SUBJECT_FIELDS = {MembershipKind.USER: "user_id", MembershipKind.GROUP: "group_id"}


class FakeMembershipRepository:
    """In-memory fake for MembershipRepositoryProtocol.

    Rows are transient model instances kept in insertion order. Set
    ``fail_on_insert`` to make the Nth insert (1-based) raise.
    """

    def __init__(self, kind: MembershipKind) -> None:
        """Initialize with an empty store for one membership kind."""
        self.kind = kind
        self._rows: Dict[UUID, MembershipMixin] = {}
        self._calls: list[tuple[Any, ...]] = []
        self._inserts = 0
        self.fail_on_insert: Optional[int] = None
        self.failure: Exception = RuntimeError("membership store unavailable")

    # -- seeding and inspection --

    def _build(
        self,
        collection_id: UUID,
        subject_id: UUID,
        permission: CollectionPermission,
        source_id: Optional[UUID],
        created_by_id: Optional[UUID],
    ) -> MembershipMixin:
        return _MODELS[self.kind](
            id=uuid4(),
            collection_id=collection_id,
            permission=permission,
            source_id=source_id,
            created_by_id=created_by_id,
            **{_SUBJECT_FIELDS[self.kind]: subject_id},
        )

    def seed(
        self,
        collection_id: UUID,
        subject_id: UUID,
        permission: CollectionPermission,
        *,
        source_id: Optional[UUID] = None,
        created_by_id: Optional[UUID] = None,
    ) -> MembershipMixin:
        """Store a membership directly, bypassing call recording."""
        row = self._build(collection_id, subject_id, permission, source_id, created_by_id)
        self._rows[row.id] = row
        return row

    def rows(self, collection_id: Optional[UUID] = None) -> List[MembershipMixin]:
        """All stored rows, optionally for one collection."""
        return [
            r for r in self._rows.values() if collection_id is None or r.collection_id == collection_id
        ]

    def snapshot(self) -> List[tuple]:
        """Comparable view of every stored row."""
        return [
            (r.id, r.collection_id, r.subject_id, r.permission, r.source_id, r.created_by_id)
            for r in self._rows.values()
        ]

    def calls(self, name: str) -> list[tuple[Any, ...]]:
        """Recorded calls of one method."""
        return [c for c in self._calls if c[0] == name]

    # -- protocol methods --

    async def find_explicit_memberships(
        self, db: AsyncSession, collection_id: UUID
    ) -> List[MembershipMixin]:
        """Return explicit rows on a collection."""
        self._calls.append(("find_explicit_memberships", collection_id))
        return [r for r in self.rows(collection_id) if r.source_id is None]

    async def find_explicit_memberships_for_collections(
        self, db: AsyncSession, collection_ids: Sequence[UUID]
    ) -> Dict[UUID, List[MembershipMixin]]:
        """Return explicit rows grouped by collection."""
        self._calls.append(("find_explicit_memberships_for_collections", tuple(collection_ids)))
        return {
            cid: [r for r in self.rows(cid) if r.source_id is None] for cid in collection_ids
        }

    async def find_membership(
        self, db: AsyncSession, collection_id: UUID, subject_id: UUID
    ) -> Optional[MembershipMixin]:
        """Return the first row for a subject on a collection."""
        self._calls.append(("find_membership", collection_id, subject_id))
        for r in self.rows(collection_id):
            if r.subject_id == subject_id:
                return r
        return None

    async def list_memberships(self, db: AsyncSession, collection_id: UUID) -> List[MembershipMixin]:
        """Return every row on a collection."""
        self._calls.append(("list_memberships", collection_id))
        return self.rows(collection_id)

    async def delete_inherited_memberships(self, db: AsyncSession, collection_id: UUID) -> int:
        """Drop inherited rows on a collection."""
        self._calls.append(("delete_inherited_memberships", collection_id))
        doomed = [r.id for r in self.rows(collection_id) if r.source_id is not None]
        for id in doomed:
            del self._rows[id]
        return len(doomed)

    async def delete_memberships(self, db: AsyncSession, ids: Sequence[UUID]) -> int:
        """Drop rows by ID."""
        self._calls.append(("delete_memberships", tuple(ids)))
        deleted = 0
        for id in ids:
            if self._rows.pop(id, None) is not None:
                deleted += 1
        return deleted

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
        """Store a new row, enforcing one row per (collection, subject)."""
        self._calls.append(("insert_membership", collection_id, subject_id, permission, source_id))
        self._inserts += 1
        if self.fail_on_insert is not None and self._inserts == self.fail_on_insert:
            raise self.failure
        if any(r.subject_id == subject_id for r in self.rows(collection_id)):
            raise ValueError(f"duplicate membership for {subject_id} on {collection_id}")
        row = self._build(collection_id, subject_id, permission, source_id, created_by_id)
        self._rows[row.id] = row
        return row
