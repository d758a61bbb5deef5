"""Membership reconciler: brings one collection's inherited memberships in line
with its ancestor chain, for one membership kind.

Resolution rules:
- ancestors are visited nearest first, and the first explicit grant seen for a
  subject wins, so a closer ancestor always beats a farther one;
- a subject with an explicit membership on the collection itself inherits
  nothing, and that explicit row is never touched;
- an inherited row points straight at the explicit ancestor grant that
  justifies it, never at another inherited row.

Instead of deleting every inherited row and re-inserting, the reconciler diffs
the desired grants against the stored rows and only writes the difference. A
second run over an unchanged tree therefore writes nothing.
"""

from typing import Dict, List, Mapping, Optional, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from canopy.core.shared_models import MembershipKind
from canopy.domains.permissions.protocols import MembershipRepositoryProtocol
from canopy.domains.permissions.types import (
    InheritanceActionBatch,
    InheritedDeleteAction,
    InheritedGrant,
    InheritedInsertAction,
    InheritedKeepAction,
)
from canopy.models.membership import MembershipMixin

ExplicitIndex = Dict[UUID, List[MembershipMixin]]


class MembershipReconciler:
    """Reconciles inherited memberships of a single kind."""

    def __init__(self, repo: MembershipRepositoryProtocol) -> None:
        """Initialize with the repository for one membership kind."""
        self._repo = repo

    @property
    def kind(self) -> MembershipKind:
        """Membership kind handled by this reconciler."""
        return self._repo.kind

    async def load_explicit(
        self,
        db: AsyncSession,
        collection_ids: Sequence[UUID],
        explicit_index: Optional[ExplicitIndex] = None,
    ) -> ExplicitIndex:
        """Fetch explicit memberships for collections missing from ``explicit_index``.

        The index is filled in place and returned. Explicit rows are never
        written during recalculation, so entries stay valid for its duration.
        """
        index = explicit_index if explicit_index is not None else {}
        missing = [cid for cid in dict.fromkeys(collection_ids) if cid not in index]
        if missing:
            index.update(await self._repo.find_explicit_memberships_for_collections(db, missing))
        return index

    def plan(
        self,
        collection_id: UUID,
        ancestor_ids: Sequence[UUID],
        current: Sequence[MembershipMixin],
        explicit_index: Mapping[UUID, Sequence[MembershipMixin]],
    ) -> InheritanceActionBatch:
        """Resolve the actions needed on one collection.

        Args:
            collection_id: Collection being reconciled
            ancestor_ids: Its ancestors, nearest first
            current: Every membership of this kind currently on the collection
            explicit_index: Explicit memberships per ancestor ID

        Returns:
            InheritanceActionBatch with inserts, deletes and keeps
        """
        batch = InheritanceActionBatch(collection_id=collection_id, kind=self.kind)

        explicit_subjects = {m.subject_id for m in current if m.is_explicit}

        desired: Dict[UUID, InheritedGrant] = {}
        for ancestor_id in ancestor_ids:
            for membership in explicit_index.get(ancestor_id, ()):
                subject_id = membership.subject_id
                if subject_id in desired:
                    continue
                if subject_id in explicit_subjects:
                    if subject_id not in batch.overridden:
                        batch.overridden.append(subject_id)
                    continue
                desired[subject_id] = InheritedGrant(
                    subject_id=subject_id,
                    permission=membership.permission,
                    source=membership,
                )

        satisfied = set()
        for membership in current:
            if membership.is_explicit:
                continue
            grant = desired.get(membership.subject_id)
            if grant is not None and membership.subject_id not in satisfied and grant.matches(
                membership
            ):
                satisfied.add(membership.subject_id)
                batch.keeps.append(InheritedKeepAction(membership=membership))
            else:
                batch.deletes.append(InheritedDeleteAction(membership=membership))

        for subject_id, grant in desired.items():
            if subject_id not in satisfied:
                batch.inserts.append(InheritedInsertAction(grant=grant))

        return batch

    async def apply(self, db: AsyncSession, batch: InheritanceActionBatch) -> None:
        """Write a resolved batch: deletes first, then inserts."""
        if batch.deletes:
            if not batch.keeps:
                await self._repo.delete_inherited_memberships(db, batch.collection_id)
            else:
                await self._repo.delete_memberships(
                    db, [action.membership.id for action in batch.deletes]
                )

        for action in batch.inserts:
            grant = action.grant
            await self._repo.insert_membership(
                db,
                collection_id=batch.collection_id,
                subject_id=grant.subject_id,
                permission=grant.permission,
                source_id=grant.source_id,
                created_by_id=grant.created_by_id,
            )

    async def reconcile(
        self,
        db: AsyncSession,
        collection_id: UUID,
        ancestor_ids: Sequence[UUID],
        explicit_index: Optional[ExplicitIndex] = None,
    ) -> InheritanceActionBatch:
        """Plan and apply the inherited memberships of one collection.

        Args:
            db: Database session, inside the caller's transaction
            collection_id: Collection to reconcile
            ancestor_ids: Its ancestors, nearest first
            explicit_index: Shared cache of explicit memberships per collection

        Returns:
            The batch that was applied
        """
        index = await self.load_explicit(db, ancestor_ids, explicit_index)
        current = await self._repo.list_memberships(db, collection_id)
        batch = self.plan(collection_id, ancestor_ids, current, index)
        await self.apply(db, batch)
        return batch
