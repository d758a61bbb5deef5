"""Permission recalculator: entry point for rebuilding inherited memberships.

Called by the operations that change the tree or its explicit grants (moving a
collection, granting or revoking a membership) with the collection that
changed. Its whole subtree is reconciled, because moving or re-granting one
collection can change which ancestor is closest for anything below it.
"""

import time
from typing import Dict, List, Sequence
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from canopy.core.context import BaseContext
from canopy.core.protocols.metrics import RecalculationMetrics
from canopy.domains.permissions.ancestry import AncestorPathResolver
from canopy.domains.permissions.exceptions import InconsistentTreeError
from canopy.domains.permissions.protocols import (
    CollectionTreeReaderProtocol,
    MembershipRepositoryProtocol,
    PermissionRecalculatorProtocol,
)
from canopy.domains.permissions.reconciler import ExplicitIndex, MembershipReconciler
from canopy.models.collection import Collection


class PermissionRecalculator(PermissionRecalculatorProtocol):
    """Recomputes inherited memberships for a collection and its descendants."""

    def __init__(
        self,
        tree: CollectionTreeReaderProtocol,
        membership_repos: Sequence[MembershipRepositoryProtocol],
        metrics: RecalculationMetrics,
    ) -> None:
        """Initialize with injected dependencies.

        Args:
            tree: Read access to parent links and descendants
            membership_repos: One repository per membership kind (user, group)
            metrics: Recalculation metrics sink
        """
        self._tree = tree
        self._reconcilers = [MembershipReconciler(repo) for repo in membership_repos]
        self._metrics = metrics

    async def _resolve_scope(
        self, db: AsyncSession, collection: Collection
    ) -> Dict[UUID, List[UUID]]:
        """Map every collection in the update scope to its own ancestor chain.

        Each descendant gets its full chain (path up to the target, the target,
        then the target's ancestors) rather than reusing the target's chain,
        so explicit grants on intermediate collections are honoured.
        """
        resolver = AncestorPathResolver(self._tree)
        chains: Dict[UUID, List[UUID]] = {
            collection.id: await resolver.resolve(
                db, collection.id, parent_id=collection.parent_collection_id
            )
        }

        descendant_ids = await self._tree.list_descendant_ids(db, collection.id)
        for descendant_id in sorted(descendant_ids - {collection.id}, key=str):
            chain = await resolver.resolve(db, descendant_id)
            if collection.id not in chain:
                raise InconsistentTreeError(
                    descendant_id, f"listed as descendant of '{collection.id}' but not below it"
                )
            chains[descendant_id] = chain
        return chains

    async def recalculate(
        self, db: AsyncSession, *, collection: Collection, ctx: BaseContext
    ) -> None:
        """Rebuild inherited memberships for ``collection`` and all its descendants.

        Must run inside the caller's transaction (see ``UnitOfWork``). Writes
        are flushed but never committed here, and any error propagates
        unchanged so the caller's transaction rolls everything back.

        Args:
            db: Database session bound to the caller's transaction
            collection: The collection that was moved or whose grants changed
            ctx: Operation context

        Raises:
            InconsistentTreeError: If the tree contains a cycle or a descendant
                that does not lead back to ``collection``.
        """
        started = time.monotonic()
        try:
            chains = await self._resolve_scope(db, collection)
            # Shallower collections first
            scope = sorted(chains, key=lambda cid: len(chains[cid]))

            mutated = 0
            for reconciler in self._reconcilers:
                explicit_index: ExplicitIndex = {}
                inserted = deleted = 0
                for collection_id in scope:
                    batch = await reconciler.reconcile(
                        db, collection_id, chains[collection_id], explicit_index
                    )
                    inserted += len(batch.inserts)
                    deleted += len(batch.deletes)
                    if batch.has_mutations:
                        mutated += 1
                        ctx.logger.debug(
                            f"[PermissionRecalculator] {batch.kind.value} memberships on "
                            f"{collection_id}: {batch.summary()}"
                        )
                self._metrics.inc_membership_writes(reconciler.kind.value, "insert", inserted)
                self._metrics.inc_membership_writes(reconciler.kind.value, "delete", deleted)
        except Exception:
            self._metrics.inc_recalculations("error")
            raise
        finally:
            self._metrics.observe_duration(time.monotonic() - started)

        self._metrics.inc_recalculations("success")
        self._metrics.observe_scope_size(len(scope))
        ctx.logger.info(
            f"[PermissionRecalculator] Recalculated {len(scope)} collection(s) under "
            f"{collection.id} ({mutated} batch(es) changed)"
        )
