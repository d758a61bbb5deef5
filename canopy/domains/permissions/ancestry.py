"""Ancestor path resolution for the collection tree."""

from typing import Dict, List, Optional, Tuple, Union, cast
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from canopy.domains.permissions.exceptions import InconsistentTreeError
from canopy.domains.permissions.protocols import CollectionTreeReaderProtocol

_UNKNOWN = object()


class AncestorPathResolver:
    """Resolves ancestor chains, nearest parent first, ending at the root.

    Every chain walked is memoized, including the chains of the intermediate
    collections on the way up, so resolving a whole subtree costs one parent
    lookup per collection. Create one resolver per recalculation: the cache
    is only valid while the tree does not change.
    """

    def __init__(self, tree: CollectionTreeReaderProtocol) -> None:
        """Initialize with the tree reader used for parent lookups."""
        self._tree = tree
        self._chains: Dict[UUID, Tuple[UUID, ...]] = {}

    async def resolve(
        self,
        db: AsyncSession,
        collection_id: UUID,
        parent_id: Union[UUID, None, object] = _UNKNOWN,
    ) -> List[UUID]:
        """Return the ancestor IDs of ``collection_id``, nearest first.

        Args:
            db: Database session
            collection_id: Collection whose ancestors to resolve
            parent_id: The collection's parent when the caller already holds it
                (for example a collection that was just moved). Looked up
                through the tree reader when omitted.

        Returns:
            Ancestor IDs from the immediate parent to the root. A parent ID
            that no longer resolves to a collection is the last entry.

        Raises:
            InconsistentTreeError: If the walk revisits a collection.
        """
        cached = self._chains.get(collection_id)
        if cached is not None and parent_id is _UNKNOWN:
            return list(cached)

        current: Optional[UUID]
        if parent_id is _UNKNOWN:
            current = await self._tree.get_parent_id(db, collection_id)
        else:
            current = cast(Optional[UUID], parent_id)

        path: List[UUID] = []
        seen = {collection_id}
        tail: Tuple[UUID, ...] = ()
        while current is not None:
            if current in seen:
                raise InconsistentTreeError(collection_id, f"parent cycle through '{current}'")
            path.append(current)
            seen.add(current)
            known = self._chains.get(current)
            if known is not None:
                tail = known
                break
            current = await self._tree.get_parent_id(db, current)

        chain = tuple(path) + tail
        if seen.intersection(tail):
            raise InconsistentTreeError(collection_id, "parent cycle in resolved chain")

        self._chains[collection_id] = chain
        for depth, ancestor_id in enumerate(path):
            self._chains.setdefault(ancestor_id, chain[depth + 1 :])
        return list(chain)
