"""Fake collection tree reader for testing."""

from typing import Any, Dict, Optional, Set
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession


class FakeCollectionTree:
    """In-memory fake for CollectionTreeReaderProtocol.

    The tree is a parent map. A parent ID that was never seeded as a
    collection behaves like a dangling reference: it has no parent of its own.
    """

    def __init__(self) -> None:
        """Initialize with an empty tree."""
        self._parents: Dict[UUID, Optional[UUID]] = {}
        self._descendant_overrides: Dict[UUID, Set[UUID]] = {}
        self._calls: list[tuple[Any, ...]] = []

    def seed(self, collection_id: UUID, parent_id: Optional[UUID] = None) -> None:
        """Add or re-parent a collection."""
        self._parents[collection_id] = parent_id

    def remove(self, collection_id: UUID) -> None:
        """Drop a collection, leaving any children pointing at it."""
        self._parents.pop(collection_id, None)

    def override_descendants(self, collection_id: UUID, descendant_ids: Set[UUID]) -> None:
        """Force list_descendant_ids to return a fixed set for one collection."""
        self._descendant_overrides[collection_id] = set(descendant_ids)

    def calls(self, name: str) -> list[tuple[Any, ...]]:
        """Recorded calls of one method."""
        return [c for c in self._calls if c[0] == name]

    async def get_parent_id(self, db: AsyncSession, collection_id: UUID) -> Optional[UUID]:
        """Return the seeded parent, or None for unknown IDs."""
        self._calls.append(("get_parent_id", collection_id))
        return self._parents.get(collection_id)

    async def list_descendant_ids(self, db: AsyncSession, collection_id: UUID) -> Set[UUID]:
        """Walk the parent map downward."""
        self._calls.append(("list_descendant_ids", collection_id))
        if collection_id in self._descendant_overrides:
            return set(self._descendant_overrides[collection_id])

        found: Set[UUID] = set()
        frontier = [collection_id]
        while frontier:
            current = frontier.pop()
            for child_id, parent_id in self._parents.items():
                if parent_id == current and child_id not in found:
                    found.add(child_id)
                    frontier.append(child_id)
        return found
