"""Fake permission recalculator for testing."""

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from canopy.core.context import BaseContext
from canopy.models.collection import Collection


class FakePermissionRecalculator:
    """In-memory fake for PermissionRecalculatorProtocol that records calls."""

    def __init__(self) -> None:
        """Initialize with no recorded calls."""
        self._calls: list[tuple[Any, ...]] = []

    @property
    def recalculated_ids(self) -> list:
        """IDs of the collections recalculate() was called with, in order."""
        return [c[2].id for c in self._calls]

    async def recalculate(
        self, db: AsyncSession, *, collection: Collection, ctx: BaseContext
    ) -> None:
        """Record the call."""
        self._calls.append(("recalculate", db, collection, ctx))
