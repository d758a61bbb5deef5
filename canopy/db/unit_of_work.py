"""Unit of work: the transaction boundary callers wrap mutations in."""

from types import TracebackType
from typing import Optional, Type

from sqlalchemy.ext.asyncio import AsyncSession


class UnitOfWork:
    """Commit on clean exit, roll back when the block raises.

    Repositories used inside the block flush but never commit, so every write
    made in the block becomes visible atomically or not at all.
    """

    def __init__(self, session: AsyncSession):
        """Bind to an open session."""
        self.session = session
        self._committed = False

    async def __aenter__(self) -> "UnitOfWork":
        """Enter the transaction scope."""
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        """Commit if the block succeeded, otherwise roll back."""
        if exc_type is not None:
            await self.rollback()
        elif not self._committed:
            await self.commit()

    async def commit(self) -> None:
        """Commit the session."""
        await self.session.commit()
        self._committed = True

    async def rollback(self) -> None:
        """Roll back the session."""
        await self.session.rollback()
