"""Shared models for the backend."""

from enum import Enum


class CollectionPermission(str, Enum):
    """Permission level granted by a membership.

    Levels are ordered: ``READ < READ_WRITE < ADMIN``. Comparisons use that
    order rather than the string values.
    """

    READ = "read"
    READ_WRITE = "read_write"
    ADMIN = "admin"

    @property
    def rank(self) -> int:
        """Position of this level in the permission order."""
        return _PERMISSION_RANK[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, CollectionPermission):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, CollectionPermission):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, CollectionPermission):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, CollectionPermission):
            return NotImplemented
        return self.rank >= other.rank


_PERMISSION_RANK = {
    CollectionPermission.READ: 0,
    CollectionPermission.READ_WRITE: 1,
    CollectionPermission.ADMIN: 2,
}


class MembershipKind(str, Enum):
    """Kind of subject a membership grants to."""

    USER = "user"
    GROUP = "group"
