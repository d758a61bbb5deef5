"""Models for the application."""

from ._base import Base, RecordBase
from .collection import Collection
from .membership import GroupMembership, MembershipMixin, UserMembership

__all__ = [
    "Base",
    "RecordBase",
    "Collection",
    "GroupMembership",
    "MembershipMixin",
    "UserMembership",
]
