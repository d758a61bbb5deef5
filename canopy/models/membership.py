"""User and group membership models.

Both tables share one shape: a subject, a collection, a permission level and an
optional ``source_id``. ``source_id IS NULL`` marks an explicit grant;
otherwise the row was derived from the explicit grant it points at.
"""

import uuid
from typing import ClassVar, Optional

from sqlalchemy import ForeignKey, Index
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from canopy.core.shared_models import CollectionPermission, MembershipKind
from canopy.models._base import RecordBase, permission_enum


class MembershipMixin:
    """Columns common to user and group memberships."""

    kind: ClassVar[MembershipKind]

    @declared_attr
    def collection_id(cls) -> Mapped[uuid.UUID]:
        return mapped_column(
            ForeignKey("collection.id", ondelete="CASCADE"), nullable=False, index=True
        )

    @declared_attr
    def permission(cls) -> Mapped[CollectionPermission]:
        return mapped_column(permission_enum(), nullable=False)

    @declared_attr
    def source_id(cls) -> Mapped[Optional[uuid.UUID]]:
        # Revoking an explicit grant removes everything derived from it
        return mapped_column(
            ForeignKey(f"{cls.__tablename__}.id", ondelete="CASCADE"), nullable=True, index=True
        )

    @declared_attr
    def created_by_id(cls) -> Mapped[Optional[uuid.UUID]]:
        return mapped_column(nullable=True)

    @property
    def is_explicit(self) -> bool:
        """Whether this is a deliberate grant rather than a derived one."""
        return self.source_id is None


class UserMembership(MembershipMixin, RecordBase):
    """Permission grant to a single user on a collection."""

    __tablename__ = "user_membership"

    kind = MembershipKind.USER

    user_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)

    __table_args__ = (
        # At most one membership per (collection, user)
        Index("uq_user_membership_collection_user", "collection_id", "user_id", unique=True),
    )

    @property
    def subject_id(self) -> uuid.UUID:
        """The user this membership grants to."""
        return self.user_id


class GroupMembership(MembershipMixin, RecordBase):
    """Permission grant to a group on a collection."""

    __tablename__ = "group_membership"

    kind = MembershipKind.GROUP

    group_id: Mapped[uuid.UUID] = mapped_column(nullable=False, index=True)

    __table_args__ = (
        # At most one membership per (collection, group)
        Index("uq_group_membership_collection_group", "collection_id", "group_id", unique=True),
    )

    @property
    def subject_id(self) -> uuid.UUID:
        """The group this membership grants to."""
        return self.group_id
