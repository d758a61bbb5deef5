"""Action types produced by inherited membership reconciliation.

A reconciliation compares the memberships a collection should inherit with the
rows it currently holds and resolves each difference into an action.
"""

from dataclasses import dataclass, field
from typing import List, Optional
from uuid import UUID

from canopy.core.shared_models import CollectionPermission, MembershipKind
from canopy.models.membership import MembershipMixin


@dataclass(frozen=True)
class InheritedGrant:
    """A membership a collection should inherit from one explicit ancestor grant."""

    subject_id: UUID
    permission: CollectionPermission
    source: MembershipMixin

    @property
    def source_id(self) -> UUID:
        """ID of the explicit ancestor membership this grant derives from."""
        return self.source.id

    @property
    def created_by_id(self) -> Optional[UUID]:
        """Creator carried over from the explicit ancestor membership."""
        return self.source.created_by_id

    def matches(self, membership: MembershipMixin) -> bool:
        """Whether an existing inherited row already represents this grant."""
        return (
            membership.source_id == self.source_id
            and membership.permission == self.permission
            and membership.created_by_id == self.created_by_id
        )


@dataclass
class InheritedInsertAction:
    """Inherited membership should be inserted."""

    grant: InheritedGrant

    @property
    def subject_id(self) -> UUID:
        """Get the subject ID."""
        return self.grant.subject_id


@dataclass
class InheritedDeleteAction:
    """Inherited membership is stale and should be deleted."""

    membership: MembershipMixin

    @property
    def subject_id(self) -> UUID:
        """Get the subject ID."""
        return self.membership.subject_id


@dataclass
class InheritedKeepAction:
    """Inherited membership already matches its grant."""

    membership: MembershipMixin

    @property
    def subject_id(self) -> UUID:
        """Get the subject ID."""
        return self.membership.subject_id


@dataclass
class InheritanceActionBatch:
    """Resolved actions for one collection and one membership kind."""

    collection_id: UUID
    kind: MembershipKind
    inserts: List[InheritedInsertAction] = field(default_factory=list)
    deletes: List[InheritedDeleteAction] = field(default_factory=list)
    keeps: List[InheritedKeepAction] = field(default_factory=list)
    # Subjects whose explicit membership on this collection overrode an ancestor grant
    overridden: List[UUID] = field(default_factory=list)

    @property
    def has_mutations(self) -> bool:
        """Check if batch has any mutation actions."""
        return bool(self.inserts or self.deletes)

    @property
    def mutation_count(self) -> int:
        """Get total count of mutation actions."""
        return len(self.inserts) + len(self.deletes)

    def summary(self) -> str:
        """Get a summary string of the batch."""
        parts = []
        if self.inserts:
            parts.append(f"{len(self.inserts)} inserts")
        if self.deletes:
            parts.append(f"{len(self.deletes)} deletes")
        if self.keeps:
            parts.append(f"{len(self.keeps)} keeps")
        if self.overridden:
            parts.append(f"{len(self.overridden)} overridden")
        return ", ".join(parts) if parts else "empty"
