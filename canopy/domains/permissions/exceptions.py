"""Domain exceptions for permission recalculation."""

from uuid import UUID

from canopy.core.exceptions import CanopyException


class InconsistentTreeError(CanopyException):
    """Raised when the collection tree violates the forest invariant.

    Either a parent walk revisits a collection (a cycle), or a collection
    reported as a descendant does not lead back to the recalculation target.
    Not retryable: the tree itself must be repaired.
    """

    def __init__(self, collection_id: UUID, reason: str):
        """Initialize with the offending collection and a description."""
        self.collection_id = collection_id
        self.reason = reason
        super().__init__(f"Inconsistent collection tree at '{collection_id}': {reason}")
