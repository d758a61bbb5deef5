"""Metrics protocols for dependency injection."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class RecalculationMetrics(Protocol):
    """Protocol for permission recalculation metrics collection."""

    def inc_recalculations(self, outcome: str) -> None:
        """Increment the recalculation counter.

        Args:
            outcome: ``success`` or ``error``.
        """
        ...

    def observe_duration(self, duration: float) -> None:
        """Record end-to-end recalculation duration in seconds."""
        ...

    def observe_scope_size(self, count: int) -> None:
        """Record how many collections one recalculation reconciled."""
        ...

    def inc_membership_writes(self, kind: str, operation: str, count: int) -> None:
        """Count inherited membership rows written.

        Args:
            kind: ``user`` or ``group``.
            operation: ``insert`` or ``delete``.
            count: Number of rows.
        """
        ...


@runtime_checkable
class MetricsRenderer(Protocol):
    """Protocol for serializing collected metrics for scraping."""

    @property
    def content_type(self) -> str:
        """Content-Type header value for the rendered payload."""
        ...

    def generate(self) -> bytes:
        """Serialize all registered metrics."""
        ...
