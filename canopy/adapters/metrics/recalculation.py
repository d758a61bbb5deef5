"""Permission recalculation metrics adapters (Prometheus + Fake).

Prometheus implementation uses a caller-supplied CollectorRegistry so these
metrics are rendered alongside any others registered on the same registry.
"""

from dataclasses import dataclass

from prometheus_client import CollectorRegistry, Counter, Histogram

from canopy.core.protocols.metrics import RecalculationMetrics

_DURATION_BUCKETS = (0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
_SCOPE_BUCKETS = (1, 2, 5, 10, 25, 50, 100, 250, 500, 1000)


class PrometheusRecalculationMetrics(RecalculationMetrics):
    """Prometheus-backed recalculation metrics collection."""

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self._registry = registry or CollectorRegistry()

        self._recalculations_total = Counter(
            "canopy_permission_recalculations_total",
            "Total permission recalculations",
            ["outcome"],
            registry=self._registry,
        )

        self._duration = Histogram(
            "canopy_permission_recalculation_duration_seconds",
            "End-to-end permission recalculation duration in seconds",
            buckets=_DURATION_BUCKETS,
            registry=self._registry,
        )

        self._scope_size = Histogram(
            "canopy_permission_recalculation_scope_size",
            "Number of collections reconciled per recalculation",
            buckets=_SCOPE_BUCKETS,
            registry=self._registry,
        )

        self._membership_writes_total = Counter(
            "canopy_inherited_membership_writes_total",
            "Inherited membership rows inserted or deleted",
            ["kind", "operation"],
            registry=self._registry,
        )

    # -- RecalculationMetrics protocol methods --

    def inc_recalculations(self, outcome: str) -> None:
        self._recalculations_total.labels(outcome=outcome).inc()

    def observe_duration(self, duration: float) -> None:
        self._duration.observe(duration)

    def observe_scope_size(self, count: int) -> None:
        self._scope_size.observe(count)

    def inc_membership_writes(self, kind: str, operation: str, count: int) -> None:
        if count:
            self._membership_writes_total.labels(kind=kind, operation=operation).inc(count)


# ---------------------------------------------------------------------------
# Fake
# ---------------------------------------------------------------------------


@dataclass
class MembershipWriteRecord:
    """Single observed batch of inherited membership writes."""

    kind: str
    operation: str
    count: int


class FakeRecalculationMetrics(RecalculationMetrics):
    """In-memory spy implementing the RecalculationMetrics protocol."""

    def __init__(self) -> None:
        self.recalculations: list[str] = []
        self.durations: list[float] = []
        self.scope_sizes: list[int] = []
        self.membership_writes: list[MembershipWriteRecord] = []

    def inc_recalculations(self, outcome: str) -> None:
        self.recalculations.append(outcome)

    def observe_duration(self, duration: float) -> None:
        self.durations.append(duration)

    def observe_scope_size(self, count: int) -> None:
        self.scope_sizes.append(count)

    def inc_membership_writes(self, kind: str, operation: str, count: int) -> None:
        self.membership_writes.append(MembershipWriteRecord(kind, operation, count))

    # -- test helpers --

    def writes_total(self, kind: str, operation: str) -> int:
        """Sum of recorded writes for one kind and operation."""
        return sum(
            r.count for r in self.membership_writes if r.kind == kind and r.operation == operation
        )

    def clear(self) -> None:
        """Reset all recorded state."""
        self.recalculations.clear()
        self.durations.clear()
        self.scope_sizes.clear()
        self.membership_writes.clear()
