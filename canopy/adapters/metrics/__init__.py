"""Metrics adapters: Prometheus and Fake implementations.

Re-exports every public adapter so consumers can import directly from
``canopy.adapters.metrics``.
"""

from canopy.adapters.metrics.recalculation import (
    FakeRecalculationMetrics,
    MembershipWriteRecord,
    PrometheusRecalculationMetrics,
)
from canopy.adapters.metrics.renderer import FakeMetricsRenderer, PrometheusMetricsRenderer

__all__ = [
    "FakeMetricsRenderer",
    "FakeRecalculationMetrics",
    "MembershipWriteRecord",
    "PrometheusMetricsRenderer",
    "PrometheusRecalculationMetrics",
]
