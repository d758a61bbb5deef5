"""Core protocols for dependency injection."""

from canopy.core.protocols.metrics import MetricsRenderer, RecalculationMetrics

__all__ = ["MetricsRenderer", "RecalculationMetrics"]
