"""Container Factory.

All construction logic lives here. The factory reads settings and builds
the container with environment-appropriate implementations.
"""

from prometheus_client import CollectorRegistry

from canopy.adapters.metrics import PrometheusMetricsRenderer, PrometheusRecalculationMetrics
from canopy.core.config import Settings
from canopy.core.container.container import Container
from canopy.core.logging import logger
from canopy.domains.permissions.recalculator import PermissionRecalculator
from canopy.domains.permissions.repository import (
    CollectionTreeRepository,
    group_membership_repository,
    user_membership_repository,
)


def create_container(settings: Settings) -> Container:
    """Build container with environment-appropriate implementations.

    This is the single source of truth for dependency wiring.

    Args:
        settings: Application settings (from core/config.py)

    Returns:
        Fully constructed Container ready for use
    """
    # -----------------------------------------------------------------
    # Metrics (Prometheus adapters on a shared registry)
    # -----------------------------------------------------------------
    registry = CollectorRegistry()
    recalculation_metrics = PrometheusRecalculationMetrics(registry=registry)

    # -----------------------------------------------------------------
    # Repositories
    # -----------------------------------------------------------------
    tree_reader = CollectionTreeRepository()
    user_membership_repo = user_membership_repository()
    group_membership_repo = group_membership_repository()

    # -----------------------------------------------------------------
    # Permission recalculation
    # User memberships are reconciled before group memberships; the two
    # kinds never touch each other's rows.
    # -----------------------------------------------------------------
    permission_recalculator = PermissionRecalculator(
        tree=tree_reader,
        membership_repos=[user_membership_repo, group_membership_repo],
        metrics=recalculation_metrics,
    )

    logger.debug(f"Container built for environment '{settings.ENVIRONMENT.value}'")

    return Container(
        tree_reader=tree_reader,
        user_membership_repo=user_membership_repo,
        group_membership_repo=group_membership_repo,
        permission_recalculator=permission_recalculator,
        recalculation_metrics=recalculation_metrics,
        metrics_renderer=PrometheusMetricsRenderer(registry),
    )
