"""Dependency Injection Container.

The container is a simple immutable dataclass that holds protocol implementations.
It has no construction logic; that belongs in the factory.
"""

from dataclasses import dataclass, replace
from typing import Any

from canopy.core.protocols import MetricsRenderer, RecalculationMetrics
from canopy.domains.permissions.protocols import (
    CollectionTreeReaderProtocol,
    MembershipRepositoryProtocol,
    PermissionRecalculatorProtocol,
)


@dataclass(frozen=True)
class Container:
    """Immutable container holding all protocol implementations.

    Usage:
        # Production: build once at startup
        from canopy.core.container import initialize_container
        initialize_container(settings)

        # Callers that move collections or change grants
        async with UnitOfWork(db) as uow:
            await container.permission_recalculator.recalculate(
                uow.session, collection=collection, ctx=ctx
            )

        # Testing: construct directly with fakes
        test_container = Container(permission_recalculator=FakePermissionRecalculator(), ...)
    """

    # Repository protocols (thin wrappers around crud singletons)
    tree_reader: CollectionTreeReaderProtocol
    user_membership_repo: MembershipRepositoryProtocol
    group_membership_repo: MembershipRepositoryProtocol

    # Inherited permission maintenance
    permission_recalculator: PermissionRecalculatorProtocol

    # Metrics
    recalculation_metrics: RecalculationMetrics
    metrics_renderer: MetricsRenderer

    def replace(self, **changes: Any) -> "Container":
        """Create a new container with some dependencies replaced.

        Useful for partial overrides in tests:

            modified = container.replace(permission_recalculator=FakePermissionRecalculator())

        Args:
            **changes: Dependency name -> new implementation

        Returns:
            New Container with specified dependencies replaced
        """
        return replace(self, **changes)
