"""Unit tests for container wiring."""

from unittest.mock import MagicMock

import pytest

from canopy.adapters.metrics import (
    FakeMetricsRenderer,
    FakeRecalculationMetrics,
    PrometheusMetricsRenderer,
    PrometheusRecalculationMetrics,
)
from canopy.core.config import Environment
from canopy.core.container import Container, create_container
from canopy.core.shared_models import MembershipKind
from canopy.domains.permissions.fakes.recalculator import FakePermissionRecalculator
from canopy.domains.permissions.recalculator import PermissionRecalculator
from canopy.domains.permissions.repository import CollectionTreeRepository


def _settings() -> MagicMock:
    settings = MagicMock()
    settings.ENVIRONMENT = Environment.TEST
    return settings


def test_create_container_wires_production_adapters():
    container = create_container(_settings())

    assert isinstance(container.tree_reader, CollectionTreeRepository)
    assert container.user_membership_repo.kind == MembershipKind.USER
    assert container.group_membership_repo.kind == MembershipKind.GROUP
    assert isinstance(container.permission_recalculator, PermissionRecalculator)
    assert isinstance(container.recalculation_metrics, PrometheusRecalculationMetrics)
    assert isinstance(container.metrics_renderer, PrometheusMetricsRenderer)


def test_renderer_exposes_recalculation_metrics():
    container = create_container(_settings())
    container.recalculation_metrics.inc_recalculations("success")

    assert b"canopy_permission_recalculations_total" in container.metrics_renderer.generate()


def test_each_container_gets_its_own_registry():
    """Building twice must not collide on metric registration."""
    first = create_container(_settings())
    second = create_container(_settings())

    assert first.recalculation_metrics is not second.recalculation_metrics


def test_replace_swaps_single_dependency():
    container = create_container(_settings())
    fake = FakePermissionRecalculator()

    modified = container.replace(permission_recalculator=fake)

    assert isinstance(modified, Container)
    assert modified.permission_recalculator is fake
    assert modified.tree_reader is container.tree_reader
    assert container.permission_recalculator is not fake


def test_container_accepts_fakes(fake_tree, fake_user_memberships, fake_group_memberships):
    container = Container(
        tree_reader=fake_tree,
        user_membership_repo=fake_user_memberships,
        group_membership_repo=fake_group_memberships,
        permission_recalculator=FakePermissionRecalculator(),
        recalculation_metrics=FakeRecalculationMetrics(),
        metrics_renderer=FakeMetricsRenderer(),
    )

    assert container.metrics_renderer.generate() == b""


def test_initialize_container_only_once():
    from canopy.core import container as container_module
    from canopy.core.container import initialize_container, reset_container

    reset_container()
    try:
        initialize_container(_settings())
        assert isinstance(container_module.container, Container)

        with pytest.raises(RuntimeError, match="already initialized"):
            initialize_container(_settings())
    finally:
        reset_container()

    assert container_module.container is None
