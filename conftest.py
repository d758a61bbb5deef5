"""Root conftest for pytest configuration and shared fixtures.

This conftest is loaded before both testpaths (tests/ and canopy/),
making its fixtures available to centralized tests AND colocated domain tests.
"""

import os
from uuid import uuid4

import pytest

# Register pytest-asyncio plugin at the root level
pytest_plugins = ("pytest_asyncio",)

# ---------------------------------------------------------------------------
# Environment variables: must be set before any canopy module import
# Uses setdefault so real env vars (CI) are never overridden.
# ---------------------------------------------------------------------------
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_USER", "test_user")
os.environ.setdefault("POSTGRES_PASSWORD", "test_password")
os.environ.setdefault("POSTGRES_DB", "test_db")
os.environ.setdefault("TESTING", "true")


# ---------------------------------------------------------------------------
# Shared fake fixtures: individual protocol fakes
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_tree():
    """Fake collection tree reader backed by a parent map."""
    from canopy.domains.permissions.fakes.tree import FakeCollectionTree

    return FakeCollectionTree()


@pytest.fixture
def fake_user_memberships():
    """Fake user membership repository."""
    from canopy.core.shared_models import MembershipKind
    from canopy.domains.permissions.fakes.membership_repository import (
        FakeMembershipRepository,
    )

    return FakeMembershipRepository(MembershipKind.USER)


@pytest.fixture
def fake_group_memberships():
    """Fake group membership repository."""
    from canopy.core.shared_models import MembershipKind
    from canopy.domains.permissions.fakes.membership_repository import (
        FakeMembershipRepository,
    )

    return FakeMembershipRepository(MembershipKind.GROUP)


@pytest.fixture
def fake_recalculation_metrics():
    """Fake RecalculationMetrics that records observations."""
    from canopy.adapters.metrics import FakeRecalculationMetrics

    return FakeRecalculationMetrics()


@pytest.fixture
def ctx():
    """Operation context for a throwaway team."""
    from canopy.core.context import BaseContext

    return BaseContext(team_id=uuid4())
