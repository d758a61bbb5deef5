"""Unit tests for MembershipReconciler.

Uses the in-memory membership repository fake; no DB.
"""

from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from canopy.core.shared_models import CollectionPermission
from canopy.domains.permissions.reconciler import MembershipReconciler

READ = CollectionPermission.READ
READ_WRITE = CollectionPermission.READ_WRITE
ADMIN = CollectionPermission.ADMIN


@pytest.fixture
def ids():
    """Collection and subject IDs: far ancestor, near ancestor, target, subjects."""
    return {
        "far": uuid4(),
        "near": uuid4(),
        "target": uuid4(),
        "alice": uuid4(),
        "bob": uuid4(),
    }


# ---------------------------------------------------------------------------
# plan()
# ---------------------------------------------------------------------------


class TestPlan:
    """Resolution of desired inherited memberships."""

    def test_no_ancestor_grants_yields_empty_batch(self, fake_user_memberships, ids):
        reconciler = MembershipReconciler(fake_user_memberships)

        batch = reconciler.plan(ids["target"], [ids["near"]], [], {ids["near"]: []})

        assert not batch.has_mutations
        assert batch.summary() == "empty"

    def test_closest_ancestor_wins(self, fake_user_memberships, ids):
        """The nearer ancestor's grant is inherited even if the farther one is higher."""
        far = fake_user_memberships.seed(ids["far"], ids["alice"], ADMIN)
        near = fake_user_memberships.seed(ids["near"], ids["alice"], READ)
        reconciler = MembershipReconciler(fake_user_memberships)

        batch = reconciler.plan(
            ids["target"],
            [ids["near"], ids["far"]],
            [],
            {ids["near"]: [near], ids["far"]: [far]},
        )

        assert len(batch.inserts) == 1
        grant = batch.inserts[0].grant
        assert grant.permission == READ
        assert grant.source_id == near.id

    def test_ancestor_order_not_permission_decides(self, fake_user_memberships, ids):
        """Reversing the chain order flips which grant wins."""
        far = fake_user_memberships.seed(ids["far"], ids["alice"], ADMIN)
        near = fake_user_memberships.seed(ids["near"], ids["alice"], READ)
        reconciler = MembershipReconciler(fake_user_memberships)

        batch = reconciler.plan(
            ids["target"],
            [ids["far"], ids["near"]],
            [],
            {ids["near"]: [near], ids["far"]: [far]},
        )

        assert batch.inserts[0].grant.source_id == far.id

    def test_explicit_override_is_kept_and_not_inherited_over(self, fake_user_memberships, ids):
        parent_grant = fake_user_memberships.seed(ids["near"], ids["alice"], ADMIN)
        override = fake_user_memberships.seed(ids["target"], ids["alice"], READ)
        reconciler = MembershipReconciler(fake_user_memberships)

        batch = reconciler.plan(
            ids["target"], [ids["near"]], [override], {ids["near"]: [parent_grant]}
        )

        assert batch.inserts == []
        assert batch.deletes == []
        assert batch.overridden == [ids["alice"]]

    def test_matching_inherited_row_is_kept(self, fake_user_memberships, ids):
        parent_grant = fake_user_memberships.seed(
            ids["near"], ids["alice"], READ_WRITE, created_by_id=ids["bob"]
        )
        inherited = fake_user_memberships.seed(
            ids["target"],
            ids["alice"],
            READ_WRITE,
            source_id=parent_grant.id,
            created_by_id=ids["bob"],
        )
        reconciler = MembershipReconciler(fake_user_memberships)

        batch = reconciler.plan(
            ids["target"], [ids["near"]], [inherited], {ids["near"]: [parent_grant]}
        )

        assert not batch.has_mutations
        assert [k.membership for k in batch.keeps] == [inherited]

    def test_inherited_row_with_stale_permission_is_replaced(self, fake_user_memberships, ids):
        parent_grant = fake_user_memberships.seed(ids["near"], ids["alice"], ADMIN)
        stale = fake_user_memberships.seed(
            ids["target"], ids["alice"], READ, source_id=parent_grant.id
        )
        reconciler = MembershipReconciler(fake_user_memberships)

        batch = reconciler.plan(
            ids["target"], [ids["near"]], [stale], {ids["near"]: [parent_grant]}
        )

        assert [d.membership for d in batch.deletes] == [stale]
        assert batch.inserts[0].grant.permission == ADMIN

    def test_inherited_row_from_farther_source_is_replaced(self, fake_user_memberships, ids):
        """A row pointing at a farther ancestor is re-pointed at the closer grant."""
        far = fake_user_memberships.seed(ids["far"], ids["alice"], READ)
        near = fake_user_memberships.seed(ids["near"], ids["alice"], READ)
        old = fake_user_memberships.seed(ids["target"], ids["alice"], READ, source_id=far.id)
        reconciler = MembershipReconciler(fake_user_memberships)

        batch = reconciler.plan(
            ids["target"],
            [ids["near"], ids["far"]],
            [old],
            {ids["near"]: [near], ids["far"]: [far]},
        )

        assert [d.membership for d in batch.deletes] == [old]
        assert batch.inserts[0].grant.source_id == near.id

    def test_inherited_row_shadowing_explicit_is_deleted(self, fake_user_memberships, ids):
        """A leftover inherited duplicate next to an explicit row is cleaned up."""
        parent_grant = fake_user_memberships.seed(ids["near"], ids["alice"], ADMIN)
        explicit = fake_user_memberships.seed(ids["target"], ids["alice"], READ)
        duplicate = fake_user_memberships.seed(
            ids["target"], ids["alice"], ADMIN, source_id=parent_grant.id
        )
        reconciler = MembershipReconciler(fake_user_memberships)

        batch = reconciler.plan(
            ids["target"], [ids["near"]], [explicit, duplicate], {ids["near"]: [parent_grant]}
        )

        assert [d.membership for d in batch.deletes] == [duplicate]
        assert batch.inserts == []

    def test_duplicate_inherited_rows_collapse_to_one(self, fake_user_memberships, ids):
        parent_grant = fake_user_memberships.seed(ids["near"], ids["alice"], READ)
        first = fake_user_memberships.seed(
            ids["target"], ids["alice"], READ, source_id=parent_grant.id
        )
        second = fake_user_memberships.seed(
            ids["target"], ids["alice"], READ, source_id=parent_grant.id
        )
        reconciler = MembershipReconciler(fake_user_memberships)

        batch = reconciler.plan(
            ids["target"], [ids["near"]], [first, second], {ids["near"]: [parent_grant]}
        )

        assert [k.membership for k in batch.keeps] == [first]
        assert [d.membership for d in batch.deletes] == [second]
        assert batch.inserts == []

    def test_creator_is_copied_from_source(self, fake_user_memberships, ids):
        creator = uuid4()
        parent_grant = fake_user_memberships.seed(
            ids["near"], ids["alice"], READ, created_by_id=creator
        )
        reconciler = MembershipReconciler(fake_user_memberships)

        batch = reconciler.plan(ids["target"], [ids["near"]], [], {ids["near"]: [parent_grant]})

        assert batch.inserts[0].grant.created_by_id == creator


# ---------------------------------------------------------------------------
# reconcile()
# ---------------------------------------------------------------------------


class TestReconcile:
    """Plan + apply against the fake store."""

    @pytest.mark.asyncio
    async def test_inserts_inherited_membership(self, fake_user_memberships, ids):
        parent_grant = fake_user_memberships.seed(ids["near"], ids["alice"], READ_WRITE)
        reconciler = MembershipReconciler(fake_user_memberships)

        await reconciler.reconcile(MagicMock(), ids["target"], [ids["near"]])

        row = await fake_user_memberships.find_membership(MagicMock(), ids["target"], ids["alice"])
        assert row is not None
        assert row.permission == READ_WRITE
        assert row.source_id == parent_grant.id

    @pytest.mark.asyncio
    async def test_removes_inheritance_when_chain_is_empty(self, fake_user_memberships, ids):
        parent_grant = fake_user_memberships.seed(ids["near"], ids["alice"], READ_WRITE)
        fake_user_memberships.seed(
            ids["target"], ids["alice"], READ_WRITE, source_id=parent_grant.id
        )
        reconciler = MembershipReconciler(fake_user_memberships)

        batch = await reconciler.reconcile(MagicMock(), ids["target"], [])

        assert fake_user_memberships.rows(ids["target"]) == []
        assert len(batch.deletes) == 1
        assert fake_user_memberships.calls("delete_inherited_memberships") == [
            ("delete_inherited_memberships", ids["target"])
        ]

    @pytest.mark.asyncio
    async def test_partial_delete_targets_stale_ids_only(self, fake_user_memberships, ids):
        alice_grant = fake_user_memberships.seed(ids["near"], ids["alice"], READ)
        kept = fake_user_memberships.seed(
            ids["target"], ids["alice"], READ, source_id=alice_grant.id
        )
        orphan = fake_user_memberships.seed(
            ids["target"], ids["bob"], ADMIN, source_id=uuid4()
        )
        reconciler = MembershipReconciler(fake_user_memberships)

        await reconciler.reconcile(MagicMock(), ids["target"], [ids["near"]])

        assert fake_user_memberships.calls("delete_memberships") == [
            ("delete_memberships", (orphan.id,))
        ]
        assert fake_user_memberships.rows(ids["target"]) == [kept]

    @pytest.mark.asyncio
    async def test_second_run_writes_nothing(self, fake_user_memberships, ids):
        fake_user_memberships.seed(ids["far"], ids["alice"], ADMIN)
        fake_user_memberships.seed(ids["near"], ids["bob"], READ)
        reconciler = MembershipReconciler(fake_user_memberships)
        chain = [ids["near"], ids["far"]]

        await reconciler.reconcile(MagicMock(), ids["target"], chain)
        before = fake_user_memberships.snapshot()
        batch = await reconciler.reconcile(MagicMock(), ids["target"], chain)

        assert not batch.has_mutations
        assert len(batch.keeps) == 2
        assert fake_user_memberships.snapshot() == before

    @pytest.mark.asyncio
    async def test_shared_index_fetches_each_ancestor_once(self, fake_user_memberships, ids):
        fake_user_memberships.seed(ids["near"], ids["alice"], READ)
        reconciler = MembershipReconciler(fake_user_memberships)
        index = {}
        other = uuid4()

        await reconciler.reconcile(MagicMock(), ids["target"], [ids["near"]], index)
        await reconciler.reconcile(MagicMock(), other, [ids["target"], ids["near"]], index)

        fetched = [c[1] for c in fake_user_memberships.calls("find_explicit_memberships_for_collections")]
        assert fetched == [(ids["near"],), (ids["target"],)]

    @pytest.mark.asyncio
    async def test_explicit_rows_never_written(self, fake_user_memberships, ids):
        fake_user_memberships.seed(ids["near"], ids["alice"], ADMIN)
        explicit = fake_user_memberships.seed(ids["target"], ids["alice"], READ)
        reconciler = MembershipReconciler(fake_user_memberships)

        await reconciler.reconcile(MagicMock(), ids["target"], [ids["near"]])

        assert fake_user_memberships.rows(ids["target"]) == [explicit]
        assert explicit.permission == READ
        assert explicit.source_id is None
        assert fake_user_memberships.calls("insert_membership") == []
