"""Add collection tree and inherited memberships.

Revision ID: b7c8d9e0f1a2
Revises:
Create Date: 2026-01-16 00:00:00.000000

"""

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision = "b7c8d9e0f1a2"
down_revision = None
branch_labels = None
depends_on = None

PERMISSION_VALUES = ("read", "read_write", "admin")


def _membership_table(name: str, subject_column: str) -> None:
    permission = postgresql.ENUM(*PERMISSION_VALUES, name="collection_permission", create_type=False)
    op.create_table(
        name,
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "collection_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("collection.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(subject_column, postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("permission", permission, nullable=False),
        # NULL: explicit grant. Otherwise: the explicit ancestor grant this row derives from.
        sa.Column(
            "source_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey(f"{name}.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("created_by_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("modified_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(f"ix_{name}_collection_id", name, ["collection_id"])
    op.create_index(f"ix_{name}_{subject_column}", name, [subject_column])
    op.create_index(f"ix_{name}_source_id", name, ["source_id"])
    # At most one membership per (collection, subject)
    op.create_index(
        f"uq_{name}_collection_{subject_column.removesuffix('_id')}",
        name,
        ["collection_id", subject_column],
        unique=True,
    )


def upgrade():
    """Create the collection tree and both membership tables."""
    postgresql.ENUM(*PERMISSION_VALUES, name="collection_permission").create(
        op.get_bind(), checkfirst=True
    )

    op.create_table(
        "collection",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("team_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(), nullable=False),
        # Self-referencing parent; a parent with children cannot be deleted
        sa.Column(
            "parent_collection_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("collection.id", ondelete="RESTRICT"),
            nullable=True,
        ),
        sa.Column(
            "permission",
            postgresql.ENUM(*PERMISSION_VALUES, name="collection_permission", create_type=False),
            nullable=True,
        ),
        sa.Column("created_by_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("modified_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_collection_team_id", "collection", ["team_id"])
    # Faster lookups of children by parent
    op.create_index("ix_collection_parent_collection_id", "collection", ["parent_collection_id"])
    # Listing children within a team
    op.create_index("idx_collection_team_parent", "collection", ["team_id", "parent_collection_id"])

    _membership_table("user_membership", "user_id")
    _membership_table("group_membership", "group_id")


def downgrade():
    """Drop membership tables, the collection tree and the permission type."""
    op.drop_table("group_membership")
    op.drop_table("user_membership")
    op.drop_table("collection")
    postgresql.ENUM(name="collection_permission").drop(op.get_bind(), checkfirst=True)
