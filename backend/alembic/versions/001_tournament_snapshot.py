"""Initial migration: create tournament_snapshot table

Revision ID: 001_tournament_snapshot
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision = "001_tournament_snapshot"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tournament_snapshot",
        sa.Column("id", sa.String(), nullable=False),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False),
        sa.Column("total_matches", sa.Integer(), nullable=False),
        sa.Column("last_updated", sa.BigInteger(), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_tournament_snapshot_last_updated", "tournament_snapshot", ["last_updated"], unique=False
    )


def downgrade() -> None:
    op.drop_index("ix_tournament_snapshot_last_updated", table_name="tournament_snapshot")
    op.drop_table("tournament_snapshot")
