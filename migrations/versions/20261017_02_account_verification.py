"""add identity verification flag to accounts

Revision ID: 8a3e5d1c6b27
Revises: 4f1c2b7d9e10
Create Date: 2026-10-17 15:10:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "8a3e5d1c6b27"
down_revision = "4f1c2b7d9e10"
branch_labels = None
depends_on = None


def upgrade() -> None:
    with op.batch_alter_table("accounts") as batch_op:
        batch_op.add_column(
            sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false())
        )


def downgrade() -> None:
    with op.batch_alter_table("accounts") as batch_op:
        batch_op.drop_column("is_verified")
