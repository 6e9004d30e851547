"""add follow-up send claims

Revision ID: 20261018_03
Revises: 20261018_02
Create Date: 2026-10-18 16:40:00

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261018_03"
down_revision = "20261018_02"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.add_column(
        "follow_up_requests",
        sa.Column("claimed_at", sa.DateTime(timezone=True), nullable=True),
    )


def downgrade() -> None:
    op.drop_column("follow_up_requests", "claimed_at")
