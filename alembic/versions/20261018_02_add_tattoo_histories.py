"""add tattoo histories

Revision ID: 20261018_02
Revises: 20261018_01
Create Date: 2026-10-18 10:05:00

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "20261018_02"
down_revision = "20261018_01"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tattoo_histories",
        sa.Column("client_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("zone", sa.String(length=120), nullable=True),
        sa.Column("size", sa.String(length=60), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=True),
        sa.Column("before_image", sa.String(length=1024), nullable=True),
        sa.Column("after_image", sa.String(length=1024), nullable=True),
        sa.Column("ink_used", sa.String(length=255), nullable=True),
        sa.Column("healing_time", sa.String(length=120), nullable=True),
        sa.Column("care_products", sa.String(length=255), nullable=True),
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("tenant_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tattoo_histories_tenant_id", "tattoo_histories", ["tenant_id"], unique=False)
    op.create_index("ix_tattoo_histories_client_id", "tattoo_histories", ["client_id"], unique=False)
    op.create_index("ix_tattoo_histories_date", "tattoo_histories", ["date"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_tattoo_histories_date", table_name="tattoo_histories")
    op.drop_index("ix_tattoo_histories_client_id", table_name="tattoo_histories")
    op.drop_index("ix_tattoo_histories_tenant_id", table_name="tattoo_histories")
    op.drop_table("tattoo_histories")
