"""create salon core schema

Revision ID: 20261018_00
Revises: 
Create Date: 2026-10-18 09:10:00

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "20261018_00"
down_revision = None
branch_labels = None
depends_on = None


def _base_columns(tenant_scoped: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]
    if tenant_scoped:
        columns.append(sa.Column("tenant_id", postgresql.UUID(as_uuid=True), nullable=False))
    return columns


def upgrade() -> None:
    op.create_table(
        "tenants",
        sa.Column("clerk_org_id", sa.String(length=255), nullable=False),
        sa.Column("salon_name", sa.String(length=150), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("plan_tier", sa.String(length=20), nullable=False, server_default="FREE"),
        sa.Column("plan_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("timezone", sa.String(length=64), nullable=False, server_default="Europe/Paris"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_base_columns(tenant_scoped=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_tenants_clerk_org_id", "tenants", ["clerk_org_id"], unique=True)
    op.create_index("ix_tenants_is_active", "tenants", ["is_active"], unique=False)

    op.create_table(
        "clients",
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("phone", sa.String(length=30), nullable=True),
        *_base_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_clients_tenant_id", "clients", ["tenant_id"], unique=False)

    op.create_table(
        "staff_members",
        sa.Column("name", sa.String(length=120), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        *_base_columns(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_staff_members_tenant_id", "staff_members", ["tenant_id"], unique=False)

    op.create_table(
        "portfolio_images",
        sa.Column("staff_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("image_url", sa.String(length=1024), nullable=False),
        sa.Column("title", sa.String(length=150), nullable=True),
        *_base_columns(),
        sa.ForeignKeyConstraint(["staff_id"], ["staff_members.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_portfolio_images_tenant_id", "portfolio_images", ["tenant_id"], unique=False)

    op.create_table(
        "appointments",
        sa.Column("client_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("staff_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("title", sa.String(length=150), nullable=False),
        sa.Column("prestation", sa.String(length=40), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("start", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end", sa.DateTime(timezone=True), nullable=False),
        *_base_columns(),
        sa.ForeignKeyConstraint(["client_id"], ["clients.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["staff_id"], ["staff_members.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_appointments_tenant_id", "appointments", ["tenant_id"], unique=False)
    op.create_index("ix_appointments_client_id", "appointments", ["client_id"], unique=False)
    op.create_index("ix_appointments_start", "appointments", ["start"], unique=False)

    op.alter_column("tenants", "plan_tier", server_default=None)
    op.alter_column("tenants", "timezone", server_default=None)
    op.alter_column("tenants", "is_active", server_default=None)


def downgrade() -> None:
    op.drop_index("ix_appointments_start", table_name="appointments")
    op.drop_index("ix_appointments_client_id", table_name="appointments")
    op.drop_index("ix_appointments_tenant_id", table_name="appointments")
    op.drop_table("appointments")

    op.drop_index("ix_portfolio_images_tenant_id", table_name="portfolio_images")
    op.drop_table("portfolio_images")

    op.drop_index("ix_staff_members_tenant_id", table_name="staff_members")
    op.drop_table("staff_members")

    op.drop_index("ix_clients_tenant_id", table_name="clients")
    op.drop_table("clients")

    op.drop_index("ix_tenants_is_active", table_name="tenants")
    op.drop_index("ix_tenants_clerk_org_id", table_name="tenants")
    op.drop_table("tenants")
