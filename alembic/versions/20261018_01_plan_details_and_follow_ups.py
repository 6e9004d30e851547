"""add plan details and follow-up tables

Revision ID: 20261018_01
Revises: 20261018_00
Create Date: 2026-10-18 09:40:00

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "20261018_01"
down_revision = "20261018_00"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "plan_details",
        sa.Column("current_tier", sa.String(length=20), nullable=False),
        sa.Column("status", sa.String(length=20), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("max_appointments", sa.Integer(), nullable=False),
        sa.Column("max_clients", sa.Integer(), nullable=False),
        sa.Column("max_staff", sa.Integer(), nullable=False),
        sa.Column("max_portfolio_images", sa.Integer(), nullable=False),
        sa.Column("has_advanced_stats", sa.Boolean(), nullable=False),
        sa.Column("has_email_reminders", sa.Boolean(), nullable=False),
        sa.Column("has_custom_branding", sa.Boolean(), nullable=False),
        sa.Column("has_api_access", sa.Boolean(), nullable=False),
        sa.Column("monthly_price", sa.Numeric(8, 2), nullable=False),
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("tenant_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tenant_id", name="uq_plan_details_tenant"),
    )
    op.create_index("ix_plan_details_tenant_id", "plan_details", ["tenant_id"], unique=False)

    op.create_table(
        "follow_up_requests",
        sa.Column("appointment_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("token", sa.String(length=64), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("sent_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("tenant_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["appointment_id"], ["appointments.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("appointment_id", name="uq_follow_up_requests_appointment"),
    )
    op.create_index("ix_follow_up_requests_tenant_id", "follow_up_requests", ["tenant_id"], unique=False)
    op.create_index("ix_follow_up_requests_token", "follow_up_requests", ["token"], unique=True)

    op.create_table(
        "follow_up_submissions",
        sa.Column("request_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("appointment_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("client_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("review", sa.Text(), nullable=True),
        sa.Column("photo_url", sa.String(length=1024), nullable=False),
        sa.Column("is_photo_public", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("is_answered", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("tenant_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(["request_id"], ["follow_up_requests.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("request_id", name="uq_follow_up_submissions_request"),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_follow_up_submissions_rating"),
    )
    op.create_index("ix_follow_up_submissions_tenant_id", "follow_up_submissions", ["tenant_id"], unique=False)
    op.create_index(
        "ix_follow_up_submissions_is_answered",
        "follow_up_submissions",
        ["is_answered"],
        unique=False,
    )
    op.alter_column("follow_up_submissions", "is_photo_public", server_default=None)
    op.alter_column("follow_up_submissions", "is_answered", server_default=None)


def downgrade() -> None:
    op.drop_index("ix_follow_up_submissions_is_answered", table_name="follow_up_submissions")
    op.drop_index("ix_follow_up_submissions_tenant_id", table_name="follow_up_submissions")
    op.drop_table("follow_up_submissions")

    op.drop_index("ix_follow_up_requests_token", table_name="follow_up_requests")
    op.drop_index("ix_follow_up_requests_tenant_id", table_name="follow_up_requests")
    op.drop_table("follow_up_requests")

    op.drop_index("ix_plan_details_tenant_id", table_name="plan_details")
    op.drop_table("plan_details")
