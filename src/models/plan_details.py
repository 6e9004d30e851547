from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Enum, Numeric, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import TenantScopedBase
from src.models.enums import PlanStatus, PlanTier


class PlanDetails(TenantScopedBase):
    __tablename__ = "plan_details"
    __table_args__ = (
        UniqueConstraint("tenant_id", name="uq_plan_details_tenant"),
    )

    current_tier: Mapped[PlanTier] = mapped_column(
        Enum(PlanTier, native_enum=False, length=20),
        nullable=False,
    )
    status: Mapped[PlanStatus] = mapped_column(
        Enum(PlanStatus, native_enum=False, length=20),
        nullable=False,
        default=PlanStatus.ACTIVE,
    )
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # -1 means unlimited.
    max_appointments: Mapped[int] = mapped_column(nullable=False)
    max_clients: Mapped[int] = mapped_column(nullable=False)
    max_staff: Mapped[int] = mapped_column(nullable=False)
    max_portfolio_images: Mapped[int] = mapped_column(nullable=False)

    has_advanced_stats: Mapped[bool] = mapped_column(nullable=False, default=False)
    has_email_reminders: Mapped[bool] = mapped_column(nullable=False, default=False)
    has_custom_branding: Mapped[bool] = mapped_column(nullable=False, default=False)
    has_api_access: Mapped[bool] = mapped_column(nullable=False, default=False)

    monthly_price: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
