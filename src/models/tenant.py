from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import TimestampedBase
from src.models.enums import PlanTier


class Tenant(TimestampedBase):
    __tablename__ = "tenants"

    clerk_org_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    salon_name: Mapped[str | None] = mapped_column(String(150), nullable=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    # Denormalized copy of PlanDetails.current_tier, written in the same transaction.
    plan_tier: Mapped[PlanTier] = mapped_column(
        Enum(PlanTier, native_enum=False, length=20),
        nullable=False,
        default=PlanTier.FREE,
    )
    plan_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    timezone: Mapped[str] = mapped_column(String(64), nullable=False, default="Europe/Paris")
    is_active: Mapped[bool] = mapped_column(nullable=False, default=True, index=True)
