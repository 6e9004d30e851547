from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import TenantScopedBase


class TattooHistory(TenantScopedBase):
    __tablename__ = "tattoo_histories"

    client_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("clients.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    zone: Mapped[str | None] = mapped_column(String(120), nullable=True)
    size: Mapped[str | None] = mapped_column(String(60), nullable=True)
    price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    before_image: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    after_image: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    ink_used: Mapped[str | None] = mapped_column(String(255), nullable=True)
    healing_time: Mapped[str | None] = mapped_column(String(120), nullable=True)
    care_products: Mapped[str | None] = mapped_column(String(255), nullable=True)
