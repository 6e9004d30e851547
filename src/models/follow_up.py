from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.models.base import TenantScopedBase


class FollowUpRequest(TenantScopedBase):
    __tablename__ = "follow_up_requests"

    appointment_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("appointments.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    token: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # Set once the email is confirmed dispatched; never cleared.
    sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # Held by the worker currently sending; cleared if that send fails.
    claimed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    submission: Mapped[FollowUpSubmission | None] = relationship(
        back_populates="request",
        uselist=False,
        lazy="raise",
    )


class FollowUpSubmission(TenantScopedBase):
    __tablename__ = "follow_up_submissions"

    request_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("follow_up_requests.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    appointment_id: Mapped[UUID] = mapped_column(PGUUID(as_uuid=True), nullable=False)
    client_id: Mapped[UUID | None] = mapped_column(PGUUID(as_uuid=True), nullable=True)
    rating: Mapped[int] = mapped_column(nullable=False)
    review: Mapped[str | None] = mapped_column(Text, nullable=True)
    photo_url: Mapped[str] = mapped_column(String(1024), nullable=False)
    is_photo_public: Mapped[bool] = mapped_column(nullable=False, default=False)
    is_answered: Mapped[bool] = mapped_column(nullable=False, default=False, index=True)

    request: Mapped[FollowUpRequest] = relationship(back_populates="submission", lazy="raise")
