"""Post-appointment follow-up emails.

The scheduler submits one delayed job per appointment under a key derived from
the appointment id. The handler runs when the job fires; it is safe to invoke
any number of times because the follow-up request row is created once, its
token is never rotated, a conditional claim lets only one run send at a time,
and ``sent_at`` marks completion.
"""
from __future__ import annotations

import enum
import logging
import secrets
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Protocol
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import FollowUpConfig, settings
from src.core.context import tenant_scope
from src.core.errors import FollowUpLinkError
from src.core.mail import FollowUpTemplateData
from src.core.repositories.appointments import AppointmentRepository
from src.core.repositories.follow_ups import FollowUpRequestRepository
from src.core.repositories.tenants import TenantAccountRepository
from src.models.enums import AppointmentStatus
from src.models.follow_up import FollowUpRequest, FollowUpSubmission

logger = logging.getLogger(__name__)

FOLLOW_UP_TASK_NAME = "followups.send_email"

FALLBACK_SALON_NAME = "our salon"
FALLBACK_STAFF_NAME = "our artist"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def follow_up_key(appointment_id: UUID) -> str:
    return f"followup:{appointment_id}"


def follow_up_url(token: str, base_url: str | None = None) -> str:
    return f"{(base_url or settings.web_url).rstrip('/')}/suivi?f={token}"


class TaskBroker(Protocol):
    def enqueue(
        self,
        task_name: str,
        payload: dict[str, str],
        *,
        delay_ms: int,
        idempotency_key: str,
        max_attempts: int,
        backoff_seconds: int,
    ) -> bool: ...

    def cancel(self, idempotency_key: str) -> None: ...


class FollowUpMailer(Protocol):
    async def send_follow_up_email(
        self,
        to_address: str,
        template_data: FollowUpTemplateData,
        sender_display_name: str | None = None,
    ) -> str: ...


@dataclass(frozen=True, slots=True)
class ScheduledFollowUp:
    appointment_id: UUID
    idempotency_key: str
    delay_ms: int
    enqueued: bool


class FollowUpScheduler:
    def __init__(self, broker: TaskBroker, config: FollowUpConfig | None = None) -> None:
        self.broker = broker
        self.config = config or settings.follow_up_config()

    @staticmethod
    def compute_delay_ms(end: datetime, delay_minutes: int, now: datetime) -> int:
        due = end + timedelta(minutes=delay_minutes)
        return max(0, int((due - now).total_seconds() * 1000))

    def schedule_follow_up(
        self,
        appointment_id: UUID,
        end: datetime,
        config: FollowUpConfig | None = None,
        *,
        now: datetime | None = None,
    ) -> ScheduledFollowUp:
        config = config or self.config
        delay_ms = self.compute_delay_ms(end, config.delay_minutes, now or _utc_now())
        key = follow_up_key(appointment_id)

        enqueued = self.broker.enqueue(
            FOLLOW_UP_TASK_NAME,
            {"appointment_id": str(appointment_id)},
            delay_ms=delay_ms,
            idempotency_key=key,
            max_attempts=config.max_attempts,
            backoff_seconds=config.backoff_seconds,
        )
        if enqueued:
            logger.info("Follow-up for appointment=%s scheduled in %sms", appointment_id, delay_ms)
        else:
            logger.info("Follow-up for appointment=%s already pending, not re-enqueued", appointment_id)

        return ScheduledFollowUp(
            appointment_id=appointment_id,
            idempotency_key=key,
            delay_ms=delay_ms,
            enqueued=enqueued,
        )

    def cancel(self, appointment_id: UUID) -> None:
        self.broker.cancel(follow_up_key(appointment_id))
        logger.info("Follow-up for appointment=%s cancelled", appointment_id)


class FollowUpOutcome(str, enum.Enum):
    SENT = "sent"
    APPOINTMENT_MISSING = "appointment_missing"
    CLIENT_MISSING = "client_missing"
    NOT_CONFIRMED = "not_confirmed"
    ALREADY_SENT = "already_sent"
    IN_PROGRESS = "in_progress"


class FollowUpHandler:
    def __init__(
        self,
        session: AsyncSession,
        mailer: FollowUpMailer,
        config: FollowUpConfig | None = None,
        *,
        appointments: AppointmentRepository | None = None,
        requests: FollowUpRequestRepository | None = None,
        tenants: TenantAccountRepository | None = None,
        token_factory: Callable[[], str] | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.session = session
        self.mailer = mailer
        self.config = config or settings.follow_up_config()
        self.appointments = appointments or AppointmentRepository(session)
        self.requests = requests or FollowUpRequestRepository(session)
        self.tenants = tenants or TenantAccountRepository(session)
        self.token_factory = token_factory or (lambda: secrets.token_urlsafe(32))
        self.clock = clock

    async def handle(self, appointment_id: UUID) -> FollowUpOutcome:
        try:
            return await self._handle(appointment_id)
        except Exception:
            logger.exception("Follow-up for appointment=%s failed", appointment_id)
            raise

    async def _handle(self, appointment_id: UUID) -> FollowUpOutcome:
        appointment = await self.appointments.get_with_parties(appointment_id)
        if appointment is None:
            logger.warning("Follow-up skipped: appointment=%s not found", appointment_id)
            return FollowUpOutcome.APPOINTMENT_MISSING

        client = appointment.client
        if client is None or not client.email:
            logger.warning("Follow-up skipped: appointment=%s has no reachable client", appointment_id)
            return FollowUpOutcome.CLIENT_MISSING

        if appointment.status != AppointmentStatus.CONFIRMED:
            logger.info(
                "Follow-up skipped: appointment=%s is %s",
                appointment_id,
                getattr(appointment.status, "value", appointment.status),
            )
            return FollowUpOutcome.NOT_CONFIRMED

        with tenant_scope(appointment.tenant_id):
            existing = await self.requests.get_by_appointment_id(appointment_id)
            if existing is not None and (existing.sent_at is not None or existing.submission is not None):
                logger.info("Follow-up for appointment=%s already sent", appointment_id)
                return FollowUpOutcome.ALREADY_SENT

            request, created = await self.requests.create_if_absent(
                appointment_id=appointment.id,
                tenant_id=appointment.tenant_id,
                token=self.token_factory(),
                expires_at=appointment.end + timedelta(days=self.config.link_ttl_days),
            )
            if not created and (request.sent_at is not None or request.submission is not None):
                return FollowUpOutcome.ALREADY_SENT

            now = self.clock()
            claimed = await self.requests.claim(
                request.id,
                now,
                now - timedelta(seconds=self.config.claim_ttl_seconds),
            )
            # The token and the claim must be durable before the email leaves.
            await self.session.commit()
            if not claimed:
                logger.info("Follow-up for appointment=%s is being sent by another run", appointment_id)
                return FollowUpOutcome.IN_PROGRESS

            tenant = await self.tenants.get(appointment.tenant_id)
            salon_name = tenant.salon_name if tenant is not None and tenant.salon_name else None
            staff_name = appointment.staff.name if appointment.staff is not None else None

            try:
                await self.mailer.send_follow_up_email(
                    client.email,
                    FollowUpTemplateData(
                        client_name=client.full_name,
                        follow_up_url=follow_up_url(request.token),
                        salon_name=salon_name or FALLBACK_SALON_NAME,
                        staff_name=staff_name or FALLBACK_STAFF_NAME,
                        appointment_title=appointment.title,
                    ),
                    salon_name,
                )
            except Exception:
                await self.requests.release_claim(request.id)
                await self.session.commit()
                raise

            await self.requests.mark_sent(request, self.clock())
            await self.session.commit()

        logger.info("Follow-up email sent for appointment=%s", appointment_id)
        return FollowUpOutcome.SENT


class FollowUpLinkService:
    """Public side of the follow-up: the client opens the link and answers."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        requests: FollowUpRequestRepository | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.session = session
        self.requests = requests or FollowUpRequestRepository(session)
        self.clock = clock

    async def validate(self, token: str) -> FollowUpRequest:
        request = await self.requests.get_by_token(token)
        if request is None:
            raise FollowUpLinkError("invalid")
        if request.submission is not None:
            raise FollowUpLinkError("already_submitted")
        if request.expires_at < self.clock():
            raise FollowUpLinkError("expired")
        return request

    async def submit(
        self,
        token: str,
        *,
        rating: int,
        photo_url: str,
        review: str | None = None,
        is_photo_public: bool = False,
    ) -> FollowUpSubmission:
        request = await self.validate(token)
        appointment = await AppointmentRepository(self.session).get_with_parties(request.appointment_id)

        submission = FollowUpSubmission(
            tenant_id=request.tenant_id,
            request_id=request.id,
            appointment_id=request.appointment_id,
            client_id=appointment.client_id if appointment is not None else None,
            rating=rating,
            review=review,
            photo_url=photo_url,
            is_photo_public=is_photo_public,
            is_answered=False,
        )
        try:
            async with self.session.begin_nested():
                await self.requests.add_submission(submission)
        except IntegrityError as exc:
            raise FollowUpLinkError("already_submitted") from exc
        await self.session.commit()
        logger.info("Follow-up submission received for appointment=%s", request.appointment_id)
        return submission

    async def count_unanswered(self, tenant_id: UUID) -> int:
        return await self.requests.count_unanswered(tenant_id)
