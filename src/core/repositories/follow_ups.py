from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import func, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.context import get_current_tenant_id
from src.core.errors import ConflictError
from src.core.repositories.base import Repository
from src.models.follow_up import FollowUpRequest, FollowUpSubmission

logger = logging.getLogger(__name__)


class FollowUpRequestRepository(Repository[FollowUpRequest]):
    entity_name = "Follow-up request"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session=session, model=FollowUpRequest)

    def _for_current_tenant(self, stmt):  # noqa: ANN001, ANN202
        tenant_id = get_current_tenant_id()
        if tenant_id is not None:
            stmt = stmt.where(FollowUpRequest.tenant_id == tenant_id)
        return stmt

    async def get_by_appointment_id(self, appointment_id: UUID) -> FollowUpRequest | None:
        result = await self.session.execute(
            self._for_current_tenant(
                select(FollowUpRequest)
                .options(selectinload(FollowUpRequest.submission))
                .where(FollowUpRequest.appointment_id == appointment_id)
            )
        )
        return result.scalar_one_or_none()

    async def get_by_token(self, token: str) -> FollowUpRequest | None:
        result = await self.session.execute(
            select(FollowUpRequest)
            .options(selectinload(FollowUpRequest.submission))
            .where(FollowUpRequest.token == token)
        )
        return result.scalar_one_or_none()

    async def create_if_absent(
        self,
        *,
        appointment_id: UUID,
        tenant_id: UUID,
        token: str,
        expires_at: datetime,
    ) -> tuple[FollowUpRequest, bool]:
        """Insert a request for the appointment unless one already exists.

        An existing row is returned untouched so its token is never rotated.
        """
        existing = await self.get_by_appointment_id(appointment_id)
        if existing is not None:
            return existing, False

        request = FollowUpRequest(
            appointment_id=appointment_id,
            tenant_id=tenant_id,
            token=token,
            expires_at=expires_at,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(request)
                await self.session.flush()
        except IntegrityError:
            logger.info("Follow-up request for appointment=%s created concurrently", appointment_id)
            existing = await self.get_by_appointment_id(appointment_id)
            if existing is None:
                raise ConflictError(
                    f"Follow-up request for appointment {appointment_id} could not be created"
                )
            return existing, False

        return request, True

    async def claim(self, request_id: UUID, now: datetime, stale_before: datetime) -> bool:
        """Take the right to send this request's email.

        The conditional UPDATE lets exactly one concurrent caller through. A
        claim older than ``stale_before`` belongs to a worker that died mid-send
        and can be taken over.
        """
        result = await self.session.execute(
            self._for_current_tenant(
                update(FollowUpRequest).where(
                    FollowUpRequest.id == request_id,
                    FollowUpRequest.sent_at.is_(None),
                    or_(
                        FollowUpRequest.claimed_at.is_(None),
                        FollowUpRequest.claimed_at < stale_before,
                    ),
                )
            )
            .values(claimed_at=now)
            .returning(FollowUpRequest.id)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one_or_none() is not None

    async def release_claim(self, request_id: UUID) -> None:
        await self.session.execute(
            update(FollowUpRequest)
            .where(FollowUpRequest.id == request_id, FollowUpRequest.sent_at.is_(None))
            .values(claimed_at=None)
            .execution_options(synchronize_session=False)
        )

    async def mark_sent(self, request: FollowUpRequest, sent_at: datetime) -> FollowUpRequest:
        request.sent_at = sent_at
        await self.session.flush()
        return request

    async def add_submission(self, submission: FollowUpSubmission) -> FollowUpSubmission:
        self.session.add(submission)
        await self.session.flush()
        return submission

    async def count_unanswered(self, tenant_id: UUID) -> int:
        return int(
            await self.session.scalar(
                select(func.count(FollowUpSubmission.id)).where(
                    FollowUpSubmission.tenant_id == tenant_id,
                    FollowUpSubmission.is_answered.is_(False),
                )
            )
            or 0
        )
