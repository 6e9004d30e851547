from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_mailer
from src.core.auth import AuthContext, require_auth_context
from src.core.db import get_db_session
from src.core.errors import NotFoundError
from src.core.follow_ups import FollowUpHandler, FollowUpLinkService, FollowUpMailer
from src.core.repositories.appointments import AppointmentRepository
from src.schemas.follow_ups import (
    FollowUpLinkResponse,
    FollowUpSendResponse,
    FollowUpSubmissionRequest,
    FollowUpSubmissionResponse,
    UnansweredCountResponse,
)

router = APIRouter(prefix="/follow-ups", tags=["follow-ups"])


@router.get("/requests/{token}", response_model=FollowUpLinkResponse)
async def validate_follow_up_link(
    token: str,
    session: AsyncSession = Depends(get_db_session),
) -> FollowUpLinkResponse:
    await FollowUpLinkService(session).validate(token)
    return FollowUpLinkResponse(ok=True)


@router.post(
    "/submissions",
    response_model=FollowUpSubmissionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_follow_up(
    payload: FollowUpSubmissionRequest,
    session: AsyncSession = Depends(get_db_session),
) -> FollowUpSubmissionResponse:
    submission = await FollowUpLinkService(session).submit(
        payload.token,
        rating=payload.rating,
        review=payload.review,
        photo_url=payload.photo_url,
        is_photo_public=payload.is_photo_public,
    )
    return FollowUpSubmissionResponse(
        id=str(submission.id),
        appointment_id=str(submission.appointment_id),
        rating=submission.rating,
    )


@router.post("/appointments/{appointment_id}/send", response_model=FollowUpSendResponse)
async def send_follow_up_now(
    appointment_id: UUID,
    _: AuthContext = Depends(require_auth_context),
    session: AsyncSession = Depends(get_db_session),
    mailer: FollowUpMailer = Depends(get_mailer),
) -> FollowUpSendResponse:
    # Scoped lookup first: the handler itself does not know the caller.
    if await AppointmentRepository(session).get(appointment_id) is None:
        raise NotFoundError("Appointment", appointment_id)

    outcome = await FollowUpHandler(session, mailer).handle(appointment_id)
    return FollowUpSendResponse(appointment_id=str(appointment_id), outcome=outcome.value)


@router.get("/unanswered/count", response_model=UnansweredCountResponse)
async def count_unanswered(
    auth: AuthContext = Depends(require_auth_context),
    session: AsyncSession = Depends(get_db_session),
) -> UnansweredCountResponse:
    count = await FollowUpLinkService(session).count_unanswered(auth.tenant_id)
    return UnansweredCountResponse(count=count)
