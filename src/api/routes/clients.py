from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_follow_up_scheduler
from src.core.appointments import AppointmentService
from src.core.auth import AuthContext, require_auth_context
from src.core.db import get_db_session
from src.core.follow_ups import FollowUpScheduler
from src.core.limits import QuotaGuard
from src.models.appointment import Appointment
from src.schemas.clients import (
    AppointmentCreateRequest,
    AppointmentResponse,
    ClientCreateRequest,
    ClientResponse,
)

router = APIRouter(tags=["bookings"])


def to_appointment_response(appointment: Appointment, *, follow_up_scheduled: bool = False) -> AppointmentResponse:
    return AppointmentResponse(
        id=str(appointment.id),
        title=appointment.title,
        prestation=appointment.prestation,
        status=appointment.status.value,
        start=appointment.start,
        end=appointment.end,
        client_id=str(appointment.client_id) if appointment.client_id else None,
        staff_id=str(appointment.staff_id) if appointment.staff_id else None,
        follow_up_scheduled=follow_up_scheduled,
    )


def get_appointment_service(
    session: AsyncSession = Depends(get_db_session),
    scheduler: FollowUpScheduler = Depends(get_follow_up_scheduler),
) -> AppointmentService:
    return AppointmentService(session, scheduler)


@router.post(
    "/clients",
    response_model=ClientResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(QuotaGuard("client"))],
)
async def create_client(
    payload: ClientCreateRequest,
    _: AuthContext = Depends(require_auth_context),
    service: AppointmentService = Depends(get_appointment_service),
) -> ClientResponse:
    client = await service.create_client(
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
        phone=payload.phone,
    )
    return ClientResponse(
        id=str(client.id),
        first_name=client.first_name,
        last_name=client.last_name,
        email=client.email,
        phone=client.phone,
    )


@router.post(
    "/appointments",
    response_model=AppointmentResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(QuotaGuard("appointment"))],
)
async def create_appointment(
    payload: AppointmentCreateRequest,
    _: AuthContext = Depends(require_auth_context),
    service: AppointmentService = Depends(get_appointment_service),
) -> AppointmentResponse:
    appointment = await service.create_appointment(
        title=payload.title,
        prestation=payload.prestation,
        start=payload.start,
        end=payload.end,
        client_id=payload.client_id,
        staff_id=payload.staff_id,
    )
    return to_appointment_response(appointment)


@router.patch("/appointments/{appointment_id}/confirm", response_model=AppointmentResponse)
async def confirm_appointment(
    appointment_id: UUID,
    _: AuthContext = Depends(require_auth_context),
    service: AppointmentService = Depends(get_appointment_service),
) -> AppointmentResponse:
    appointment, scheduled = await service.confirm_appointment(appointment_id)
    return to_appointment_response(appointment, follow_up_scheduled=scheduled is not None)


@router.patch("/appointments/{appointment_id}/cancel", response_model=AppointmentResponse)
async def cancel_appointment(
    appointment_id: UUID,
    _: AuthContext = Depends(require_auth_context),
    service: AppointmentService = Depends(get_appointment_service),
) -> AppointmentResponse:
    appointment = await service.cancel_appointment(appointment_id)
    return to_appointment_response(appointment)
