from __future__ import annotations

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import FollowUpConfig, settings
from src.core.errors import NotFoundError
from src.core.follow_ups import FollowUpScheduler, ScheduledFollowUp
from src.core.repositories.appointments import AppointmentRepository
from src.core.repositories.clients import ClientRepository
from src.models.appointment import Appointment
from src.models.client import Client
from src.models.enums import AppointmentStatus

logger = logging.getLogger(__name__)


class AppointmentService:
    """Booking writes for the current tenant.

    Quotas are checked by the route's ``QuotaGuard`` before these run.
    """

    def __init__(
        self,
        session: AsyncSession,
        scheduler: FollowUpScheduler,
        config: FollowUpConfig | None = None,
        *,
        prestations: set[str] | None = None,
        appointments: AppointmentRepository | None = None,
        clients: ClientRepository | None = None,
    ) -> None:
        self.session = session
        self.scheduler = scheduler
        self.config = config or settings.follow_up_config()
        self.prestations = prestations if prestations is not None else settings.follow_up_prestations()
        self.appointments = appointments or AppointmentRepository(session)
        self.clients = clients or ClientRepository(session)

    async def create_client(
        self,
        *,
        first_name: str,
        last_name: str,
        email: str,
        phone: str | None = None,
    ) -> Client:
        client = await self.clients.create(
            first_name=first_name,
            last_name=last_name,
            email=email,
            phone=phone,
        )
        await self.session.commit()
        return client

    async def create_appointment(
        self,
        *,
        title: str,
        prestation: str,
        start: datetime,
        end: datetime,
        client_id: UUID | None = None,
        staff_id: UUID | None = None,
    ) -> Appointment:
        if client_id is not None and await self.clients.get(client_id) is None:
            raise NotFoundError("Client", client_id)

        appointment = await self.appointments.create(
            title=title,
            prestation=prestation.upper(),
            start=start,
            end=end,
            client_id=client_id,
            staff_id=staff_id,
            status=AppointmentStatus.PENDING,
        )
        await self.session.commit()
        return appointment

    async def confirm_appointment(self, appointment_id: UUID) -> tuple[Appointment, ScheduledFollowUp | None]:
        appointment = await self.appointments.get(appointment_id)
        if appointment is None:
            raise NotFoundError("Appointment", appointment_id)

        appointment.status = AppointmentStatus.CONFIRMED
        await self.session.commit()

        scheduled = None
        if appointment.prestation.upper() in self.prestations:
            scheduled = self.scheduler.schedule_follow_up(appointment.id, appointment.end, self.config)
        else:
            logger.debug("No follow-up for prestation=%s", appointment.prestation)
        return appointment, scheduled

    async def cancel_appointment(self, appointment_id: UUID) -> Appointment:
        appointment = await self.appointments.get(appointment_id)
        if appointment is None:
            raise NotFoundError("Appointment", appointment_id)

        appointment.status = AppointmentStatus.CANCELLED
        await self.session.commit()

        self.scheduler.cancel(appointment.id)
        return appointment
