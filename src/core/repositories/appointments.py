from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.core.repositories.base import TenantRepository
from src.models.appointment import Appointment


class AppointmentRepository(TenantRepository[Appointment]):
    entity_name = "Appointment"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session=session, model=Appointment)

    async def get_with_parties(self, appointment_id: UUID) -> Appointment | None:
        """Load client and staff eagerly, without tenant scoping.

        Used by the follow-up worker, which only knows the appointment id and
        learns the tenant from the row itself.
        """
        result = await self.session.execute(
            select(Appointment)
            .options(selectinload(Appointment.client), selectinload(Appointment.staff))
            .where(Appointment.id == appointment_id)
        )
        return result.scalar_one_or_none()
