from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import datetime, time, timezone
from uuid import UUID
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

from src.core.config import settings
from src.core.plans import Metric
from src.models.appointment import Appointment
from src.models.client import Client
from src.models.portfolio_image import PortfolioImage
from src.models.staff_member import StaffMember


@dataclass(frozen=True, slots=True)
class UsageSnapshot:
    appointments: int
    clients: int
    staff: int
    portfolio_images: int

    def for_metric(self, metric: Metric) -> int:
        return getattr(self, metric)

    def as_dict(self) -> dict[str, int]:
        return {
            "appointments": self.appointments,
            "clients": self.clients,
            "staff": self.staff,
            "portfolio_images": self.portfolio_images,
        }


def resolve_timezone(name: str | None) -> ZoneInfo:
    try:
        return ZoneInfo(name or settings.default_tenant_timezone)
    except (ZoneInfoNotFoundError, ValueError):
        return ZoneInfo(settings.default_tenant_timezone)


def month_bounds(now: datetime, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """First day 00:00:00 and last day 23:59:59 of ``now``'s month in ``tz``."""
    local_now = now.astimezone(tz)
    last_day = calendar.monthrange(local_now.year, local_now.month)[1]
    start = datetime.combine(local_now.date().replace(day=1), time(0, 0, 0), tzinfo=tz)
    end = datetime.combine(local_now.date().replace(day=last_day), time(23, 59, 59), tzinfo=tz)
    return start, end


def usage_statement(tenant_id: UUID, period: tuple[datetime, datetime]) -> Select:
    # One statement so the four counts come from the same snapshot.
    start, end = period
    return select(
        select(func.count(Appointment.id))
        .where(
            Appointment.tenant_id == tenant_id,
            Appointment.start >= start,
            Appointment.start <= end,
        )
        .scalar_subquery()
        .label("appointments"),
        select(func.count(Client.id))
        .where(Client.tenant_id == tenant_id)
        .scalar_subquery()
        .label("clients"),
        select(func.count(StaffMember.id))
        .where(StaffMember.tenant_id == tenant_id)
        .scalar_subquery()
        .label("staff"),
        select(func.count(PortfolioImage.id))
        .where(PortfolioImage.tenant_id == tenant_id)
        .scalar_subquery()
        .label("portfolio_images"),
    )


class UsageCounter:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def count(
        self,
        tenant_id: UUID,
        *,
        timezone_name: str | None = None,
        now: datetime | None = None,
    ) -> UsageSnapshot:
        period = month_bounds(now or datetime.now(timezone.utc), resolve_timezone(timezone_name))
        row = (await self.session.execute(usage_statement(tenant_id, period))).one()
        return UsageSnapshot(
            appointments=int(row.appointments or 0),
            clients=int(row.clients or 0),
            staff=int(row.staff or 0),
            portfolio_images=int(row.portfolio_images or 0),
        )
