"""Tenant plan records: creation, lazy expiry, tier changes and repair.

Expiry is never driven by a timer. :meth:`PlanLifecycleManager.get_plan_details`
checks ``end_date`` on every access and downgrades to FREE when it has passed,
so anything that evaluates limits must go through it first.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import settings
from src.core.errors import ConflictError, NotFoundError
from src.core.plans import Feature, PlanQuotas, parse_tier, quotas_for
from src.core.repositories.plan_details import PlanDetailsRepository
from src.core.repositories.tenants import TenantAccountRepository
from src.models.enums import PlanStatus, PlanTier
from src.models.plan_details import PlanDetails

logger = logging.getLogger(__name__)


def default_end_date(tier: PlanTier, now: datetime) -> datetime | None:
    if tier == PlanTier.FREE:
        return None
    return now + timedelta(days=settings.paid_plan_duration_days)


def apply_quotas(details: PlanDetails, quotas: PlanQuotas) -> None:
    for column, value in quotas.as_columns().items():
        setattr(details, column, value)


def drifted_columns(details: PlanDetails) -> list[str]:
    expected = quotas_for(details.current_tier).as_columns()
    return [column for column, value in expected.items() if getattr(details, column) != value]


class PlanLifecycleManager:
    def __init__(
        self,
        session: AsyncSession,
        *,
        plans: PlanDetailsRepository | None = None,
        tenants: TenantAccountRepository | None = None,
    ) -> None:
        self.session = session
        self.plans = plans or PlanDetailsRepository(session)
        self.tenants = tenants or TenantAccountRepository(session)

    async def create_on_registration(self, tenant_id: UUID, tier: PlanTier | str) -> PlanDetails:
        details = await self._insert_plan(tenant_id, parse_tier(tier))
        await self.session.commit()
        return details

    async def get_plan_details(self, tenant_id: UUID) -> PlanDetails:
        details = await self.plans.get_for_tenant(tenant_id)
        if details is None:
            logger.warning("No plan found for tenant=%s, creating one from the signup choice", tenant_id)
            details = await self._create_from_tenant_choice(tenant_id)
            await self.session.commit()

        now = datetime.now(timezone.utc)
        if details.end_date is not None and details.end_date < now and not self._is_expired(details):
            details = await self._expire(details)
            await self.session.commit()

        return details

    async def has_feature(self, tenant_id: UUID, feature: Feature) -> bool:
        details = await self.get_plan_details(tenant_id)
        return bool(getattr(details, f"has_{feature}"))

    async def update_plan(
        self,
        tenant_id: UUID,
        tier: PlanTier | str,
        end_date: datetime | None = None,
    ) -> PlanDetails:
        """Move a tenant to ``tier``, writing the tenant row and its plan together."""
        target = parse_tier(tier)
        quotas = quotas_for(target)
        if end_date is None:
            end_date = default_end_date(target, datetime.now(timezone.utc))

        try:
            tenant = await self.tenants.get(tenant_id)
            if tenant is None:
                raise NotFoundError("Tenant", tenant_id)
            tenant.plan_tier = target
            tenant.plan_until = end_date

            details = await self.plans.get_for_tenant(tenant_id)
            if details is None:
                # A concurrent lazy creation may win the row; the tier is then applied to it.
                details = await self._insert_plan(tenant_id, target)
            details.current_tier = target
            details.status = PlanStatus.ACTIVE
            details.end_date = end_date
            apply_quotas(details, quotas)

            await self.session.flush()
            await self.session.commit()
        except Exception:
            await self.session.rollback()
            raise

        logger.info("Tenant=%s moved to tier=%s until=%s", tenant_id, target.value, end_date)
        return details

    async def upgrade_to_pro(self, tenant_id: UUID, end_date: datetime | None = None) -> PlanDetails:
        return await self.update_plan(tenant_id, PlanTier.PRO, end_date)

    async def upgrade_to_business(self, tenant_id: UUID, end_date: datetime | None = None) -> PlanDetails:
        return await self.update_plan(tenant_id, PlanTier.BUSINESS, end_date)

    async def repair_plan(self, tenant_id: UUID) -> PlanDetails:
        details = await self.plans.get_for_tenant(tenant_id)
        if details is None:
            raise NotFoundError("Plan", tenant_id)

        drift = drifted_columns(details)
        if drift:
            logger.warning("Repairing plan for tenant=%s, drifted columns: %s", tenant_id, ", ".join(drift))
        apply_quotas(details, quotas_for(details.current_tier))
        await self.session.flush()
        await self.session.commit()
        return details

    @staticmethod
    def _is_expired(details: PlanDetails) -> bool:
        return (
            details.status == PlanStatus.EXPIRED
            and details.current_tier == PlanTier.FREE
            and not drifted_columns(details)
        )

    async def _expire(self, details: PlanDetails) -> PlanDetails:
        logger.info("Plan for tenant=%s expired on %s, downgrading to FREE", details.tenant_id, details.end_date)
        details.status = PlanStatus.EXPIRED
        details.current_tier = PlanTier.FREE
        apply_quotas(details, quotas_for(PlanTier.FREE))

        tenant = await self.tenants.get(details.tenant_id)
        if tenant is not None:
            tenant.plan_tier = PlanTier.FREE

        await self.session.flush()
        return details

    async def _create_from_tenant_choice(self, tenant_id: UUID) -> PlanDetails:
        tenant = await self.tenants.get(tenant_id)
        tier = tenant.plan_tier if tenant is not None else PlanTier.FREE
        return await self._insert_plan(tenant_id, tier)

    async def _insert_plan(self, tenant_id: UUID, tier: PlanTier) -> PlanDetails:
        details = PlanDetails(
            tenant_id=tenant_id,
            current_tier=tier,
            status=PlanStatus.ACTIVE,
            end_date=default_end_date(tier, datetime.now(timezone.utc)),
        )
        apply_quotas(details, quotas_for(tier))
        try:
            async with self.session.begin_nested():
                self.session.add(details)
                await self.session.flush()
        except IntegrityError:
            # Someone else created it first; theirs wins.
            existing = await self.plans.get_for_tenant(tenant_id)
            if existing is None:
                raise ConflictError(f"Plan for tenant {tenant_id} could not be created")
            return existing
        return details
