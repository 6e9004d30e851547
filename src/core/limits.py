from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth import AuthContext, require_auth_context
from src.core.db import get_db_session
from src.core.errors import QuotaExceededError
from src.core.plan_lifecycle import PlanLifecycleManager
from src.core.plans import (
    ACTION_LABELS,
    ACTION_METRICS,
    FEATURES,
    METRICS,
    Action,
    Metric,
    has_reached,
    is_unlimited,
)
from src.core.repositories.tenants import TenantAccountRepository
from src.core.usage import UsageCounter, UsageSnapshot
from src.models.plan_details import PlanDetails


def metric_for(action: str) -> Metric:
    try:
        return ACTION_METRICS[action]  # type: ignore[index]
    except KeyError as exc:
        raise ValueError(f"Unknown quota action: {action}") from exc


def percentage_used(usage: int, limit: int) -> int:
    if is_unlimited(limit):
        return 0
    if limit == 0:
        return 100 if usage > 0 else 0
    return round(usage / limit * 100)


@dataclass(slots=True)
class LimitReport:
    plan: PlanDetails
    usage: UsageSnapshot
    limits: dict[str, int]
    has_reached: dict[str, bool]

    @classmethod
    def build(cls, plan: PlanDetails, usage: UsageSnapshot) -> LimitReport:
        limits = {metric: getattr(plan, f"max_{metric}") for metric in METRICS}
        return cls(
            plan=plan,
            usage=usage,
            limits=limits,
            has_reached={
                metric: has_reached(limits[metric], usage.for_metric(metric)) for metric in METRICS
            },
        )

    def allows(self, action: str) -> bool:
        metric = metric_for(action)
        return is_unlimited(self.limits[metric]) or not self.has_reached[metric]

    def percentage_used(self) -> dict[str, int]:
        return {
            metric: percentage_used(self.usage.for_metric(metric), self.limits[metric])
            for metric in METRICS
        }

    def features(self) -> dict[str, bool]:
        return {feature: bool(getattr(self.plan, f"has_{feature}")) for feature in FEATURES}


class LimitEvaluator:
    def __init__(
        self,
        session: AsyncSession,
        *,
        lifecycle: PlanLifecycleManager | None = None,
        counter: UsageCounter | None = None,
        tenants: TenantAccountRepository | None = None,
    ) -> None:
        self.session = session
        self.lifecycle = lifecycle or PlanLifecycleManager(session)
        self.counter = counter or UsageCounter(session)
        self.tenants = tenants or TenantAccountRepository(session)

    async def check_limits(self, tenant_id: UUID, *, now: datetime | None = None) -> LimitReport:
        # Lazy expiry runs inside get_plan_details, before any limit is read.
        plan = await self.lifecycle.get_plan_details(tenant_id)
        tenant = await self.tenants.get(tenant_id)
        usage = await self.counter.count(
            tenant_id,
            timezone_name=tenant.timezone if tenant is not None else None,
            now=now,
        )
        return LimitReport.build(plan, usage)

    async def can_perform(self, tenant_id: UUID, action: Action) -> bool:
        metric_for(action)
        report = await self.check_limits(tenant_id)
        return report.allows(action)

    async def enforce(self, tenant_id: UUID, action: Action) -> LimitReport:
        metric = metric_for(action)
        report = await self.check_limits(tenant_id)
        if not report.allows(action):
            raise QuotaExceededError(action, ACTION_LABELS[action], report.limits[metric])
        return report

    async def usage_stats(self, tenant_id: UUID) -> dict[str, object]:
        report = await self.check_limits(tenant_id)
        return {
            "tier": report.plan.current_tier,
            "status": report.plan.status,
            "end_date": report.plan.end_date,
            "usage": report.usage.as_dict(),
            "limits": report.limits,
            "percentage_used": report.percentage_used(),
            "features": report.features(),
        }


class QuotaGuard:
    """Route dependency that rejects the request when ``action`` is over quota.

    Routes declare the requirement explicitly, e.g.
    ``dependencies=[Depends(QuotaGuard("client"))]``.
    """

    def __init__(self, action: Action) -> None:
        metric_for(action)
        self.action = action

    async def __call__(
        self,
        auth: AuthContext = Depends(require_auth_context),
        session: AsyncSession = Depends(get_db_session),
    ) -> LimitReport:
        return await LimitEvaluator(session).enforce(auth.tenant_id, self.action)
