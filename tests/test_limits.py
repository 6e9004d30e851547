from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest

from src.core.errors import QuotaExceededError
from src.core.limits import LimitEvaluator, LimitReport, QuotaGuard
from src.core.plan_lifecycle import PlanLifecycleManager, apply_quotas
from src.core.plans import ACTION_METRICS, quotas_for
from src.core.usage import UsageSnapshot
from src.models.enums import PlanStatus, PlanTier
from src.models.plan_details import PlanDetails


def _details(tier: PlanTier) -> PlanDetails:
    details = PlanDetails(tenant_id=uuid4(), current_tier=tier, status=PlanStatus.ACTIVE, end_date=None)
    apply_quotas(details, quotas_for(tier))
    return details


def _usage(appointments: int = 0, clients: int = 0, staff: int = 0, portfolio_images: int = 0) -> UsageSnapshot:
    return UsageSnapshot(
        appointments=appointments,
        clients=clients,
        staff=staff,
        portfolio_images=portfolio_images,
    )


class _FakeLifecycle:
    def __init__(self, details: PlanDetails) -> None:
        self.details = details
        self.calls = 0

    async def get_plan_details(self, tenant_id):  # noqa: ANN001
        self.calls += 1
        return self.details


class _FakeCounter:
    def __init__(self, snapshot: UsageSnapshot) -> None:
        self.snapshot = snapshot
        self.timezones: list[str | None] = []

    async def count(self, tenant_id, *, timezone_name=None, now=None):  # noqa: ANN001
        self.timezones.append(timezone_name)
        return self.snapshot


def _tenants(timezone_name: str = "Europe/Paris") -> SimpleNamespace:
    tenant = SimpleNamespace(id=uuid4(), timezone=timezone_name, plan_tier=PlanTier.FREE, plan_until=None)
    return SimpleNamespace(tenant=tenant, get=AsyncMock(return_value=tenant))


def _evaluator(details: PlanDetails, usage: UsageSnapshot) -> LimitEvaluator:
    return LimitEvaluator(
        Mock(),
        lifecycle=_FakeLifecycle(details),  # type: ignore[arg-type]
        counter=_FakeCounter(usage),  # type: ignore[arg-type]
        tenants=_tenants(),  # type: ignore[arg-type]
    )


@pytest.mark.asyncio
async def test_check_limits_reports_reached_metrics() -> None:
    evaluator = _evaluator(_details(PlanTier.FREE), _usage(appointments=5, clients=2, staff=1))

    report = await evaluator.check_limits(uuid4())

    assert report.limits == {"appointments": 5, "clients": 5, "staff": 1, "portfolio_images": 5}
    assert report.has_reached == {
        "appointments": True,
        "clients": False,
        "staff": True,
        "portfolio_images": False,
    }
    assert evaluator.counter.timezones == ["Europe/Paris"]  # type: ignore[attr-defined]


@pytest.mark.asyncio
async def test_lazy_expiry_runs_before_limits_are_read() -> None:
    evaluator = _evaluator(_details(PlanTier.PRO), _usage())
    await evaluator.can_perform(uuid4(), "client")
    assert evaluator.lifecycle.calls == 1  # type: ignore[attr-defined]


@pytest.mark.asyncio
async def test_business_is_never_blocked() -> None:
    evaluator = _evaluator(_details(PlanTier.BUSINESS), _usage(10**6, 10**6, 10**6, 10**6))
    for action in ACTION_METRICS:
        assert await evaluator.can_perform(uuid4(), action) is True
        await evaluator.enforce(uuid4(), action)


@pytest.mark.asyncio
@pytest.mark.parametrize("tier", list(PlanTier))
@pytest.mark.parametrize("count", [0, 1, 4, 5, 30, 150, 200, 1000])
async def test_enforce_agrees_with_can_perform(tier: PlanTier, count: int) -> None:
    evaluator = _evaluator(_details(tier), _usage(count, count, count, count))
    for action in ACTION_METRICS:
        allowed = await evaluator.can_perform(uuid4(), action)
        if allowed:
            await evaluator.enforce(uuid4(), action)
        else:
            with pytest.raises(QuotaExceededError):
                await evaluator.enforce(uuid4(), action)


@pytest.mark.asyncio
async def test_enforce_error_carries_label_and_limit() -> None:
    evaluator = _evaluator(_details(PlanTier.FREE), _usage(clients=5))

    with pytest.raises(QuotaExceededError) as exc:
        await evaluator.enforce(uuid4(), "client")

    assert exc.value.limit == 5
    assert exc.value.label == "client records"
    assert "Upgrade" in exc.value.message
    assert exc.value.status_code == 403


@pytest.mark.asyncio
async def test_free_tenant_unblocked_by_upgrade_to_pro() -> None:
    details = _details(PlanTier.FREE)
    tenants = _tenants()
    session = Mock()
    session.add = Mock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    lifecycle = PlanLifecycleManager(
        session,
        plans=SimpleNamespace(get_for_tenant=AsyncMock(return_value=details)),  # type: ignore[arg-type]
        tenants=tenants,  # type: ignore[arg-type]
    )
    counter = _FakeCounter(_usage(appointments=5))
    evaluator = LimitEvaluator(session, lifecycle=lifecycle, counter=counter, tenants=tenants)  # type: ignore[arg-type]

    assert await evaluator.can_perform(tenants.tenant.id, "appointment") is False

    await lifecycle.update_plan(tenants.tenant.id, PlanTier.PRO)
    assert await evaluator.can_perform(tenants.tenant.id, "appointment") is True

    counter.snapshot = _usage(appointments=149)
    assert await evaluator.can_perform(tenants.tenant.id, "appointment") is True
    counter.snapshot = _usage(appointments=150)
    assert await evaluator.can_perform(tenants.tenant.id, "appointment") is False


@pytest.mark.asyncio
async def test_unknown_action_is_rejected() -> None:
    evaluator = _evaluator(_details(PlanTier.FREE), _usage())
    with pytest.raises(ValueError):
        await evaluator.can_perform(uuid4(), "invoice")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        QuotaGuard("invoice")  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_usage_stats_shape() -> None:
    evaluator = _evaluator(_details(PlanTier.PRO), _usage(appointments=15, clients=100, staff=3))

    stats = await evaluator.usage_stats(uuid4())

    assert stats["tier"] is PlanTier.PRO
    assert stats["percentage_used"] == {
        "appointments": 10,
        "clients": 50,
        "staff": 100,
        "portfolio_images": 0,
    }
    assert stats["features"] == {
        "advanced_stats": True,
        "email_reminders": True,
        "custom_branding": False,
        "api_access": False,
    }


@pytest.mark.asyncio
async def test_quota_guard_enforces_its_action(monkeypatch: pytest.MonkeyPatch) -> None:
    from src.core import limits

    seen: list[tuple] = []
    report = LimitReport.build(_details(PlanTier.FREE), _usage())

    class FakeEvaluator:
        def __init__(self, session):  # noqa: ANN001
            self.session = session

        async def enforce(self, tenant_id, action):  # noqa: ANN001
            seen.append((tenant_id, action))
            return report

    monkeypatch.setattr(limits, "LimitEvaluator", FakeEvaluator)
    auth = SimpleNamespace(tenant_id=uuid4())

    result = await QuotaGuard("portfolio")(auth, Mock())  # type: ignore[arg-type]

    assert result is report
    assert seen == [(auth.tenant_id, "portfolio")]
