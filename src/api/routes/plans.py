from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth import AuthContext, require_auth_context
from src.core.db import get_db_session
from src.core.limits import LimitEvaluator
from src.core.plan_lifecycle import PlanLifecycleManager
from src.core.plans import ACTION_METRICS, FEATURES, METRICS, parse_tier
from src.models.plan_details import PlanDetails
from src.schemas.plans import (
    FeatureCheckRequest,
    FeatureCheckResponse,
    LimitsResponse,
    PlanDetailsResponse,
    PlanEndDateRequest,
    PlanUpgradeRequest,
    UsageStatsResponse,
)

router = APIRouter(prefix="/plans", tags=["plans"])


def to_plan_response(details: PlanDetails) -> PlanDetailsResponse:
    return PlanDetailsResponse(
        tenant_id=str(details.tenant_id),
        current_tier=details.current_tier.value,
        status=details.status.value,
        end_date=details.end_date,
        limits={metric: getattr(details, f"max_{metric}") for metric in METRICS},
        features={feature: getattr(details, f"has_{feature}") for feature in FEATURES},
        monthly_price=details.monthly_price,
    )


@router.get("/usage", response_model=UsageStatsResponse)
async def get_usage_stats(
    auth: AuthContext = Depends(require_auth_context),
    session: AsyncSession = Depends(get_db_session),
) -> UsageStatsResponse:
    stats = await LimitEvaluator(session).usage_stats(auth.tenant_id)
    return UsageStatsResponse(
        tier=stats["tier"].value,
        status=stats["status"].value,
        end_date=stats["end_date"],
        usage=stats["usage"],
        limits=stats["limits"],
        percentage_used=stats["percentage_used"],
        features=stats["features"],
    )


@router.get("/current", response_model=PlanDetailsResponse)
async def get_current_plan(
    auth: AuthContext = Depends(require_auth_context),
    session: AsyncSession = Depends(get_db_session),
) -> PlanDetailsResponse:
    details = await PlanLifecycleManager(session).get_plan_details(auth.tenant_id)
    return to_plan_response(details)


@router.get("/limits", response_model=LimitsResponse)
async def get_limits(
    auth: AuthContext = Depends(require_auth_context),
    session: AsyncSession = Depends(get_db_session),
) -> LimitsResponse:
    report = await LimitEvaluator(session).check_limits(auth.tenant_id)
    return LimitsResponse(
        usage=report.usage.as_dict(),
        limits=report.limits,
        has_reached=report.has_reached,
        can_create={action: report.allows(action) for action in ACTION_METRICS},
    )


@router.post("/features/check", response_model=FeatureCheckResponse)
async def check_feature(
    payload: FeatureCheckRequest,
    auth: AuthContext = Depends(require_auth_context),
    session: AsyncSession = Depends(get_db_session),
) -> FeatureCheckResponse:
    enabled = await PlanLifecycleManager(session).has_feature(auth.tenant_id, payload.feature)
    return FeatureCheckResponse(feature=payload.feature, enabled=enabled)


@router.patch("/upgrade", response_model=PlanDetailsResponse)
async def upgrade_plan(
    payload: PlanUpgradeRequest,
    auth: AuthContext = Depends(require_auth_context),
    session: AsyncSession = Depends(get_db_session),
) -> PlanDetailsResponse:
    tier = parse_tier(payload.tier)
    details = await PlanLifecycleManager(session).update_plan(auth.tenant_id, tier, payload.end_date)
    return to_plan_response(details)


@router.post("/upgrade-pro", response_model=PlanDetailsResponse)
async def upgrade_to_pro(
    payload: PlanEndDateRequest | None = None,
    auth: AuthContext = Depends(require_auth_context),
    session: AsyncSession = Depends(get_db_session),
) -> PlanDetailsResponse:
    end_date = payload.end_date if payload is not None else None
    details = await PlanLifecycleManager(session).upgrade_to_pro(auth.tenant_id, end_date)
    return to_plan_response(details)


@router.post("/upgrade-business", response_model=PlanDetailsResponse)
async def upgrade_to_business(
    payload: PlanEndDateRequest | None = None,
    auth: AuthContext = Depends(require_auth_context),
    session: AsyncSession = Depends(get_db_session),
) -> PlanDetailsResponse:
    end_date = payload.end_date if payload is not None else None
    details = await PlanLifecycleManager(session).upgrade_to_business(auth.tenant_id, end_date)
    return to_plan_response(details)
