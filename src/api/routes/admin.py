from __future__ import annotations

import logging
from datetime import datetime, timezone
from uuid import UUID

import redis.asyncio as redis
from fastapi import APIRouter, Depends
from sqlalchemy import func, select, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.routes.plans import to_plan_response
from src.core.auth import AuthContext, require_super_admin
from src.core.config import settings
from src.core.db import get_db_session
from src.core.plan_lifecycle import PlanLifecycleManager
from src.core.plans import parse_tier
from src.models.enums import PlanStatus
from src.models.plan_details import PlanDetails
from src.models.tenant import Tenant
from src.schemas.admin import SystemHealthResponse
from src.schemas.plans import PlanDetailsResponse, PlanUpgradeRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.post("/tenants/{tenant_id}/plan/repair", response_model=PlanDetailsResponse)
async def repair_tenant_plan(
    tenant_id: UUID,
    admin: AuthContext = Depends(require_super_admin),
    session: AsyncSession = Depends(get_db_session),
) -> PlanDetailsResponse:
    details = await PlanLifecycleManager(session).repair_plan(tenant_id)
    logger.info("Plan for tenant=%s repaired by %s", tenant_id, admin.subject)
    return to_plan_response(details)


@router.patch("/tenants/{tenant_id}/plan", response_model=PlanDetailsResponse)
async def set_tenant_plan(
    tenant_id: UUID,
    payload: PlanUpgradeRequest,
    admin: AuthContext = Depends(require_super_admin),
    session: AsyncSession = Depends(get_db_session),
) -> PlanDetailsResponse:
    tier = parse_tier(payload.tier)
    details = await PlanLifecycleManager(session).update_plan(tenant_id, tier, payload.end_date)
    logger.info("Plan for tenant=%s set to %s by %s", tenant_id, tier.value, admin.subject)
    return to_plan_response(details)


@router.get("/system/health", response_model=SystemHealthResponse)
async def system_health(
    _: AuthContext = Depends(require_super_admin),
    session: AsyncSession = Depends(get_db_session),
) -> SystemHealthResponse:
    database_ok = True
    total_tenants = 0
    expired_plans = 0
    try:
        await session.execute(text("SELECT 1"))
        total_tenants = int(await session.scalar(select(func.count(Tenant.id))) or 0)
        # Plans past their end date that nobody has accessed yet still read ACTIVE.
        expired_plans = int(
            await session.scalar(
                select(func.count(PlanDetails.id)).where(
                    (PlanDetails.status == PlanStatus.EXPIRED)
                    | (PlanDetails.end_date < datetime.now(timezone.utc))
                )
            )
            or 0
        )
    except Exception:
        logger.exception("Database health check failed")
        database_ok = False

    redis_ok = True
    redis_client = redis.from_url(settings.redis_url, decode_responses=True)
    try:
        redis_ok = bool(await redis_client.ping())
    except Exception:
        logger.exception("Redis health check failed")
        redis_ok = False
    finally:
        await redis_client.aclose()

    status_value = "ok" if database_ok and redis_ok else "degraded"
    return SystemHealthResponse(
        status=status_value,
        database_ok=database_ok,
        redis_ok=redis_ok,
        total_tenants=total_tenants,
        expired_plans=expired_plans,
    )
