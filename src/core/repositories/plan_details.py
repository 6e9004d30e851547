from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.repositories.base import Repository
from src.models.plan_details import PlanDetails


class PlanDetailsRepository(Repository[PlanDetails]):
    entity_name = "Plan"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session=session, model=PlanDetails)

    async def get_for_tenant(self, tenant_id: UUID) -> PlanDetails | None:
        return await self.session.scalar(select(PlanDetails).where(PlanDetails.tenant_id == tenant_id))
