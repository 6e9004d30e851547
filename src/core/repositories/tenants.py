from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.repositories.base import Repository
from src.models.tenant import Tenant


class TenantAccountRepository(Repository[Tenant]):
    entity_name = "Tenant"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session=session, model=Tenant)

    async def get_by_clerk_org_id(self, clerk_org_id: str) -> Tenant | None:
        return await self.session.scalar(select(Tenant).where(Tenant.clerk_org_id == clerk_org_id))
