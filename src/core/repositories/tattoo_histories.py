from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.repositories.base import TenantRepository
from src.models.tattoo_history import TattooHistory


class TattooHistoryRepository(TenantRepository[TattooHistory]):
    entity_name = "Tattoo history"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session=session, model=TattooHistory)

    async def list_for_tenant(self) -> list[TattooHistory]:
        await self._apply_rls()
        result = await self.session.execute(
            self._scoped_select().order_by(TattooHistory.date.desc())
        )
        return list(result.scalars().all())

    async def list_for_client(self, client_id: UUID) -> list[TattooHistory]:
        await self._apply_rls()
        result = await self.session.execute(
            self._scoped_select()
            .where(TattooHistory.client_id == client_id)
            .order_by(TattooHistory.date.desc())
        )
        return list(result.scalars().all())
