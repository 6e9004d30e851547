from __future__ import annotations

from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.errors import NotFoundError
from src.core.repositories.clients import ClientRepository
from src.core.repositories.tattoo_histories import TattooHistoryRepository
from src.models.tattoo_history import TattooHistory


class TattooHistoryStore:
    """Treatment records, always resolved through the caller's tenant."""

    def __init__(
        self,
        session: AsyncSession,
        *,
        histories: TattooHistoryRepository | None = None,
        clients: ClientRepository | None = None,
    ) -> None:
        self.session = session
        self.histories = histories or TattooHistoryRepository(session)
        self.clients = clients or ClientRepository(session)

    async def create(self, *, client_id: UUID, **values: object) -> TattooHistory:
        # Scoped lookup: a client of another salon is reported as missing.
        if await self.clients.get(client_id) is None:
            raise NotFoundError("Client", client_id)

        history = await self.histories.create(client_id=client_id, **values)
        await self.session.commit()
        return history

    async def list_for_tenant(self) -> list[TattooHistory]:
        return await self.histories.list_for_tenant()

    async def list_for_client(self, client_id: UUID) -> list[TattooHistory]:
        return await self.histories.list_for_client(client_id)

    async def update(self, history_id: UUID, **values: object) -> TattooHistory:
        values.pop("client_id", None)
        history = await self.histories.update(history_id, **values)
        if history is None:
            raise NotFoundError("Tattoo history", history_id)
        await self.session.commit()
        return history

    async def delete(self, history_id: UUID) -> None:
        if not await self.histories.delete(history_id):
            raise NotFoundError("Tattoo history", history_id)
        await self.session.commit()
