from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.repositories.base import TenantRepository
from src.models.client import Client


class ClientRepository(TenantRepository[Client]):
    entity_name = "Client"

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session=session, model=Client)
