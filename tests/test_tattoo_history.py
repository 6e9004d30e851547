from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock
from uuid import uuid4

import pytest

from src.core.errors import NotFoundError
from src.core.tattoo_history import TattooHistoryStore


def _store(*, client=None, updated=None, deleted=True, listed=None):  # noqa: ANN001
    session = Mock()
    session.commit = AsyncMock()
    histories = SimpleNamespace(
        create=AsyncMock(side_effect=lambda **values: SimpleNamespace(id=uuid4(), **values)),
        update=AsyncMock(return_value=updated),
        delete=AsyncMock(return_value=deleted),
        list_for_tenant=AsyncMock(return_value=listed or []),
        list_for_client=AsyncMock(return_value=listed or []),
    )
    clients = SimpleNamespace(get=AsyncMock(return_value=client))
    store = TattooHistoryStore(session, histories=histories, clients=clients)  # type: ignore[arg-type]
    return store, session, histories


@pytest.mark.asyncio
async def test_create_requires_client_of_current_tenant() -> None:
    store, session, histories = _store(client=None)

    with pytest.raises(NotFoundError) as exc:
        await store.create(client_id=uuid4(), date=datetime.now(timezone.utc), description="Koi")

    assert exc.value.entity == "Client"
    histories.create.assert_not_awaited()
    session.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_create_persists_record() -> None:
    client_id = uuid4()
    store, session, _ = _store(client=SimpleNamespace(id=client_id))

    history = await store.create(client_id=client_id, date=datetime.now(timezone.utc), description="Koi", zone="arm")

    assert history.client_id == client_id
    assert history.zone == "arm"
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_update_of_foreign_or_missing_record_is_not_found() -> None:
    store, session, _ = _store(updated=None)

    with pytest.raises(NotFoundError):
        await store.update(uuid4(), description="Touch-up")
    session.commit.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_never_moves_record_to_another_client() -> None:
    record = SimpleNamespace(id=uuid4())
    store, session, histories = _store(updated=record)

    result = await store.update(record.id, description="Touch-up", client_id=uuid4())

    assert result is record
    histories.update.assert_awaited_once_with(record.id, description="Touch-up")
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_delete_of_foreign_or_missing_record_is_not_found() -> None:
    store, session, _ = _store(deleted=False)

    with pytest.raises(NotFoundError):
        await store.delete(uuid4())
    session.commit.assert_not_awaited()

    store, session, _ = _store(deleted=True)
    await store.delete(uuid4())
    session.commit.assert_awaited_once()


@pytest.mark.asyncio
async def test_listing_delegates_to_scoped_queries() -> None:
    items = [SimpleNamespace(id=uuid4()), SimpleNamespace(id=uuid4())]
    store, _, histories = _store(listed=items)

    assert await store.list_for_tenant() == items
    client_id = uuid4()
    assert await store.list_for_client(client_id) == items
    histories.list_for_client.assert_awaited_once_with(client_id)
