from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.auth import AuthContext, require_auth_context
from src.core.db import get_db_session
from src.core.tattoo_history import TattooHistoryStore
from src.models.tattoo_history import TattooHistory
from src.schemas.tattoo_history import (
    TattooHistoryCreateRequest,
    TattooHistoryResponse,
    TattooHistoryUpdateRequest,
)

router = APIRouter(prefix="/tattoo-history", tags=["tattoo-history"])


def to_history_response(history: TattooHistory) -> TattooHistoryResponse:
    return TattooHistoryResponse(
        id=str(history.id),
        client_id=str(history.client_id),
        date=history.date,
        description=history.description,
        zone=history.zone,
        size=history.size,
        price=history.price,
        before_image=history.before_image,
        after_image=history.after_image,
        ink_used=history.ink_used,
        healing_time=history.healing_time,
        care_products=history.care_products,
    )


@router.post("", response_model=TattooHistoryResponse, status_code=status.HTTP_201_CREATED)
async def create_history(
    payload: TattooHistoryCreateRequest,
    _: AuthContext = Depends(require_auth_context),
    session: AsyncSession = Depends(get_db_session),
) -> TattooHistoryResponse:
    history = await TattooHistoryStore(session).create(**payload.model_dump())
    return to_history_response(history)


@router.get("", response_model=list[TattooHistoryResponse])
async def list_histories(
    _: AuthContext = Depends(require_auth_context),
    session: AsyncSession = Depends(get_db_session),
) -> list[TattooHistoryResponse]:
    return [to_history_response(item) for item in await TattooHistoryStore(session).list_for_tenant()]


@router.get("/clients/{client_id}", response_model=list[TattooHistoryResponse])
async def list_client_histories(
    client_id: UUID,
    _: AuthContext = Depends(require_auth_context),
    session: AsyncSession = Depends(get_db_session),
) -> list[TattooHistoryResponse]:
    histories = await TattooHistoryStore(session).list_for_client(client_id)
    return [to_history_response(item) for item in histories]


@router.patch("/{history_id}", response_model=TattooHistoryResponse)
async def update_history(
    history_id: UUID,
    payload: TattooHistoryUpdateRequest,
    _: AuthContext = Depends(require_auth_context),
    session: AsyncSession = Depends(get_db_session),
) -> TattooHistoryResponse:
    history = await TattooHistoryStore(session).update(history_id, **payload.model_dump(exclude_unset=True))
    return to_history_response(history)


@router.delete("/{history_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_history(
    history_id: UUID,
    _: AuthContext = Depends(require_auth_context),
    session: AsyncSession = Depends(get_db_session),
) -> Response:
    await TattooHistoryStore(session).delete(history_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
