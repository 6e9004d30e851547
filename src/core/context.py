from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from typing import Final
from uuid import UUID

_CURRENT_TENANT_ID: Final[ContextVar[UUID | None]] = ContextVar(
    "current_tenant_id",
    default=None,
)


def set_current_tenant_id(tenant_id: UUID | None) -> Token[UUID | None]:
    return _CURRENT_TENANT_ID.set(tenant_id)


def get_current_tenant_id() -> UUID | None:
    return _CURRENT_TENANT_ID.get()


def reset_current_tenant_id(token: Token[UUID | None]) -> None:
    _CURRENT_TENANT_ID.reset(token)


@contextmanager
def tenant_scope(tenant_id: UUID) -> Iterator[UUID]:
    """Bind the tenant context outside of an HTTP request (workers, scripts)."""
    token = set_current_tenant_id(tenant_id)
    try:
        yield tenant_id
    finally:
        reset_current_tenant_id(token)
