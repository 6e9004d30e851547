from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from uuid import UUID

from fastapi import Request
from starlette import status
from starlette.responses import JSONResponse, Response

from src.core.context import get_current_tenant_id, reset_current_tenant_id, set_current_tenant_id

logger = logging.getLogger(__name__)


async def tenant_context_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Seed the tenant context from ``X-Tenant-Id`` and clear it after the request.

    Authenticated routes overwrite the value with the tenant resolved from the
    token, so the header only matters for internal callers.
    """
    tenant_header = request.headers.get("X-Tenant-Id")
    tenant_id: UUID | None = None
    if tenant_header:
        try:
            tenant_id = UUID(tenant_header)
        except ValueError:
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"detail": "Invalid X-Tenant-Id header"},
            )

    token = set_current_tenant_id(tenant_id)
    started = time.perf_counter()
    try:
        response = await call_next(request)
        logger.debug(
            "%s %s -> %s tenant=%s in %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            get_current_tenant_id(),
            (time.perf_counter() - started) * 1000,
        )
        return response
    finally:
        reset_current_tenant_id(token)
