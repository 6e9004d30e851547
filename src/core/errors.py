from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from starlette.responses import JSONResponse

logger = logging.getLogger(__name__)


class DomainError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, entity: str, key: object) -> None:
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.key = key


class QuotaExceededError(DomainError):
    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, action: str, label: str, limit: int) -> None:
        super().__init__(
            f"Limit reached for {label} ({limit}). "
            "Upgrade to the PRO or BUSINESS plan to continue."
        )
        self.action = action
        self.label = label
        self.limit = limit


class InvalidTierError(DomainError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(self, value: object) -> None:
        super().__init__(f"Unknown plan tier: {value!r}")
        self.value = value


class TransientDeliveryFailure(DomainError):
    status_code = status.HTTP_502_BAD_GATEWAY


class ConflictError(DomainError):
    status_code = status.HTTP_409_CONFLICT


class FollowUpLinkError(DomainError):
    MESSAGES = {
        "invalid": "Invalid follow-up link",
        "already_submitted": "This follow-up has already been submitted",
        "expired": "This follow-up link has expired",
    }

    def __init__(self, reason: str) -> None:
        super().__init__(self.MESSAGES.get(reason, reason))
        self.reason = reason


async def _domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, DomainError)
    if exc.status_code >= 500:
        logger.error("Request %s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def register_exception_handlers(app: FastAPI) -> None:
    for exc_class in (
        NotFoundError,
        QuotaExceededError,
        InvalidTierError,
        TransientDeliveryFailure,
        ConflictError,
        FollowUpLinkError,
    ):
        app.add_exception_handler(exc_class, _domain_error_handler)
