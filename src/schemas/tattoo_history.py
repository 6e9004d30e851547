from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, Field


class TattooHistoryFields(BaseModel):
    zone: str | None = Field(default=None, max_length=120)
    size: str | None = Field(default=None, max_length=60)
    price: Decimal | None = Field(default=None, ge=0)
    before_image: str | None = Field(default=None, max_length=1024)
    after_image: str | None = Field(default=None, max_length=1024)
    ink_used: str | None = Field(default=None, max_length=255)
    healing_time: str | None = Field(default=None, max_length=120)
    care_products: str | None = Field(default=None, max_length=255)


class TattooHistoryCreateRequest(TattooHistoryFields):
    client_id: UUID
    date: datetime
    description: str = Field(min_length=1)


class TattooHistoryUpdateRequest(TattooHistoryFields):
    date: datetime | None = None
    description: str | None = Field(default=None, min_length=1)


class TattooHistoryResponse(TattooHistoryFields):
    id: str
    client_id: str
    date: datetime
    description: str
