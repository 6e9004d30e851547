from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import AwareDatetime, BaseModel, EmailStr, Field, model_validator


class ClientCreateRequest(BaseModel):
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    phone: str | None = Field(default=None, max_length=30)


class ClientResponse(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: str
    phone: str | None = None


class AppointmentCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=150)
    prestation: str = Field(min_length=1, max_length=40)
    start: AwareDatetime
    end: AwareDatetime
    client_id: UUID | None = None
    staff_id: UUID | None = None

    @model_validator(mode="after")
    def _end_after_start(self) -> AppointmentCreateRequest:
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self


class AppointmentResponse(BaseModel):
    id: str
    title: str
    prestation: str
    status: str
    start: datetime
    end: datetime
    client_id: str | None = None
    staff_id: str | None = None
    follow_up_scheduled: bool = False
