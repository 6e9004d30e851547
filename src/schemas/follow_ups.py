from __future__ import annotations

from pydantic import BaseModel, Field


class FollowUpLinkResponse(BaseModel):
    ok: bool


class FollowUpSubmissionRequest(BaseModel):
    token: str = Field(min_length=8, max_length=64)
    rating: int = Field(ge=1, le=5)
    review: str | None = Field(default=None, max_length=2000)
    photo_url: str = Field(min_length=1, max_length=1024)
    is_photo_public: bool = False


class FollowUpSubmissionResponse(BaseModel):
    id: str
    appointment_id: str
    rating: int


class FollowUpSendResponse(BaseModel):
    appointment_id: str
    outcome: str


class UnansweredCountResponse(BaseModel):
    count: int
