from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import AwareDatetime, BaseModel, Field

FeatureName = Literal["advanced_stats", "email_reminders", "custom_branding", "api_access"]


class MetricCounts(BaseModel):
    appointments: int
    clients: int
    staff: int
    portfolio_images: int


class FeatureFlags(BaseModel):
    advanced_stats: bool
    email_reminders: bool
    custom_branding: bool
    api_access: bool


class PlanDetailsResponse(BaseModel):
    tenant_id: str
    current_tier: str
    status: str
    end_date: datetime | None = None
    limits: MetricCounts
    features: FeatureFlags
    monthly_price: Decimal


class UsageStatsResponse(BaseModel):
    tier: str
    status: str
    end_date: datetime | None = None
    usage: MetricCounts
    limits: MetricCounts
    percentage_used: MetricCounts
    features: FeatureFlags


class LimitsResponse(BaseModel):
    usage: MetricCounts
    limits: MetricCounts
    has_reached: dict[str, bool]
    can_create: dict[str, bool]


class FeatureCheckRequest(BaseModel):
    feature: FeatureName


class FeatureCheckResponse(BaseModel):
    feature: str
    enabled: bool


class PlanUpgradeRequest(BaseModel):
    # Kept as a plain string so unknown tiers surface as InvalidTierError.
    tier: str = Field(min_length=1, max_length=20)
    end_date: AwareDatetime | None = None


class PlanEndDateRequest(BaseModel):
    end_date: AwareDatetime | None = None
