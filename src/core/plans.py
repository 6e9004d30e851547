"""Subscription plan catalog.

Every quota and feature flag stored on a tenant's ``PlanDetails`` row is a
pure function of its tier; :func:`quotas_for` is that function.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from decimal import Decimal
from typing import Literal

from src.core.errors import InvalidTierError
from src.models.enums import PlanTier

UNLIMITED = -1

Metric = Literal["appointments", "clients", "staff", "portfolio_images"]
Action = Literal["appointment", "client", "staff", "portfolio"]
Feature = Literal["advanced_stats", "email_reminders", "custom_branding", "api_access"]

METRICS: tuple[Metric, ...] = ("appointments", "clients", "staff", "portfolio_images")
FEATURES: tuple[Feature, ...] = ("advanced_stats", "email_reminders", "custom_branding", "api_access")

ACTION_METRICS: dict[Action, Metric] = {
    "appointment": "appointments",
    "client": "clients",
    "staff": "staff",
    "portfolio": "portfolio_images",
}

ACTION_LABELS: dict[Action, str] = {
    "appointment": "appointments this month",
    "client": "client records",
    "staff": "staff members",
    "portfolio": "portfolio images",
}


@dataclass(frozen=True, slots=True)
class PlanQuotas:
    max_appointments: int
    max_clients: int
    max_staff: int
    max_portfolio_images: int
    has_advanced_stats: bool
    has_email_reminders: bool
    has_custom_branding: bool
    has_api_access: bool
    monthly_price: Decimal

    def limit_for(self, metric: Metric) -> int:
        return getattr(self, f"max_{metric}")

    def as_columns(self) -> dict[str, object]:
        return asdict(self)


_CATALOG: dict[PlanTier, PlanQuotas] = {
    PlanTier.FREE: PlanQuotas(
        max_appointments=5,
        max_clients=5,
        max_staff=1,
        max_portfolio_images=5,
        has_advanced_stats=False,
        has_email_reminders=False,
        has_custom_branding=False,
        has_api_access=False,
        monthly_price=Decimal("0.00"),
    ),
    PlanTier.PRO: PlanQuotas(
        max_appointments=150,
        max_clients=200,
        max_staff=3,
        max_portfolio_images=30,
        has_advanced_stats=True,
        has_email_reminders=True,
        has_custom_branding=False,
        has_api_access=False,
        monthly_price=Decimal("29.99"),
    ),
    PlanTier.BUSINESS: PlanQuotas(
        max_appointments=UNLIMITED,
        max_clients=UNLIMITED,
        max_staff=UNLIMITED,
        max_portfolio_images=UNLIMITED,
        has_advanced_stats=True,
        has_email_reminders=True,
        has_custom_branding=True,
        has_api_access=True,
        monthly_price=Decimal("59.99"),
    ),
}


def parse_tier(value: object) -> PlanTier:
    if isinstance(value, PlanTier):
        return value
    if isinstance(value, str):
        try:
            return PlanTier(value.strip().upper())
        except ValueError:
            pass
    raise InvalidTierError(value)


def quotas_for(tier: PlanTier | str) -> PlanQuotas:
    # Unknown tiers are a configuration bug; never fall back to FREE here.
    try:
        return _CATALOG[parse_tier(tier)]
    except KeyError as exc:
        raise InvalidTierError(tier) from exc


def is_unlimited(limit: int) -> bool:
    return limit == UNLIMITED


def has_reached(limit: int, usage: int) -> bool:
    if is_unlimited(limit):
        return False
    return usage >= limit
