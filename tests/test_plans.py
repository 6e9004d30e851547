from __future__ import annotations

from decimal import Decimal

import pytest

from src.core.errors import InvalidTierError
from src.core.limits import percentage_used
from src.core.plans import (
    METRICS,
    UNLIMITED,
    has_reached,
    is_unlimited,
    parse_tier,
    quotas_for,
)
from src.models.enums import PlanTier


def test_quotas_for_every_tier_matches_catalog() -> None:
    free = quotas_for(PlanTier.FREE)
    pro = quotas_for(PlanTier.PRO)
    business = quotas_for(PlanTier.BUSINESS)

    assert (free.max_appointments, free.max_clients, free.max_staff, free.max_portfolio_images) == (5, 5, 1, 5)
    assert (pro.max_appointments, pro.max_clients, pro.max_staff, pro.max_portfolio_images) == (150, 200, 3, 30)
    assert all(business.limit_for(metric) == UNLIMITED for metric in METRICS)

    assert not any([free.has_advanced_stats, free.has_email_reminders, free.has_custom_branding, free.has_api_access])
    assert pro.has_advanced_stats and pro.has_email_reminders
    assert not pro.has_custom_branding and not pro.has_api_access
    assert business.has_custom_branding and business.has_api_access
    assert free.monthly_price == Decimal("0.00")


def test_quotas_for_is_pure() -> None:
    assert quotas_for(PlanTier.PRO) == quotas_for("pro")
    assert quotas_for(PlanTier.PRO) is quotas_for(PlanTier.PRO)


@pytest.mark.parametrize("value", ["GOLD", "", None, 3, "FREEE"])
def test_unknown_tier_is_rejected(value: object) -> None:
    with pytest.raises(InvalidTierError):
        quotas_for(value)  # type: ignore[arg-type]


def test_parse_tier_accepts_case_and_whitespace() -> None:
    assert parse_tier(" business ") is PlanTier.BUSINESS
    assert parse_tier(PlanTier.FREE) is PlanTier.FREE


@pytest.mark.parametrize("usage", [0, 1, 150, 10**9])
def test_unlimited_is_never_reached(usage: int) -> None:
    assert is_unlimited(UNLIMITED)
    assert has_reached(UNLIMITED, usage) is False


def test_has_reached_at_and_above_limit() -> None:
    assert has_reached(5, 4) is False
    assert has_reached(5, 5) is True
    assert has_reached(5, 6) is True
    assert has_reached(0, 0) is True


def test_percentage_used() -> None:
    assert percentage_used(10, UNLIMITED) == 0
    assert percentage_used(3, 0) == 100
    assert percentage_used(0, 0) == 0
    assert percentage_used(1, 3) == 33
    assert percentage_used(2, 3) == 67
    assert percentage_used(6, 5) == 120
