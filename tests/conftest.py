from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from rental_pricing.schemas import (
    BaseRates,
    BookingContext,
    Condition,
    Effect,
    PenaltySettings,
    PriceRule,
    Validity,
)

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def base_rates() -> BaseRates:
    return BaseRates(hourly=100, daily=800, weekly=4000)


@pytest.fixture
def context() -> BookingContext:
    return BookingContext(
        duration_hours=5,
        duration_days=1,
        unit_count=1,
        deposit_amount=1000,
        product_id="ev-1",
        category_id="scooters",
        user_type="regular",
    )


@pytest.fixture
def make_rule():
    def _make(
        rule_id: str = "r1",
        effect_type: str = "flatDiscount",
        value=50,
        apply_to: str = "total",
        priority: float = 1,
        conditions=(),
        enabled: bool = True,
        product_id=None,
        category_id=None,
        start: datetime = NOW - timedelta(days=1),
        end: datetime = NOW + timedelta(days=1),
        name: str = None,
    ) -> PriceRule:
        return PriceRule(
            rule_id=rule_id,
            name=name or f"Rule {rule_id}",
            product_id=product_id,
            category_id=category_id,
            priority=priority,
            validity=Validity(start_date=start, end_date=end),
            conditions=[
                c if isinstance(c, Condition) else Condition(**c) for c in conditions
            ],
            effect=Effect(type=effect_type, value=value, apply_to=apply_to),
            enabled=enabled,
        )

    return _make


@pytest.fixture
def penalty_settings() -> PenaltySettings:
    return PenaltySettings(
        damage_penalty_rate=10,
        damage_penalty_type="percentage",
        late_penalty_rate=5,
        late_penalty_type="percentage",
        max_late_penalty_days=7,
    )


@pytest.fixture
def client():
    from rental_pricing.main import app

    with TestClient(app) as test_client:
        yield test_client


def pytest_configure(config):
    config.addinivalue_line("markers", "api: tests that go through the HTTP layer")
