"""Helpers the booking workflow uses before pricing: rule scoping, pricelist
choice and turning a booking period into a ``BookingContext``."""

import math
from datetime import datetime, timedelta
from typing import Any, Iterable, List, Mapping, Optional

from loguru import logger

from rental_pricing.core.exceptions import InvalidBookingPeriodException
from rental_pricing.core.utils import ensure_utc, resolve_now
from rental_pricing.schemas import BookingContext, Pricelist, PriceRule, Validity

_ONE_HOUR = timedelta(hours=1)


def _within(validity: Validity, now: datetime) -> bool:
    return ensure_utc(validity.start_date) <= now <= ensure_utc(validity.end_date)


def is_rule_active(rule: PriceRule, now: Optional[datetime] = None) -> bool:
    return rule.enabled and _within(rule.validity, resolve_now(now))


def active_rules(
    rules: Iterable[PriceRule], now: Optional[datetime] = None
) -> List[PriceRule]:
    """Enabled rules valid at ``now``, lowest priority first."""
    now = resolve_now(now)
    return sorted(
        (rule for rule in rules if is_rule_active(rule, now)),
        key=lambda r: r.priority,
    )


def rules_for_product(
    rules: Iterable[PriceRule], product_id: str, now: Optional[datetime] = None
) -> List[PriceRule]:
    return [
        rule
        for rule in active_rules(rules, now)
        if not rule.product_id or str(rule.product_id) == str(product_id)
    ]


def rules_for_category(
    rules: Iterable[PriceRule], category_id: str, now: Optional[datetime] = None
) -> List[PriceRule]:
    return [
        rule
        for rule in active_rules(rules, now)
        if not rule.category_id or str(rule.category_id) == str(category_id)
    ]


def select_pricelist(
    pricelists: Iterable[Pricelist],
    customer_type: Optional[str],
    now: Optional[datetime] = None,
    region: Optional[str] = None,
) -> Optional[Pricelist]:
    now = resolve_now(now)
    for pricelist in pricelists:
        if not _within(pricelist.validity, now):
            continue
        targets = pricelist.target_customer_types
        if targets and customer_type not in targets:
            continue
        if region is not None and pricelist.region != region:
            continue
        return pricelist
    return None


def build_booking_context(
    start: datetime,
    end: datetime,
    unit_count: int,
    product_id: str,
    category_id: Optional[str] = None,
    user_type: Optional[str] = None,
    deposit_amount: float = 0,
    attributes: Optional[Mapping[str, Any]] = None,
) -> BookingContext:
    """Build the context for a booking period.

    ``attributes`` feed custom rule conditions. Keys naming a declared
    context field (either spelling) are dropped, so those values always
    come from the booking itself.
    """
    start, end = ensure_utc(start), ensure_utc(end)
    if end <= start:
        raise InvalidBookingPeriodException(start, end)

    extra = {}
    for key, value in (attributes or {}).items():
        if BookingContext.is_declared_field(key):
            logger.warning(f"Ignoring attribute {key!r}: it names a booking field")
            continue
        extra[key] = value

    duration_hours = math.ceil((end - start) / _ONE_HOUR)
    duration_days = math.ceil(duration_hours / 24)

    return BookingContext(
        duration_hours=duration_hours,
        duration_days=duration_days,
        unit_count=unit_count,
        deposit_amount=deposit_amount,
        product_id=product_id,
        category_id=category_id,
        user_type=user_type,
        **extra,
    )
