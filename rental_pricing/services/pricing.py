from datetime import datetime
from typing import List, Optional, Sequence

from loguru import logger

from rental_pricing.core.exceptions import NoApplicablePricelistException
from rental_pricing.core.pricing_engine import apply_price_rules
from rental_pricing.core.selection import (
    active_rules,
    build_booking_context,
    rules_for_category,
    rules_for_product,
    select_pricelist,
)
from rental_pricing.monitoring.metrics import MetricsCollector
from rental_pricing.schemas import (
    BaseRates,
    BookingContext,
    PriceQuoteRequest,
    PriceQuoteResponse,
    PriceRule,
    PricingSnapshot,
)


class PricingService:
    def __init__(self, now: Optional[datetime] = None):
        self._now = now

    def evaluate(
        self,
        base_rates: BaseRates,
        rules: Sequence[PriceRule],
        context: BookingContext,
        kind: str = "evaluate",
    ) -> PricingSnapshot:
        logger.debug(
            f"Evaluating {len(rules)} price rules for product {context.product_id}, "
            f"duration_hours={context.duration_hours}"
        )

        snapshot = apply_price_rules(base_rates, rules, context, now=self._now)

        MetricsCollector.record_price_evaluation(
            kind, len(snapshot.applied_rules), snapshot.total_price
        )
        logger.info(
            f"Priced product {context.product_id}: "
            f"applied={[r.rule_id for r in snapshot.applied_rules]}, "
            f"discount={snapshot.discount_amount}, late_fee={snapshot.late_fee}, "
            f"total={snapshot.total_price}"
        )
        return snapshot

    def quote(self, request: PriceQuoteRequest) -> PriceQuoteResponse:
        context = build_booking_context(
            request.start_date,
            request.end_date,
            request.unit_count,
            request.product_id,
            category_id=request.category_id,
            user_type=request.user_type,
            deposit_amount=request.deposit_amount,
            attributes=request.attributes,
        )

        pricelist_id = None
        base_rates = request.base_rates
        if base_rates is None:
            pricelist = select_pricelist(
                request.pricelists, request.user_type, now=self._now, region=request.region
            )
            if pricelist is None:
                logger.warning(
                    f"No pricelist for customer type {request.user_type}, region {request.region}"
                )
                raise NoApplicablePricelistException(request.user_type, request.region)
            pricelist_id = pricelist.pricelist_id
            base_rates = pricelist.base_rates

        snapshot = self.evaluate(base_rates, request.rules, context, kind="quote")

        return PriceQuoteResponse(
            pricelist_id=pricelist_id,
            duration_hours=int(context.duration_hours),
            duration_days=int(context.duration_days),
            pricing=snapshot,
        )

    def select_rules(
        self,
        rules: Sequence[PriceRule],
        product_id: Optional[str] = None,
        category_id: Optional[str] = None,
    ) -> List[PriceRule]:
        selected = active_rules(rules, now=self._now)
        if product_id is not None:
            selected = rules_for_product(selected, product_id, now=self._now)
        if category_id is not None:
            selected = rules_for_category(selected, category_id, now=self._now)
        return selected
