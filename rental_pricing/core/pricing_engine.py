"""Price rule evaluation.

Rules are applied highest priority first and compose: every rule sees the
hourly rate and accumulators left by the rules applied before it, so with two
``setPrice`` rules the lower-priority one wins.
"""

from datetime import datetime
from numbers import Number
from typing import Any, Dict, List, Optional, Sequence, Tuple

from rental_pricing.core.conditions import conditions_met
from rental_pricing.core.utils import ensure_utc, resolve_now
from rental_pricing.schemas import (
    AppliedRule,
    ApplyTo,
    BaseRates,
    BookingContext,
    EffectType,
    PriceRule,
    PricingSnapshot,
)


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, Number) and not isinstance(value, bool):
        return float(value)
    return None


class RuleEngine:
    def __init__(self, now: Optional[datetime] = None):
        self._now = now

    def is_in_scope(self, rule: PriceRule, context: BookingContext, now: datetime) -> bool:
        if not rule.enabled:
            return False
        if not (ensure_utc(rule.validity.start_date) <= now <= ensure_utc(rule.validity.end_date)):
            return False
        if rule.product_id and str(rule.product_id) != str(context.product_id):
            return False
        if rule.category_id and str(rule.category_id) != str(context.category_id):
            return False
        return True

    def apply(
        self,
        base_rates: BaseRates,
        rules: Sequence[PriceRule],
        context: BookingContext,
    ) -> PricingSnapshot:
        now = resolve_now(self._now)
        final_rates: Dict[str, float] = base_rates.model_dump()
        applied_rules: List[AppliedRule] = []
        discount_amount = 0.0
        late_fee = 0.0

        # sorted() is stable with reverse=True, equal priorities keep arrival order
        for rule in sorted(rules, key=lambda r: r.priority, reverse=True):
            if not self.is_in_scope(rule, context, now):
                continue
            if not conditions_met(rule.conditions, context):
                continue

            discount, fee = self._apply_effect(rule, final_rates, context)
            discount_amount += discount
            late_fee += fee
            applied_rules.append(
                AppliedRule(
                    rule_id=rule.rule_id,
                    summary=f"{rule.name}: {rule.effect.type} applied",
                )
            )

        base_price = final_rates["hourly"] * context.duration_hours
        total_price = max(0.0, base_price - discount_amount + late_fee)

        return PricingSnapshot(
            base_rates=BaseRates(**final_rates),
            applied_rules=applied_rules,
            discount_amount=discount_amount,
            late_fee=late_fee,
            deposit=context.deposit_amount or 0,
            total_price=total_price,
        )

    @staticmethod
    def _apply_effect(
        rule: PriceRule, rates: Dict[str, float], context: BookingContext
    ) -> Tuple[float, float]:
        """Mutate the working ``rates`` and return the (discount, late fee) deltas."""
        effect = rule.effect
        value = _as_number(effect.value)
        if value is None:
            return 0.0, 0.0

        hours = context.duration_hours
        per_unit = effect.apply_to == ApplyTo.UNIT.value

        if effect.type == EffectType.PERCENT_DISCOUNT.value:
            if per_unit:
                return rates["hourly"] * value / 100 * hours, 0.0
            # TODO: confirm whether total-level percentage should scale by unitCount
            return rates["hourly"] * hours * value / 100, 0.0

        if effect.type == EffectType.FLAT_DISCOUNT.value:
            return value, 0.0

        if effect.type == EffectType.SET_PRICE.value:
            if per_unit:
                rates["hourly"] = value
            return 0.0, 0.0

        if effect.type == EffectType.SURCHARGE.value:
            if per_unit:
                rates["hourly"] += value
                return 0.0, 0.0
            return 0.0, value

        # tieredPrice carries no pricing semantics yet
        return 0.0, 0.0


def apply_price_rules(
    base_rates: BaseRates,
    rules: Sequence[PriceRule],
    context: BookingContext,
    now: Optional[datetime] = None,
) -> PricingSnapshot:
    return RuleEngine(now=now).apply(base_rates, rules, context)
