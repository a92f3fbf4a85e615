from datetime import timedelta

import pytest

from rental_pricing.core.pricing_engine import RuleEngine, apply_price_rules
from rental_pricing.schemas import BaseRates, BookingContext


def test_no_rules_prices_hourly_rate_by_duration(base_rates, context, now):
    snapshot = apply_price_rules(base_rates, [], context, now=now)

    assert snapshot.total_price == 500
    assert snapshot.applied_rules == []
    assert snapshot.discount_amount == 0
    assert snapshot.late_fee == 0
    assert snapshot.deposit == 1000
    assert snapshot.base_rates == base_rates


def test_flat_discount(base_rates, context, make_rule, now):
    rule = make_rule(effect_type="flatDiscount", value=50, apply_to="total")

    snapshot = apply_price_rules(base_rates, [rule], context, now=now)

    assert snapshot.discount_amount == 50
    assert snapshot.total_price == 450
    assert [r.rule_id for r in snapshot.applied_rules] == ["r1"]
    assert snapshot.applied_rules[0].summary == "Rule r1: flatDiscount applied"


@pytest.mark.parametrize("apply_to", ["unit", "total"])
def test_percent_discount_scales_hourly_rate_by_duration(base_rates, context, make_rule, now, apply_to):
    rule = make_rule(effect_type="percentDiscount", value=10, apply_to=apply_to)

    snapshot = apply_price_rules(base_rates, [rule], context, now=now)

    assert snapshot.discount_amount == pytest.approx(50)
    assert snapshot.total_price == pytest.approx(450)


def test_set_price_replaces_hourly_rate(base_rates, context, make_rule, now):
    rule = make_rule(effect_type="setPrice", value=80, apply_to="unit")

    snapshot = apply_price_rules(base_rates, [rule], context, now=now)

    assert snapshot.base_rates.hourly == 80
    assert snapshot.base_rates.daily == 800
    assert snapshot.total_price == 400


def test_set_price_on_total_is_noop_but_recorded(base_rates, context, make_rule, now):
    rule = make_rule(effect_type="setPrice", value=80, apply_to="total")

    snapshot = apply_price_rules(base_rates, [rule], context, now=now)

    assert snapshot.base_rates.hourly == 100
    assert snapshot.total_price == 500
    assert len(snapshot.applied_rules) == 1


def test_unit_surcharge_raises_hourly_rate(base_rates, context, make_rule, now):
    rule = make_rule(effect_type="surcharge", value=20, apply_to="unit")

    snapshot = apply_price_rules(base_rates, [rule], context, now=now)

    assert snapshot.base_rates.hourly == 120
    assert snapshot.late_fee == 0
    assert snapshot.total_price == 600


def test_total_surcharge_becomes_late_fee(base_rates, context, make_rule, now):
    rule = make_rule(effect_type="surcharge", value=75, apply_to="total")

    snapshot = apply_price_rules(base_rates, [rule], context, now=now)

    assert snapshot.late_fee == 75
    assert snapshot.total_price == 575


def test_tiered_price_is_noop(base_rates, context, make_rule, now):
    rule = make_rule(effect_type="tieredPrice", value=10, apply_to="unit")

    snapshot = apply_price_rules(base_rates, [rule], context, now=now)

    assert snapshot.total_price == 500
    assert snapshot.applied_rules[0].summary == "Rule r1: tieredPrice applied"


def test_total_never_negative(base_rates, context, make_rule, now):
    rule = make_rule(effect_type="flatDiscount", value=10_000)

    snapshot = apply_price_rules(base_rates, [rule], context, now=now)

    assert snapshot.discount_amount == 10_000
    assert snapshot.total_price == 0


def test_higher_priority_applies_first_so_lower_set_price_wins(base_rates, context, make_rule, now):
    high = make_rule("high", effect_type="setPrice", value=90, apply_to="unit", priority=10)
    low = make_rule("low", effect_type="setPrice", value=70, apply_to="unit", priority=5)

    snapshot = apply_price_rules(base_rates, [low, high], context, now=now)

    assert [r.rule_id for r in snapshot.applied_rules] == ["high", "low"]
    assert snapshot.base_rates.hourly == 70


def test_equal_priorities_keep_arrival_order(base_rates, context, make_rule, now):
    rules = [
        make_rule(rule_id, effect_type="setPrice", value=value, apply_to="unit", priority=3)
        for rule_id, value in [("a", 60), ("b", 70), ("c", 80)]
    ]

    snapshot = apply_price_rules(base_rates, rules, context, now=now)

    assert [r.rule_id for r in snapshot.applied_rules] == ["a", "b", "c"]
    assert snapshot.base_rates.hourly == 80


def test_effects_compose_in_priority_order(base_rates, context, make_rule, now):
    surcharge = make_rule("peak", effect_type="surcharge", value=20, apply_to="unit", priority=10)
    discount = make_rule("promo", effect_type="percentDiscount", value=50, apply_to="unit", priority=1)

    snapshot = apply_price_rules(base_rates, [discount, surcharge], context, now=now)

    # the discount sees the surcharged 120/h rate
    assert snapshot.discount_amount == pytest.approx(300)
    assert snapshot.total_price == pytest.approx(300)


@pytest.mark.parametrize(
    "overrides",
    [
        {"enabled": False},
        {"start": "future"},
        {"end": "past"},
        {"product_id": "ev-2"},
        {"category_id": "cars"},
        {"conditions": [{"field": "userType", "operator": "equals", "value": "vip"}]},
    ],
)
def test_out_of_scope_rules_are_skipped(base_rates, context, make_rule, now, overrides):
    overrides = dict(overrides)
    if overrides.get("start") == "future":
        overrides["start"] = now + timedelta(hours=1)
    if overrides.get("end") == "past":
        overrides["end"] = now - timedelta(hours=1)
    rule = make_rule(**overrides)

    snapshot = apply_price_rules(base_rates, [rule], context, now=now)

    assert snapshot.applied_rules == []
    assert snapshot.total_price == base_rates.hourly * context.duration_hours


def test_matching_scope_and_conditions_apply(base_rates, context, make_rule, now):
    rule = make_rule(
        product_id="ev-1",
        category_id="scooters",
        conditions=[
            {"field": "userType", "operator": "equals", "value": "regular"},
            {"field": "durationHours", "operator": "greater_than_equal", "value": 5},
        ],
    )

    snapshot = apply_price_rules(base_rates, [rule], context, now=now)

    assert [r.rule_id for r in snapshot.applied_rules] == ["r1"]


def test_validity_bounds_are_inclusive(base_rates, context, make_rule, now):
    rule = make_rule(start=now, end=now)

    snapshot = apply_price_rules(base_rates, [rule], context, now=now)

    assert len(snapshot.applied_rules) == 1


def test_naive_validity_dates_are_read_as_utc(base_rates, context, make_rule, now):
    naive_now = now.replace(tzinfo=None)
    rule = make_rule(start=naive_now - timedelta(minutes=1), end=naive_now + timedelta(minutes=1))

    snapshot = apply_price_rules(base_rates, [rule], context, now=now)

    assert len(snapshot.applied_rules) == 1


def test_inputs_are_not_mutated(base_rates, context, make_rule, now):
    rules = [
        make_rule("low", effect_type="setPrice", value=10, apply_to="unit", priority=1),
        make_rule("high", effect_type="surcharge", value=5, apply_to="unit", priority=9),
    ]
    original_order = [r.rule_id for r in rules]

    apply_price_rules(base_rates, rules, context, now=now)

    assert base_rates.hourly == 100
    assert [r.rule_id for r in rules] == original_order


def test_same_inputs_give_same_snapshot(base_rates, context, make_rule, now):
    rules = [
        make_rule("a", effect_type="percentDiscount", value=15, priority=2),
        make_rule("b", effect_type="surcharge", value=30, priority=1),
    ]

    first = apply_price_rules(base_rates, rules, context, now=now)
    second = RuleEngine(now=now).apply(base_rates, rules, context)

    assert first == second


def test_missing_deposit_defaults_to_zero(base_rates, now):
    context = BookingContext(duration_hours=2, deposit_amount=None)

    snapshot = apply_price_rules(base_rates, [], context, now=now)

    assert snapshot.deposit == 0
    assert snapshot.total_price == 200


def test_non_numeric_effect_value_changes_nothing(base_rates, context, make_rule, now):
    rule = make_rule(effect_type="flatDiscount", value="fifty")

    snapshot = apply_price_rules(base_rates, [rule], context, now=now)

    assert snapshot.discount_amount == 0
    assert snapshot.total_price == 500


def test_snapshot_serialises_with_wire_names(base_rates, context, make_rule, now):
    snapshot = apply_price_rules(base_rates, [make_rule()], context, now=now)

    data = snapshot.model_dump(by_alias=True)

    assert set(data) == {
        "baseRates",
        "appliedRules",
        "discountAmount",
        "lateFee",
        "deposit",
        "totalPrice",
    }
    assert data["appliedRules"][0] == {"ruleId": "r1", "summary": "Rule r1: flatDiscount applied"}


def test_zero_rates_stay_zero(context, make_rule, now):
    rates = BaseRates(hourly=0, daily=0, weekly=0)

    snapshot = apply_price_rules(rates, [make_rule(effect_type="percentDiscount", value=20)], context, now=now)

    assert snapshot.total_price == 0
