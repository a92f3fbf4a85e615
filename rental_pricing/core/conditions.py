"""Evaluation of price-rule conditions against a booking context.

Comparisons are typed: ordering operators only compare numbers, ``contains``
only works on strings and sequences, and ``in`` needs a sequence as the rule
value. Any mismatch, including a field missing from the context, makes the
condition false. ``not_equals`` is the exception for missing fields: an absent
value is never equal to anything, so it holds.
"""

from numbers import Number
from typing import Any, Callable, Dict, Iterable

from rental_pricing.schemas import BookingContext, Condition, ConditionOperator

_SEQUENCE_TYPES = (list, tuple)


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def strict_equals(left: Any, right: Any) -> bool:
    """Equality that never mixes types, except ints with floats."""
    if left is None or right is None:
        return False
    if _is_number(left) and _is_number(right):
        return left == right
    if isinstance(left, bool) or isinstance(right, bool):
        return type(left) is type(right) and left == right
    if isinstance(left, _SEQUENCE_TYPES) and isinstance(right, _SEQUENCE_TYPES):
        return len(left) == len(right) and all(
            strict_equals(a, b) for a, b in zip(left, right)
        )
    if type(left) is not type(right):
        return False
    return left == right


def _contains_strictly(items: Iterable[Any], target: Any) -> bool:
    return any(strict_equals(item, target) for item in items)


def _compare(op: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def _check(field_value: Any, rule_value: Any) -> bool:
        if not (_is_number(field_value) and _is_number(rule_value)):
            return False
        return op(field_value, rule_value)

    return _check


def _contains(field_value: Any, rule_value: Any) -> bool:
    if not field_value:
        return False
    if isinstance(field_value, str):
        return isinstance(rule_value, str) and rule_value in field_value
    if isinstance(field_value, _SEQUENCE_TYPES):
        return _contains_strictly(field_value, rule_value)
    return False


def _in(field_value: Any, rule_value: Any) -> bool:
    if field_value is None or not isinstance(rule_value, _SEQUENCE_TYPES):
        return False
    return _contains_strictly(rule_value, field_value)


_OPERATORS: Dict[str, Callable[[Any, Any], bool]] = {
    ConditionOperator.EQUALS.value: strict_equals,
    ConditionOperator.NOT_EQUALS.value: lambda a, b: not strict_equals(a, b),
    ConditionOperator.GREATER_THAN.value: _compare(lambda a, b: a > b),
    ConditionOperator.LESS_THAN.value: _compare(lambda a, b: a < b),
    ConditionOperator.GREATER_THAN_EQUAL.value: _compare(lambda a, b: a >= b),
    ConditionOperator.LESS_THAN_EQUAL.value: _compare(lambda a, b: a <= b),
    ConditionOperator.CONTAINS.value: _contains,
    ConditionOperator.IN.value: _in,
}


def evaluate_condition(condition: Condition, context: BookingContext) -> bool:
    check = _OPERATORS.get(condition.operator)
    if check is None:
        return False
    return check(context.lookup(condition.field), condition.value)


def conditions_met(conditions: Iterable[Condition], context: BookingContext) -> bool:
    return all(evaluate_condition(condition, context) for condition in conditions)
