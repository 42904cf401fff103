"""
Discount condition evaluation.

A condition is a single predicate over the cart as it stands before any
engine discount. Conditions of one discount combine with logical AND.
"""

from decimal import Decimal, InvalidOperation
from typing import Any, FrozenSet, Iterable

from apps.pricing.domain.exceptions import ConditionEvaluationError
from apps.pricing.domain.models import (
    CartContext,
    ConditionOperator,
    ConditionType,
    DiscountCondition,
)

# Condition types compared against a single context attribute
FIELD_CONDITIONS = {
    ConditionType.PAYMENT_METHOD: "payment_method",
    ConditionType.CUSTOMER_TIER: "customer_tier",
    ConditionType.CARD_TYPE: "card_type",
    ConditionType.BANK_NAME: "bank_name",
}


def _as_decimal(value: Any, condition: DiscountCondition) -> Decimal:
    try:
        number = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        number = None
    if number is None or not number.is_finite() or isinstance(value, bool):
        raise ConditionEvaluationError(
            f"Condition {condition.type} needs a numeric value, got {value!r}"
        )
    return number


def _normalize(value: Any) -> Any:
    return value.strip().casefold() if isinstance(value, str) else value


class DiscountConditionEvaluator:
    """
    Stateless evaluator. Every method is a pure function of its arguments.

    A context field that is absent (no card on a cash sale, no customer)
    never matches, whatever the operator.
    """

    def matches(self, condition: DiscountCondition, context: CartContext) -> bool:
        """
        Raises:
            ConditionEvaluationError: unknown type or operator, or unusable value
        """
        condition_type = self._condition_type(condition)

        if condition_type == ConditionType.MIN_AMOUNT:
            return context.subtotal >= _as_decimal(condition.value, condition)

        if condition_type == ConditionType.SPECIFIC_PRODUCTS:
            return self.matched_units(condition, context) >= self.required_quantity(condition)

        actual = getattr(context, FIELD_CONDITIONS[condition_type])
        return self._compare(actual, condition)

    def matches_all(self, conditions: Iterable[DiscountCondition], context: CartContext) -> bool:
        return all(self.matches(condition, context) for condition in conditions)

    @staticmethod
    def _condition_type(condition: DiscountCondition) -> ConditionType:
        try:
            return ConditionType(condition.type)
        except ValueError:
            raise ConditionEvaluationError(f"Unknown condition type {condition.type!r}") from None

    @staticmethod
    def product_refs(condition: DiscountCondition) -> FrozenSet[str]:
        value = condition.value
        if isinstance(value, str):
            return frozenset({value})
        if isinstance(value, (list, tuple, set, frozenset)):
            return frozenset(str(v) for v in value)
        raise ConditionEvaluationError(
            f"specific_products needs a product reference or a list of them, got {value!r}"
        )

    @staticmethod
    def required_quantity(condition: DiscountCondition) -> int:
        if condition.min_quantity is None:
            return 1
        if condition.min_quantity < 1:
            raise ConditionEvaluationError(f"min_quantity must be >= 1, got {condition.min_quantity}")
        return condition.min_quantity

    def matched_units(self, condition: DiscountCondition, context: CartContext) -> int:
        """Units in the cart across the products a specific_products condition names."""
        refs = self.product_refs(condition)
        return sum(line.quantity for line in context.lines if line.product_ref in refs)

    def _compare(self, actual: Any, condition: DiscountCondition) -> bool:
        try:
            operator = ConditionOperator(condition.operator or ConditionOperator.EQUALS)
        except ValueError:
            raise ConditionEvaluationError(f"Unknown condition operator {condition.operator!r}") from None

        if actual is None or actual == "":
            return False

        expected = condition.value

        if operator == ConditionOperator.EQUALS:
            if isinstance(expected, (list, tuple, set, frozenset, dict)):
                raise ConditionEvaluationError(f"equals needs a single value, got {expected!r}")
            return _normalize(actual) == _normalize(expected)

        if operator == ConditionOperator.IN_ARRAY:
            if not isinstance(expected, (list, tuple, set, frozenset)):
                raise ConditionEvaluationError(f"in_array needs a list, got {expected!r}")
            return _normalize(actual) in {_normalize(v) for v in expected}

        actual_number = _as_decimal(actual, condition)
        expected_number = _as_decimal(expected, condition)
        if operator == ConditionOperator.GREATER_THAN:
            return actual_number > expected_number
        return actual_number < expected_number
