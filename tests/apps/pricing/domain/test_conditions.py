import pytest
from decimal import Decimal

from apps.pricing.domain.conditions import DiscountConditionEvaluator
from apps.pricing.domain.exceptions import ConditionEvaluationError
from apps.pricing.domain.models import Cart, CartContext, CartLine, DiscountCondition, Payment


@pytest.fixture
def evaluator():
    return DiscountConditionEvaluator()


def context(subtotal="100", lines=(), **fields):
    return CartContext(subtotal=Decimal(subtotal), lines=tuple(lines), **fields)


class TestMinAmount:

    def test_at_threshold(self, evaluator):
        assert evaluator.matches(DiscountCondition("min_amount", 100), context("100.00"))

    def test_below_threshold(self, evaluator):
        assert not evaluator.matches(DiscountCondition("min_amount", "100"), context("99.99"))

    @pytest.mark.parametrize("value", ["abc", None, True, "NaN", [100]])
    def test_non_numeric_value(self, evaluator, value):
        with pytest.raises(ConditionEvaluationError):
            evaluator.matches(DiscountCondition("min_amount", value), context())


class TestSpecificProducts:

    def test_enough_units(self, evaluator):
        condition = DiscountCondition("specific_products", ["SKU-1", "SKU-2"], min_quantity=3)
        lines = [CartLine("SKU-1", "2.00", quantity=2), CartLine("SKU-2", "5.00", quantity=1)]

        assert evaluator.matches(condition, context(lines=lines))

    def test_not_enough_units(self, evaluator):
        condition = DiscountCondition("specific_products", ["SKU-1"], min_quantity=2)
        lines = [CartLine("SKU-1", "2.00", quantity=1), CartLine("SKU-9", "5.00", quantity=4)]

        assert not evaluator.matches(condition, context(lines=lines))

    def test_single_reference_defaults_to_one_unit(self, evaluator):
        condition = DiscountCondition("specific_products", "SKU-1")

        assert evaluator.matches(condition, context(lines=[CartLine("SKU-1", "2.00")]))
        assert not evaluator.matches(condition, context(lines=[CartLine("SKU-2", "2.00")]))

    def test_min_quantity_below_one(self, evaluator):
        condition = DiscountCondition("specific_products", ["SKU-1"], min_quantity=0)

        with pytest.raises(ConditionEvaluationError):
            evaluator.matches(condition, context(lines=[CartLine("SKU-1", "2.00")]))

    def test_unusable_product_list(self, evaluator):
        with pytest.raises(ConditionEvaluationError):
            evaluator.matches(DiscountCondition("specific_products", 42), context())


class TestFieldConditions:
    """payment_method, customer_tier, card_type and bank_name."""

    def test_equals_is_case_insensitive(self, evaluator):
        condition = DiscountCondition("payment_method", "Card")

        assert evaluator.matches(condition, context(payment_method="card"))
        assert not evaluator.matches(condition, context(payment_method="cash"))

    def test_in_array(self, evaluator):
        condition = DiscountCondition("customer_tier", ["gold", "platinum"], operator="in_array")

        assert evaluator.matches(condition, context(customer_tier="Gold"))
        assert not evaluator.matches(condition, context(customer_tier="silver"))

    def test_absent_field_never_matches(self, evaluator):
        condition = DiscountCondition("card_type", ["visa", "mastercard"], operator="in_array")

        assert not evaluator.matches(condition, context(card_type=None))
        assert not evaluator.matches(condition, context(card_type=""))

    def test_numeric_operators(self, evaluator):
        above = DiscountCondition("customer_tier", 2, operator="greater_than")
        below = DiscountCondition("customer_tier", 2, operator="less_than")

        assert evaluator.matches(above, context(customer_tier="3"))
        assert not evaluator.matches(below, context(customer_tier="3"))

    def test_numeric_operator_on_text(self, evaluator):
        condition = DiscountCondition("customer_tier", 2, operator="greater_than")

        with pytest.raises(ConditionEvaluationError):
            evaluator.matches(condition, context(customer_tier="gold"))

    def test_equals_with_list(self, evaluator):
        with pytest.raises(ConditionEvaluationError):
            evaluator.matches(DiscountCondition("bank_name", ["HNB"]), context(bank_name="HNB"))

    def test_in_array_with_scalar(self, evaluator):
        condition = DiscountCondition("bank_name", "HNB", operator="in_array")

        with pytest.raises(ConditionEvaluationError):
            evaluator.matches(condition, context(bank_name="HNB"))

    def test_unknown_operator(self, evaluator):
        condition = DiscountCondition("bank_name", "HNB", operator="contains")

        with pytest.raises(ConditionEvaluationError):
            evaluator.matches(condition, context(bank_name="HNB"))

    def test_bank_name_from_split_payment(self, evaluator):
        cart = Cart(
            lines=[CartLine("SKU-1", "10.00")],
            payment_method="split",
            payments=[
                Payment("cash", "4.00"),
                Payment("card", "6.00", card_type="visa", bank_name="Commercial Bank"),
            ],
        )

        cart_context = CartContext.from_cart(cart, Decimal("10.00"))

        assert evaluator.matches(DiscountCondition("bank_name", "commercial bank"), cart_context)
        assert evaluator.matches(DiscountCondition("card_type", "VISA"), cart_context)


class TestEvaluator:

    def test_unknown_condition_type(self, evaluator):
        with pytest.raises(ConditionEvaluationError):
            evaluator.matches(DiscountCondition("weather", "sunny"), context())

    def test_matches_all_is_conjunction(self, evaluator):
        conditions = [
            DiscountCondition("min_amount", 50),
            DiscountCondition("payment_method", "card"),
        ]

        assert evaluator.matches_all(conditions, context("60", payment_method="card"))
        assert not evaluator.matches_all(conditions, context("60", payment_method="cash"))
        assert not evaluator.matches_all(conditions, context("40", payment_method="card"))

    def test_no_conditions_always_match(self, evaluator):
        assert evaluator.matches_all([], context("0"))

    def test_same_input_same_answer(self, evaluator):
        condition = DiscountCondition("customer_tier", ["gold"], operator="in_array")
        cart_context = context(customer_tier="gold")

        assert evaluator.matches(condition, cart_context) == evaluator.matches(condition, cart_context)
