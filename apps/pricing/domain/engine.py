"""
Discount engine - prices a cart against the configured discounts.

Every call recomputes the whole snapshot from the cart and the discount set,
so pricing the same cart twice gives equal snapshots.
"""

import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Iterable, List, Optional, Tuple

from apps.currency.domain.rates import utc_now
from apps.pricing.domain.conditions import DiscountConditionEvaluator
from apps.pricing.domain.exceptions import ConditionEvaluationError, InvalidCartError
from apps.pricing.domain.models import (
    AppliedDiscount,
    Cart,
    CartContext,
    CartLine,
    ConditionType,
    Discount,
    DiscountType,
    PricedCartSnapshot,
)

logger = logging.getLogger(__name__)

ZERO = Decimal("0")
DEFAULT_BOGO_GROUP_SIZE = 2


def weekday_index(moment: datetime) -> int:
    """0 = Sunday ... 6 = Saturday."""
    return (moment.weekday() + 1) % 7


class DiscountEngine:
    """
    Applies discounts in declaration order.

    Conditions see the pre-discount subtotal, never a subtotal reduced by an
    earlier discount, so whether a discount applies does not depend on its
    position. Amounts are capped by what is left of the subtotal, which keeps
    the discounted subtotal and the total non-negative.
    """

    def __init__(
        self,
        discounts: Iterable[Discount],
        evaluator: Optional[DiscountConditionEvaluator] = None,
        decimal_places: int = 2,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._discounts: Tuple[Discount, ...] = tuple(discounts)
        self._evaluator = evaluator or DiscountConditionEvaluator()
        self._quantum = Decimal(1).scaleb(-decimal_places)
        self._clock = clock

    @property
    def discounts(self) -> Tuple[Discount, ...]:
        return self._discounts

    def _round(self, amount: Decimal) -> Decimal:
        return amount.quantize(self._quantum, rounding=ROUND_HALF_UP)

    @staticmethod
    def validate_cart(cart: Cart) -> None:
        """
        Raises:
            InvalidCartError: no lines, or a negative quantity, weight, price or line discount
        """
        if not cart.lines:
            raise InvalidCartError("Cart has no lines")

        for line in cart.lines:
            if line.quantity < 0:
                raise InvalidCartError(f"Negative quantity for {line.product_ref}: {line.quantity}")
            if line.weight is not None and line.weight < 0:
                raise InvalidCartError(f"Negative weight for {line.product_ref}: {line.weight}")
            if line.unit_price < 0:
                raise InvalidCartError(f"Negative unit price for {line.product_ref}: {line.unit_price}")
            if line.line_discount < 0:
                raise InvalidCartError(f"Negative line discount for {line.product_ref}: {line.line_discount}")

        if cart.tax_rate < 0:
            raise InvalidCartError(f"Negative tax rate: {cart.tax_rate}")

    @staticmethod
    def is_applicable(discount: Discount, at: datetime) -> bool:
        """Active, inside its validity window and allowed on the weekday of `at`."""
        if not discount.active:
            return False
        if discount.valid_from is not None and at < discount.valid_from:
            return False
        if discount.valid_to is not None and at > discount.valid_to:
            return False
        if discount.valid_days and weekday_index(at) not in discount.valid_days:
            return False
        return True

    def price(self, cart: Cart, at: Optional[datetime] = None) -> PricedCartSnapshot:
        """
        Price a cart.

        Args:
            cart: Cart snapshot in the base currency
            at: Moment used for validity windows and weekdays (defaults to now)

        Raises:
            InvalidCartError: if the cart is structurally invalid

        Example:
            >>> engine = DiscountEngine([ten_percent_over_100])
            >>> engine.price(Cart(lines=[...150.00...], tax_rate=Decimal("8.75"))).total
            Decimal('146.81')
        """
        self.validate_cart(cart)
        at = at or self._clock()

        subtotal = self._round(sum((line.subtotal for line in cart.lines), ZERO))
        context = CartContext.from_cart(cart, subtotal)

        remaining = subtotal
        applied: List[AppliedDiscount] = []
        free_gifts: List[CartLine] = []

        for discount in self._discounts:
            try:
                if not self.is_applicable(discount, at):
                    continue
                if not self._evaluator.matches_all(discount.conditions, context):
                    continue
                amount, gifts = self._contribution(discount, context, remaining)
            except (ConditionEvaluationError, TypeError, ValueError) as e:
                logger.warning("Skipping discount %s (%s): %s", discount.id, discount.name, e)
                continue

            if amount <= 0 and not gifts:
                continue

            remaining -= amount
            free_gifts.extend(gifts)
            applied.append(AppliedDiscount(
                discount_id=discount.id,
                discount_name=discount.name,
                discount_amount=amount,
                type=DiscountType(discount.type).value,
            ))

        discount_amount = subtotal - remaining
        tax_amount = self._round(remaining * cart.tax_rate / 100)
        total = max(subtotal - discount_amount + tax_amount, ZERO)

        return PricedCartSnapshot(
            currency=cart.currency,
            subtotal=subtotal,
            discount_amount=discount_amount,
            tax_amount=tax_amount,
            total=total,
            applied_discounts=tuple(applied),
            free_gifts=tuple(free_gifts),
        )

    def _contribution(
        self,
        discount: Discount,
        context: CartContext,
        remaining: Decimal,
    ) -> Tuple[Decimal, List[CartLine]]:
        """
        Amount a discount takes off, and the free gift lines it adds.

        Raises:
            ValueError: unknown discount type or negative value
            ConditionEvaluationError: malformed specific_products condition on a BOGO
        """
        discount_type = DiscountType(discount.type)

        if discount.value < 0:
            raise ValueError(f"Negative discount value {discount.value}")

        if discount.min_amount is not None and context.subtotal < discount.min_amount:
            return ZERO, []

        if discount_type == DiscountType.PERCENTAGE:
            amount = self._round(context.subtotal * discount.value / 100)
            if discount.max_discount is not None:
                amount = min(amount, self._round(discount.max_discount))
            return min(amount, remaining), []

        if discount_type == DiscountType.FIXED:
            return min(self._round(discount.value), remaining), []

        if discount_type == DiscountType.BOGO:
            return min(self._bogo_amount(discount, context), remaining), []

        gifts = [
            CartLine(product_ref=ref, unit_price=ZERO, quantity=1)
            for ref in discount.free_gift_product_refs
        ]
        return ZERO, gifts

    def _bogo_amount(self, discount: Discount, context: CartContext) -> Decimal:
        """
        One unit free for every complete group of N matched units.

        N is the min_quantity of the discount's specific_products condition,
        or 2 when it sets none. Without such a condition every unit-priced
        line matches. The cheapest matched units are the free ones.
        Weight-based lines never take part.
        """
        product_condition = next(
            (c for c in discount.conditions if c.type == ConditionType.SPECIFIC_PRODUCTS),
            None,
        )
        if product_condition is not None:
            refs = self._evaluator.product_refs(product_condition)
            group_size = product_condition.min_quantity or DEFAULT_BOGO_GROUP_SIZE
            lines = [l for l in context.lines if l.product_ref in refs]
        else:
            group_size = DEFAULT_BOGO_GROUP_SIZE
            lines = list(context.lines)

        lines = [l for l in lines if not l.is_weight_based and l.quantity > 0]
        free_units = sum(l.quantity for l in lines) // group_size

        amount = ZERO
        for line in sorted(lines, key=lambda l: l.unit_price):
            if free_units <= 0:
                break
            units = min(line.quantity, free_units)
            amount += line.unit_price * units
            free_units -= units

        return self._round(amount)
