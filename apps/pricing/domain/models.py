"""
Pure domain entities for pricing (POPOs).
No dependency on Django or the ORM.

Carts and discounts are immutable snapshots: the engine reads them and
produces a new PricedCartSnapshot on every pass.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Tuple

from apps.currency.domain.models import to_decimal


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"
    BOGO = "bogo"
    FREE_GIFT = "free_gift"


class ConditionType(str, Enum):
    MIN_AMOUNT = "min_amount"
    SPECIFIC_PRODUCTS = "specific_products"
    PAYMENT_METHOD = "payment_method"
    CUSTOMER_TIER = "customer_tier"
    CARD_TYPE = "card_type"
    BANK_NAME = "bank_name"


class ConditionOperator(str, Enum):
    EQUALS = "equals"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    IN_ARRAY = "in_array"


class LineDiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


@dataclass(frozen=True)
class CartLine:
    """
    A priced line of the cart, in the base currency.

    For weight-based products unit_price is the price per weight unit and
    weight replaces quantity in the line total.
    """

    product_ref: str
    unit_price: Decimal
    quantity: int = 1
    weight: Optional[Decimal] = None
    line_discount: Decimal = Decimal("0")
    line_discount_type: LineDiscountType = LineDiscountType.FIXED
    name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "unit_price", to_decimal(self.unit_price))
        object.__setattr__(self, "line_discount", to_decimal(self.line_discount))
        object.__setattr__(self, "line_discount_type", LineDiscountType(self.line_discount_type))
        if self.weight is not None:
            object.__setattr__(self, "weight", to_decimal(self.weight))

    @property
    def is_weight_based(self) -> bool:
        return self.weight is not None

    @property
    def gross(self) -> Decimal:
        measure = self.weight if self.is_weight_based else Decimal(self.quantity)
        return measure * self.unit_price

    @property
    def subtotal(self) -> Decimal:
        gross = self.gross
        if self.line_discount_type == LineDiscountType.PERCENTAGE:
            reduction = gross * self.line_discount / 100
        else:
            reduction = self.line_discount
        return max(gross - reduction, Decimal("0"))


@dataclass(frozen=True)
class Payment:

    method: str
    amount: Decimal
    card_type: Optional[str] = None
    bank_name: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "amount", to_decimal(self.amount))


@dataclass(frozen=True)
class Cart:

    lines: Tuple[CartLine, ...]
    currency: str = "USD"
    tax_rate: Decimal = Decimal("0")
    customer_tier: Optional[str] = None
    payment_method: Optional[str] = None
    card_type: Optional[str] = None
    bank_name: Optional[str] = None
    payments: Tuple[Payment, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "lines", tuple(self.lines))
        object.__setattr__(self, "payments", tuple(self.payments))
        object.__setattr__(self, "tax_rate", to_decimal(self.tax_rate))

    def _card_payment(self) -> Optional[Payment]:
        return next((p for p in self.payments if p.card_type or p.bank_name), None)

    @property
    def effective_card_type(self) -> Optional[str]:
        if self.card_type:
            return self.card_type
        payment = self._card_payment()
        return payment.card_type if payment else None

    @property
    def effective_bank_name(self) -> Optional[str]:
        if self.bank_name:
            return self.bank_name
        payment = self._card_payment()
        return payment.bank_name if payment else None


@dataclass(frozen=True)
class DiscountCondition:

    type: str
    value: Any = None
    operator: Optional[str] = None
    min_quantity: Optional[int] = None


@dataclass(frozen=True)
class Discount:
    """
    A configured discount. Read-only to the engine.

    valid_days uses 0 = Sunday through 6 = Saturday.
    """

    id: str
    name: str
    type: str
    value: Decimal = Decimal("0")
    conditions: Tuple[DiscountCondition, ...] = ()
    free_gift_product_refs: Tuple[str, ...] = ()
    min_amount: Optional[Decimal] = None
    max_discount: Optional[Decimal] = None
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    valid_days: Optional[frozenset] = None
    active: bool = True
    description: str = ""

    def __post_init__(self):
        object.__setattr__(self, "value", to_decimal(self.value))
        object.__setattr__(self, "conditions", tuple(self.conditions))
        object.__setattr__(self, "free_gift_product_refs", tuple(self.free_gift_product_refs))
        if self.min_amount is not None:
            object.__setattr__(self, "min_amount", to_decimal(self.min_amount))
        if self.max_discount is not None:
            object.__setattr__(self, "max_discount", to_decimal(self.max_discount))
        if self.valid_days is not None:
            object.__setattr__(self, "valid_days", frozenset(self.valid_days))


@dataclass(frozen=True)
class CartContext:
    """What conditions are evaluated against: the cart before any engine discount."""

    subtotal: Decimal
    lines: Tuple[CartLine, ...] = ()
    customer_tier: Optional[str] = None
    payment_method: Optional[str] = None
    card_type: Optional[str] = None
    bank_name: Optional[str] = None

    @classmethod
    def from_cart(cls, cart: Cart, subtotal: Decimal) -> "CartContext":
        return cls(
            subtotal=subtotal,
            lines=cart.lines,
            customer_tier=cart.customer_tier,
            payment_method=cart.payment_method,
            card_type=cart.effective_card_type,
            bank_name=cart.effective_bank_name,
        )


@dataclass(frozen=True)
class AppliedDiscount:

    discount_id: str
    discount_name: str
    discount_amount: Decimal
    type: str


@dataclass(frozen=True)
class PricedCartSnapshot:

    currency: str
    subtotal: Decimal
    discount_amount: Decimal
    tax_amount: Decimal
    total: Decimal
    applied_discounts: Tuple[AppliedDiscount, ...] = field(default_factory=tuple)
    free_gifts: Tuple[CartLine, ...] = field(default_factory=tuple)
