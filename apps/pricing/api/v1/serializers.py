"""
Serializers for the pricing bounded context.
Cart input is validated here and turned into domain snapshots for the engine.
"""

from decimal import Decimal

from django.conf import settings
from rest_framework import serializers

from apps.currency.api.v1.serializers import CurrencyConversionSerializer
from apps.pricing.domain.models import Cart, CartLine, LineDiscountType, Payment
from apps.pricing.infrastructure.persistence.models import Discount, DiscountCondition


class CartLineSerializer(serializers.Serializer):
    product_ref = serializers.CharField(max_length=100)
    name = serializers.CharField(max_length=200, required=False, default="")
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=4)
    quantity = serializers.IntegerField(default=1)
    weight = serializers.DecimalField(max_digits=12, decimal_places=4, required=False, allow_null=True, default=None)
    line_discount = serializers.DecimalField(max_digits=12, decimal_places=4, required=False, default=Decimal("0"))
    line_discount_type = serializers.ChoiceField(
        choices=[t.value for t in LineDiscountType],
        default=LineDiscountType.FIXED.value,
    )


class PaymentSerializer(serializers.Serializer):
    method = serializers.CharField(max_length=30)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    card_type = serializers.CharField(max_length=30, required=False, allow_null=True, default=None)
    bank_name = serializers.CharField(max_length=100, required=False, allow_null=True, default=None)


class CartSerializer(serializers.Serializer):
    """
    Cart as sent by the till.

    Negative quantities, prices and weights pass through to the engine,
    which rejects the cart as a whole.
    """
    lines = CartLineSerializer(many=True)
    currency = serializers.CharField(max_length=3, min_length=3, required=False)
    tax_rate = serializers.DecimalField(max_digits=6, decimal_places=3, required=False)
    customer_tier = serializers.CharField(max_length=30, required=False, allow_null=True, default=None)
    payment_method = serializers.CharField(max_length=30, required=False, allow_null=True, default=None)
    card_type = serializers.CharField(max_length=30, required=False, allow_null=True, default=None)
    bank_name = serializers.CharField(max_length=100, required=False, allow_null=True, default=None)
    payments = PaymentSerializer(many=True, required=False, default=list)
    display_currency = serializers.CharField(max_length=3, min_length=3, required=False, allow_null=True, default=None)

    def validate_currency(self, value: str) -> str:
        return value.upper()

    def validate_display_currency(self, value):
        return value.upper() if value else value

    def to_cart(self, base_currency: str) -> Cart:
        data = self.validated_data
        tax_rate = data.get("tax_rate")
        return Cart(
            lines=[CartLine(**line) for line in data["lines"]],
            currency=base_currency,
            tax_rate=Decimal(str(settings.POS_TAX_RATE)) if tax_rate is None else tax_rate,
            customer_tier=data["customer_tier"],
            payment_method=data["payment_method"],
            card_type=data["card_type"],
            bank_name=data["bank_name"],
            payments=[Payment(**payment) for payment in data["payments"]],
        )


class CartLineOutputSerializer(serializers.Serializer):
    product_ref = serializers.CharField(read_only=True)
    name = serializers.CharField(read_only=True)
    unit_price = serializers.DecimalField(max_digits=None, decimal_places=None, read_only=True)
    quantity = serializers.IntegerField(read_only=True)


class AppliedDiscountSerializer(serializers.Serializer):
    discount_id = serializers.CharField(read_only=True)
    discount_name = serializers.CharField(read_only=True)
    discount_amount = serializers.DecimalField(max_digits=None, decimal_places=None, read_only=True)
    type = serializers.CharField(read_only=True)


class PricedCartSerializer(serializers.Serializer):
    """Read-only representation of a PricedCartSnapshot."""
    currency = serializers.CharField(read_only=True)
    subtotal = serializers.DecimalField(max_digits=None, decimal_places=None, read_only=True)
    discount_amount = serializers.DecimalField(max_digits=None, decimal_places=None, read_only=True)
    tax_amount = serializers.DecimalField(max_digits=None, decimal_places=None, read_only=True)
    total = serializers.DecimalField(max_digits=None, decimal_places=None, read_only=True)
    applied_discounts = AppliedDiscountSerializer(many=True, read_only=True)
    free_gifts = CartLineOutputSerializer(many=True, read_only=True)


class PriceQuoteSerializer(serializers.Serializer):
    snapshot = PricedCartSerializer(read_only=True)
    display = CurrencyConversionSerializer(read_only=True, allow_null=True)
    display_formatted = serializers.CharField(read_only=True, allow_null=True)


class DiscountConditionSerializer(serializers.ModelSerializer):
    class Meta:
        model = DiscountCondition
        fields = ["id", "type", "value", "operator", "min_quantity"]


class DiscountSerializer(serializers.ModelSerializer):
    conditions = DiscountConditionSerializer(many=True, read_only=True)

    class Meta:
        model = Discount
        fields = [
            "id",
            "name",
            "description",
            "type",
            "value",
            "conditions",
            "free_gift_products",
            "min_amount",
            "max_discount",
            "valid_from",
            "valid_to",
            "valid_days",
            "active",
        ]
