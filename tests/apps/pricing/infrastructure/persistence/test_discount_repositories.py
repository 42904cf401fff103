import pytest
from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from apps.pricing.infrastructure.persistence.models import Discount, DiscountCondition
from apps.pricing.infrastructure.persistence.repositories import DiscountRepository


def create_discount(name, type="percentage", value="10", **kwargs):
    now = timezone.now()
    kwargs.setdefault("valid_from", now - timedelta(days=1))
    kwargs.setdefault("valid_to", now + timedelta(days=30))
    return Discount.objects.create(name=name, type=type, value=Decimal(value), **kwargs)


@pytest.mark.django_db
class TestDiscountRepository:
    """Tests for DiscountRepository."""

    def test_get_active_maps_conditions(self):
        discount = create_discount("Gold members", valid_days=[1, 2, 3])
        DiscountCondition.objects.create(discount=discount, type="customer_tier", value=["gold"], operator="in_array")
        DiscountCondition.objects.create(discount=discount, type="min_amount", value=50)

        (result,) = DiscountRepository.get_active()

        assert result.id == str(discount.id)
        assert result.value == Decimal("10")
        assert result.valid_days == frozenset({1, 2, 3})
        assert {c.type for c in result.conditions} == {"customer_tier", "min_amount"}
        tier = next(c for c in result.conditions if c.type == "customer_tier")
        assert tier.value == ["gold"]
        assert tier.operator == "in_array"

    def test_get_active_excludes_inactive(self):
        create_discount("Live")
        create_discount("Paused", active=False)

        assert [d.name for d in DiscountRepository.get_active()] == ["Live"]
        assert len(DiscountRepository.get_all()) == 2

    def test_creation_order(self):
        for name in ["first", "second", "third"]:
            create_discount(name)

        assert [d.name for d in DiscountRepository.get_active()] == ["first", "second", "third"]

    def test_free_gift_products(self):
        create_discount("Tote bag", type="free_gift", value="0", free_gift_products=["TOTE-BAG", 1001])

        (result,) = DiscountRepository.get_active()

        assert result.free_gift_product_refs == ("TOTE-BAG", "1001")

    def test_empty_valid_days_means_every_day(self):
        create_discount("Any day", valid_days=None)

        (result,) = DiscountRepository.get_active()

        assert result.valid_days is None

    def test_null_operator_maps_to_none(self):
        discount = create_discount("Card payments")
        DiscountCondition.objects.create(discount=discount, type="payment_method", value="card", operator="")

        (result,) = DiscountRepository.get_active()

        assert result.conditions[0].operator is None
