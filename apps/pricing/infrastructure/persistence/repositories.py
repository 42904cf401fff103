"""
Repository for discounts.
Maps ORM rows to the read-only domain snapshot the engine consumes.
"""

import logging
from typing import Iterable, List

from apps.pricing.domain.interfaces import BaseDiscountRepository
from apps.pricing.domain.models import Discount, DiscountCondition
from apps.pricing.infrastructure.persistence.models import (
    Discount as DiscountModel,
    DiscountCondition as DiscountConditionModel,
)

logger = logging.getLogger(__name__)


def condition_to_domain(condition: DiscountConditionModel) -> DiscountCondition:
    return DiscountCondition(
        type=condition.type,
        value=condition.value,
        operator=condition.operator or None,
        min_quantity=condition.min_quantity,
    )


def discount_to_domain(discount: DiscountModel) -> Discount:
    return Discount(
        id=str(discount.id),
        name=discount.name,
        description=discount.description,
        type=discount.type,
        value=discount.value,
        conditions=[condition_to_domain(c) for c in discount.conditions.all()],
        free_gift_product_refs=[str(ref) for ref in discount.free_gift_products or []],
        min_amount=discount.min_amount,
        max_discount=discount.max_discount,
        valid_from=discount.valid_from,
        valid_to=discount.valid_to,
        valid_days=discount.valid_days or None,
        active=discount.active,
    )


class DiscountRepository(BaseDiscountRepository):
    """Repository for Discount aggregate."""

    @staticmethod
    def _to_domain(rows: Iterable[DiscountModel]) -> List[Discount]:
        discounts = []
        for row in rows:
            try:
                discounts.append(discount_to_domain(row))
            except (ValueError, TypeError, ArithmeticError) as e:
                logger.warning("Skipping malformed discount %s (%s): %s", row.id, row.name, e)
        return discounts

    @staticmethod
    def get_active() -> List[Discount]:
        """Active discounts in creation order, conditions included."""
        queryset = (
            DiscountModel.objects
            .filter(active=True)
            .prefetch_related('conditions')
            .order_by('created_at', 'id')
        )
        return DiscountRepository._to_domain(queryset)

    @staticmethod
    def get_all() -> List[Discount]:
        queryset = DiscountModel.objects.prefetch_related('conditions').order_by('created_at', 'id')
        return DiscountRepository._to_domain(queryset)
