from apps.pricing.infrastructure.persistence.models import (  # noqa: F401
    Discount,
    DiscountCondition,
)
