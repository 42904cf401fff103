"""
Application services - prices carts with the configured discounts.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from django.conf import settings
from django.utils import timezone

from apps.currency.application.services import get_conversion_service
from apps.currency.domain.models import CurrencyConversion
from apps.pricing.domain.engine import DiscountEngine
from apps.pricing.domain.interfaces import BaseDiscountRepository
from apps.pricing.domain.models import Cart, PricedCartSnapshot
from apps.pricing.infrastructure.persistence.repositories import DiscountRepository


@dataclass(frozen=True)
class PriceQuote:
    """A priced cart plus, when requested, its total in a display currency."""
    snapshot: PricedCartSnapshot
    display: Optional[CurrencyConversion] = None
    display_formatted: Optional[str] = None


def build_discount_engine(repository: Optional[BaseDiscountRepository] = None) -> DiscountEngine:
    repository = repository or DiscountRepository()
    return DiscountEngine(
        repository.get_active(),
        decimal_places=settings.POS_MONEY_DECIMAL_PLACES,
        clock=timezone.localtime,
    )


def price_cart(cart: Cart, display_currency: Optional[str] = None, at: Optional[datetime] = None) -> PriceQuote:
    """
    Price a cart in the base currency and optionally project the total.

    Raises:
        InvalidCartError: if the cart is structurally invalid
    """
    snapshot = build_discount_engine().price(cart, at=at)

    if not display_currency or display_currency.upper() == snapshot.currency:
        return PriceQuote(snapshot=snapshot)

    service = get_conversion_service()
    conversion = service.convert(snapshot.total, snapshot.currency, display_currency)
    return PriceQuote(
        snapshot=snapshot,
        display=conversion,
        display_formatted=service.format(conversion.converted_amount, conversion.to_currency),
    )
