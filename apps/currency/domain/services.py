"""
Domain services - currency conversion.
Composes the currency registry and the exchange rate store.
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Iterable, List

from apps.currency.domain.models import ConversionRequest, CurrencyConversion, Money, to_decimal
from apps.currency.domain.rates import ExchangeRateStore, utc_now
from apps.currency.domain.registry import CurrencyRegistry

CONVERSION_PRECISION = Decimal("0.000001")


class CurrencyConversionService:
    """
    Converts and formats amounts for display.

    Currency codes are not validated here. An unknown code resolves
    through the store's soft fallback (rate 1.0) so that display and
    checkout keep working; callers validate at the boundary with
    CurrencyRegistry.is_valid.
    """

    def __init__(
        self,
        registry: CurrencyRegistry,
        store: ExchangeRateStore,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._registry = registry
        self._store = store
        self._clock = clock

    def convert(self, amount, from_currency: str, to_currency: str) -> CurrencyConversion:
        """
        Convert an amount from one currency to another.

        Example:
            >>> result = service.convert(Decimal("100"), "USD", "EUR")
            >>> result.converted_amount
            Decimal('85.000000')
        """
        amount = to_decimal(amount)
        from_currency = from_currency.upper()
        to_currency = to_currency.upper()

        rate = self._store.current_rate(from_currency, to_currency)
        converted_amount = (amount * rate).quantize(CONVERSION_PRECISION)

        return CurrencyConversion(
            original_amount=amount,
            converted_amount=converted_amount,
            from_currency=from_currency,
            to_currency=to_currency,
            exchange_rate=rate,
            timestamp=self._clock(),
        )

    def convert_money(self, money: Money, to_currency: str) -> Money:
        conversion = self.convert(money.amount, money.currency, to_currency)
        return Money(conversion.converted_amount, conversion.to_currency)

    def from_base(self, amount, to_currency: str) -> CurrencyConversion:
        """Project a base-currency amount into a display currency."""
        base = self._registry.get_base()
        return self.convert(amount, base.code, to_currency)

    def to_base(self, amount, from_currency: str) -> CurrencyConversion:
        base = self._registry.get_base()
        return self.convert(amount, from_currency, base.code)

    def format(self, amount, currency: str) -> str:
        return self._registry.format(amount, currency)

    def batch_convert(self, items: Iterable[ConversionRequest]) -> List[CurrencyConversion]:
        """Convert each item independently, preserving input order."""
        return [
            self.convert(item.amount, item.from_currency, item.to_currency)
            for item in items
        ]
