"""
Currency registry - the set of configured currencies.
Answers which currencies are active, which one is the base, and how amounts render.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from apps.currency.domain.exceptions import ConfigurationError
from apps.currency.domain.interfaces import BaseCurrencyRepository
from apps.currency.domain.models import CurrencyDefinition, SymbolPosition, to_decimal


def quantize_places(amount: Decimal, places: int) -> Decimal:
    return amount.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


class CurrencyRegistry:
    """
    Read-side view over the configured currencies.

    The repository is queried on every call so edits made by the
    management side are visible without rebuilding the registry.
    """

    def __init__(self, repository: BaseCurrencyRepository):
        self._repository = repository

    def list_active(self) -> List[CurrencyDefinition]:
        """
        Active currencies ordered by code.

        Raises:
            ConfigurationError: if no currency is active
        """
        active = sorted(
            (c for c in self._repository.list_all() if c.is_active),
            key=lambda c: c.code,
        )
        if not active:
            raise ConfigurationError("No active currencies configured")
        return active

    def get_base(self) -> CurrencyDefinition:
        """
        The single active base currency.

        Raises:
            ConfigurationError: if there is no base currency, or more than one
        """
        bases = [c for c in self._repository.list_all() if c.is_active and c.is_base_currency]
        if not bases:
            raise ConfigurationError("No active base currency configured")
        if len(bases) > 1:
            codes = ", ".join(sorted(c.code for c in bases))
            raise ConfigurationError(f"Ambiguous base currency: {codes}")
        return bases[0]

    def by_code(self, code: str) -> Optional[CurrencyDefinition]:
        code = code.upper()
        for currency in self._repository.list_all():
            if currency.is_active and currency.code == code:
                return currency
        return None

    def is_valid(self, code: str) -> bool:
        return self.by_code(code) is not None

    def symbol(self, code: str) -> str:
        currency = self.by_code(code)
        return currency.symbol if currency else code

    def format(self, amount, code: str) -> str:
        """
        Render an amount with the currency symbol and decimal places.

        Unknown codes degrade to "CODE 12.34" instead of failing.

        Example:
            >>> registry.format(Decimal("1234.5"), "USD")
            '$1234.50'
            >>> registry.format(Decimal("10"), "CHF")
            '10.00 CHF'
        """
        amount = to_decimal(amount)
        currency = self.by_code(code)

        if currency is None:
            return f"{code.upper()} {quantize_places(amount, 2)}"

        formatted = quantize_places(amount, currency.decimal_places)
        if currency.symbol_position == SymbolPosition.BEFORE:
            return f"{currency.symbol}{formatted}"
        return f"{formatted} {currency.symbol}"
