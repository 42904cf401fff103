"""
Manual provider - configured fallback rates.
Used when no API provider is configured and as the fallback when the API fails.
"""

import logging
from decimal import Decimal

from django.conf import settings

from apps.currency.domain.interfaces import BaseExchangeRateProvider

logger = logging.getLogger(__name__)


class ManualProvider(BaseExchangeRateProvider):
    """
    Serves the rates from settings.EXCHANGE_RATE_FALLBACK_RATES.

    The table is quoted against settings.EXCHANGE_RATE_FALLBACK_BASE (USD by
    default). Other bases get cross rates computed from the same table.
    """

    def __init__(self, rates: dict | None = None, quote_currency: str | None = None):
        table = rates if rates is not None else settings.EXCHANGE_RATE_FALLBACK_RATES
        self.quote_currency = (quote_currency or settings.EXCHANGE_RATE_FALLBACK_BASE).upper()
        self.rates = {code.upper(): Decimal(str(value)) for code, value in table.items()}
        self.rates[self.quote_currency] = Decimal("1")

    def get_latest_rates(self, base_currency: str) -> dict[str, Decimal] | None:
        """
        Fallback rates for a base currency.

        Returns:
            Mapping of target code to rate, or None if the base is not in the table
        """
        base_rate = self.rates.get(base_currency.upper())
        if base_rate is None:
            logger.warning("ManualProvider: no fallback rate for base %s", base_currency)
            return None

        # Calculate cross rate, rounded to 8 decimal places
        return {
            code: (rate / base_rate).quantize(Decimal("0.00000001"))
            for code, rate in self.rates.items()
            if code != base_currency.upper()
        }
