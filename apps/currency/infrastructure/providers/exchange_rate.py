import logging
import requests
from decimal import Decimal

from django.conf import settings

from apps.currency.domain.interfaces import BaseExchangeRateProvider

logger = logging.getLogger(__name__)


def parse_rates(raw: dict, base_currency: str) -> dict[str, Decimal]:
    """Convert a {code: number} mapping into Decimals, dropping the identity entry."""
    return {
        code.upper(): Decimal(str(value))
        for code, value in raw.items()
        if code.upper() != base_currency and value
    }


class ExchangeRateApiProvider(BaseExchangeRateProvider):
    """
    ExchangeRate-API provider (free tier).
    Uses the /latest/{base} endpoint, no API key required.
    """

    def get_latest_rates(self, base_currency: str) -> dict[str, Decimal] | None:
        """
        Fetch the latest rates for a base currency.

        Args:
            base_currency: Base currency code (e.g. USD)

        Returns:
            Mapping of target code to rate, or None if error occurs
        """
        # Format: https://api.exchangerate-api.com/v4/latest/USD
        url = f"{settings.EXCHANGERATE_URL}/{base_currency}"

        try:
            response = requests.get(url, timeout=settings.EXCHANGE_RATE_HTTP_TIMEOUT)
            response.raise_for_status()
            data = response.json()

            # Response format: {"base": "USD", "rates": {"EUR": 0.85, ...}}
            return parse_rates(data['rates'], base_currency)

        except requests.exceptions.Timeout:
            logger.warning("Timeout calling ExchangeRate API for %s", base_currency)
            return None
        except requests.exceptions.RequestException as e:
            logger.warning("HTTP error from ExchangeRate API: %s", e)
            return None
        except (KeyError, ValueError, ArithmeticError, AttributeError) as e:
            logger.warning("Invalid response from ExchangeRate API: %s", e)
            return None
