import logging
import requests
from decimal import Decimal

from django.conf import settings

from apps.currency.domain.interfaces import BaseExchangeRateProvider
from apps.currency.infrastructure.providers.exchange_rate import parse_rates

logger = logging.getLogger(__name__)


class FixerProvider(BaseExchangeRateProvider):
    """
    Fixer.io provider.
    Requires EXCHANGE_RATE_API_KEY. Failures are reported in the body via "success": false.
    """

    def get_latest_rates(self, base_currency: str) -> dict[str, Decimal] | None:
        if not settings.EXCHANGE_RATE_API_KEY:
            logger.warning("EXCHANGE_RATE_API_KEY is not configured. Cannot fetch Fixer rates.")
            return None

        try:
            response = requests.get(
                settings.FIXER_URL,
                params={"access_key": settings.EXCHANGE_RATE_API_KEY, "base": base_currency},
                timeout=settings.EXCHANGE_RATE_HTTP_TIMEOUT,
            )
            response.raise_for_status()
            data = response.json()

            if not data.get('success'):
                info = (data.get('error') or {}).get('info', 'Unknown error')
                logger.warning("Fixer API error: %s", info)
                return None

            return parse_rates(data['rates'], base_currency)

        except requests.exceptions.Timeout:
            logger.warning("Timeout calling Fixer API for %s", base_currency)
            return None
        except requests.exceptions.RequestException as e:
            logger.warning("HTTP error from Fixer: %s", e)
            return None
        except (KeyError, ValueError, ArithmeticError, AttributeError) as e:
            logger.warning("Invalid response from Fixer: %s", e)
            return None
