import logging
import requests
from decimal import Decimal

from django.conf import settings

from apps.currency.domain.interfaces import BaseExchangeRateProvider
from apps.currency.infrastructure.providers.exchange_rate import parse_rates

logger = logging.getLogger(__name__)


class CurrencyLayerProvider(BaseExchangeRateProvider):
    """
    CurrencyLayer provider.
    Quotes come keyed by the concatenated pair ("USDEUR"); the source prefix is stripped.
    """

    def get_latest_rates(self, base_currency: str) -> dict[str, Decimal] | None:
        if not settings.EXCHANGE_RATE_API_KEY:
            logger.warning("EXCHANGE_RATE_API_KEY is not configured. Cannot fetch CurrencyLayer rates.")
            return None

        try:
            response = requests.get(
                settings.CURRENCY_LAYER_URL,
                params={
                    "access_key": settings.EXCHANGE_RATE_API_KEY,
                    "source": base_currency,
                    "format": 1,
                },
                timeout=settings.EXCHANGE_RATE_HTTP_TIMEOUT,
            )
            response.raise_for_status()
            data = response.json()

            if not data.get('success'):
                info = (data.get('error') or {}).get('info', 'Unknown error')
                logger.warning("CurrencyLayer API error: %s", info)
                return None

            # Response format: {"source": "USD", "quotes": {"USDEUR": 0.85}}
            quotes = {
                key[len(base_currency):] if key.startswith(base_currency) else key: value
                for key, value in data['quotes'].items()
            }
            return parse_rates(quotes, base_currency)

        except requests.exceptions.Timeout:
            logger.warning("Timeout calling CurrencyLayer API for %s", base_currency)
            return None
        except requests.exceptions.RequestException as e:
            logger.warning("HTTP error from CurrencyLayer: %s", e)
            return None
        except (KeyError, ValueError, ArithmeticError, AttributeError) as e:
            logger.warning("Invalid response from CurrencyLayer: %s", e)
            return None
