"""
Provider Registry - Maps ProviderName enum to adapter classes.
This is the glue between the configured provider name and the actual implementation.
"""

import logging

from django.db import models

from apps.currency.domain.interfaces import BaseExchangeRateProvider
from apps.currency.infrastructure.providers.currency_layer import CurrencyLayerProvider
from apps.currency.infrastructure.providers.exchange_rate import ExchangeRateApiProvider
from apps.currency.infrastructure.providers.fixer import FixerProvider
from apps.currency.infrastructure.providers.manual import ManualProvider

logger = logging.getLogger(__name__)


class ProviderName(models.TextChoices):
    """
    Enum with available providers.
    To add a new provider:
    1. Add an entry here
    2. Implement the BaseExchangeRateProvider interface
    3. Register in PROVIDER_REGISTRY below
    """

    EXCHANGE_RATE = "exchange_rate", "ExchangeRate-API"
    FIXER = "fixer", "Fixer"
    CURRENCY_LAYER = "currency_layer", "CurrencyLayer"
    MANUAL = "manual", "Manual"


# Registry: Maps ProviderName enum to the corresponding adapter class
PROVIDER_REGISTRY: dict[str, type[BaseExchangeRateProvider]] = {
    ProviderName.EXCHANGE_RATE: ExchangeRateApiProvider,
    ProviderName.FIXER: FixerProvider,
    ProviderName.CURRENCY_LAYER: CurrencyLayerProvider,
    ProviderName.MANUAL: ManualProvider,
}


def get_provider_instance(provider_name: str) -> BaseExchangeRateProvider | None:
    """
    Get an instance of a provider by its name.

    Args:
        provider_name: The provider name from ProviderName enum

    Returns:
        Instance of the provider adapter, or None if not found
    """
    provider_class = PROVIDER_REGISTRY.get(provider_name)

    if provider_class is None:
        logger.warning("Provider '%s' not found in registry", provider_name)
        return None

    return provider_class()
