"""
Application services - wires the currency domain to the ORM repositories.
"""

import logging
from decimal import Decimal

from django.apps import apps

from apps.currency.domain.models import ExchangeRate, RateSource
from apps.currency.domain.rates import ExchangeRateHistoryLedger, ExchangeRateStore
from apps.currency.domain.registry import CurrencyRegistry
from apps.currency.domain.services import CurrencyConversionService
from apps.currency.infrastructure.persistence.repositories import (
    CurrencyRepository,
    ExchangeRateHistoryRepository,
    ExchangeRateRepository,
)

logger = logging.getLogger(__name__)


def get_currency_registry() -> CurrencyRegistry:
    return CurrencyRegistry(CurrencyRepository())


def get_rate_store() -> ExchangeRateStore:
    """Store backed by the database, sharing the process-wide cache and pair locks."""
    config = apps.get_app_config("currency")
    return ExchangeRateStore(
        repository=ExchangeRateRepository(),
        ledger=ExchangeRateHistoryLedger(ExchangeRateHistoryRepository()),
        cache=config.rate_cache,
        locks=config.pair_locks,
    )


def get_conversion_service() -> CurrencyConversionService:
    return CurrencyConversionService(get_currency_registry(), get_rate_store())


def update_manual_rate(base_currency: str, target_currency: str, rate: Decimal) -> ExchangeRate:
    """Record an operator-entered rate. Visible to lookups as soon as this returns."""
    new_rate = get_rate_store().update(
        base_currency,
        target_currency,
        rate,
        source=RateSource.MANUAL,
        is_manual_override=True,
    )
    logger.info("Manual rate updated: %s to %s = %s", base_currency, target_currency, rate)
    return new_rate
