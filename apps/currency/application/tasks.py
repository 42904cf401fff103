"""
Celery tasks for background processing.
"""

import logging
from dataclasses import asdict
from decimal import Decimal
from typing import Dict, Optional

from celery import shared_task
from django.conf import settings
from django.db import DatabaseError

from apps.currency.application.dto import RateRefreshResultDTO
from apps.currency.application.services import get_currency_registry, get_rate_store
from apps.currency.domain.exceptions import ConcurrentUpdateConflict, ConfigurationError
from apps.currency.domain.models import RateSource
from apps.currency.domain.rates import ExchangeRateStore
from apps.currency.infrastructure.providers.registry import ProviderName, get_provider_instance

logger = logging.getLogger(__name__)


def apply_rates(
    store: ExchangeRateStore,
    base_currency: str,
    rates: Dict[str, Decimal],
    allowed_targets: set,
    source: RateSource,
    result: RateRefreshResultDTO,
) -> None:
    """
    Apply fetched rates pair by pair.

    Each pair is its own atomic update, so a failure on one pair leaves the
    others applied.
    """
    for target_currency in sorted(rates):
        if target_currency == base_currency or target_currency not in allowed_targets:
            continue

        try:
            store.update(base_currency, target_currency, rates[target_currency], source=source)
        except (ValueError, ArithmeticError, ConcurrentUpdateConflict, DatabaseError) as e:
            logger.error("Error updating rate for %s/%s: %s", base_currency, target_currency, e)
            result.errors.append(f"{base_currency}/{target_currency}: {e}")
            continue

        result.rates_updated += 1
        result.currencies_updated.append(target_currency)


@shared_task(name="refresh_exchange_rates")
def refresh_exchange_rates(provider_name: Optional[str] = None) -> Dict:
    """
    Refresh the active rates of the base currency against every other active currency.

    Uses the configured provider. If it returns nothing, the configured
    fallback rates are applied with source "fallback".

    Args:
        provider_name: Override for settings.EXCHANGE_RATE_PROVIDER

    Returns:
        Dict with operation results
    """
    registry = get_currency_registry()

    try:
        base_currency = registry.get_base().code
        targets = {c.code for c in registry.list_active()}
    except ConfigurationError as e:
        return asdict(RateRefreshResultDTO(success=False, base_currency=None, message=str(e)))

    provider_name = provider_name or settings.EXCHANGE_RATE_PROVIDER
    result = RateRefreshResultDTO(success=True, base_currency=base_currency)

    provider = get_provider_instance(provider_name)
    rates = provider.get_latest_rates(base_currency) if provider is not None else None

    if rates:
        result.provider_used = provider_name
        result.source = RateSource.MANUAL.value if provider_name == ProviderName.MANUAL else RateSource.API.value
    else:
        logger.warning("Provider %s returned no rates for %s, using fallback rates", provider_name, base_currency)
        rates = get_provider_instance(ProviderName.MANUAL).get_latest_rates(base_currency)
        result.provider_used = ProviderName.MANUAL.value
        result.source = RateSource.FALLBACK.value

    if not rates:
        result.success = False
        result.message = f"No rates available for base currency {base_currency}"
        return asdict(result)

    logger.info("Updating %s rates for base %s from %s", len(rates), base_currency, result.provider_used)
    apply_rates(get_rate_store(), base_currency, rates, targets, RateSource(result.source), result)

    result.message = f"Updated {result.rates_updated} rates"
    return asdict(result)
