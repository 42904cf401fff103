"""
Repository pattern implementation.
Abstracts database access to decouple domain logic from persistence.
"""

from datetime import datetime
from typing import List, Optional

from django.db import IntegrityError, transaction

from apps.currency.domain.exceptions import ConcurrentUpdateConflict
from apps.currency.domain.interfaces import (
    BaseCurrencyRepository,
    BaseExchangeRateHistoryRepository,
    BaseExchangeRateRepository,
)
from apps.currency.domain.models import (
    CurrencyDefinition,
    ExchangeRate,
    ExchangeRateHistoryEntry,
)
from apps.currency.infrastructure.persistence.models import (
    Currency,
    CurrencyExchangeRate,
    ExchangeRateHistory,
)


def currency_to_domain(currency: Currency) -> CurrencyDefinition:
    return CurrencyDefinition(
        code=currency.code,
        name=currency.name,
        symbol=currency.symbol,
        symbol_position=currency.symbol_position,
        decimal_places=currency.decimal_places,
        is_active=currency.is_active,
        is_base_currency=currency.is_base_currency,
    )


def rate_to_domain(record: CurrencyExchangeRate) -> ExchangeRate:
    return ExchangeRate(
        id=record.id,
        base_currency=record.base_currency,
        target_currency=record.target_currency,
        rate=record.rate,
        source=record.source,
        is_manual_override=record.is_manual_override,
        effective_from=record.effective_from,
        effective_to=record.effective_to,
    )


def history_to_domain(record: ExchangeRateHistory) -> ExchangeRateHistoryEntry:
    return ExchangeRateHistoryEntry(
        id=record.id,
        base_currency=record.base_currency,
        target_currency=record.target_currency,
        rate=record.rate,
        previous_rate=record.previous_rate,
        change_percentage=record.change_percentage,
        source=record.source,
        is_manual_override=record.is_manual_override,
        recorded_at=record.recorded_at,
    )


class CurrencyRepository(BaseCurrencyRepository):
    """Repository for Currency aggregate."""

    def list_all(self) -> List[CurrencyDefinition]:
        return [currency_to_domain(c) for c in Currency.objects.all()]

    @staticmethod
    def get_by_code(code: str) -> Optional[Currency]:
        """Get currency by code."""
        try:
            return Currency.objects.get(code=code.upper())
        except Currency.DoesNotExist:
            return None

    @staticmethod
    def create(code: str, name: str, symbol: str, **extra) -> Currency:
        """Create a new currency."""
        return Currency.objects.create(
            code=code.upper(),
            name=name,
            symbol=symbol,
            **extra
        )


class ExchangeRateRepository(BaseExchangeRateRepository):
    """
    Repository for CurrencyExchangeRate aggregate.

    The partial unique constraint on active rows is the last line of
    defence against two writers superseding the same pair: the losing
    insert surfaces as ConcurrentUpdateConflict.
    """

    def atomic(self):
        return transaction.atomic()

    @staticmethod
    def _active(base_currency: str, target_currency: str):
        return CurrencyExchangeRate.objects.filter(
            base_currency=base_currency,
            target_currency=target_currency,
            effective_to__isnull=True,
        )

    def get_active(self, base_currency: str, target_currency: str) -> Optional[ExchangeRate]:
        record = self._active(base_currency, target_currency).order_by('-effective_from').first()
        return rate_to_domain(record) if record else None

    def list_active(self, base_currency: str) -> List[ExchangeRate]:
        return [
            rate_to_domain(r)
            for r in CurrencyExchangeRate.objects.filter(
                base_currency=base_currency,
                effective_to__isnull=True,
            ).order_by('target_currency')
        ]

    def close_active(self, base_currency: str, target_currency: str, closed_at: datetime) -> Optional[ExchangeRate]:
        record = (
            self._active(base_currency, target_currency)
            .select_for_update()
            .order_by('-effective_from')
            .first()
        )
        if record is None:
            return None

        previous = rate_to_domain(record)
        record.effective_to = closed_at
        record.save(update_fields=["effective_to", "updated_at"])
        return previous

    def add(self, rate: ExchangeRate) -> ExchangeRate:
        try:
            with transaction.atomic():
                record = CurrencyExchangeRate.objects.create(
                    id=rate.id,
                    base_currency=rate.base_currency,
                    target_currency=rate.target_currency,
                    rate=rate.rate,
                    source=rate.source.value,
                    is_manual_override=rate.is_manual_override,
                    effective_from=rate.effective_from,
                    effective_to=rate.effective_to,
                )
        except IntegrityError as e:
            raise ConcurrentUpdateConflict(
                f"Active rate for {rate.base_currency}/{rate.target_currency} was superseded concurrently"
            ) from e
        return rate_to_domain(record)

    @staticmethod
    def list_for_pair(base_currency: str, target_currency: str) -> List[CurrencyExchangeRate]:
        """All records for a pair, newest first."""
        return list(
            CurrencyExchangeRate.objects
            .filter(base_currency=base_currency, target_currency=target_currency)
            .order_by('-effective_from')
        )


class ExchangeRateHistoryRepository(BaseExchangeRateHistoryRepository):
    """Repository for ExchangeRateHistory entries."""

    def add(self, entry: ExchangeRateHistoryEntry) -> ExchangeRateHistoryEntry:
        record = ExchangeRateHistory.objects.create(
            id=entry.id,
            base_currency=entry.base_currency,
            target_currency=entry.target_currency,
            rate=entry.rate,
            previous_rate=entry.previous_rate,
            change_percentage=entry.change_percentage,
            source=entry.source.value,
            is_manual_override=entry.is_manual_override,
            recorded_at=entry.recorded_at,
        )
        return history_to_domain(record)

    def list(self, base_currency: str, target_currency: str, limit: int) -> List[ExchangeRateHistoryEntry]:
        records = (
            ExchangeRateHistory.objects
            .filter(base_currency=base_currency, target_currency=target_currency)
            .order_by('-recorded_at', '-created_at')[:limit]
        )
        return [history_to_domain(r) for r in records]
