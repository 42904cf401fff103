"""
In-memory repositories.
Used by tests and by callers that keep rates in process without a database.
"""

from contextlib import nullcontext
from dataclasses import replace
from datetime import datetime
from typing import Iterable, List, Optional

from apps.currency.domain.interfaces import (
    BaseCurrencyRepository,
    BaseExchangeRateHistoryRepository,
    BaseExchangeRateRepository,
)
from apps.currency.domain.models import CurrencyDefinition, ExchangeRate, ExchangeRateHistoryEntry


class InMemoryCurrencyRepository(BaseCurrencyRepository):

    def __init__(self, currencies: Iterable[CurrencyDefinition] = ()):
        self._currencies = list(currencies)

    def list_all(self) -> List[CurrencyDefinition]:
        return list(self._currencies)

    def add(self, currency: CurrencyDefinition) -> CurrencyDefinition:
        self._currencies.append(currency)
        return currency


class InMemoryExchangeRateRepository(BaseExchangeRateRepository):

    def __init__(self):
        self._records: List[ExchangeRate] = []

    def atomic(self):
        return nullcontext()

    def get_active(self, base_currency: str, target_currency: str) -> Optional[ExchangeRate]:
        active = [
            r for r in self._records
            if r.base_currency == base_currency and r.target_currency == target_currency and r.is_active
        ]
        if not active:
            return None
        return max(active, key=lambda r: r.effective_from)

    def list_active(self, base_currency: str) -> List[ExchangeRate]:
        return [r for r in self._records if r.base_currency == base_currency and r.is_active]

    def close_active(self, base_currency: str, target_currency: str, closed_at: datetime) -> Optional[ExchangeRate]:
        previous = None
        for index, record in enumerate(self._records):
            if (
                record.base_currency == base_currency
                and record.target_currency == target_currency
                and record.is_active
            ):
                previous = record
                self._records[index] = replace(record, effective_to=closed_at)
        return previous

    def add(self, rate: ExchangeRate) -> ExchangeRate:
        self._records.append(rate)
        return rate

    def list_for_pair(self, base_currency: str, target_currency: str) -> List[ExchangeRate]:
        return [
            r for r in self._records
            if r.base_currency == base_currency and r.target_currency == target_currency
        ]


class InMemoryExchangeRateHistoryRepository(BaseExchangeRateHistoryRepository):

    def __init__(self):
        self._entries: List[ExchangeRateHistoryEntry] = []

    def add(self, entry: ExchangeRateHistoryEntry) -> ExchangeRateHistoryEntry:
        self._entries.append(entry)
        return entry

    def list(self, base_currency: str, target_currency: str, limit: int) -> List[ExchangeRateHistoryEntry]:
        matching = [
            (index, e) for index, e in enumerate(self._entries)
            if e.base_currency == base_currency and e.target_currency == target_currency
        ]
        matching.sort(key=lambda item: (item[1].recorded_at, item[0]), reverse=True)
        return [e for _, e in matching[:limit]]
