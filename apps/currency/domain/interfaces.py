from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from apps.currency.domain.models import CurrencyDefinition, ExchangeRate, ExchangeRateHistoryEntry


class BaseExchangeRateProvider(ABC):
    @abstractmethod
    def get_latest_rates(self, base_currency: str) -> dict[str, Decimal] | None:
        pass


class BaseCurrencyRepository(ABC):
    @abstractmethod
    def list_all(self) -> List[CurrencyDefinition]:
        pass


class BaseExchangeRateRepository(ABC):
    @abstractmethod
    def atomic(self) -> AbstractContextManager:
        """Context manager wrapping close/insert/log into one unit of work."""

    @abstractmethod
    def get_active(self, base_currency: str, target_currency: str) -> Optional[ExchangeRate]:
        pass

    @abstractmethod
    def list_active(self, base_currency: str) -> List[ExchangeRate]:
        pass

    @abstractmethod
    def close_active(self, base_currency: str, target_currency: str, closed_at: datetime) -> Optional[ExchangeRate]:
        """Set effective_to on the active record and return it as it was before closing."""

    @abstractmethod
    def add(self, rate: ExchangeRate) -> ExchangeRate:
        pass


class BaseExchangeRateHistoryRepository(ABC):
    @abstractmethod
    def add(self, entry: ExchangeRateHistoryEntry) -> ExchangeRateHistoryEntry:
        pass

    @abstractmethod
    def list(self, base_currency: str, target_currency: str, limit: int) -> List[ExchangeRateHistoryEntry]:
        """Entries for the pair, newest first."""
