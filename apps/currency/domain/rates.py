"""
Exchange rate store, history ledger and rate cache.

Rates are never edited in place: an update closes the active record for the
pair (supersession), inserts the new active record and appends one history
entry. Lookups fall back to the reverse pair and, as a last resort, to 1.0 so
that checkout never stalls on a missing rate.
"""

import logging
import threading
import time
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict, List, Optional, Tuple

from apps.currency.domain.exceptions import RateUnavailable
from apps.currency.domain.interfaces import (
    BaseExchangeRateHistoryRepository,
    BaseExchangeRateRepository,
)
from apps.currency.domain.models import (
    ExchangeRate,
    ExchangeRateHistoryEntry,
    RateSource,
    to_decimal,
)

logger = logging.getLogger(__name__)

IDENTITY_RATE = Decimal("1")
FALLBACK_RATE = Decimal("1")
DEFAULT_CACHE_TTL_SECONDS = 5 * 60

Pair = Tuple[str, str]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def change_percentage(rate: Decimal, previous_rate: Optional[Decimal]) -> Optional[Decimal]:
    if previous_rate is None or previous_rate <= 0:
        return None
    change = (rate - previous_rate) / previous_rate * 100
    return change.quantize(Decimal("0.0001"), rounding=ROUND_HALF_UP)


class RateCache:
    """Thread-safe read-through cache of resolved rates keyed by (base, target)."""

    def __init__(self, ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[Pair, Tuple[Decimal, float]] = {}
        self._lock = threading.Lock()

    def get(self, base_currency: str, target_currency: str) -> Optional[Decimal]:
        key = (base_currency, target_currency)
        with self._lock:
            cached = self._entries.get(key)
            if cached is None:
                return None
            rate, stored_at = cached
            if self._clock() - stored_at >= self.ttl_seconds:
                del self._entries[key]
                return None
            return rate

    def set(self, base_currency: str, target_currency: str, rate: Decimal) -> None:
        with self._lock:
            self._entries[(base_currency, target_currency)] = (rate, self._clock())

    def invalidate(self, base_currency: str, target_currency: str) -> None:
        with self._lock:
            self._entries.pop((base_currency, target_currency), None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class PairLockRegistry:
    """One lock per currency pair. Updates for different pairs never contend."""

    def __init__(self):
        self._locks: Dict[Pair, threading.Lock] = {}
        self._guard = threading.Lock()

    def lock_for(self, base_currency: str, target_currency: str) -> threading.Lock:
        key = (base_currency, target_currency)
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock


class ExchangeRateHistoryLedger:
    """Append-only log of rate changes."""

    def __init__(self, repository: BaseExchangeRateHistoryRepository):
        self._repository = repository

    def append(self, entry: ExchangeRateHistoryEntry) -> ExchangeRateHistoryEntry:
        return self._repository.add(entry)

    def query(self, base_currency: str, target_currency: str, limit: int = 100) -> List[ExchangeRateHistoryEntry]:
        if limit <= 0:
            return []
        return self._repository.list(base_currency.upper(), target_currency.upper(), limit)


class ExchangeRateStore:
    """
    Time-partitioned exchange rates with a cached active-rate lookup.

    Lookup order for current_rate(base, target):
    1. Identity (base == target) -> 1.0, no lookup
    2. Fresh cache entry
    3. Active record for (base, target)
    4. Reciprocal of the active record for (target, base)
    5. Soft fallback 1.0 (logged, not cached)
    """

    def __init__(
        self,
        repository: BaseExchangeRateRepository,
        ledger: ExchangeRateHistoryLedger,
        cache: Optional[RateCache] = None,
        locks: Optional[PairLockRegistry] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._repository = repository
        self._ledger = ledger
        self._cache = cache if cache is not None else RateCache()
        self._locks = locks if locks is not None else PairLockRegistry()
        self._clock = clock

    @property
    def ledger(self) -> ExchangeRateHistoryLedger:
        return self._ledger

    def _lookup(self, base_currency: str, target_currency: str) -> Optional[Decimal]:
        direct = self._repository.get_active(base_currency, target_currency)
        if direct is not None:
            return direct.rate

        reverse = self._repository.get_active(target_currency, base_currency)
        if reverse is not None:
            return IDENTITY_RATE / reverse.rate

        return None

    def strict_rate(self, base_currency: str, target_currency: str) -> Decimal:
        """
        Resolve the current rate without the soft fallback.

        Raises:
            RateUnavailable: if neither direction has an active record
        """
        base_currency = base_currency.upper()
        target_currency = target_currency.upper()

        if base_currency == target_currency:
            return IDENTITY_RATE

        cached = self._cache.get(base_currency, target_currency)
        if cached is not None:
            return cached

        rate = self._lookup(base_currency, target_currency)
        if rate is None:
            raise RateUnavailable(base_currency, target_currency)

        self._cache.set(base_currency, target_currency, rate)
        return rate

    def current_rate(self, base_currency: str, target_currency: str) -> Decimal:
        """
        Get the current rate, never raising for a missing pair.

        Example:
            >>> store.update("USD", "EUR", Decimal("0.85"))
            >>> store.current_rate("EUR", "USD")
            Decimal('1.176470588235294117647058824')
        """
        try:
            return self.strict_rate(base_currency, target_currency)
        except RateUnavailable as e:
            logger.warning("%s, using fallback rate %s", e, FALLBACK_RATE)
            return FALLBACK_RATE

    def has_rate(self, base_currency: str, target_currency: str) -> bool:
        base_currency = base_currency.upper()
        target_currency = target_currency.upper()
        if base_currency == target_currency:
            return True
        return self._lookup(base_currency, target_currency) is not None

    def update(
        self,
        base_currency: str,
        target_currency: str,
        rate,
        source: RateSource = RateSource.API,
        is_manual_override: bool = False,
    ) -> ExchangeRate:
        """
        Supersede the active rate for a pair and record the change.

        Close-insert-log runs under the pair lock and inside the
        repository's atomic block. The cache entries for the pair and its
        reverse are dropped before returning.

        Raises:
            ValueError: if rate is not positive or the pair is an identity
            ConcurrentUpdateConflict: if the backing store lost a race
        """
        base_currency = base_currency.upper()
        target_currency = target_currency.upper()
        rate = to_decimal(rate)
        source = RateSource(source)

        if rate <= 0:
            raise ValueError(f"rate must be positive, got {rate}")
        if base_currency == target_currency:
            raise ValueError("Identity rates are implicit and cannot be stored")

        with self._locks.lock_for(base_currency, target_currency):
            with self._repository.atomic():
                now = self._clock()
                previous = self._repository.close_active(base_currency, target_currency, now)
                previous_rate = previous.rate if previous else None

                new_rate = self._repository.add(ExchangeRate(
                    base_currency=base_currency,
                    target_currency=target_currency,
                    rate=rate,
                    source=source,
                    is_manual_override=is_manual_override,
                    effective_from=now,
                ))

                self._ledger.append(ExchangeRateHistoryEntry(
                    base_currency=base_currency,
                    target_currency=target_currency,
                    rate=rate,
                    previous_rate=previous_rate,
                    change_percentage=change_percentage(rate, previous_rate),
                    source=source,
                    is_manual_override=is_manual_override,
                    recorded_at=now,
                ))

            self._cache.invalidate(base_currency, target_currency)
            self._cache.invalidate(target_currency, base_currency)

        logger.info(
            "Rate updated %s/%s: %s -> %s (%s%s)",
            base_currency, target_currency, previous_rate, rate,
            source.value, ", manual override" if is_manual_override else "",
        )
        return new_rate

    def all_active(self, base_currency: str) -> List[ExchangeRate]:
        rates = self._repository.list_active(base_currency.upper())
        return sorted(rates, key=lambda r: r.target_currency)

    def is_stale(self, base_currency: str, target_currency: str, max_age_minutes: int = 60) -> bool:
        active = self._repository.get_active(base_currency.upper(), target_currency.upper())
        if active is None:
            return True
        return self._clock() - active.effective_from > timedelta(minutes=max_age_minutes)
