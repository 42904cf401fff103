import threading
import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from apps.currency.domain.exceptions import RateUnavailable
from apps.currency.domain.models import RateSource
from apps.currency.domain.rates import (
    ExchangeRateHistoryLedger,
    ExchangeRateStore,
    RateCache,
    change_percentage,
)
from apps.currency.infrastructure.persistence.memory import (
    InMemoryExchangeRateHistoryRepository,
    InMemoryExchangeRateRepository,
)


class FakeClock:

    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 5, 21, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def repository():
    return InMemoryExchangeRateRepository()


@pytest.fixture
def ledger():
    return ExchangeRateHistoryLedger(InMemoryExchangeRateHistoryRepository())


@pytest.fixture
def cache():
    return RateCache(ttl_seconds=300)


@pytest.fixture
def store(repository, ledger, cache, clock):
    return ExchangeRateStore(repository, ledger, cache=cache, clock=clock)


class TestRateLookup:
    """Tests for ExchangeRateStore.current_rate resolution order."""

    def test_identity_skips_lookup(self, store, repository, mocker):
        spy = mocker.spy(repository, "get_active")

        assert store.current_rate("USD", "usd") == Decimal("1")
        spy.assert_not_called()

    def test_direct_rate(self, store):
        store.update("USD", "EUR", Decimal("0.85"))

        assert store.current_rate("USD", "EUR") == Decimal("0.85")

    def test_codes_are_case_insensitive(self, store):
        store.update("usd", "eur", Decimal("0.85"))

        assert store.current_rate("Usd", "EUR") == Decimal("0.85")

    def test_reverse_rate_is_reciprocal(self, store):
        store.update("USD", "EUR", Decimal("0.85"))

        assert store.current_rate("EUR", "USD") == Decimal("1") / Decimal("0.85")

    def test_direct_rate_wins_over_reverse(self, store):
        store.update("USD", "EUR", Decimal("0.85"))
        store.update("EUR", "USD", Decimal("1.20"))

        assert store.current_rate("EUR", "USD") == Decimal("1.20")

    def test_missing_pair_falls_back_to_one(self, store, cache, caplog):
        assert store.current_rate("USD", "XYZ") == Decimal("1")
        assert len(cache) == 0
        assert "USD/XYZ" in caplog.text

    def test_strict_rate_raises_for_missing_pair(self, store):
        with pytest.raises(RateUnavailable) as excinfo:
            store.strict_rate("USD", "XYZ")

        assert excinfo.value.base_currency == "USD"
        assert excinfo.value.target_currency == "XYZ"

    def test_has_rate(self, store):
        store.update("USD", "LKR", Decimal("325"))

        assert store.has_rate("USD", "LKR")
        assert store.has_rate("LKR", "USD")
        assert store.has_rate("GBP", "GBP")
        assert not store.has_rate("USD", "GBP")


class TestRateCaching:
    """Tests for the read-through cache in front of the repository."""

    def test_second_lookup_served_from_cache(self, store, repository, mocker):
        store.update("USD", "EUR", Decimal("0.85"))
        store.current_rate("USD", "EUR")
        spy = mocker.spy(repository, "get_active")

        assert store.current_rate("USD", "EUR") == Decimal("0.85")
        spy.assert_not_called()

    def test_update_invalidates_pair(self, store):
        store.update("USD", "EUR", Decimal("0.85"))
        assert store.current_rate("USD", "EUR") == Decimal("0.85")

        store.update("USD", "EUR", Decimal("0.90"))

        assert store.current_rate("USD", "EUR") == Decimal("0.90")

    def test_update_invalidates_reverse_pair(self, store):
        store.update("USD", "EUR", Decimal("0.80"))
        assert store.current_rate("EUR", "USD") == Decimal("1.25")

        store.update("USD", "EUR", Decimal("0.50"))

        assert store.current_rate("EUR", "USD") == Decimal("2")

    def test_entries_expire_after_ttl(self):
        now = [0.0]
        cache = RateCache(ttl_seconds=300, clock=lambda: now[0])
        cache.set("USD", "EUR", Decimal("0.85"))

        now[0] = 299
        assert cache.get("USD", "EUR") == Decimal("0.85")

        now[0] = 300
        assert cache.get("USD", "EUR") is None


class TestRateUpdate:
    """Tests for supersession and history on ExchangeRateStore.update."""

    def test_supersedes_active_rate(self, store, repository, clock):
        first = store.update("USD", "LKR", Decimal("325"))
        clock.advance(minutes=5)
        second = store.update("USD", "LKR", Decimal("330"))

        records = repository.list_for_pair("USD", "LKR")
        active = [r for r in records if r.is_active]

        assert len(records) == 2
        assert active == [second]
        closed = next(r for r in records if r.id == first.id)
        assert closed.effective_to == second.effective_from

    def test_update_appends_history(self, store, clock):
        store.update("USD", "LKR", Decimal("325"))
        clock.advance(minutes=5)
        store.update("USD", "LKR", Decimal("330"), source=RateSource.MANUAL, is_manual_override=True)

        latest, first = store.ledger.query("USD", "LKR")

        assert first.previous_rate is None
        assert first.change_percentage is None
        assert latest.rate == Decimal("330")
        assert latest.previous_rate == Decimal("325")
        assert latest.change_percentage == Decimal("1.5385")
        assert latest.source == RateSource.MANUAL
        assert latest.is_manual_override

    def test_history_timestamp_matches_new_rate(self, store):
        new_rate = store.update("USD", "EUR", Decimal("0.85"))

        (entry,) = store.ledger.query("USD", "EUR")

        assert entry.recorded_at == new_rate.effective_from

    @pytest.mark.parametrize("rate", [Decimal("0"), Decimal("-1.5")])
    def test_rejects_non_positive_rate(self, store, repository, rate):
        with pytest.raises(ValueError):
            store.update("USD", "EUR", rate)

        assert repository.list_for_pair("USD", "EUR") == []
        assert store.ledger.query("USD", "EUR") == []

    def test_rejects_identity_pair(self, store):
        with pytest.raises(ValueError):
            store.update("USD", "usd", Decimal("1"))

    def test_all_active_sorted_by_target(self, store):
        store.update("USD", "LKR", Decimal("325"))
        store.update("USD", "EUR", Decimal("0.85"))
        store.update("USD", "GBP", Decimal("0.73"))
        store.update("EUR", "GBP", Decimal("0.86"))

        targets = [r.target_currency for r in store.all_active("usd")]

        assert targets == ["EUR", "GBP", "LKR"]

    def test_concurrent_updates_leave_one_active_rate(self, repository, ledger):
        store = ExchangeRateStore(repository, ledger)
        rates = [Decimal(300 + i) for i in range(20)]

        threads = [
            threading.Thread(target=store.update, args=("USD", "LKR", rate))
            for rate in rates
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        records = repository.list_for_pair("USD", "LKR")
        assert len(records) == 20
        assert len([r for r in records if r.is_active]) == 1

        entries = list(reversed(ledger.query("USD", "LKR")))
        assert len(entries) == 20
        assert entries[0].previous_rate is None
        for previous, entry in zip(entries, entries[1:]):
            assert entry.previous_rate == previous.rate

        assert store.current_rate("USD", "LKR") == entries[-1].rate


class TestStaleness:

    def test_missing_pair_is_stale(self, store):
        assert store.is_stale("USD", "EUR")

    def test_fresh_rate_is_not_stale(self, store, clock):
        store.update("USD", "EUR", Decimal("0.85"))
        clock.advance(minutes=59)

        assert not store.is_stale("USD", "EUR")

    def test_old_rate_is_stale(self, store, clock):
        store.update("USD", "EUR", Decimal("0.85"))
        clock.advance(minutes=61)

        assert store.is_stale("USD", "EUR")
        assert not store.is_stale("USD", "EUR", max_age_minutes=120)


class TestChangePercentage:

    def test_rounds_half_up_to_four_places(self):
        assert change_percentage(Decimal("330"), Decimal("325")) == Decimal("1.5385")

    def test_without_previous_rate(self):
        assert change_percentage(Decimal("330"), None) is None

    def test_decrease_is_negative(self):
        assert change_percentage(Decimal("0.80"), Decimal("0.85")) == Decimal("-5.8824")
