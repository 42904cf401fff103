import pytest
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from apps.currency.domain.models import ExchangeRateHistoryEntry
from apps.currency.domain.rates import ExchangeRateHistoryLedger
from apps.currency.infrastructure.persistence.memory import InMemoryExchangeRateHistoryRepository

START = datetime(2024, 5, 21, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def ledger():
    ledger = ExchangeRateHistoryLedger(InMemoryExchangeRateHistoryRepository())
    for minutes, rate in enumerate(["325", "326", "327", "328"]):
        ledger.append(ExchangeRateHistoryEntry(
            base_currency="USD",
            target_currency="LKR",
            rate=Decimal(rate),
            recorded_at=START + timedelta(minutes=minutes),
        ))
    ledger.append(ExchangeRateHistoryEntry(
        base_currency="USD",
        target_currency="EUR",
        rate=Decimal("0.85"),
        recorded_at=START,
    ))
    return ledger


class TestExchangeRateHistoryLedger:
    """Tests for history queries."""

    def test_newest_first(self, ledger):
        rates = [e.rate for e in ledger.query("USD", "LKR")]

        assert rates == [Decimal("328"), Decimal("327"), Decimal("326"), Decimal("325")]

    def test_limit(self, ledger):
        entries = ledger.query("USD", "LKR", limit=2)

        assert [e.rate for e in entries] == [Decimal("328"), Decimal("327")]

    @pytest.mark.parametrize("limit", [0, -5])
    def test_non_positive_limit_returns_nothing(self, ledger, limit):
        assert ledger.query("USD", "LKR", limit=limit) == []

    def test_pairs_are_isolated(self, ledger):
        assert len(ledger.query("USD", "EUR")) == 1
        assert ledger.query("EUR", "USD") == []

    def test_codes_are_upper_cased(self, ledger):
        assert len(ledger.query("usd", "lkr")) == 4

    def test_same_timestamp_keeps_append_order(self):
        ledger = ExchangeRateHistoryLedger(InMemoryExchangeRateHistoryRepository())
        for rate in ["1.1", "1.2"]:
            ledger.append(ExchangeRateHistoryEntry("EUR", "USD", Decimal(rate), recorded_at=START))

        assert [e.rate for e in ledger.query("EUR", "USD")] == [Decimal("1.2"), Decimal("1.1")]
