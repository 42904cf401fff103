import pytest
from datetime import datetime, timezone
from decimal import Decimal

from apps.currency.domain.exceptions import CurrencyMismatchError
from apps.currency.domain.models import (
    CurrencyDefinition,
    ExchangeRate,
    Money,
    RateSource,
    SymbolPosition,
)

NOW = datetime(2024, 5, 21, 12, 0, tzinfo=timezone.utc)


class TestMoney:
    """Tests for the Money value object."""

    def test_add_same_currency(self):
        total = Money(Decimal("10.50"), "usd") + Money("4.25", "USD")

        assert total == Money(Decimal("14.75"), "USD")

    def test_add_different_currencies_raises(self):
        with pytest.raises(CurrencyMismatchError):
            Money(Decimal("10"), "USD") + Money(Decimal("10"), "EUR")

    def test_mismatch_is_a_value_error(self):
        with pytest.raises(ValueError):
            Money(Decimal("10"), "USD") - Money(Decimal("1"), "LKR")

    def test_negative_amount_rejected(self):
        with pytest.raises(ValueError):
            Money(Decimal("-0.01"), "USD")

    def test_float_amount_has_no_binary_noise(self):
        assert Money(0.1, "USD").amount == Decimal("0.1")


class TestCurrencyDefinition:

    def test_code_is_upper_cased(self):
        currency = CurrencyDefinition(code="lkr", name="Sri Lankan Rupee", symbol="Rs")

        assert currency.code == "LKR"
        assert currency.symbol_position == SymbolPosition.BEFORE

    def test_code_must_have_three_characters(self):
        with pytest.raises(ValueError):
            CurrencyDefinition(code="US", name="Broken", symbol="$")

    def test_negative_decimal_places_rejected(self):
        with pytest.raises(ValueError):
            CurrencyDefinition(code="USD", name="US Dollar", symbol="$", decimal_places=-1)


class TestExchangeRate:

    def test_rate_must_be_positive(self):
        with pytest.raises(ValueError):
            ExchangeRate("USD", "EUR", Decimal("0"), effective_from=NOW)

    def test_identity_pair_rejected(self):
        with pytest.raises(ValueError):
            ExchangeRate("USD", "USD", Decimal("1"), effective_from=NOW)

    def test_source_coerced_from_string(self):
        rate = ExchangeRate("USD", "EUR", "0.85", effective_from=NOW, source="manual")

        assert rate.source == RateSource.MANUAL
        assert rate.rate == Decimal("0.85")
        assert rate.is_active

    def test_convert(self):
        rate = ExchangeRate("USD", "LKR", Decimal("325"), effective_from=NOW)

        assert rate.convert(Decimal("2.5")) == Decimal("812.500000")
