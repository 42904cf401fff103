import pytest
from decimal import Decimal

from apps.currency.domain.exceptions import ConfigurationError
from apps.currency.domain.models import CurrencyDefinition, SymbolPosition
from apps.currency.domain.registry import CurrencyRegistry
from apps.currency.infrastructure.persistence.memory import InMemoryCurrencyRepository


@pytest.fixture
def repository():
    return InMemoryCurrencyRepository([
        CurrencyDefinition("USD", "US Dollar", "$", is_base_currency=True),
        CurrencyDefinition("LKR", "Sri Lankan Rupee", "Rs"),
        CurrencyDefinition("CHF", "Swiss Franc", "CHF", symbol_position=SymbolPosition.AFTER),
        CurrencyDefinition("JPY", "Japanese Yen", "¥", decimal_places=0),
        CurrencyDefinition("GBP", "British Pound", "£", is_active=False),
    ])


@pytest.fixture
def registry(repository):
    return CurrencyRegistry(repository)


class TestCurrencyRegistry:
    """Tests for CurrencyRegistry lookups."""

    def test_list_active_sorted_by_code(self, registry):
        codes = [c.code for c in registry.list_active()]

        assert codes == ["CHF", "JPY", "LKR", "USD"]

    def test_list_active_without_active_currencies(self):
        registry = CurrencyRegistry(InMemoryCurrencyRepository([
            CurrencyDefinition("USD", "US Dollar", "$", is_active=False),
        ]))

        with pytest.raises(ConfigurationError):
            registry.list_active()

    def test_get_base(self, registry):
        assert registry.get_base().code == "USD"

    def test_get_base_missing(self):
        registry = CurrencyRegistry(InMemoryCurrencyRepository([
            CurrencyDefinition("USD", "US Dollar", "$"),
        ]))

        with pytest.raises(ConfigurationError):
            registry.get_base()

    def test_get_base_ambiguous(self, repository, registry):
        repository.add(CurrencyDefinition("EUR", "Euro", "€", is_base_currency=True))

        with pytest.raises(ConfigurationError, match="EUR, USD"):
            registry.get_base()

    def test_inactive_base_is_ignored(self, repository, registry):
        repository.add(CurrencyDefinition("EUR", "Euro", "€", is_base_currency=True, is_active=False))

        assert registry.get_base().code == "USD"

    def test_by_code_is_case_insensitive(self, registry):
        assert registry.by_code("lkr").name == "Sri Lankan Rupee"

    def test_inactive_currency_is_not_valid(self, registry):
        assert registry.is_valid("USD")
        assert not registry.is_valid("GBP")
        assert not registry.is_valid("XYZ")

    def test_sees_currencies_added_after_construction(self, repository, registry):
        repository.add(CurrencyDefinition("INR", "Indian Rupee", "₹"))

        assert registry.is_valid("INR")

    def test_symbol_falls_back_to_code(self, registry):
        assert registry.symbol("LKR") == "Rs"
        assert registry.symbol("XYZ") == "XYZ"


class TestCurrencyFormatting:
    """Tests for CurrencyRegistry.format."""

    def test_symbol_before(self, registry):
        assert registry.format(Decimal("1234.5"), "USD") == "$1234.50"

    def test_symbol_after(self, registry):
        assert registry.format(Decimal("10"), "CHF") == "10.00 CHF"

    def test_zero_decimal_places_rounds_half_up(self, registry):
        assert registry.format(Decimal("1234.5"), "JPY") == "¥1235"

    def test_unknown_code(self, registry):
        assert registry.format(Decimal("12.345"), "xyz") == "XYZ 12.35"

    def test_inactive_code_formats_like_unknown(self, registry):
        assert registry.format(Decimal("5"), "GBP") == "GBP 5.00"
