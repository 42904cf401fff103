import pytest

from apps.currency.domain.interfaces import BaseExchangeRateProvider
from apps.currency.infrastructure.providers.currency_layer import CurrencyLayerProvider
from apps.currency.infrastructure.providers.exchange_rate import ExchangeRateApiProvider
from apps.currency.infrastructure.providers.fixer import FixerProvider
from apps.currency.infrastructure.providers.manual import ManualProvider
from apps.currency.infrastructure.providers.registry import (
    PROVIDER_REGISTRY,
    ProviderName,
    get_provider_instance,
)


class TestProviderRegistry:
    """Tests for the provider registry."""

    def test_every_provider_name_is_registered(self):
        assert set(PROVIDER_REGISTRY) == set(ProviderName)

    def test_registered_classes_implement_interface(self):
        for provider_class in PROVIDER_REGISTRY.values():
            assert issubclass(provider_class, BaseExchangeRateProvider)

    @pytest.mark.parametrize("name, expected", [
        ("exchange_rate", ExchangeRateApiProvider),
        ("fixer", FixerProvider),
        ("currency_layer", CurrencyLayerProvider),
        ("manual", ManualProvider),
    ])
    def test_get_provider_instance(self, name, expected):
        assert isinstance(get_provider_instance(name), expected)

    def test_unknown_provider(self):
        assert get_provider_instance("currency_beacon") is None
