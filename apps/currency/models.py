from apps.currency.infrastructure.persistence.models import (  # noqa: F401
    Currency,
    CurrencyExchangeRate,
    ExchangeRateHistory,
)
