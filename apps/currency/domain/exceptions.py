"""
Domain errors for the currency bounded context.
"""


class CurrencyError(Exception):
    """Base class for currency errors."""


class ConfigurationError(CurrencyError):
    """No active base currency, several of them, or no active currency at all."""


class RateUnavailable(CurrencyError):
    """Neither a direct nor a reverse active rate exists for a pair."""

    def __init__(self, base_currency: str, target_currency: str):
        self.base_currency = base_currency
        self.target_currency = target_currency
        super().__init__(f"No active exchange rate for {base_currency}/{target_currency}")


class ConcurrentUpdateConflict(CurrencyError):
    """Another update superseded the same pair concurrently. Retry the update."""


class CurrencyMismatchError(CurrencyError, ValueError):
    """Arithmetic attempted across two different currencies."""
