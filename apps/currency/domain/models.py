"""
Pure domain entities (POPOs).
No dependency on Django or the ORM.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4, UUID

from apps.currency.domain.exceptions import CurrencyMismatchError


class SymbolPosition(str, Enum):
    BEFORE = "before"
    AFTER = "after"


class RateSource(str, Enum):
    API = "api"
    MANUAL = "manual"
    FALLBACK = "fallback"


def to_decimal(value) -> Decimal:
    """Coerce ints, floats and strings to Decimal without float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


@dataclass(frozen=True)
class Money:

    amount: Decimal
    currency: str

    def __post_init__(self):
        object.__setattr__(self, "amount", to_decimal(self.amount))
        object.__setattr__(self, "currency", self.currency.upper())
        if self.amount < 0:
            raise ValueError(f"Money amount must be non-negative, got {self.amount}")

    def _check_currency(self, other: "Money") -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(
                f"Cannot combine {self.currency} and {other.currency} without conversion"
            )

    def __add__(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: "Money") -> "Money":
        self._check_currency(other)
        return Money(self.amount - other.amount, self.currency)


@dataclass(frozen=True)
class CurrencyDefinition:

    code: str
    name: str
    symbol: str
    symbol_position: SymbolPosition = SymbolPosition.BEFORE
    decimal_places: int = 2
    is_active: bool = True
    is_base_currency: bool = False

    def __post_init__(self):
        if len(self.code) != 3:
            raise ValueError(f"Currency code must be exactly 3 characters, got '{self.code}'")
        if self.decimal_places < 0:
            raise ValueError(f"decimal_places must be >= 0, got {self.decimal_places}")
        object.__setattr__(self, "code", self.code.upper())
        object.__setattr__(self, "symbol_position", SymbolPosition(self.symbol_position))


@dataclass(frozen=True)
class ExchangeRate:

    base_currency: str
    target_currency: str
    rate: Decimal
    effective_from: datetime
    source: RateSource = RateSource.API
    is_manual_override: bool = False
    effective_to: Optional[datetime] = None
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self):
        object.__setattr__(self, "rate", to_decimal(self.rate))
        object.__setattr__(self, "source", RateSource(self.source))
        if self.rate <= 0:
            raise ValueError(f"rate must be positive, got {self.rate}")
        if self.base_currency == self.target_currency:
            raise ValueError("base_currency and target_currency must be different")

    @property
    def is_active(self) -> bool:
        return self.effective_to is None

    def convert(self, amount: Decimal) -> Decimal:
        return (amount * self.rate).quantize(Decimal("0.000001"))


@dataclass(frozen=True)
class ExchangeRateHistoryEntry:

    base_currency: str
    target_currency: str
    rate: Decimal
    recorded_at: datetime
    previous_rate: Optional[Decimal] = None
    change_percentage: Optional[Decimal] = None
    source: RateSource = RateSource.API
    is_manual_override: bool = False
    id: UUID = field(default_factory=uuid4)

    def __post_init__(self):
        object.__setattr__(self, "rate", to_decimal(self.rate))
        object.__setattr__(self, "source", RateSource(self.source))


@dataclass(frozen=True)
class CurrencyConversion:

    original_amount: Decimal
    converted_amount: Decimal
    from_currency: str
    to_currency: str
    exchange_rate: Decimal
    timestamp: datetime


@dataclass(frozen=True)
class ConversionRequest:

    amount: Decimal
    from_currency: str
    to_currency: str
