"""
Data Transfer Objects for the application layer.
DTOs decouple internal domain models from external API contracts.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class RateRefreshResultDTO:
    """Result DTO for the exchange rate refresh task."""
    success: bool
    base_currency: Optional[str]
    rates_updated: int = 0
    source: Optional[str] = None
    provider_used: Optional[str] = None
    currencies_updated: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    message: str = ""
