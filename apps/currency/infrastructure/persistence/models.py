"""
Django ORM models for persistence.
Infrastructure layer: technical storage detail.
"""

import uuid
from django.db import models
from django.db.models import Q
from django.utils import timezone


class BaseModel(models.Model):

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class SymbolPosition(models.TextChoices):
    BEFORE = "before", "Before amount"
    AFTER = "after", "After amount"


class RateSource(models.TextChoices):
    API = "api", "API"
    MANUAL = "manual", "Manual"
    FALLBACK = "fallback", "Fallback"


class Currency(BaseModel):

    code = models.CharField(max_length=3, unique=True)
    name = models.CharField(max_length=50, db_index=True)
    symbol = models.CharField(max_length=10)
    symbol_position = models.CharField(
        max_length=6,
        choices=SymbolPosition.choices,
        default=SymbolPosition.BEFORE,
    )
    decimal_places = models.PositiveSmallIntegerField(default=2)
    is_active = models.BooleanField(default=True)
    is_base_currency = models.BooleanField(
        default=False,
        help_text="Exactly one active currency should be the base currency.",
    )

    class Meta:
        verbose_name_plural = "currencies"
        ordering = ["code"]

    def __str__(self):
        return f"{self.code} ({self.symbol})"


class CurrencyExchangeRate(BaseModel):

    base_currency = models.CharField(max_length=3, db_index=True)
    target_currency = models.CharField(max_length=3, db_index=True)
    rate = models.DecimalField(max_digits=15, decimal_places=8)
    source = models.CharField(max_length=10, choices=RateSource.choices, default=RateSource.API)
    is_manual_override = models.BooleanField(default=False)
    effective_from = models.DateTimeField(default=timezone.now, db_index=True)
    effective_to = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Empty while the rate is active.",
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["base_currency", "target_currency"],
                condition=Q(effective_to__isnull=True),
                name="unique_active_rate_per_pair",
            ),
            models.CheckConstraint(
                condition=Q(rate__gt=0),
                name="exchange_rate_positive",
            ),
        ]
        ordering = ["base_currency", "target_currency", "-effective_from"]

    def __str__(self):
        status = "active" if self.effective_to is None else f"until {self.effective_to:%Y-%m-%d %H:%M}"
        return f"{self.base_currency}/{self.target_currency} | {self.rate} | {status}"


class ExchangeRateHistory(BaseModel):

    base_currency = models.CharField(max_length=3)
    target_currency = models.CharField(max_length=3)
    rate = models.DecimalField(max_digits=15, decimal_places=8)
    previous_rate = models.DecimalField(max_digits=15, decimal_places=8, null=True, blank=True)
    change_percentage = models.DecimalField(max_digits=24, decimal_places=4, null=True, blank=True)
    source = models.CharField(max_length=10, choices=RateSource.choices, default=RateSource.API)
    is_manual_override = models.BooleanField(default=False)
    recorded_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        verbose_name_plural = "exchange rate history"
        ordering = ["-recorded_at", "-created_at"]
        indexes = [
            models.Index(fields=["base_currency", "target_currency"], name="history_pair_idx"),
        ]

    def __str__(self):
        return f"{self.base_currency}/{self.target_currency} | {self.rate} | {self.recorded_at:%Y-%m-%d %H:%M}"
