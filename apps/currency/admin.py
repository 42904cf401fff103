"""
Django Admin configuration for the currency app.
Rates and history are read-only here: changes go through the rate store so
that supersession and history stay consistent.
"""

from django.contrib import admin

from apps.currency.infrastructure.persistence.models import (
    Currency,
    CurrencyExchangeRate,
    ExchangeRateHistory,
)


@admin.register(Currency)
class CurrencyAdmin(admin.ModelAdmin):
    """Admin interface for Currency model."""

    list_display = ('code', 'name', 'symbol', 'symbol_position', 'decimal_places', 'is_active', 'is_base_currency')
    list_filter = ('is_active', 'is_base_currency')
    search_fields = ('code', 'name')
    readonly_fields = ('id', 'created_at', 'updated_at')
    ordering = ('code',)

    fieldsets = (
        ('Currency Information', {
            'fields': ('code', 'name', 'symbol', 'symbol_position', 'decimal_places')
        }),
        ('Status', {
            'fields': ('is_active', 'is_base_currency')
        }),
        ('Metadata', {
            'fields': ('id', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )


class ReadOnlyAdmin(admin.ModelAdmin):

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(CurrencyExchangeRate)
class CurrencyExchangeRateAdmin(ReadOnlyAdmin):
    """Admin interface for CurrencyExchangeRate model."""

    list_display = (
        'get_currency_pair',
        'rate',
        'source',
        'is_manual_override',
        'effective_from',
        'effective_to',
    )
    list_filter = ('source', 'is_manual_override', 'base_currency', 'target_currency')
    search_fields = ('base_currency', 'target_currency')
    date_hierarchy = 'effective_from'
    ordering = ('base_currency', 'target_currency', '-effective_from')

    @admin.display(description='Currency Pair', ordering='base_currency')
    def get_currency_pair(self, obj):
        """Display currency pair in format BASE/TARGET."""
        return f"{obj.base_currency}/{obj.target_currency}"


@admin.register(ExchangeRateHistory)
class ExchangeRateHistoryAdmin(ReadOnlyAdmin):
    """Admin interface for ExchangeRateHistory model."""

    list_display = (
        'base_currency',
        'target_currency',
        'rate',
        'previous_rate',
        'change_percentage',
        'source',
        'recorded_at',
    )
    list_filter = ('source', 'is_manual_override', 'base_currency', 'target_currency')
    date_hierarchy = 'recorded_at'
    ordering = ('-recorded_at',)
