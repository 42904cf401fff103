"""
Django Admin configuration for the pricing app.
"""

from django.contrib import admin

from apps.pricing.infrastructure.persistence.models import Discount, DiscountCondition


class DiscountConditionInline(admin.TabularInline):
    model = DiscountCondition
    extra = 0
    fields = ('type', 'operator', 'value', 'min_quantity')


@admin.register(Discount)
class DiscountAdmin(admin.ModelAdmin):
    """Admin interface for Discount model."""

    list_display = ('name', 'type', 'value', 'valid_from', 'valid_to', 'active')
    list_filter = ('type', 'active')
    search_fields = ('name', 'description')
    readonly_fields = ('id', 'created_at', 'updated_at')
    ordering = ('created_at',)
    inlines = [DiscountConditionInline]

    fieldsets = (
        ('Discount', {
            'fields': ('name', 'description', 'type', 'value', 'free_gift_products')
        }),
        ('Limits', {
            'fields': ('min_amount', 'max_discount')
        }),
        ('Validity', {
            'fields': ('valid_from', 'valid_to', 'valid_days', 'active')
        }),
        ('Metadata', {
            'fields': ('id', 'created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )
