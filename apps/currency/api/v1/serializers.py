"""
Serializers for the currency bounded context.
Handles validation and transformation between API, domain and ORM layers.
"""

from decimal import Decimal

from rest_framework import serializers

from apps.currency.infrastructure.persistence.models import Currency


class CurrencySerializer(serializers.ModelSerializer):
    class Meta:
        model = Currency
        fields = [
            "id",
            "code",
            "name",
            "symbol",
            "symbol_position",
            "decimal_places",
            "is_active",
            "is_base_currency",
        ]
        read_only_fields = ["id"]

    def validate_code(self, value: str) -> str:
        return value.upper()


class ExchangeRateSerializer(serializers.Serializer):
    """Read-only representation of a domain ExchangeRate."""
    id = serializers.UUIDField(read_only=True)
    base_currency = serializers.CharField(read_only=True)
    target_currency = serializers.CharField(read_only=True)
    rate = serializers.DecimalField(max_digits=None, decimal_places=None, read_only=True)
    source = serializers.CharField(source="source.value", read_only=True)
    is_manual_override = serializers.BooleanField(read_only=True)
    effective_from = serializers.DateTimeField(read_only=True)
    effective_to = serializers.DateTimeField(read_only=True, allow_null=True)


class ExchangeRateHistorySerializer(serializers.Serializer):
    """Read-only representation of a domain ExchangeRateHistoryEntry."""
    id = serializers.UUIDField(read_only=True)
    base_currency = serializers.CharField(read_only=True)
    target_currency = serializers.CharField(read_only=True)
    rate = serializers.DecimalField(max_digits=None, decimal_places=None, read_only=True)
    previous_rate = serializers.DecimalField(max_digits=None, decimal_places=None, read_only=True, allow_null=True)
    change_percentage = serializers.DecimalField(max_digits=None, decimal_places=None, read_only=True, allow_null=True)
    source = serializers.CharField(source="source.value", read_only=True)
    is_manual_override = serializers.BooleanField(read_only=True)
    recorded_at = serializers.DateTimeField(read_only=True)


class CurrencyConversionSerializer(serializers.Serializer):
    original_amount = serializers.DecimalField(max_digits=None, decimal_places=None, read_only=True)
    converted_amount = serializers.DecimalField(max_digits=None, decimal_places=None, read_only=True)
    from_currency = serializers.CharField(read_only=True)
    to_currency = serializers.CharField(read_only=True)
    exchange_rate = serializers.DecimalField(max_digits=None, decimal_places=None, read_only=True)
    timestamp = serializers.DateTimeField(read_only=True)


class ConversionRequestSerializer(serializers.Serializer):
    from_currency = serializers.CharField(max_length=3, min_length=3)
    to_currency = serializers.CharField(max_length=3, min_length=3)
    amount = serializers.DecimalField(max_digits=20, decimal_places=6, min_value=Decimal("0"))

    def validate_from_currency(self, value: str) -> str:
        return value.upper()

    def validate_to_currency(self, value: str) -> str:
        return value.upper()


class BatchConversionRequestSerializer(serializers.Serializer):
    items = ConversionRequestSerializer(many=True, allow_empty=False)


class ManualRateSerializer(serializers.Serializer):
    base_currency = serializers.CharField(max_length=3, min_length=3)
    target_currency = serializers.CharField(max_length=3, min_length=3)
    rate = serializers.DecimalField(max_digits=15, decimal_places=8)

    def validate_base_currency(self, value: str) -> str:
        return value.upper()

    def validate_target_currency(self, value: str) -> str:
        return value.upper()

    def validate_rate(self, value: Decimal) -> Decimal:
        if value <= 0:
            raise serializers.ValidationError("Rate must be positive.")
        return value

    def validate(self, attrs):
        if attrs["base_currency"] == attrs["target_currency"]:
            raise serializers.ValidationError("base_currency and target_currency must be different.")
        return attrs


class StaleQuerySerializer(serializers.Serializer):
    base = serializers.CharField(max_length=3, min_length=3)
    target = serializers.CharField(max_length=3, min_length=3)
    max_age_minutes = serializers.IntegerField(min_value=0, default=60)
