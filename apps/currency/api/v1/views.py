"""
ViewSets for the currency API v1.
Read endpoints for currencies and rates, conversion, history and manual overrides.
"""

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.currency.api.v1.serializers import (
    BatchConversionRequestSerializer,
    ConversionRequestSerializer,
    CurrencyConversionSerializer,
    CurrencySerializer,
    ExchangeRateHistorySerializer,
    ExchangeRateSerializer,
    ManualRateSerializer,
    StaleQuerySerializer,
)
from apps.currency.application.services import (
    get_conversion_service,
    get_currency_registry,
    get_rate_store,
    update_manual_rate,
)
from apps.currency.domain.exceptions import ConcurrentUpdateConflict, ConfigurationError
from apps.currency.domain.models import ConversionRequest
from apps.currency.infrastructure.persistence.models import Currency


def configuration_error_response(error: ConfigurationError) -> Response:
    return Response({"error": str(error)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)


@extend_schema(tags=['Currencies'])
class CurrencyViewSet(viewsets.ReadOnlyModelViewSet):

    queryset = Currency.objects.filter(is_active=True)
    serializer_class = CurrencySerializer

    @extend_schema(description="The single active base currency")
    @action(detail=False, methods=['get'], url_path='base')
    def base(self, request):
        try:
            base = get_currency_registry().get_base()
        except ConfigurationError as e:
            return configuration_error_response(e)

        serializer = self.get_serializer(Currency.objects.get(code=base.code))
        return Response(serializer.data)


@extend_schema(tags=['Rates'])
class ExchangeRateViewSet(viewsets.ViewSet):

    @extend_schema(
        parameters=[
            OpenApiParameter("base", OpenApiTypes.STR, description="Base currency code (defaults to the configured base)"),
        ],
        responses=ExchangeRateSerializer(many=True),
        description="Active exchange rates for a base currency"
    )
    def list(self, request):
        base_code = request.query_params.get('base')
        if not base_code:
            try:
                base_code = get_currency_registry().get_base().code
            except ConfigurationError as e:
                return configuration_error_response(e)

        rates = get_rate_store().all_active(base_code)
        return Response({
            "base_currency": base_code.upper(),
            "rates": ExchangeRateSerializer(rates, many=True).data,
        })

    @extend_schema(
        parameters=[
            OpenApiParameter("from_currency", OpenApiTypes.STR, required=True, description="Source currency code (e.g. USD)"),
            OpenApiParameter("to_currency", OpenApiTypes.STR, required=True, description="Target currency code (e.g. EUR)"),
            OpenApiParameter("amount", OpenApiTypes.DECIMAL, required=True, description="Amount to convert"),
        ],
        responses=CurrencyConversionSerializer,
        description="Convert an amount using the current rate. Missing rates resolve to 1.0."
    )
    @action(detail=False, methods=['get'], url_path='convert')
    def convert(self, request):
        query = ConversionRequestSerializer(data=request.query_params)
        if not query.is_valid():
            return Response(query.errors, status=status.HTTP_400_BAD_REQUEST)

        service = get_conversion_service()
        conversion = service.convert(**query.validated_data)
        data = CurrencyConversionSerializer(conversion).data
        data["formatted"] = service.format(conversion.converted_amount, conversion.to_currency)
        return Response(data)

    @extend_schema(
        request=BatchConversionRequestSerializer,
        responses=CurrencyConversionSerializer(many=True),
        description="Convert several amounts independently, preserving order"
    )
    @action(detail=False, methods=['post'], url_path='batch-convert')
    def batch_convert(self, request):
        payload = BatchConversionRequestSerializer(data=request.data)
        if not payload.is_valid():
            return Response(payload.errors, status=status.HTTP_400_BAD_REQUEST)

        items = [ConversionRequest(**item) for item in payload.validated_data["items"]]
        conversions = get_conversion_service().batch_convert(items)
        return Response(CurrencyConversionSerializer(conversions, many=True).data)

    @extend_schema(
        parameters=[
            OpenApiParameter("base", OpenApiTypes.STR, required=True, description="Base currency code"),
            OpenApiParameter("target", OpenApiTypes.STR, required=True, description="Target currency code"),
            OpenApiParameter("limit", OpenApiTypes.INT, description="Maximum entries (default 100)"),
        ],
        responses=ExchangeRateHistorySerializer(many=True),
        description="Rate change history for a pair, newest first"
    )
    @action(detail=False, methods=['get'], url_path='history')
    def history(self, request):
        base_code = request.query_params.get('base')
        target_code = request.query_params.get('target')
        limit_str = request.query_params.get('limit', '100')

        if not all([base_code, target_code]):
            return Response(
                {"error": "base and target are required"},
                status=status.HTTP_400_BAD_REQUEST
            )

        try:
            limit = int(limit_str)
        except ValueError:
            return Response(
                {"error": "Invalid limit. Must be an integer"},
                status=status.HTTP_400_BAD_REQUEST
            )

        entries = get_rate_store().ledger.query(base_code, target_code, limit)
        return Response(ExchangeRateHistorySerializer(entries, many=True).data)

    @extend_schema(
        request=ManualRateSerializer,
        responses={201: ExchangeRateSerializer},
        description="Set a manual override rate. Supersedes the active rate for the pair."
    )
    @action(detail=False, methods=['post'], url_path='manual')
    def manual(self, request):
        payload = ManualRateSerializer(data=request.data)
        if not payload.is_valid():
            return Response(payload.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            new_rate = update_manual_rate(**payload.validated_data)
        except ConcurrentUpdateConflict as e:
            return Response({"error": str(e)}, status=status.HTTP_409_CONFLICT)
        except ValueError as e:
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(ExchangeRateSerializer(new_rate).data, status=status.HTTP_201_CREATED)

    @extend_schema(
        parameters=[
            OpenApiParameter("base", OpenApiTypes.STR, required=True, description="Base currency code"),
            OpenApiParameter("target", OpenApiTypes.STR, required=True, description="Target currency code"),
            OpenApiParameter("max_age_minutes", OpenApiTypes.INT, description="Staleness threshold (default 60)"),
        ],
        description="Whether the active rate for a pair is missing or older than the threshold"
    )
    @action(detail=False, methods=['get'], url_path='stale')
    def stale(self, request):
        query = StaleQuerySerializer(data=request.query_params)
        if not query.is_valid():
            return Response(query.errors, status=status.HTTP_400_BAD_REQUEST)

        base_code = query.validated_data["base"].upper()
        target_code = query.validated_data["target"].upper()
        store = get_rate_store()
        return Response({
            "base_currency": base_code,
            "target_currency": target_code,
            "has_rate": store.has_rate(base_code, target_code),
            "is_stale": store.is_stale(base_code, target_code, query.validated_data["max_age_minutes"]),
        })
