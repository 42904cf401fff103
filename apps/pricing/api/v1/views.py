"""
ViewSets for the pricing API v1.
"""

import logging

from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.currency.application.services import get_currency_registry
from apps.currency.domain.exceptions import ConfigurationError
from apps.pricing.api.v1.serializers import (
    CartSerializer,
    DiscountSerializer,
    PriceQuoteSerializer,
)
from apps.pricing.application.services import price_cart
from apps.pricing.domain.exceptions import InvalidCartError
from apps.pricing.infrastructure.persistence.models import Discount

logger = logging.getLogger(__name__)


@extend_schema(tags=['Pricing'])
class PricingViewSet(viewsets.ViewSet):

    @extend_schema(
        request=CartSerializer,
        responses=PriceQuoteSerializer,
        description="Price a cart against the active discounts. "
                    "Optionally project the total into a display currency."
    )
    @action(detail=False, methods=['post'], url_path='quote')
    def quote(self, request):
        payload = CartSerializer(data=request.data)
        if not payload.is_valid():
            return Response(payload.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            base_code = get_currency_registry().get_base().code
        except ConfigurationError as e:
            return Response({"error": str(e)}, status=status.HTTP_503_SERVICE_UNAVAILABLE)

        # Fixed and capped discount amounts are base-currency values
        requested = payload.validated_data.get("currency")
        if requested and requested != base_code:
            return Response(
                {"error": f"Carts are priced in the base currency {base_code}, got {requested}"},
                status=status.HTTP_400_BAD_REQUEST,
            )

        try:
            quote = price_cart(
                payload.to_cart(base_code),
                display_currency=payload.validated_data["display_currency"],
            )
        except InvalidCartError as e:
            logger.info("Rejected cart: %s", e)
            return Response({"error": str(e)}, status=status.HTTP_400_BAD_REQUEST)

        return Response(PriceQuoteSerializer(quote).data)


@extend_schema(tags=['Pricing'])
class DiscountViewSet(viewsets.ReadOnlyModelViewSet):
    """Configured discounts. Editing happens in the admin."""

    queryset = Discount.objects.prefetch_related('conditions').order_by('created_at', 'id')
    serializer_class = DiscountSerializer
