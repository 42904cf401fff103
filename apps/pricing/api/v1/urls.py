from django.urls import path, include
from rest_framework.routers import DefaultRouter

from apps.pricing.api.v1.views import (
    DiscountViewSet,
    PricingViewSet,
)

router = DefaultRouter()
router.register(r'pricing', PricingViewSet, basename='pricing')
router.register(r'pricing/discounts', DiscountViewSet, basename='discount')

urlpatterns = [
    path('', include(router.urls)),
]
