# store_core/api/urls.py
from __future__ import annotations

from django.urls import include, path
from rest_framework.routers import DefaultRouter
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from store_core.charges.api.views import FixedChargeViewSet, VariableChargeViewSet
from store_core.statistics.api.views import ChargesDetailView, StatisticsView

router = DefaultRouter()

router.register(r"charges/fixed", FixedChargeViewSet, basename="fixed-charges")
router.register(r"charges/variable", VariableChargeViewSet, basename="variable-charges")

urlpatterns = [
    # Auth (JWT)
    path("auth/token/", TokenObtainPairView.as_view(), name="token-obtain"),
    path("auth/token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),

    # Statistics
    path("statistics/", StatisticsView.as_view(), name="statistics"),
    path("statistics/charges-detail/", ChargesDetailView.as_view(), name="statistics-charges-detail"),

    path("", include(router.urls)),
]
