from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from store_core.common.scope import require_store_scope
from store_core.statistics.api.serializers import ChargesDetailSerializer, StatisticsSerializer
from store_core.statistics.services import StatisticsService


class StatisticsView(APIView):
    """
    GET /api/v1/statistics/?period=day|week|month&date=...
    """

    @extend_schema(
        tags=["Statistics"],
        responses={200: StatisticsSerializer},
        parameters=[
            OpenApiParameter(
                name="period",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=True,
                enum=["day", "week", "month"],
            ),
            OpenApiParameter(
                name="date",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="YYYY-MM-DD (YYYY-MM also accepted for month). Defaults to today.",
            ),
        ],
    )
    def get(self, request):
        scope = require_store_scope(request)

        data = StatisticsService.get_statistics(
            store_id=scope.store_id,
            period=request.query_params.get("period", ""),
            anchor=request.query_params.get("date") or None,
        )
        return Response(StatisticsSerializer(data).data, status=status.HTTP_200_OK)


class ChargesDetailView(APIView):
    """
    GET /api/v1/statistics/charges-detail/?period=week|month&month=YYYY-MM&week=YYYY-MM-DD
    """

    @extend_schema(
        tags=["Statistics"],
        responses={200: ChargesDetailSerializer},
        parameters=[
            OpenApiParameter(
                name="period",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=True,
                enum=["week", "month"],
            ),
            OpenApiParameter(name="month", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="week", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def get(self, request):
        scope = require_store_scope(request)

        data = StatisticsService.get_charges_detail(
            store_id=scope.store_id,
            period=request.query_params.get("period", ""),
            month=request.query_params.get("month") or None,
            week=request.query_params.get("week") or None,
        )
        return Response(ChargesDetailSerializer(data).data, status=status.HTTP_200_OK)
