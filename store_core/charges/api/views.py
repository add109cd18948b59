from __future__ import annotations

from uuid import UUID

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.response import Response

from store_core.charges.api.filters import EmployeeFilter, FixedChargeFilter, VariableChargeFilter, cleaned_params
from store_core.charges.api.serializers import (
    EmployeeSerializer,
    FixedChargeCreateSerializer,
    FixedChargeDetailSerializer,
    FixedChargeSerializer,
    FixedChargeUpdateSerializer,
    PersonnelLastPeriodSerializer,
    VariableChargeSerializer,
    VariableChargeWriteSerializer,
)
from store_core.charges.models import FixedCharge, VariableCharge
from store_core.charges.selectors import (
    fixed_charge_detail,
    get_fixed_charge,
    get_variable_charge,
    list_employees,
    list_fixed_charges,
    list_fixed_charges_for_week,
    list_variable_charges,
)
from store_core.charges.services import FixedChargeService, VariableChargeService
from store_core.common.api.pagination import paginate
from store_core.common.scope import require_store_scope
from store_core.stores.services import PreferenceService

UUID_RE = r"[0-9a-fA-F-]{36}"


def _pk(value) -> UUID:
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise NotFound("Not found.")


class FixedChargeViewSet(viewsets.GenericViewSet):
    """
    Fixed (recurring) charges of the caller's store.
    PUT and PATCH both apply partial updates: omitted fields keep their value.
    """
    serializer_class = FixedChargeSerializer
    queryset = FixedCharge.objects.none()
    lookup_value_regex = UUID_RE

    @extend_schema(
        tags=["Charges"],
        responses={200: FixedChargeSerializer(many=True)},
        parameters=[
            OpenApiParameter(
                name="month",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Month key YYYY-MM (defaults to the current month).",
            ),
            OpenApiParameter(name="category", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="period", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        scope = require_store_scope(request)
        params = cleaned_params(FixedChargeFilter, request.query_params)

        qs = list_fixed_charges(
            store_id=scope.store_id,
            month_key=params.get("month"),
            category=params.get("category"),
            period=params.get("period"),
        )
        return paginate(request, qs, FixedChargeSerializer)

    @extend_schema(
        tags=["Charges"],
        responses={200: FixedChargeDetailSerializer},
        parameters=[
            OpenApiParameter(
                name="month",
                type=OpenApiTypes.STR,
                location=OpenApiParameter.QUERY,
                required=False,
                description="Month whose week amounts and history are shown (defaults to the charge's month).",
            ),
        ],
    )
    def retrieve(self, request, pk=None):
        scope = require_store_scope(request)

        detail = fixed_charge_detail(
            store_id=scope.store_id,
            charge_id=_pk(pk),
            month_key=request.query_params.get("month") or None,
        )
        return Response(FixedChargeDetailSerializer(detail).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Charges"],
        request=FixedChargeCreateSerializer,
        responses={201: FixedChargeSerializer},
    )
    def create(self, request):
        scope = require_store_scope(request)

        ser = FixedChargeCreateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        charge = FixedChargeService.create(
            store_id=scope.store_id,
            category=data["category"],
            period=data.get("period"),
            month_key=data["month_key"],
            week_key=data.get("week_key") or None,
            amount=data.get("amount"),
            notes=data.get("notes", ""),
            employees=data.get("employees"),
        )
        charge = get_fixed_charge(store_id=scope.store_id, charge_id=charge.id)
        return Response(FixedChargeSerializer(charge).data, status=status.HTTP_201_CREATED)

    def _update(self, request, pk):
        scope = require_store_scope(request)

        ser = FixedChargeUpdateSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data

        charge = FixedChargeService.update(
            store_id=scope.store_id,
            charge_id=_pk(pk),
            amount=data.get("amount"),
            period=data.get("period"),
            month_key=data.get("month_key"),
            week_key=data.get("week_key") or None,
            notes=data.get("notes"),
            employees=data.get("employees"),
        )
        charge = get_fixed_charge(store_id=scope.store_id, charge_id=charge.id)
        return Response(FixedChargeSerializer(charge).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Charges"], request=FixedChargeUpdateSerializer, responses={200: FixedChargeSerializer})
    def update(self, request, pk=None):
        return self._update(request, pk)

    @extend_schema(tags=["Charges"], request=FixedChargeUpdateSerializer, responses={200: FixedChargeSerializer})
    def partial_update(self, request, pk=None):
        return self._update(request, pk)

    @extend_schema(tags=["Charges"], responses={204: None})
    def destroy(self, request, pk=None):
        scope = require_store_scope(request)
        FixedChargeService.delete(store_id=scope.store_id, charge_id=_pk(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(
        tags=["Charges"],
        responses={200: FixedChargeSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="category", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    @action(
        detail=False,
        methods=["get"],
        url_path=r"month/(?P<month>\d{4}-\d{2})/week/(?P<week>\d{4}-\d{2}-\d{2})",
    )
    def by_week(self, request, month=None, week=None):
        scope = require_store_scope(request)
        params = cleaned_params(FixedChargeFilter, request.query_params)

        qs = list_fixed_charges_for_week(
            store_id=scope.store_id,
            month_key=month,
            week_key=week,
            category=params.get("category"),
        )
        return Response(FixedChargeSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Charges"],
        responses={200: EmployeeSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="type", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    @action(detail=False, methods=["get"], url_path="personnel/employees")
    def employees(self, request):
        scope = require_store_scope(request)
        params = cleaned_params(EmployeeFilter, request.query_params)

        qs = list_employees(store_id=scope.store_id, type=params.get("type"))
        return Response(EmployeeSerializer(qs, many=True).data, status=status.HTTP_200_OK)

    @extend_schema(
        tags=["Charges"],
        request=PersonnelLastPeriodSerializer,
        responses={200: PersonnelLastPeriodSerializer},
    )
    @action(detail=False, methods=["get", "put"], url_path="personnel/last-period")
    def last_period(self, request):
        if request.method == "GET":
            period = PreferenceService.get_personnel_last_period(user_id=request.user.id)
            return Response({"period": period}, status=status.HTTP_200_OK)

        ser = PersonnelLastPeriodSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        period = PreferenceService.set_personnel_last_period(
            user_id=request.user.id,
            period=ser.validated_data.get("period") or "",
        )
        return Response({"period": period}, status=status.HTTP_200_OK)


class VariableChargeViewSet(viewsets.GenericViewSet):
    """
    One-off dated charges of the caller's store.
    """
    serializer_class = VariableChargeSerializer
    queryset = VariableCharge.objects.none()
    lookup_value_regex = UUID_RE

    @extend_schema(
        tags=["Charges"],
        responses={200: VariableChargeSerializer(many=True)},
        parameters=[
            OpenApiParameter(name="start_date", type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="end_date", type=OpenApiTypes.DATE, location=OpenApiParameter.QUERY, required=False),
            OpenApiParameter(name="category", type=OpenApiTypes.STR, location=OpenApiParameter.QUERY, required=False),
        ],
    )
    def list(self, request):
        scope = require_store_scope(request)
        params = cleaned_params(VariableChargeFilter, request.query_params)

        qs = list_variable_charges(
            store_id=scope.store_id,
            start_date=params.get("start_date"),
            end_date=params.get("end_date"),
            category=params.get("category"),
        )
        return paginate(request, qs, VariableChargeSerializer)

    @extend_schema(tags=["Charges"], responses={200: VariableChargeSerializer})
    def retrieve(self, request, pk=None):
        scope = require_store_scope(request)
        charge = get_variable_charge(store_id=scope.store_id, charge_id=_pk(pk))
        return Response(VariableChargeSerializer(charge).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Charges"], request=VariableChargeWriteSerializer, responses={201: VariableChargeSerializer})
    def create(self, request):
        scope = require_store_scope(request)

        ser = VariableChargeWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        charge = VariableChargeService.create(store_id=scope.store_id, **ser.validated_data)
        return Response(VariableChargeSerializer(charge).data, status=status.HTTP_201_CREATED)

    def _update(self, request, pk, *, partial: bool):
        scope = require_store_scope(request)

        ser = VariableChargeWriteSerializer(data=request.data, partial=partial)
        ser.is_valid(raise_exception=True)

        charge = VariableChargeService.update(store_id=scope.store_id, charge_id=_pk(pk), **ser.validated_data)
        return Response(VariableChargeSerializer(charge).data, status=status.HTTP_200_OK)

    @extend_schema(tags=["Charges"], request=VariableChargeWriteSerializer, responses={200: VariableChargeSerializer})
    def update(self, request, pk=None):
        # optional fields left out of a PUT are cleared
        return self._update(request, pk, partial=False)

    @extend_schema(tags=["Charges"], request=VariableChargeWriteSerializer, responses={200: VariableChargeSerializer})
    def partial_update(self, request, pk=None):
        return self._update(request, pk, partial=True)

    @extend_schema(tags=["Charges"], responses={204: None})
    def destroy(self, request, pk=None):
        scope = require_store_scope(request)
        VariableChargeService.delete(store_id=scope.store_id, charge_id=_pk(pk))
        return Response(status=status.HTTP_204_NO_CONTENT)
