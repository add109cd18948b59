from __future__ import annotations

import django_filters
from rest_framework.exceptions import ValidationError

from store_core.charges.models import (
    ChargeCategory,
    ChargePeriod,
    Employee,
    EmployeeType,
    FixedCharge,
    VariableCharge,
)


class FixedChargeFilter(django_filters.FilterSet):
    month = django_filters.CharFilter(field_name="month_key")
    category = django_filters.ChoiceFilter(choices=ChargeCategory.choices)
    period = django_filters.ChoiceFilter(choices=ChargePeriod.choices)

    class Meta:
        model = FixedCharge
        fields = ["month", "category", "period"]


class EmployeeFilter(django_filters.FilterSet):
    type = django_filters.ChoiceFilter(choices=EmployeeType.choices)

    class Meta:
        model = Employee
        fields = ["type"]


class VariableChargeFilter(django_filters.FilterSet):
    start_date = django_filters.DateFilter(field_name="date", lookup_expr="gte")
    end_date = django_filters.DateFilter(field_name="date", lookup_expr="lte")
    category = django_filters.CharFilter()

    class Meta:
        model = VariableCharge
        fields = ["start_date", "end_date", "category"]


def cleaned_params(filterset_class, query_params) -> dict:
    """Validates query params with a FilterSet; returns only the ones supplied."""
    fs = filterset_class(data=query_params)
    if not fs.is_valid():
        raise ValidationError(fs.errors)
    return {k: v for k, v in fs.form.cleaned_data.items() if v not in (None, "")}
