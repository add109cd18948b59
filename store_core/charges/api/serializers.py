# store_core/charges/api/serializers.py
from __future__ import annotations

from drf_spectacular.types import OpenApiTypes
from drf_spectacular.utils import extend_schema_field
from rest_framework import serializers

from store_core.charges.models import (
    ChargeCategory,
    ChargePeriod,
    Employee,
    EmployeeType,
    FixedCharge,
    VariableCharge,
)
from store_core.charges.selectors import accumulated_month_amount, is_weekly_personnel

MONEY = serializers.DecimalField(max_digits=12, decimal_places=2)


class FixedChargeSerializer(serializers.ModelSerializer):
    month_amount = serializers.SerializerMethodField()

    class Meta:
        model = FixedCharge
        fields = [
            "id",
            "store_id",
            "category",
            "amount",
            "month_amount",
            "period",
            "month_key",
            "week_key",
            "trend",
            "trend_percentage",
            "previous_amount",
            "abnormal_increase",
            "notes",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    @extend_schema_field(OpenApiTypes.DECIMAL)
    def get_month_amount(self, obj: FixedCharge) -> str | None:
        # weekly personnel charges store one week; this is the month so far
        if not is_weekly_personnel(obj):
            return None
        return MONEY.to_representation(accumulated_month_amount(obj))


class EmployeeSerializer(serializers.ModelSerializer):
    class Meta:
        model = Employee
        fields = ["id", "name", "type", "position", "start_date"]
        read_only_fields = fields


class PersonnelEmployeeInputSerializer(serializers.Serializer):
    """
    One employee on a personnel charge.

    - id: reuse a master employee of the store
    - otherwise name (+ type, start_date) finds or creates the master record
    - salary: the month figure for MONTH charges, the week figure for WEEK charges
    - week_salaries: {"YYYY-MM-DD": amount} replaces just those weeks
    """
    id = serializers.UUIDField(required=False, allow_null=True)
    name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    type = serializers.ChoiceField(choices=EmployeeType.choices, required=False, allow_null=True)
    position = serializers.CharField(required=False, allow_blank=True, max_length=128)
    start_date = serializers.DateField(required=False, allow_null=True)
    salary = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    hours = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    week_salaries = serializers.DictField(
        child=serializers.DecimalField(max_digits=12, decimal_places=2),
        required=False,
    )


class FixedChargeCreateSerializer(serializers.Serializer):
    category = serializers.ChoiceField(choices=ChargeCategory.choices)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    period = serializers.ChoiceField(choices=ChargePeriod.choices, default=ChargePeriod.MONTH)
    month_key = serializers.CharField(max_length=7)
    week_key = serializers.CharField(max_length=10, required=False, allow_blank=True, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    employees = PersonnelEmployeeInputSerializer(many=True, required=False)


class FixedChargeUpdateSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    period = serializers.ChoiceField(choices=ChargePeriod.choices, required=False)
    month_key = serializers.CharField(max_length=7, required=False)
    week_key = serializers.CharField(max_length=10, required=False, allow_blank=True, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True)
    employees = PersonnelEmployeeInputSerializer(many=True, required=False)


class ChartPointSerializer(serializers.Serializer):
    period = serializers.CharField()
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)


class PersonnelLineSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    employee_id = serializers.UUIDField()
    name = serializers.CharField()
    type = serializers.CharField()
    position = serializers.CharField()
    start_date = serializers.DateField(allow_null=True)
    salary = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    hours = serializers.IntegerField(allow_null=True)
    salary_by_period = serializers.CharField(allow_null=True)
    month_salary = serializers.DecimalField(max_digits=12, decimal_places=2)
    week_salaries = serializers.DictField(child=serializers.DecimalField(max_digits=12, decimal_places=2))


class PersonnelGroupSerializer(serializers.Serializer):
    type = serializers.CharField()
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    employees = PersonnelLineSerializer(many=True)


class FixedChargeDetailSerializer(serializers.Serializer):
    """Wraps the dict built by selectors.fixed_charge_detail."""
    charge = FixedChargeSerializer()
    month_key = serializers.CharField()
    month_amount = serializers.DecimalField(max_digits=12, decimal_places=2, allow_null=True)
    personnel_data = PersonnelGroupSerializer(many=True)
    chart_data = ChartPointSerializer(many=True)


class PersonnelLastPeriodSerializer(serializers.Serializer):
    period = serializers.ChoiceField(choices=[("week", "week"), ("month", "month")], allow_null=True)


class VariableChargeSerializer(serializers.ModelSerializer):
    class Meta:
        model = VariableCharge
        fields = [
            "id",
            "store_id",
            "name",
            "amount",
            "date",
            "category",
            "supplier",
            "notes",
            "purchase_order_url",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class VariableChargeWriteSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    amount = serializers.DecimalField(max_digits=12, decimal_places=2)
    date = serializers.DateField()
    category = serializers.CharField(max_length=64, required=False, allow_blank=True, default="")
    supplier = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    notes = serializers.CharField(required=False, allow_blank=True, default="")
    purchase_order_url = serializers.URLField(max_length=1024, required=False, allow_blank=True, default="")
