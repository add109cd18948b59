from __future__ import annotations

from rest_framework import serializers

AMOUNT = dict(max_digits=14, decimal_places=2)
PERCENT = dict(max_digits=9, decimal_places=2)


class KpiSerializer(serializers.Serializer):
    revenue = serializers.DecimalField(**AMOUNT)
    charges = serializers.DecimalField(**AMOUNT)
    profit = serializers.DecimalField(**AMOUNT)
    revenue_evolution = serializers.DecimalField(**PERCENT)
    charges_percentage = serializers.DecimalField(**PERCENT)
    profit_percentage = serializers.DecimalField(**PERCENT)
    charges_status = serializers.CharField()
    profit_status = serializers.CharField()


class ChartPointSerializer(serializers.Serializer):
    period = serializers.CharField()
    revenue = serializers.DecimalField(**AMOUNT)
    charges = serializers.DecimalField(**AMOUNT)
    profit = serializers.DecimalField(**AMOUNT)


class ChargeItemSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    name = serializers.CharField()
    amount = serializers.DecimalField(**AMOUNT)
    percentage_of_charges = serializers.DecimalField(**PERCENT)
    percentage_of_revenue = serializers.DecimalField(**PERCENT)
    category = serializers.CharField()
    status = serializers.CharField()
    date = serializers.DateField(required=False)
    supplier = serializers.CharField(required=False, allow_blank=True)


class ChargesBreakdownSerializer(serializers.Serializer):
    fixed = ChargeItemSerializer(many=True)
    variable = ChargeItemSerializer(many=True)


class StatisticsSerializer(serializers.Serializer):
    period = serializers.CharField()
    start = serializers.DateField()
    end = serializers.DateField()
    kpi = KpiSerializer()
    chart_data = ChartPointSerializer(many=True)
    charges = ChargesBreakdownSerializer()


class ChargesStatisticsSerializer(serializers.Serializer):
    total_charges = serializers.DecimalField(**AMOUNT)
    total_fixed_charges = serializers.DecimalField(**AMOUNT)
    total_variable_charges = serializers.DecimalField(**AMOUNT)
    item_count = serializers.IntegerField()
    percentage_of_all_charges = serializers.DecimalField(**PERCENT)
    ca_percentage = serializers.DecimalField(**PERCENT)
    revenue = serializers.DecimalField(**AMOUNT)


class ChargesDetailSerializer(serializers.Serializer):
    period = serializers.CharField()
    start = serializers.DateField()
    end = serializers.DateField()
    statistics = ChargesStatisticsSerializer()
    fixed_charges = ChargeItemSerializer(many=True)
    variable_charges = ChargeItemSerializer(many=True)
