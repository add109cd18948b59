# store_core/charges/admin.py
from __future__ import annotations

from django.contrib import admin

from store_core.charges.models import Employee, FixedCharge, PersonnelEmployee, PersonnelWeekSalary, VariableCharge


class PersonnelEmployeeInline(admin.TabularInline):
    model = PersonnelEmployee
    extra = 0
    fields = ("employee", "salary", "month_salary", "salary_by_period", "hours")
    readonly_fields = ("month_salary",)


@admin.register(FixedCharge)
class FixedChargeAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "store_id",
        "category",
        "period",
        "month_key",
        "week_key",
        "amount",
        "trend",
        "trend_percentage",
        "abnormal_increase",
        "created_at",
    )
    list_filter = ("category", "period", "abnormal_increase")
    search_fields = ("id", "month_key", "week_key")
    ordering = ("-month_key", "-week_key")
    inlines = [PersonnelEmployeeInline]


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ("id", "store_id", "name", "type", "position", "start_date")
    list_filter = ("type",)
    search_fields = ("name", "position")


@admin.register(PersonnelWeekSalary)
class PersonnelWeekSalaryAdmin(admin.ModelAdmin):
    list_display = ("id", "personnel_employee", "week_key", "month_key", "amount")
    search_fields = ("week_key", "month_key")
    ordering = ("-week_key",)


@admin.register(VariableCharge)
class VariableChargeAdmin(admin.ModelAdmin):
    list_display = ("id", "store_id", "name", "date", "amount", "category", "supplier")
    list_filter = ("category",)
    search_fields = ("name", "supplier", "notes")
    ordering = ("-date",)
