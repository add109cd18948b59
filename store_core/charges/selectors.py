# store_core/charges/selectors.py
from __future__ import annotations

from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from django.db.models import Prefetch, QuerySet
from django.utils import timezone
from rest_framework.exceptions import NotFound, ValidationError

from store_core.charges import weeks
from store_core.charges.models import (
    ChargeCategory,
    ChargePeriod,
    Employee,
    EmployeeType,
    FixedCharge,
    PersonnelEmployee,
    VariableCharge,
)
from store_core.common.money import ZERO, q2


def _month_or_400(month_key: str, field_name: str = "month") -> str:
    if not weeks.is_valid_month_key(month_key):
        raise ValidationError({field_name: "Invalid month. Expected YYYY-MM."})
    return month_key


def _week_or_400(week_key: str, field_name: str = "week") -> str:
    if not weeks.is_valid_week_key(week_key):
        raise ValidationError({field_name: "Invalid week. Expected a Monday as YYYY-MM-DD."})
    return week_key


# -------------------------------------------------------------------
# Fixed charges
# -------------------------------------------------------------------

def fixed_charges_qs(*, store_id: UUID) -> QuerySet[FixedCharge]:
    return FixedCharge.objects.filter(store_id=store_id)


def _with_lines(qs: QuerySet[FixedCharge]) -> QuerySet[FixedCharge]:
    return qs.prefetch_related(
        Prefetch(
            "employees",
            queryset=PersonnelEmployee.objects.select_related("employee").prefetch_related("week_salaries"),
        )
    )


def list_fixed_charges(
    *,
    store_id: UUID,
    month_key: str | None = None,
    category: str | None = None,
    period: str | None = None,
) -> QuerySet[FixedCharge]:
    month_key = _month_or_400(month_key) if month_key else weeks.month_key(timezone.localdate())

    qs = fixed_charges_qs(store_id=store_id).filter(month_key=month_key)
    if category:
        qs = qs.filter(category=category)
    if period:
        qs = qs.filter(period=period)
    return _with_lines(qs).order_by("category", "week_key", "created_at")


def list_fixed_charges_for_week(
    *,
    store_id: UUID,
    month_key: str,
    week_key: str,
    category: str | None = None,
) -> QuerySet[FixedCharge]:
    _month_or_400(month_key)
    _week_or_400(week_key)

    qs = fixed_charges_qs(store_id=store_id).filter(month_key=month_key, week_key=week_key)
    if category:
        qs = qs.filter(category=category)
    return _with_lines(qs).order_by("category", "created_at")


def get_fixed_charge(*, store_id: UUID, charge_id: UUID) -> FixedCharge:
    # charges of another store look exactly like missing ones
    charge = _with_lines(fixed_charges_qs(store_id=store_id)).filter(id=charge_id).first()
    if charge is None:
        raise NotFound("Fixed charge not found.")
    return charge


def accumulated_month_amount(charge: FixedCharge, month_key: str | None = None) -> Decimal:
    """
    Sum of the charge's week rows for a month.
    Used for weekly personnel charges, whose stored amount covers one week only.
    """
    month_key = month_key or charge.month_key
    total = ZERO
    for line in charge.employees.all():
        total += sum((r.amount for r in line.week_salaries.all() if r.month_key == month_key), ZERO)
    return q2(total)


def is_weekly_personnel(charge: FixedCharge) -> bool:
    return charge.category == ChargeCategory.PERSONNEL and charge.period == ChargePeriod.WEEK


def _month_label(month_key: str) -> str:
    first = weeks.parse_month_key(month_key)
    return first.strftime("%b %Y") if first else month_key


def charge_history(*, store_id: UUID, charge: FixedCharge, month_key: str) -> list[dict[str, Any]]:
    """Same category/period charges up to `month_key`, newest first."""
    qs = (
        fixed_charges_qs(store_id=store_id)
        .filter(category=charge.category, period=charge.period, month_key__lte=month_key)
        .order_by("-month_key", "-week_key")
    )
    return [{"period": _month_label(c.month_key), "amount": c.amount} for c in qs]


def _line_view(line: PersonnelEmployee, month_key: str) -> dict[str, Any]:
    rows = sorted(
        (r for r in line.week_salaries.all() if r.month_key == month_key),
        key=lambda r: r.week_key,
    )
    emp = line.employee
    return {
        "id": line.id,
        "employee_id": emp.id,
        "name": emp.name,
        "type": emp.type,
        "position": emp.position,
        "start_date": emp.start_date,
        "salary": line.salary,
        "hours": line.hours,
        "salary_by_period": line.salary_by_period,
        "month_salary": q2(sum((r.amount for r in rows), ZERO)),
        "week_salaries": OrderedDict((r.week_key, r.amount) for r in rows),
    }


def personnel_breakdown(charge: FixedCharge, month_key: str) -> list[dict[str, Any]]:
    """Line items grouped by employee type, week amounts limited to `month_key`."""
    groups: "OrderedDict[str, list[dict[str, Any]]]" = OrderedDict()
    for line in sorted(charge.employees.all(), key=lambda l: (l.employee.type, l.employee.name)):
        view = _line_view(line, month_key)
        groups.setdefault(view["type"] or EmployeeType.SERVER, []).append(view)

    return [
        {
            "type": emp_type,
            "total_amount": q2(sum((v["month_salary"] for v in items), ZERO)),
            "employees": items,
        }
        for emp_type, items in groups.items()
    ]


def fixed_charge_detail(*, store_id: UUID, charge_id: UUID, month_key: str | None = None) -> dict[str, Any]:
    charge = get_fixed_charge(store_id=store_id, charge_id=charge_id)
    month_key = _month_or_400(month_key) if month_key else charge.month_key

    personnel = []
    if charge.category == ChargeCategory.PERSONNEL:
        personnel = personnel_breakdown(charge, month_key)

    return {
        "charge": charge,
        "month_key": month_key,
        "month_amount": accumulated_month_amount(charge, month_key) if is_weekly_personnel(charge) else None,
        "personnel_data": personnel,
        "chart_data": charge_history(store_id=store_id, charge=charge, month_key=month_key),
    }


# Statistics inputs

def monthly_charges(*, store_id: UUID, month_key: str) -> QuerySet[FixedCharge]:
    return fixed_charges_qs(store_id=store_id).filter(month_key=month_key, period=ChargePeriod.MONTH)


def weekly_charges(*, store_id: UUID, week_key: str) -> QuerySet[FixedCharge]:
    return fixed_charges_qs(store_id=store_id).filter(week_key=week_key, period=ChargePeriod.WEEK)


# -------------------------------------------------------------------
# Employees
# -------------------------------------------------------------------

def employees_qs(*, store_id: UUID) -> QuerySet[Employee]:
    return Employee.objects.filter(store_id=store_id)


def list_employees(*, store_id: UUID, type: str | None = None) -> QuerySet[Employee]:
    qs = employees_qs(store_id=store_id)
    if type:
        qs = qs.filter(type=type)
    return qs.order_by("name", "start_date")


# -------------------------------------------------------------------
# Variable charges
# -------------------------------------------------------------------

def variable_charges_qs(*, store_id: UUID) -> QuerySet[VariableCharge]:
    return VariableCharge.objects.filter(store_id=store_id)


def list_variable_charges(
    *,
    store_id: UUID,
    start_date: date | None = None,
    end_date: date | None = None,
    category: str | None = None,
) -> QuerySet[VariableCharge]:
    qs = variable_charges_qs(store_id=store_id)
    if start_date:
        qs = qs.filter(date__gte=start_date)
    if end_date:
        qs = qs.filter(date__lte=end_date)
    if category:
        qs = qs.filter(category=category)
    return qs.order_by("-date", "-created_at")


def get_variable_charge(*, store_id: UUID, charge_id: UUID) -> VariableCharge:
    charge = variable_charges_qs(store_id=store_id).filter(id=charge_id).first()
    if charge is None:
        raise NotFound("Variable charge not found.")
    return charge


def variable_charges_between(*, store_id: UUID, start: date, end: date) -> QuerySet[VariableCharge]:
    return variable_charges_qs(store_id=store_id).filter(date__gte=start, date__lte=end).order_by("date", "created_at")
