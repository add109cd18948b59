# store_core/charges/services.py
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Mapping
from uuid import UUID

from django.conf import settings
from django.db import transaction
from rest_framework.exceptions import NotFound, ValidationError

from store_core.charges import personnel, weeks
from store_core.charges.models import (
    ChargeCategory,
    ChargePeriod,
    Employee,
    EmployeeType,
    FixedCharge,
    PersonnelEmployee,
    TrendDirection,
    VariableCharge,
)
from store_core.common.money import ZERO, percentage, q2, to_decimal

logger = logging.getLogger(__name__)


def _abnormal_threshold() -> Decimal:
    return Decimal(str(getattr(settings, "STORE_TREND_ABNORMAL_THRESHOLD", "20")))


def _choice(value: str | None, choices, field_name: str) -> str | None:
    if value is None:
        return None
    value = str(value).strip().upper()
    if value not in choices.values:
        raise ValidationError({field_name: f"Invalid {field_name}: {value}."})
    return value


def _positive_amount(value, field_name: str = "amount") -> Decimal:
    amount = q2(to_decimal(value, field_name))
    if amount <= 0:
        raise ValidationError({field_name: "Amount must be > 0."})
    return amount


class TrendService:
    @staticmethod
    def previous_charge(charge: FixedCharge) -> FixedCharge | None:
        qs = FixedCharge.objects.filter(
            store_id=charge.store_id,
            category=charge.category,
            period=charge.period,
        ).exclude(id=charge.id)

        if charge.period == ChargePeriod.WEEK:
            qs = qs.filter(week_key__lt=charge.week_key)
        else:
            qs = qs.filter(month_key__lt=charge.month_key)

        return qs.order_by("-month_key", "-week_key").first()

    @staticmethod
    def apply(charge: FixedCharge) -> None:
        """Sets the trend fields in memory; the caller saves."""
        previous = TrendService.previous_charge(charge)
        if previous is None:
            charge.trend = None
            charge.trend_percentage = None
            charge.previous_amount = None
            charge.abnormal_increase = False
            return

        delta = charge.amount - previous.amount
        pct = percentage(delta, previous.amount)

        if delta > 0:
            direction = TrendDirection.UP
        elif delta < 0:
            direction = TrendDirection.DOWN
        else:
            direction = TrendDirection.STABLE

        charge.trend = direction
        charge.trend_percentage = pct
        charge.previous_amount = previous.amount
        charge.abnormal_increase = pct > _abnormal_threshold()


class FixedChargeService:
    @staticmethod
    def _validate_keys(*, period: str, month_key: str | None, week_key: str | None) -> str:
        """Returns the week key to store ("" for monthly charges)."""
        if not month_key or not weeks.is_valid_month_key(month_key):
            raise ValidationError({"month_key": "Invalid month key. Expected YYYY-MM."})

        if period != ChargePeriod.WEEK:
            return ""

        if not week_key:
            raise ValidationError({"week_key": "Week key is required for weekly charges."})
        if not weeks.is_valid_week_key(week_key):
            raise ValidationError({"week_key": "Invalid week key. Expected a Monday as YYYY-MM-DD."})
        if not weeks.week_overlaps_month(week_key, month_key):
            raise ValidationError({"week_key": f"Week {week_key} does not overlap month {month_key}."})
        return week_key

    @staticmethod
    def _check_entries(entries: Iterable[Mapping[str, Any]], *, require_salary: bool) -> None:
        for i, entry in enumerate(entries):
            if not entry.get("id") and not (entry.get("name") or "").strip():
                raise ValidationError({"employees": {i: "Employee name is required."}})

            salary = entry.get("salary")
            if salary is not None and to_decimal(salary, "salary") <= 0:
                raise ValidationError({"employees": {i: "Salary must be > 0."}})

            if require_salary and salary is None and not entry.get("week_salaries"):
                raise ValidationError({"employees": {i: "Salary is required for a new employee."}})

    @staticmethod
    def _resolve_employee(*, store_id: UUID, entry: Mapping[str, Any]) -> Employee:
        """
        Reuses a master Employee by id, or by (name, type, start_date) within
        the store; otherwise creates one.
        """
        emp_id = entry.get("id")
        if emp_id:
            emp = Employee.objects.filter(store_id=store_id, id=emp_id).first()
            if emp is None:
                raise NotFound("Employee not found.")
            return emp

        name = (entry.get("name") or "").strip()
        emp_type = _choice(entry.get("type"), EmployeeType, "type") or EmployeeType.SERVER
        start_date: date | None = entry.get("start_date")

        emp, created = Employee.objects.get_or_create(
            store_id=store_id,
            name=name,
            type=emp_type,
            start_date=start_date,
            defaults={"position": (entry.get("position") or "").strip()},
        )
        if created:
            logger.info("Created employee id=%s store=%s", emp.id, store_id)
        return emp

    @staticmethod
    def _apply_salary(line: PersonnelEmployee, salary: Decimal, charge: FixedCharge) -> None:
        if charge.period == ChargePeriod.MONTH:
            personnel.distribute_monthly_salary(line, salary, charge.month_key)
        else:
            personnel.set_weekly_salary(line, salary, charge.week_key, charge.month_key)

    @staticmethod
    def _apply_entry(line: PersonnelEmployee, entry: Mapping[str, Any], charge: FixedCharge) -> None:
        week_salaries = entry.get("week_salaries")
        if week_salaries:
            personnel.update_week_salaries(line, week_salaries, charge.month_key, charge.period)
            return

        salary = entry.get("salary")
        if salary is not None:
            FixedChargeService._apply_salary(line, to_decimal(salary, "salary"), charge)

    @staticmethod
    def _add_lines(charge: FixedCharge, entries: Iterable[Mapping[str, Any]]) -> None:
        for entry in entries:
            emp = FixedChargeService._resolve_employee(store_id=charge.store_id, entry=entry)
            line = PersonnelEmployee.objects.create(fixed_charge=charge, employee=emp, hours=entry.get("hours"))
            FixedChargeService._apply_entry(line, entry, charge)

    @staticmethod
    def _sync_lines(charge: FixedCharge, entries: list[Mapping[str, Any]]) -> None:
        """
        Matches request entries to existing lines by master employee.
        Unmatched entries become new lines; lines absent from the request are removed.
        """
        existing = {line.employee_id: line for line in PersonnelEmployee.objects.filter(fixed_charge=charge)}
        seen: set[UUID] = set()

        for i, entry in enumerate(entries):
            emp = FixedChargeService._resolve_employee(store_id=charge.store_id, entry=entry)
            line = existing.get(emp.id)

            if line is None:
                if entry.get("salary") is None and not entry.get("week_salaries"):
                    raise ValidationError({"employees": {i: "Salary is required for a new employee."}})
                line = PersonnelEmployee.objects.create(fixed_charge=charge, employee=emp, hours=entry.get("hours"))
                existing[emp.id] = line
            elif entry.get("hours") is not None:
                line.hours = entry["hours"]
                line.save(update_fields=["hours", "updated_at"])

            FixedChargeService._apply_entry(line, entry, charge)
            seen.add(emp.id)

        stale = [line.id for emp_id, line in existing.items() if emp_id not in seen]
        if stale:
            PersonnelEmployee.objects.filter(id__in=stale).delete()

    @staticmethod
    def _reapply_salaries(charge: FixedCharge) -> None:
        """Moves every line's last salary onto the charge's current month/week."""
        personnel.discard_week_rows(charge)
        for line in PersonnelEmployee.objects.filter(fixed_charge=charge):
            if line.salary is not None and line.salary > 0:
                FixedChargeService._apply_salary(line, line.salary, charge)

    @staticmethod
    def derived_amount(charge: FixedCharge) -> Decimal:
        lines = PersonnelEmployee.objects.filter(fixed_charge=charge)
        if charge.period == ChargePeriod.WEEK:
            return q2(sum((personnel.week_amount(line, charge.week_key) for line in lines), ZERO))
        return q2(sum((personnel.month_total(line, charge.month_key) for line in lines), ZERO))

    @staticmethod
    @transaction.atomic
    def create(
        *,
        store_id: UUID,
        category: str,
        month_key: str,
        period: str | None = None,
        week_key: str | None = None,
        amount=None,
        notes: str = "",
        employees: list[Mapping[str, Any]] | None = None,
    ) -> FixedCharge:
        category = _choice(category, ChargeCategory, "category")
        if category is None:
            raise ValidationError({"category": "This field is required."})
        period = _choice(period, ChargePeriod, "period") or ChargePeriod.MONTH
        week_key = FixedChargeService._validate_keys(period=period, month_key=month_key, week_key=week_key)

        # a zero amount on a personnel charge means "derive it"
        given = None if amount is None else q2(to_decimal(amount, "amount"))

        if category == ChargeCategory.PERSONNEL:
            if not employees:
                raise ValidationError({"employees": "At least one employee is required for personnel charges."})
            FixedChargeService._check_entries(employees, require_salary=True)
            if given is not None and given < 0:
                raise ValidationError({"amount": "Amount must be > 0."})
        else:
            if period != ChargePeriod.MONTH:
                raise ValidationError({"period": "Only personnel charges can be weekly."})
            if given is None:
                raise ValidationError({"amount": "Amount is required for non-personnel charges."})
            given = _positive_amount(given)

        charge = FixedCharge.objects.create(
            store_id=store_id,
            category=category,
            period=period,
            month_key=month_key,
            week_key=week_key,
            amount=given or ZERO,
            notes=notes or "",
        )

        if category == ChargeCategory.PERSONNEL:
            FixedChargeService._add_lines(charge, employees)
            if not given:
                charge.amount = FixedChargeService.derived_amount(charge)

        TrendService.apply(charge)
        charge.save()

        logger.info(
            "Fixed charge created id=%s store=%s category=%s period=%s key=%s amount=%s",
            charge.id, store_id, category, period, week_key or month_key, charge.amount,
        )
        return charge

    @staticmethod
    @transaction.atomic
    def update(
        *,
        store_id: UUID,
        charge_id: UUID,
        amount=None,
        period: str | None = None,
        month_key: str | None = None,
        week_key: str | None = None,
        notes: str | None = None,
        employees: list[Mapping[str, Any]] | None = None,
    ) -> FixedCharge:
        """
        Partial update: arguments left as None keep their stored value.

        Switching the period (MONTH <-> WEEK) of a personnel charge drops every
        line item and week row, then rebuilds them from `employees` (required).
        Moving the charge to another month or week re-applies each line's
        salary there.
        """
        charge = FixedCharge.objects.select_for_update().filter(store_id=store_id, id=charge_id).first()
        if charge is None:
            raise NotFound("Fixed charge not found.")

        is_personnel = charge.category == ChargeCategory.PERSONNEL

        new_period = _choice(period, ChargePeriod, "period") or charge.period
        new_month = month_key or charge.month_key
        if week_key is None and new_period == charge.period:
            week_key = charge.week_key
        new_week = FixedChargeService._validate_keys(period=new_period, month_key=new_month, week_key=week_key)

        if not is_personnel and new_period != ChargePeriod.MONTH:
            raise ValidationError({"period": "Only personnel charges can be weekly."})

        given = None
        if amount is not None:
            given = _positive_amount(amount)
        elif not is_personnel and charge.amount <= 0:
            raise ValidationError({"amount": "Amount is required for non-personnel charges."})

        period_changed = new_period != charge.period
        rekeyed = new_month != charge.month_key or new_week != charge.week_key

        if is_personnel and period_changed and employees is None:
            raise ValidationError({"employees": "Employees are required when changing the period."})

        if employees is not None:
            if is_personnel and not employees:
                raise ValidationError({"employees": "At least one employee is required for personnel charges."})
            FixedChargeService._check_entries(employees, require_salary=is_personnel and period_changed)

        charge.period = new_period
        charge.month_key = new_month
        charge.week_key = new_week
        if notes is not None:
            charge.notes = notes

        if is_personnel:
            if period_changed:
                personnel.discard_all(charge)
                FixedChargeService._add_lines(charge, employees)
            else:
                if rekeyed:
                    FixedChargeService._reapply_salaries(charge)
                if employees is not None:
                    FixedChargeService._sync_lines(charge, employees)

        if given is not None:
            charge.amount = given
        elif is_personnel and (employees is not None or period_changed or rekeyed):
            charge.amount = FixedChargeService.derived_amount(charge)

        TrendService.apply(charge)
        charge.save()

        logger.info(
            "Fixed charge updated id=%s store=%s period=%s key=%s amount=%s period_changed=%s",
            charge.id, store_id, charge.period, charge.week_key or charge.month_key, charge.amount, period_changed,
        )
        return charge

    @staticmethod
    @transaction.atomic
    def delete(*, store_id: UUID, charge_id: UUID) -> None:
        charge = FixedCharge.objects.select_for_update().filter(store_id=store_id, id=charge_id).first()
        if charge is None:
            raise NotFound("Fixed charge not found.")

        charge.delete()
        logger.info("Fixed charge deleted id=%s store=%s", charge_id, store_id)


class VariableChargeService:
    UPDATABLE_FIELDS = ("name", "amount", "date", "category", "supplier", "notes", "purchase_order_url")

    @staticmethod
    @transaction.atomic
    def create(
        *,
        store_id: UUID,
        name: str,
        amount,
        date: date,
        category: str = "",
        supplier: str = "",
        notes: str = "",
        purchase_order_url: str = "",
    ) -> VariableCharge:
        name = (name or "").strip()
        if not name:
            raise ValidationError({"name": "This field is required."})
        if date is None:
            raise ValidationError({"date": "This field is required."})

        charge = VariableCharge.objects.create(
            store_id=store_id,
            name=name,
            amount=_positive_amount(amount),
            date=date,
            category=(category or "").strip(),
            supplier=(supplier or "").strip(),
            notes=notes or "",
            purchase_order_url=purchase_order_url or "",
        )
        logger.info("Variable charge created id=%s store=%s amount=%s date=%s", charge.id, store_id, charge.amount, date)
        return charge

    @staticmethod
    @transaction.atomic
    def update(*, store_id: UUID, charge_id: UUID, **changes) -> VariableCharge:
        charge = VariableCharge.objects.select_for_update().filter(store_id=store_id, id=charge_id).first()
        if charge is None:
            raise NotFound("Variable charge not found.")

        unknown = set(changes) - set(VariableChargeService.UPDATABLE_FIELDS)
        if unknown:
            raise ValidationError({field: "Unknown field." for field in sorted(unknown)})

        updated = []
        for field, value in changes.items():
            if value is None:
                continue
            if field == "amount":
                value = _positive_amount(value)
            elif field == "name":
                value = value.strip()
                if not value:
                    raise ValidationError({"name": "This field may not be blank."})
            setattr(charge, field, value)
            updated.append(field)

        if updated:
            charge.save(update_fields=updated + ["updated_at"])
            logger.info("Variable charge updated id=%s store=%s fields=%s", charge.id, store_id, ",".join(updated))
        return charge

    @staticmethod
    @transaction.atomic
    def delete(*, store_id: UUID, charge_id: UUID) -> None:
        deleted, _ = VariableCharge.objects.filter(store_id=store_id, id=charge_id).delete()
        if not deleted:
            raise NotFound("Variable charge not found.")
        logger.info("Variable charge deleted id=%s store=%s", charge_id, store_id)
