# store_core/charges/personnel.py
"""
Personnel salary allocation.

A line item's cost is stored as one PersonnelWeekSalary row per week.
Rows are replaced (delete matching keys, then insert) and never edited in
place; callers run these functions inside their own transaction.atomic block
so a reader never sees a half-replaced set.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Mapping

from rest_framework.exceptions import ValidationError

from store_core.charges import weeks
from store_core.charges.models import (
    ChargePeriod,
    FixedCharge,
    PersonnelEmployee,
    PersonnelWeekSalary,
    SalaryByPeriod,
)
from store_core.common.api.exceptions import CalendarComputationError
from store_core.common.money import ZERO, q2, q4, to_decimal

logger = logging.getLogger(__name__)


def _positive(value, field_name: str) -> Decimal:
    amount = to_decimal(value, field_name)
    if amount <= 0:
        raise ValidationError({field_name: "Amount must be > 0."})
    return q2(amount)


def _require_month(month_key: str) -> None:
    if not weeks.is_valid_month_key(month_key):
        raise ValidationError({"month_key": "Invalid month key. Expected YYYY-MM."})


def _require_week(week_key: str, month_key: str | None) -> None:
    if not weeks.is_valid_week_key(week_key):
        raise ValidationError({"week_key": f"Invalid week key: {week_key}. Expected a Monday as YYYY-MM-DD."})
    if month_key is not None and not weeks.week_overlaps_month(week_key, month_key):
        raise ValidationError({"week_key": f"Week {week_key} does not overlap month {month_key}."})


def split_monthly_amount(amount: Decimal, month_key: str) -> dict[str, Decimal]:
    """
    Splits a monthly figure over the weeks belonging to the month.

    Each week gets amount / n (4-decimal division, rounded to cents); the
    rounding residue goes to the first week so the parts sum to `amount`.
    """
    month_weeks = weeks.weeks_belonging_to_month(month_key)
    if not month_weeks:
        logger.warning("Month %s resolved to zero weeks", month_key)
        raise CalendarComputationError(f"Month {month_key} has no weeks.")

    per_week = q2(q4(amount / Decimal(len(month_weeks))))
    parts = {w.week_key: per_week for w in month_weeks}

    residue = amount - per_week * len(month_weeks)
    if residue:
        first = month_weeks[0].week_key
        parts[first] = parts[first] + residue
    return parts


def week_amount(line: PersonnelEmployee, week_key: str) -> Decimal:
    row = PersonnelWeekSalary.objects.filter(personnel_employee=line, week_key=week_key).only("amount").first()
    return row.amount if row else ZERO


def month_total(line: PersonnelEmployee, month_key: str | None) -> Decimal:
    rows = PersonnelWeekSalary.objects.filter(personnel_employee=line)
    if month_key is not None:
        rows = rows.filter(month_key=month_key)
    return q2(sum((r.amount for r in rows), ZERO))


def distribute_monthly_salary(line: PersonnelEmployee, monthly_amount, month_key: str) -> list[PersonnelWeekSalary]:
    amount = _positive(monthly_amount, "salary")
    _require_month(month_key)

    parts = split_monthly_amount(amount, month_key)

    PersonnelWeekSalary.objects.filter(personnel_employee=line, month_key=month_key).delete()
    rows = PersonnelWeekSalary.objects.bulk_create(
        [
            PersonnelWeekSalary(personnel_employee=line, week_key=key, amount=value, month_key=month_key)
            for key, value in parts.items()
        ]
    )

    line.salary = amount
    line.month_salary = amount
    line.salary_by_period = SalaryByPeriod.MONTH
    line.save(update_fields=["salary", "month_salary", "salary_by_period", "updated_at"])

    logger.info(
        "Distributed monthly salary line=%s month=%s amount=%s weeks=%d",
        line.id, month_key, amount, len(rows),
    )
    return rows


def set_weekly_salary(line: PersonnelEmployee, weekly_amount, week_key: str, month_key: str) -> PersonnelWeekSalary:
    amount = _positive(weekly_amount, "salary")
    _require_month(month_key)
    _require_week(week_key, month_key)

    PersonnelWeekSalary.objects.filter(personnel_employee=line, week_key=week_key).delete()
    row = PersonnelWeekSalary.objects.create(
        personnel_employee=line,
        week_key=week_key,
        amount=amount,
        month_key=weeks.month_key_for_week(week_key),
    )

    line.salary = amount
    line.month_salary = month_total(line, month_key)
    line.salary_by_period = SalaryByPeriod.WEEK
    line.save(update_fields=["salary", "month_salary", "salary_by_period", "updated_at"])

    logger.info("Set weekly salary line=%s week=%s amount=%s", line.id, week_key, amount)
    return row


def update_week_salaries(
    line: PersonnelEmployee,
    updates: Mapping[str, object],
    month_key: str | None,
    period: str | None = None,
) -> list[PersonnelWeekSalary]:
    """
    Replaces exactly the weeks named in `updates`; other rows are untouched.
    Every key and amount is checked before anything is written.
    """
    if month_key is not None:
        _require_month(month_key)

    cleaned: dict[str, Decimal] = {}
    for key, value in updates.items():
        _require_week(key, month_key)
        cleaned[key] = _positive(value, f"week_salaries.{key}")

    if not cleaned:
        return []

    PersonnelWeekSalary.objects.filter(personnel_employee=line, week_key__in=list(cleaned)).delete()
    rows = PersonnelWeekSalary.objects.bulk_create(
        [
            PersonnelWeekSalary(
                personnel_employee=line,
                week_key=key,
                amount=value,
                month_key=weeks.month_key_for_week(key),
            )
            for key, value in sorted(cleaned.items())
        ]
    )

    total = month_total(line, month_key)
    line.month_salary = total
    line.salary = total
    if period is not None:
        line.salary_by_period = SalaryByPeriod.MONTH if period == ChargePeriod.MONTH else SalaryByPeriod.WEEK
    line.save(update_fields=["salary", "month_salary", "salary_by_period", "updated_at"])

    logger.info("Updated %d week salaries line=%s month=%s", len(rows), line.id, month_key)
    return rows


def discard_week_rows(charge: FixedCharge) -> int:
    """Deletes every week row of the charge's line items, keeping the lines."""
    deleted, _ = PersonnelWeekSalary.objects.filter(personnel_employee__fixed_charge=charge).delete()
    return deleted


def discard_all(charge: FixedCharge) -> int:
    """Deletes every line item of the charge; week rows go with them."""
    count = PersonnelEmployee.objects.filter(fixed_charge=charge).count()
    PersonnelEmployee.objects.filter(fixed_charge=charge).delete()
    if count:
        logger.info("Discarded %d personnel lines charge=%s", count, charge.id)
    return count
