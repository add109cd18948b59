# store_core/statistics/services.py
"""
Profit & loss roll-ups over a day, a week or a month.

Fixed charges are prorated into the window:

    window   MONTH charge                    WEEK charge
    day      amount / days in month          amount / 7 (same week only)
    week     amount / weeks of the month     full amount (same week only)
    month    full amount                     not counted

Variable charges count at full value on their date. Revenue comes from the
configured RevenueSource; days without a figure count as zero.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Union
from uuid import UUID

from django.utils import timezone
from django.utils.dateparse import parse_date
from rest_framework.exceptions import ValidationError

from store_core.charges import weeks
from store_core.charges.models import ChargeCategory, FixedCharge, VariableCharge
from store_core.charges.selectors import monthly_charges, variable_charges_between, weekly_charges
from store_core.common.api.exceptions import CalendarComputationError
from store_core.common.money import ZERO, divide, evolution, percentage, q2
from store_core.revenue.sources import RevenueSource, get_revenue_source

logger = logging.getLogger(__name__)

DAY = "day"
WEEK = "week"
MONTH = "month"
PERIODS = (DAY, WEEK, MONTH)

DAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")
MONTH_CHART_SIZE = 4

CHARGE_NAMES = {
    ChargeCategory.PERSONNEL: "Personnel",
    ChargeCategory.WATER: "Water",
    ChargeCategory.ELECTRICITY: "Electricity",
    ChargeCategory.WIFI: "WiFi",
}


@dataclass(frozen=True)
class Window:
    period: str
    start: date
    end: date

    def previous(self) -> "Window":
        if self.period == MONTH:
            prev_key = weeks.previous_month_key(weeks.month_key(self.start))
            first, last = weeks.month_bounds(prev_key)
            return Window(MONTH, first, last)
        span = (self.end - self.start).days + 1
        return Window(self.period, self.start - timedelta(days=span), self.end - timedelta(days=span))


def resolve_window(period: str, anchor: date) -> Window:
    if period == DAY:
        return Window(DAY, anchor, anchor)
    if period == WEEK:
        return Window(WEEK, weeks.monday_of(anchor), weeks.sunday_of(anchor))
    first, last = weeks.month_bounds(weeks.month_key(anchor))
    return Window(MONTH, first, last)


def parse_anchor(period: str, value: Union[str, date, None], field: str = "date") -> date:
    """
    Day/week anchors are dates (YYYY-MM-DD); a month anchor may also be a
    month key (YYYY-MM). Missing anchors mean today.
    """
    if value is None or value == "":
        return timezone.localdate()
    if isinstance(value, date):
        return value

    if period == MONTH and weeks.is_valid_month_key(value):
        return weeks.parse_month_key(value)

    message = "Invalid date. Expected YYYY-MM-DD" + (" or YYYY-MM." if period == MONTH else ".")
    try:
        parsed = parse_date(str(value))
    except ValueError:
        # well-formed but impossible, e.g. 2024-02-30
        raise ValidationError({field: message})
    if parsed is None:
        raise ValidationError({field: message})
    return parsed


def charges_status(pct: Decimal) -> str:
    if pct > 75:
        return "critical"
    if pct > 66:
        return "medium"
    return "good"


def profit_status(pct: Decimal) -> str:
    if pct >= 33:
        return "good"
    if pct >= 15:
        return "medium"
    return "critical"


def item_status(pct_of_revenue: Decimal) -> str:
    if pct_of_revenue > 20:
        return "critical"
    if pct_of_revenue > 10:
        return "medium"
    return "good"


def weeks_in_month(month_key: str) -> int:
    count = len(weeks.weeks_belonging_to_month(month_key))
    if not count:
        logger.warning("Month %s resolved to zero weeks", month_key)
        raise CalendarComputationError(f"Month {month_key} has no weeks.")
    return count


def prorated_fixed_charges(*, store_id: UUID, period: str, anchor: date) -> list[tuple[FixedCharge, Decimal]]:
    """(charge, effective amount) pairs for the window containing `anchor`."""
    if period == DAY:
        mk = weeks.month_key(anchor)
        days = weeks.days_in_month(mk)
        result = [(c, divide(c.amount, days)) for c in monthly_charges(store_id=store_id, month_key=mk)]
        result += [(c, divide(c.amount, 7)) for c in weekly_charges(store_id=store_id, week_key=weeks.week_key(anchor))]
        return result

    if period == WEEK:
        monday = weeks.monday_of(anchor)
        mk = weeks.month_key(monday)
        n = weeks_in_month(mk)
        result = [(c, divide(c.amount, n)) for c in monthly_charges(store_id=store_id, month_key=mk)]
        result += [(c, q2(c.amount)) for c in weekly_charges(store_id=store_id, week_key=weeks.week_key(monday))]
        return result

    mk = weeks.month_key(anchor)
    return [(c, q2(c.amount)) for c in monthly_charges(store_id=store_id, month_key=mk)]


def _sum(values) -> Decimal:
    return q2(sum(values, ZERO))


class StatisticsService:
    @staticmethod
    def _check_period(period: str, allowed=PERIODS) -> str:
        period = (period or "").strip().lower()
        if period not in allowed:
            raise ValidationError({"period": f"Invalid period. Must be one of: {', '.join(allowed)}."})
        return period

    @staticmethod
    def _point(*, source: RevenueSource, store_id: UUID, label: str, window: Window, fixed: Decimal) -> dict[str, Any]:
        revenue = source.revenue_between(store_id, window.start, window.end)
        variable = _sum(v.amount for v in variable_charges_between(store_id=store_id, start=window.start, end=window.end))
        charges = q2(fixed + variable)
        return {"period": label, "revenue": revenue, "charges": charges, "profit": q2(revenue - charges)}

    @staticmethod
    def chart_data(*, store_id: UUID, period: str, anchor: date, source: RevenueSource | None = None) -> list[dict[str, Any]]:
        """
        day   -> 7 points, Mon..Sun of the anchor's week
        week  -> one point per week belonging to the anchor week's month (W1..Wn)
        month -> 4 points, the anchor's month and the 3 before it, oldest first
        """
        source = source or get_revenue_source()
        points = []

        if period == DAY:
            monday = weeks.monday_of(anchor)
            for i, label in enumerate(DAY_LABELS):
                day = monday + timedelta(days=i)
                fixed = _sum(a for _, a in prorated_fixed_charges(store_id=store_id, period=DAY, anchor=day))
                points.append(
                    StatisticsService._point(
                        source=source, store_id=store_id, label=label, window=Window(DAY, day, day), fixed=fixed,
                    )
                )
            return points

        if period == WEEK:
            mk = weeks.month_key(weeks.monday_of(anchor))
            for i, info in enumerate(weeks.weeks_belonging_to_month(mk), start=1):
                fixed = _sum(a for _, a in prorated_fixed_charges(store_id=store_id, period=WEEK, anchor=info.start))
                points.append(
                    StatisticsService._point(
                        source=source, store_id=store_id, label=f"W{i}",
                        window=Window(WEEK, info.start, info.end), fixed=fixed,
                    )
                )
            return points

        current = weeks.month_key(anchor)
        for back in range(MONTH_CHART_SIZE - 1, -1, -1):
            mk = weeks.previous_month_key(current, back)
            first, last = weeks.month_bounds(mk)
            fixed = _sum(a for _, a in prorated_fixed_charges(store_id=store_id, period=MONTH, anchor=first))
            points.append(
                StatisticsService._point(
                    source=source, store_id=store_id, label=first.strftime("%b"),
                    window=Window(MONTH, first, last), fixed=fixed,
                )
            )
        return points

    @staticmethod
    def _fixed_item(charge: FixedCharge, amount: Decimal, total: Decimal, revenue: Decimal) -> dict[str, Any]:
        pct_revenue = percentage(amount, revenue)
        return {
            "id": charge.id,
            "name": CHARGE_NAMES.get(charge.category, charge.category),
            "amount": amount,
            "percentage_of_charges": percentage(amount, total),
            "percentage_of_revenue": pct_revenue,
            "category": "fixed",
            "status": item_status(pct_revenue),
        }

    @staticmethod
    def _variable_item(charge: VariableCharge, total: Decimal, revenue: Decimal) -> dict[str, Any]:
        amount = q2(charge.amount)
        pct_revenue = percentage(amount, revenue)
        return {
            "id": charge.id,
            "name": charge.name,
            "amount": amount,
            "percentage_of_charges": percentage(amount, total),
            "percentage_of_revenue": pct_revenue,
            "category": "variable",
            "status": item_status(pct_revenue),
            "date": charge.date,
            "supplier": charge.supplier,
        }

    @staticmethod
    def get_statistics(*, store_id: UUID, period: str, anchor: Union[str, date, None] = None) -> dict[str, Any]:
        period = StatisticsService._check_period(period)
        day = parse_anchor(period, anchor)
        window = resolve_window(period, day)
        previous = window.previous()

        source = get_revenue_source()
        revenue = source.revenue_between(store_id, window.start, window.end)
        previous_revenue = source.revenue_between(store_id, previous.start, previous.end)

        fixed = prorated_fixed_charges(store_id=store_id, period=period, anchor=day)
        variable = list(variable_charges_between(store_id=store_id, start=window.start, end=window.end))

        fixed_total = _sum(a for _, a in fixed)
        variable_total = _sum(v.amount for v in variable)
        charges = q2(fixed_total + variable_total)
        profit = q2(revenue - charges)

        charges_pct = percentage(charges, revenue)
        profit_pct = percentage(profit, revenue)

        return {
            "period": period,
            "start": window.start,
            "end": window.end,
            "kpi": {
                "revenue": revenue,
                "charges": charges,
                "profit": profit,
                "revenue_evolution": evolution(revenue, previous_revenue),
                "charges_percentage": charges_pct,
                "profit_percentage": profit_pct,
                "charges_status": charges_status(charges_pct),
                "profit_status": profit_status(profit_pct),
            },
            "chart_data": StatisticsService.chart_data(store_id=store_id, period=period, anchor=day, source=source),
            "charges": {
                "fixed": [StatisticsService._fixed_item(c, a, charges, revenue) for c, a in fixed],
                "variable": [StatisticsService._variable_item(v, charges, revenue) for v in variable],
            },
        }

    @staticmethod
    def get_charges_detail(
        *,
        store_id: UUID,
        period: str,
        month: str | None = None,
        week: Union[str, date, None] = None,
    ) -> dict[str, Any]:
        period = StatisticsService._check_period(period, allowed=(WEEK, MONTH))

        if period == WEEK:
            if not week:
                raise ValidationError({"week": "Week parameter is required for week period."})
            anchor = parse_anchor(WEEK, week, field="week")
        else:
            if not month or not weeks.is_valid_month_key(month):
                raise ValidationError({"month": "Invalid month. Expected YYYY-MM."})
            anchor = weeks.parse_month_key(month)

        window = resolve_window(period, anchor)
        revenue = get_revenue_source().revenue_between(store_id, window.start, window.end)

        fixed = prorated_fixed_charges(store_id=store_id, period=period, anchor=anchor)
        variable = list(variable_charges_between(store_id=store_id, start=window.start, end=window.end))

        fixed_total = _sum(a for _, a in fixed)
        variable_total = _sum(v.amount for v in variable)
        total = q2(fixed_total + variable_total)

        return {
            "period": period,
            "start": window.start,
            "end": window.end,
            "statistics": {
                "total_charges": total,
                "total_fixed_charges": fixed_total,
                "total_variable_charges": variable_total,
                "item_count": len(fixed) + len(variable),
                "percentage_of_all_charges": percentage(variable_total, total),
                "ca_percentage": percentage(total, revenue),
                "revenue": revenue,
            },
            "fixed_charges": [StatisticsService._fixed_item(c, a, total, revenue) for c, a in fixed],
            "variable_charges": [StatisticsService._variable_item(v, total, revenue) for v in variable],
        }
