# store_core/revenue/sources.py
"""
Revenue lookup used by the statistics roll-ups.

The class is picked by settings.STORE_REVENUE_SOURCE (dotted path), so a
deployment can read revenue from elsewhere without touching the aggregator.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from django.conf import settings
from django.utils.module_loading import import_string

from store_core.common.money import ZERO, q2
from store_core.revenue.models import DailyRevenue

DEFAULT_SOURCE = "store_core.revenue.sources.DailyRevenueSource"


class RevenueSource:
    def revenue_for(self, store_id: UUID, day: date) -> Decimal | None:
        raise NotImplementedError

    def revenue_between(self, store_id: UUID, start: date, end: date) -> Decimal:
        """Inclusive range; days without a figure count as zero."""
        total = ZERO
        day = start
        while day <= end:
            total += self.revenue_for(store_id, day) or ZERO
            day = date.fromordinal(day.toordinal() + 1)
        return q2(total)


class DailyRevenueSource(RevenueSource):
    def revenue_for(self, store_id: UUID, day: date) -> Decimal | None:
        row = DailyRevenue.objects.filter(store_id=store_id, date=day).only("amount").first()
        return row.amount if row else None

    def revenue_between(self, store_id: UUID, start: date, end: date) -> Decimal:
        rows = DailyRevenue.objects.filter(store_id=store_id, date__gte=start, date__lte=end).only("amount")
        return q2(sum((r.amount for r in rows), ZERO))


def get_revenue_source() -> RevenueSource:
    path = getattr(settings, "STORE_REVENUE_SOURCE", None) or DEFAULT_SOURCE
    return import_string(path)()
