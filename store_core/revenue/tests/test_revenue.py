from datetime import date
from decimal import Decimal

import pytest
from rest_framework.exceptions import ValidationError

from store_core.revenue.models import DailyRevenue
from store_core.revenue.services import DailyRevenueService
from store_core.revenue.sources import DailyRevenueSource, RevenueSource, get_revenue_source


class ConstantRevenueSource(RevenueSource):
    def revenue_for(self, store_id, day):
        return None if day.weekday() == 6 else Decimal("100")


@pytest.mark.django_db
def test_record_upserts_one_row_per_day(store):
    DailyRevenueService.record(store_id=store.id, day=date(2024, 1, 1), amount="120.5")
    DailyRevenueService.record(store_id=store.id, day=date(2024, 1, 1), amount=Decimal("130"))

    rows = DailyRevenue.objects.filter(store_id=store.id)
    assert rows.count() == 1
    assert rows.get().amount == Decimal("130.00")


@pytest.mark.django_db
def test_record_rejects_negative(store):
    with pytest.raises(ValidationError):
        DailyRevenueService.record(store_id=store.id, day=date(2024, 1, 1), amount=Decimal("-1"))


@pytest.mark.django_db
def test_daily_source_missing_days_count_as_zero(store, other_store):
    DailyRevenueService.record(store_id=store.id, day=date(2024, 1, 1), amount=Decimal("100"))
    DailyRevenueService.record(store_id=store.id, day=date(2024, 1, 3), amount=Decimal("50.25"))
    DailyRevenueService.record(store_id=other_store.id, day=date(2024, 1, 2), amount=Decimal("999"))

    source = DailyRevenueSource()
    assert source.revenue_for(store.id, date(2024, 1, 2)) is None
    assert source.revenue_for(store.id, date(2024, 1, 3)) == Decimal("50.25")
    assert source.revenue_between(store.id, date(2024, 1, 1), date(2024, 1, 7)) == Decimal("150.25")


def test_base_source_sums_day_by_day():
    # 2024-01-01 is a Monday; Sunday has no figure
    total = ConstantRevenueSource().revenue_between("any", date(2024, 1, 1), date(2024, 1, 7))
    assert total == Decimal("600.00")


def test_source_is_configurable(settings):
    settings.STORE_REVENUE_SOURCE = "store_core.revenue.tests.test_revenue.ConstantRevenueSource"
    assert isinstance(get_revenue_source(), ConstantRevenueSource)

    settings.STORE_REVENUE_SOURCE = None
    assert isinstance(get_revenue_source(), DailyRevenueSource)
