from datetime import date
from decimal import Decimal

import pytest

from store_core.charges.models import ChargeCategory, ChargePeriod, FixedCharge, VariableCharge
from store_core.revenue.services import DailyRevenueService


@pytest.fixture
def fixed_charge(store):
    def make(amount, *, month_key="2024-01", week_key="", category=ChargeCategory.WATER):
        return FixedCharge.objects.create(
            store_id=store.id,
            category=category,
            period=ChargePeriod.WEEK if week_key else ChargePeriod.MONTH,
            month_key=month_key,
            week_key=week_key,
            amount=Decimal(amount),
        )
    return make


@pytest.fixture
def variable_charge(store):
    def make(amount, day, name="Coffee beans"):
        return VariableCharge.objects.create(
            store_id=store.id, name=name, amount=Decimal(amount), date=day, supplier="Roaster"
        )
    return make


@pytest.fixture
def revenue(store):
    def record(day: date, amount):
        return DailyRevenueService.record(store_id=store.id, day=day, amount=Decimal(amount))
    return record
