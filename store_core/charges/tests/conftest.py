import pytest

from store_core.charges.models import ChargeCategory, ChargePeriod, Employee, FixedCharge, PersonnelEmployee


@pytest.fixture
def employee(store):
    return Employee.objects.create(store_id=store.id, name="Ana", type="SERVER")


@pytest.fixture
def personnel_charge(store):
    return FixedCharge.objects.create(
        store_id=store.id,
        category=ChargeCategory.PERSONNEL,
        period=ChargePeriod.MONTH,
        month_key="2024-01",
    )


@pytest.fixture
def line(personnel_charge, employee):
    return PersonnelEmployee.objects.create(fixed_charge=personnel_charge, employee=employee)
