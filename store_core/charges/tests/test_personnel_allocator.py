from decimal import Decimal

import pytest
from rest_framework.exceptions import ValidationError

from store_core.charges import personnel
from store_core.charges.models import PersonnelEmployee, PersonnelWeekSalary, SalaryByPeriod
from store_core.common.api.exceptions import CalendarComputationError


@pytest.mark.parametrize(
    "amount, month_key",
    [
        ("1000.00", "2024-01"),
        ("1000.01", "2024-02"),
        ("333.33", "2024-01"),
        ("0.03", "2024-03"),
        ("2517.49", "2025-08"),
        ("99999.99", "2026-02"),
    ],
)
def test_split_monthly_amount_sums_exactly(amount, month_key):
    parts = personnel.split_monthly_amount(Decimal(amount), month_key)

    assert sum(parts.values()) == Decimal(amount)
    assert len(parts) in (4, 5)
    assert list(parts) == sorted(parts)


def test_split_puts_residue_on_first_week():
    # 333.33 / 5 = 66.666 -> 66.67 each, 0.02 too much, taken off the first week
    parts = personnel.split_monthly_amount(Decimal("333.33"), "2024-01")

    assert parts["2024-01-01"] == Decimal("66.65")
    assert [parts[k] for k in list(parts)[1:]] == [Decimal("66.67")] * 4


@pytest.mark.django_db
def test_distribute_monthly_salary_writes_one_row_per_week(line):
    rows = personnel.distribute_monthly_salary(line, Decimal("1000.01"), "2024-02")

    assert len(rows) == 4
    stored = PersonnelWeekSalary.objects.filter(personnel_employee=line, month_key="2024-02").order_by("week_key")
    assert [r.week_key for r in stored] == ["2024-02-05", "2024-02-12", "2024-02-19", "2024-02-26"]
    assert stored[0].amount == Decimal("250.01")
    assert sum(r.amount for r in stored) == Decimal("1000.01")

    line.refresh_from_db()
    assert line.salary == Decimal("1000.01")
    assert line.month_salary == Decimal("1000.01")
    assert line.salary_by_period == SalaryByPeriod.MONTH


@pytest.mark.django_db
def test_distribute_replaces_previous_rows_of_the_month(line):
    personnel.distribute_monthly_salary(line, Decimal("1000"), "2024-01")
    personnel.distribute_monthly_salary(line, Decimal("500"), "2024-01")

    rows = PersonnelWeekSalary.objects.filter(personnel_employee=line)
    assert rows.count() == 5
    assert sum(r.amount for r in rows) == Decimal("500.00")


@pytest.mark.django_db
def test_distribute_keeps_other_months(line):
    personnel.distribute_monthly_salary(line, Decimal("1000"), "2024-01")
    personnel.distribute_monthly_salary(line, Decimal("400"), "2024-02")

    assert personnel.month_total(line, "2024-01") == Decimal("1000.00")
    assert personnel.month_total(line, "2024-02") == Decimal("400.00")


@pytest.mark.django_db
@pytest.mark.parametrize("amount, month_key", [("0", "2024-01"), ("-5", "2024-01"), ("100", "2024-13")])
def test_distribute_rejects_bad_input(line, amount, month_key):
    with pytest.raises(ValidationError):
        personnel.distribute_monthly_salary(line, Decimal(amount), month_key)
    assert not PersonnelWeekSalary.objects.filter(personnel_employee=line).exists()


@pytest.mark.django_db
def test_zero_weeks_is_a_computation_error(line, monkeypatch):
    monkeypatch.setattr("store_core.charges.weeks.weeks_belonging_to_month", lambda key: [])

    with pytest.raises(CalendarComputationError):
        personnel.distribute_monthly_salary(line, Decimal("1000"), "2024-01")
    assert not PersonnelWeekSalary.objects.filter(personnel_employee=line).exists()


@pytest.mark.django_db
def test_set_weekly_salary_replaces_the_week(line):
    personnel.set_weekly_salary(line, Decimal("300"), "2024-01-08", "2024-01")
    personnel.set_weekly_salary(line, Decimal("350"), "2024-01-08", "2024-01")
    personnel.set_weekly_salary(line, Decimal("200"), "2024-01-15", "2024-01")

    assert personnel.week_amount(line, "2024-01-08") == Decimal("350.00")
    assert PersonnelWeekSalary.objects.filter(personnel_employee=line).count() == 2

    line.refresh_from_db()
    assert line.salary == Decimal("200.00")
    assert line.month_salary == Decimal("550.00")
    assert line.salary_by_period == SalaryByPeriod.WEEK


@pytest.mark.django_db
def test_boundary_week_row_is_keyed_to_its_mondays_month(line):
    # week of 2024-01-29 overlaps February but belongs to January
    row = personnel.set_weekly_salary(line, Decimal("300"), "2024-01-29", "2024-02")

    assert row.month_key == "2024-01"
    line.refresh_from_db()
    assert line.month_salary == Decimal("0.00")


@pytest.mark.django_db
@pytest.mark.parametrize(
    "week_key, month_key",
    [
        ("2024-01-09", "2024-01"),  # not a Monday
        ("2024-03-04", "2024-01"),  # no overlap
        ("nonsense", "2024-01"),
    ],
)
def test_set_weekly_salary_rejects_bad_weeks(line, week_key, month_key):
    with pytest.raises(ValidationError):
        personnel.set_weekly_salary(line, Decimal("100"), week_key, month_key)


@pytest.mark.django_db
def test_update_week_salaries_replaces_only_targeted_weeks(line):
    personnel.distribute_monthly_salary(line, Decimal("1000"), "2024-01")

    personnel.update_week_salaries(line, {"2024-01-08": Decimal("250"), "2024-01-15": Decimal("150")}, "2024-01", "MONTH")

    amounts = dict(PersonnelWeekSalary.objects.filter(personnel_employee=line).values_list("week_key", "amount"))
    assert amounts == {
        "2024-01-01": Decimal("200.00"),
        "2024-01-08": Decimal("250.00"),
        "2024-01-15": Decimal("150.00"),
        "2024-01-22": Decimal("200.00"),
        "2024-01-29": Decimal("200.00"),
    }
    line.refresh_from_db()
    assert line.month_salary == Decimal("1000.00")
    assert line.salary == Decimal("1000.00")


@pytest.mark.django_db
def test_update_week_salaries_validates_everything_before_writing(line):
    personnel.distribute_monthly_salary(line, Decimal("1000"), "2024-01")

    with pytest.raises(ValidationError):
        personnel.update_week_salaries(
            line,
            {"2024-01-08": Decimal("250"), "2024-01-10": Decimal("100")},
            "2024-01",
        )

    assert personnel.week_amount(line, "2024-01-08") == Decimal("200.00")
    assert personnel.month_total(line, "2024-01") == Decimal("1000.00")


@pytest.mark.django_db
def test_discard_all_removes_lines_and_rows(personnel_charge, line):
    personnel.distribute_monthly_salary(line, Decimal("1000"), "2024-01")

    assert personnel.discard_all(personnel_charge) == 1
    assert not PersonnelEmployee.objects.filter(fixed_charge=personnel_charge).exists()
    assert not PersonnelWeekSalary.objects.exists()
