from datetime import date
from decimal import Decimal

import pytest
from rest_framework.exceptions import ValidationError

from store_core.charges.models import ChargeCategory
from store_core.common.api.exceptions import CalendarComputationError
from store_core.statistics.services import (
    StatisticsService,
    Window,
    charges_status,
    item_status,
    parse_anchor,
    profit_status,
    prorated_fixed_charges,
    resolve_window,
    weeks_in_month,
)


def _fixed_total(store, period, anchor):
    return sum((a for _, a in prorated_fixed_charges(store_id=store.id, period=period, anchor=anchor)), Decimal("0"))


def test_status_thresholds():
    assert charges_status(Decimal("66.00")) == "good"
    assert charges_status(Decimal("66.01")) == "medium"
    assert charges_status(Decimal("75.00")) == "medium"
    assert charges_status(Decimal("75.01")) == "critical"

    assert profit_status(Decimal("33.00")) == "good"
    assert profit_status(Decimal("15.00")) == "medium"
    assert profit_status(Decimal("14.99")) == "critical"

    assert item_status(Decimal("10.00")) == "good"
    assert item_status(Decimal("20.00")) == "medium"
    assert item_status(Decimal("20.01")) == "critical"


def test_windows_and_previous_windows():
    day = resolve_window("day", date(2024, 3, 1))
    assert day.previous() == Window("day", date(2024, 2, 29), date(2024, 2, 29))

    week = resolve_window("week", date(2024, 1, 3))
    assert (week.start, week.end) == (date(2024, 1, 1), date(2024, 1, 7))
    assert week.previous().start == date(2023, 12, 25)

    month = resolve_window("month", date(2024, 3, 15))
    assert (month.start, month.end) == (date(2024, 3, 1), date(2024, 3, 31))
    assert month.previous() == Window("month", date(2024, 2, 1), date(2024, 2, 29))


def test_parse_anchor():
    assert parse_anchor("month", "2024-02") == date(2024, 2, 1)
    assert parse_anchor("day", "2024-02-10") == date(2024, 2, 10)
    with pytest.raises(ValidationError):
        parse_anchor("day", "2024-02")
    with pytest.raises(ValidationError):
        parse_anchor("week", "yesterday")


def test_weeks_in_month_guards_against_empty_months():
    assert weeks_in_month("2024-01") == 5
    assert weeks_in_month("2024-02") == 4
    with pytest.raises(CalendarComputationError):
        weeks_in_month("2024-13")


@pytest.mark.django_db
def test_kpi_percentages_and_statuses(store, fixed_charge, revenue):
    revenue(date(2024, 1, 5), "600")
    revenue(date(2024, 1, 20), "400")
    charge = fixed_charge("700")

    stats = StatisticsService.get_statistics(store_id=store.id, period="month", anchor="2024-01")
    kpi = stats["kpi"]
    assert kpi["revenue"] == Decimal("1000.00")
    assert kpi["charges"] == Decimal("700.00")
    assert kpi["profit"] == Decimal("300.00")
    assert kpi["charges_percentage"] == Decimal("70.00")
    assert kpi["profit_percentage"] == Decimal("30.00")
    assert kpi["charges_status"] == "medium"
    assert kpi["profit_status"] == "medium"

    charge.amount = Decimal("800")
    charge.save(update_fields=["amount"])

    kpi = StatisticsService.get_statistics(store_id=store.id, period="month", anchor="2024-01")["kpi"]
    assert kpi["charges_percentage"] == Decimal("80.00")
    assert kpi["charges_status"] == "critical"


@pytest.mark.django_db
def test_zero_revenue_yields_zero_percentages(store, fixed_charge):
    fixed_charge("500")

    kpi = StatisticsService.get_statistics(store_id=store.id, period="month", anchor="2024-01")["kpi"]
    assert kpi["revenue"] == Decimal("0.00")
    assert kpi["profit"] == Decimal("-500.00")
    assert kpi["charges_percentage"] == Decimal("0.00")
    assert kpi["revenue_evolution"] == Decimal("0.00")


@pytest.mark.django_db
def test_revenue_evolution_against_previous_month(store, revenue):
    revenue(date(2023, 12, 31), "800")
    revenue(date(2024, 1, 1), "1000")

    kpi = StatisticsService.get_statistics(store_id=store.id, period="month", anchor="2024-01-15")["kpi"]
    assert kpi["revenue_evolution"] == Decimal("25.00")

    kpi = StatisticsService.get_statistics(store_id=store.id, period="day", anchor="2024-01-01")["kpi"]
    assert kpi["revenue_evolution"] == Decimal("25.00")


@pytest.mark.django_db
def test_monthly_charge_prorated_per_day(store, fixed_charge):
    fixed_charge("310")

    assert _fixed_total(store, "day", date(2024, 1, 10)) == Decimal("10.00")
    assert _fixed_total(store, "day", date(2024, 1, 31)) == Decimal("10.00")
    assert _fixed_total(store, "day", date(2024, 2, 1)) == 0


@pytest.mark.django_db
def test_weekly_charge_counts_only_within_its_week(store, fixed_charge):
    fixed_charge("310")
    fixed_charge("700", week_key="2024-01-08", category=ChargeCategory.PERSONNEL)

    assert _fixed_total(store, "day", date(2024, 1, 10)) == Decimal("110.00")
    assert _fixed_total(store, "day", date(2024, 1, 14)) == Decimal("110.00")
    assert _fixed_total(store, "day", date(2024, 1, 15)) == Decimal("10.00")


@pytest.mark.django_db
def test_week_window_proration(store, fixed_charge):
    fixed_charge("1000")
    fixed_charge("900", month_key="2024-02")
    fixed_charge("700", week_key="2024-01-08", category=ChargeCategory.PERSONNEL)

    # January 2024 owns five weeks
    assert _fixed_total(store, "week", date(2024, 1, 10)) == Decimal("900.00")
    assert _fixed_total(store, "week", date(2024, 1, 17)) == Decimal("200.00")
    # Thursday Feb 1 sits in the week of Monday Jan 29, which belongs to January
    assert _fixed_total(store, "week", date(2024, 2, 1)) == Decimal("200.00")
    # February 2024 owns four weeks
    assert _fixed_total(store, "week", date(2024, 2, 5)) == Decimal("225.00")


@pytest.mark.django_db
def test_month_window_ignores_weekly_charges(store, fixed_charge, variable_charge):
    fixed_charge("1000")
    fixed_charge("700", week_key="2024-01-08", category=ChargeCategory.PERSONNEL)
    variable_charge("50", date(2024, 1, 31))
    variable_charge("80", date(2024, 2, 1))

    stats = StatisticsService.get_statistics(store_id=store.id, period="month", anchor="2024-01")
    assert stats["kpi"]["charges"] == Decimal("1050.00")
    assert [item["amount"] for item in stats["charges"]["fixed"]] == [Decimal("1000.00")]
    assert [item["amount"] for item in stats["charges"]["variable"]] == [Decimal("50.00")]


@pytest.mark.django_db
def test_chart_data_shapes(store, fixed_charge, revenue):
    fixed_charge("310")
    revenue(date(2024, 1, 10), "200")

    day_chart = StatisticsService.chart_data(store_id=store.id, period="day", anchor=date(2024, 1, 10))
    assert [p["period"] for p in day_chart] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    assert day_chart[2]["revenue"] == Decimal("200.00")
    assert day_chart[2]["charges"] == Decimal("10.00")
    assert day_chart[2]["profit"] == Decimal("190.00")
    assert day_chart[0]["revenue"] == Decimal("0.00")

    week_chart = StatisticsService.chart_data(store_id=store.id, period="week", anchor=date(2024, 1, 10))
    assert [p["period"] for p in week_chart] == ["W1", "W2", "W3", "W4", "W5"]
    assert week_chart[1]["revenue"] == Decimal("200.00")
    assert all(p["charges"] == Decimal("62.00") for p in week_chart)

    feb_chart = StatisticsService.chart_data(store_id=store.id, period="week", anchor=date(2024, 2, 14))
    assert len(feb_chart) == 4

    month_chart = StatisticsService.chart_data(store_id=store.id, period="month", anchor=date(2024, 1, 15))
    assert [p["period"] for p in month_chart] == ["Oct", "Nov", "Dec", "Jan"]
    assert month_chart[-1]["charges"] == Decimal("310.00")
    assert month_chart[0]["charges"] == Decimal("0.00")


@pytest.mark.django_db
def test_invalid_period_is_rejected(store):
    with pytest.raises(ValidationError):
        StatisticsService.get_statistics(store_id=store.id, period="year")


@pytest.mark.django_db
def test_charges_detail_month(store, fixed_charge, variable_charge, revenue):
    fixed_charge("700")
    variable_charge("300", date(2024, 1, 12), name="Beans")
    revenue(date(2024, 1, 12), "2000")

    detail = StatisticsService.get_charges_detail(store_id=store.id, period="month", month="2024-01")
    stats = detail["statistics"]
    assert stats["total_charges"] == Decimal("1000.00")
    assert stats["total_fixed_charges"] == Decimal("700.00")
    assert stats["total_variable_charges"] == Decimal("300.00")
    assert stats["item_count"] == 2
    assert stats["percentage_of_all_charges"] == Decimal("30.00")
    assert stats["ca_percentage"] == Decimal("50.00")

    (water,) = detail["fixed_charges"]
    assert water["name"] == "Water"
    assert water["percentage_of_charges"] == Decimal("70.00")
    assert water["percentage_of_revenue"] == Decimal("35.00")
    assert water["status"] == "critical"

    (beans,) = detail["variable_charges"]
    assert beans["percentage_of_revenue"] == Decimal("15.00")
    assert beans["status"] == "medium"
    assert beans["supplier"] == "Roaster"


@pytest.mark.django_db
def test_charges_detail_week(store, fixed_charge, variable_charge):
    fixed_charge("1000")
    variable_charge("40", date(2024, 1, 9))
    variable_charge("60", date(2024, 1, 16))

    detail = StatisticsService.get_charges_detail(store_id=store.id, period="week", week="2024-01-10")
    assert (detail["start"], detail["end"]) == (date(2024, 1, 8), date(2024, 1, 14))
    assert detail["statistics"]["total_fixed_charges"] == Decimal("200.00")
    assert detail["statistics"]["total_variable_charges"] == Decimal("40.00")


@pytest.mark.django_db
def test_charges_detail_validation(store):
    with pytest.raises(ValidationError):
        StatisticsService.get_charges_detail(store_id=store.id, period="week")
    with pytest.raises(ValidationError):
        StatisticsService.get_charges_detail(store_id=store.id, period="day", week="2024-01-08")
    with pytest.raises(ValidationError):
        StatisticsService.get_charges_detail(store_id=store.id, period="month", month="2024-1")


@pytest.mark.django_db
def test_impossible_dates_are_validation_errors(store):
    with pytest.raises(ValidationError) as exc:
        StatisticsService.get_statistics(store_id=store.id, period="day", anchor="2024-02-30")
    assert "date" in exc.value.detail

    with pytest.raises(ValidationError) as exc:
        StatisticsService.get_charges_detail(store_id=store.id, period="week", week="2023-02-29")
    assert "week" in exc.value.detail
