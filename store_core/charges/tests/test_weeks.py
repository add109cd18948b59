from datetime import date, timedelta

import pytest

from store_core.charges import weeks


def _month_keys(start_year=2023, end_year=2027):
    for year in range(start_year, end_year + 1):
        for month in range(1, 13):
            yield f"{year:04d}-{month:02d}"


def test_monday_and_sunday_of():
    # 2024-01-10 is a Wednesday
    assert weeks.monday_of(date(2024, 1, 10)) == date(2024, 1, 8)
    assert weeks.sunday_of(date(2024, 1, 10)) == date(2024, 1, 14)
    assert weeks.monday_of(date(2024, 1, 8)) == date(2024, 1, 8)
    assert weeks.sunday_of(date(2024, 1, 14)) == date(2024, 1, 14)


def test_keys():
    assert weeks.week_key(date(2024, 2, 1)) == "2024-01-29"
    assert weeks.month_key(date(2024, 2, 1)) == "2024-02"
    assert weeks.month_key_for_week("2024-01-29") == "2024-01"


@pytest.mark.parametrize("month_key", list(_month_keys()))
def test_weeks_belonging_to_month_has_four_or_five_ascending_mondays(month_key):
    result = weeks.weeks_belonging_to_month(month_key)

    assert len(result) in (4, 5)
    starts = [w.start for w in result]
    assert starts == sorted(starts)
    for w in result:
        assert w.start.weekday() == 0
        assert w.end == w.start + timedelta(days=6)
        assert weeks.month_key(w.start) == month_key
        assert w.belongs_to_month


def test_weeks_overlapping_month_includes_boundary_weeks():
    # March 2024 starts on a Friday: the week of Feb 26 overlaps it but belongs to February
    overlapping = weeks.weeks_overlapping_month("2024-03")
    keys = [w.week_key for w in overlapping]

    assert keys == ["2024-02-26", "2024-03-04", "2024-03-11", "2024-03-18", "2024-03-25"]
    assert overlapping[0].belongs_to_month is False
    assert overlapping[0].month_key == "2024-02"
    assert [w.week_key for w in weeks.weeks_belonging_to_month("2024-03")] == keys[1:]


def test_january_2024_has_five_weeks():
    assert [w.week_key for w in weeks.weeks_belonging_to_month("2024-01")] == [
        "2024-01-01",
        "2024-01-08",
        "2024-01-15",
        "2024-01-22",
        "2024-01-29",
    ]


@pytest.mark.parametrize("month_key", ["2024-01", "2024-02", "2024-03", "2025-06", "2026-02"])
def test_week_overlaps_month_matches_definition(month_key):
    first, last = weeks.month_bounds(month_key)
    monday = weeks.monday_of(first) - timedelta(days=14)

    while monday <= last + timedelta(days=14):
        expected = monday + timedelta(days=6) >= first and monday <= last
        assert weeks.week_overlaps_month(monday.isoformat(), month_key) is expected
        monday += timedelta(days=7)


def test_week_overlaps_month_rejects_malformed_keys():
    assert weeks.week_overlaps_month("2024-01-02", "2024-01") is False  # Tuesday
    assert weeks.week_overlaps_month("garbage", "2024-01") is False
    assert weeks.week_overlaps_month("2024-01-01", "2024-1") is False


def test_key_validation():
    assert weeks.is_valid_week_key("2024-01-01")
    assert not weeks.is_valid_week_key("2024-01-03")
    assert not weeks.is_valid_week_key("2024-13-01")
    assert not weeks.is_valid_week_key(None)

    assert weeks.is_valid_month_key("2024-12")
    assert not weeks.is_valid_month_key("2024-13")
    assert not weeks.is_valid_month_key("2024-1")
    assert not weeks.is_valid_month_key("")


def test_month_helpers():
    assert weeks.days_in_month("2024-02") == 29
    assert weeks.days_in_month("2023-02") == 28
    assert weeks.month_bounds("2024-12") == (date(2024, 12, 1), date(2024, 12, 31))
    assert weeks.previous_month_key("2024-01") == "2023-12"
    assert weeks.previous_month_key("2024-03", 3) == "2023-12"
    assert weeks.previous_month_key("bad") is None
