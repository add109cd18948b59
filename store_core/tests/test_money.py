from decimal import Decimal

import pytest
from rest_framework.exceptions import ValidationError

from store_core.common.money import divide, evolution, percentage, q2, to_decimal


def test_q2_rounds_half_up():
    assert q2(Decimal("1.005")) == Decimal("1.01")
    assert q2(Decimal("2.344")) == Decimal("2.34")


def test_percentage_divides_at_four_places_first():
    # 1/3 -> 0.3333 -> 33.33
    assert percentage(Decimal("1"), Decimal("3")) == Decimal("33.33")
    assert percentage(Decimal("700"), Decimal("1000")) == Decimal("70.00")


def test_percentage_of_zero_is_zero():
    assert percentage(Decimal("50"), Decimal("0")) == Decimal("0.00")
    assert percentage(Decimal("50"), None) == Decimal("0.00")


def test_divide_by_zero_parts_is_zero():
    assert divide(Decimal("310"), 0) == Decimal("0.00")
    assert divide(Decimal("310"), 31) == Decimal("10.00")


def test_evolution():
    assert evolution(Decimal("130"), Decimal("100")) == Decimal("30.00")
    assert evolution(Decimal("130"), Decimal("0")) == Decimal("0.00")


def test_to_decimal_rejects_garbage():
    with pytest.raises(ValidationError):
        to_decimal("abc", "amount")
