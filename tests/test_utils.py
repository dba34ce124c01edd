"""Tests for input coercion, rounding, unit conversion and date helpers."""

from datetime import date
from decimal import Decimal

import pytest

from land_deal.utils import (
    add_duration,
    add_months,
    convert_area,
    decimal_from_str,
    parse_iso_date,
    parse_optional_number,
    round_half_up,
    vigha_equivalent,
)


class TestParseOptionalNumber:
    @pytest.mark.parametrize("raw", [None, "", "   ", "abc", "12x", float("nan"), True])
    def test_blank_and_garbage_become_zero(self, raw):
        assert parse_optional_number(raw) == Decimal("0")

    def test_strips_indian_thousands_separators(self):
        assert parse_optional_number("1,25,000") == Decimal("125000")

    def test_numbers_pass_through(self):
        assert parse_optional_number(7) == Decimal("7")
        assert parse_optional_number(2.5) == Decimal("2.5")
        assert parse_optional_number(Decimal("4.9")) == Decimal("4.9")
        assert parse_optional_number("-3.25") == Decimal("-3.25")


def test_decimal_from_str_is_strict():
    assert decimal_from_str("1,000") == Decimal("1000")
    with pytest.raises(ValueError):
        decimal_from_str("ten")


def test_round_half_up():
    assert round_half_up(Decimal("2.5")) == Decimal("3")
    assert round_half_up(Decimal("33333.3")) == Decimal("33333")
    assert round_half_up(Decimal("100.665"), 2) == Decimal("100.67")


class TestDates:
    def test_add_months_clamps_to_month_end(self):
        assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
        assert add_months(date(2023, 1, 31), 1) == date(2023, 2, 28)
        assert add_months(date(2024, 11, 30), 3) == date(2025, 2, 28)

    def test_add_duration_days_and_months(self):
        start = date(2024, 1, 15)
        assert add_duration(start, "45", "Days") == date(2024, 2, 29)
        assert add_duration(start, "2", "Months") == date(2024, 3, 15)
        assert add_duration(start, "", "Months") == start

    def test_add_duration_truncates_fractions(self):
        assert add_duration(date(2024, 1, 15), "1.9", "Months") == date(2024, 2, 15)

    def test_add_duration_rejects_unknown_unit(self):
        with pytest.raises(ValueError):
            add_duration(date(2024, 1, 1), 1, "Weeks")

    def test_parse_iso_date(self):
        assert parse_iso_date("2024-03-05") == date(2024, 3, 5)
        assert parse_iso_date("2024-03-05T12:00:00") == date(2024, 3, 5)
        with pytest.raises(ValueError):
            parse_iso_date("05/03/2024")


class TestAreaConversion:
    def test_vigha_equivalent(self):
        assert vigha_equivalent(Decimal("2377.73")) == Decimal("1")

    def test_convert_between_units(self):
        assert convert_area(Decimal("1"), "Vigha", "Vaar") == Decimal("2843.71")
        assert convert_area(Decimal("2843.71"), "Vaar", "SqMeter") == Decimal("2377.73")

    def test_unknown_unit(self):
        with pytest.raises(ValueError):
            convert_area(Decimal("1"), "Acre", "SqMeter")
