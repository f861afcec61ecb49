"""Tests for date parsing utilities."""

from datetime import date

import pytest

from expense_insights.utils.date_utils import (
    InvalidDateFormat,
    month_bounds,
    parse_date,
    try_parse_date,
)


class TestParseDate:
    """Tests for parse_date."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("2024-03-05", date(2024, 3, 5)),
            ("05/03/2024", date(2024, 3, 5)),
            ("25/12/2024", date(2024, 12, 25)),
            ("05-03-2024", date(2024, 3, 5)),
            ("  2024-03-05  ", date(2024, 3, 5)),
        ],
    )
    def test_accepted_formats(self, text: str, expected: date) -> None:
        assert parse_date(text) == expected

    def test_slash_dates_are_day_first(self) -> None:
        """03/04/2024 is 3 April, not 4 March."""
        assert parse_date("03/04/2024") == date(2024, 4, 3)

    def test_month_first_used_when_day_first_is_impossible(self) -> None:
        assert parse_date("12/25/2024") == date(2024, 12, 25)

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("2024-02-30", date(2024, 2, 29)),
            ("2023-02-29", date(2023, 2, 28)),
            ("2024-02-31", date(2024, 2, 29)),
            ("31/04/2024", date(2024, 4, 30)),
            ("31-06-2024", date(2024, 6, 30)),
            ("31/02/2024", date(2024, 2, 29)),
        ],
    )
    def test_day_past_month_end_is_clamped(self, text: str, expected: date) -> None:
        assert parse_date(text) == expected

    def test_month_first_date_is_clamped(self) -> None:
        """02/30/2024 has no month 30, so it is read month-first and clamped."""
        assert parse_date("02/30/2024") == date(2024, 2, 29)

    @pytest.mark.parametrize(
        "text",
        [
            "2024/03/05",
            "5/3/2024",
            "2024-3-5",
            "2024-13-01",
            "2024-00-10",
            "13/13/2024",
            "32/01/2024",
            "00/01/2024",
            "2024-01-32",
            "0000-01-01",
            "March 5, 2024",
            "20240305",
            "not a date",
        ],
    )
    def test_rejected(self, text: str) -> None:
        with pytest.raises(InvalidDateFormat) as exc_info:
            parse_date(text)
        assert exc_info.value.text == text
        assert text in str(exc_info.value)

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_empty_input_rejected(self, text) -> None:
        with pytest.raises(InvalidDateFormat):
            parse_date(text)

    def test_invalid_date_format_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse_date("garbage")


class TestTryParseDate:
    """Tests for the non-raising variant."""

    def test_success_records_format(self) -> None:
        result = try_parse_date("25-12-2024")
        assert result.ok
        assert result.value == date(2024, 12, 25)
        assert result.matched_format == "%d-%m-%Y"

    def test_month_first_format_reported(self) -> None:
        assert try_parse_date("12/25/2024").matched_format == "%m/%d/%Y"

    def test_failure_has_reason(self) -> None:
        result = try_parse_date("2024/03/05")
        assert not result.ok
        assert result.value is None
        assert "2024/03/05" in result.reason


class TestMonthBounds:
    def test_mid_year(self) -> None:
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 3, 1))

    def test_december_rolls_over(self) -> None:
        assert month_bounds(2024, 12) == (date(2024, 12, 1), date(2025, 1, 1))
