"""Tests for free-text event date parsing."""

from datetime import date

import pytest

from outsyd_scraper.utils.date_parser import parse_event_date, parse_future_date

TODAY = date(2026, 3, 1)


class TestParseEventDate:
    """Tests for parse_event_date."""

    @pytest.mark.parametrize("value,expected", [
        ("March 15, 2026", date(2026, 3, 15)),
        ("Sat 14 Mar 2026", date(2026, 3, 14)),
        ("2026-03-15", date(2026, 3, 15)),
        ("2026-03-15T19:00:00Z", date(2026, 3, 15)),
        ("December 31, 2026", date(2026, 12, 31)),
    ])
    def test_explicit_dates(self, value, expected):
        assert parse_event_date(value, today=TODAY) == expected

    def test_numeric_dates_are_month_first(self):
        assert parse_event_date("03/04/2026", today=TODAY) == date(2026, 3, 4)

    def test_collapses_whitespace(self):
        assert parse_event_date("  March   15,\n2026 ", today=TODAY) == date(2026, 3, 15)

    def test_missing_year_uses_current_year(self):
        assert parse_event_date("April 10", today=TODAY) == date(2026, 4, 10)

    def test_missing_year_already_past_rolls_forward(self):
        assert parse_event_date("January 3", today=TODAY) == date(2027, 1, 3)

    def test_explicit_past_year_is_kept(self):
        assert parse_event_date("January 3, 2020", today=TODAY) == date(2020, 1, 3)

    @pytest.mark.parametrize("value", [
        None,
        "",
        "TBD",
        "tba",
        "Coming soon",
        "Every weekend",
        "19:00",
        "7pm",
        "2026-02-30",
        "18:00 - 22:00",
        "Sat 8pm",
        "15th",
        "Friday 7:30pm",
        "March 2026",
    ])
    def test_unparsable(self, value):
        assert parse_event_date(value, today=TODAY) is None

    def test_month_and_day_must_be_written(self):
        # Nothing in the text may be filled in from the reference day
        autumn = date(2026, 10, 19)

        assert parse_event_date("15th", today=autumn) is None
        assert parse_event_date("Friday 7:30pm", today=autumn) is None
        assert parse_event_date("October 25", today=autumn) == date(2026, 10, 25)


class TestDateRanges:
    """Ranges resolve to their first day."""

    @pytest.mark.parametrize("value", [
        "March 15 - 17, 2026",
        "15 - 17 March 2026",
        "March 15 – 17, 2026",
        "March 15 to March 17, 2026",
        "Sun 15 - Tue 17 March 2026",
        "March 15-17, 2026",
    ])
    def test_first_day_with_borrowed_year(self, value):
        assert parse_event_date(value, today=TODAY) == date(2026, 3, 15)

    def test_range_across_months(self):
        assert parse_event_date("March 30 - April 2, 2026", today=TODAY) == date(2026, 3, 30)

    def test_yearless_range_rolls_forward(self):
        assert parse_event_date("15 - 17 January", today=TODAY) == date(2027, 1, 15)

    def test_dashed_numeric_date_is_not_a_range(self):
        assert parse_event_date("03-15-2026", today=TODAY) == date(2026, 3, 15)


class TestParseFutureDate:
    """Tests for parse_future_date."""

    def test_future(self):
        assert parse_future_date("March 15, 2026", today=TODAY) == date(2026, 3, 15)

    def test_today_is_still_valid(self):
        assert parse_future_date("March 1, 2026", today=TODAY) == TODAY

    def test_yesterday_is_past(self):
        assert parse_future_date("February 28, 2026", today=TODAY) is None

    def test_old_event(self):
        assert parse_future_date("January 3, 2020", today=TODAY) is None

    def test_unparsable(self):
        assert parse_future_date("TBD", today=TODAY) is None
