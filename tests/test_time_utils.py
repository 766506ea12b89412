from datetime import date, datetime, timezone

import pytest

from utils.time_utils import (
    add_months,
    current_financial_year,
    financial_year,
    financial_year_options,
    format_display_date,
    is_cache_fresh,
    month_name,
    months_ago,
    now_ms,
    parse_iso_date,
    parse_iso_datetime,
    to_api_date,
    to_form_date,
)


@pytest.mark.parametrize("d,expected", [
    (date(2024, 3, 15), "2023-24"),
    (date(2024, 4, 1), "2024-25"),
    (date(2024, 3, 31), "2023-24"),
    (date(2000, 1, 1), "1999-00"),
    (date(2099, 12, 31), "2099-00"),
])
def test_financial_year_boundaries(d, expected):
    assert financial_year(d) == expected


def test_current_financial_year_uses_today():
    assert current_financial_year(date(2025, 1, 10)) == "2024-25"


def test_financial_year_options_newest_first():
    options = financial_year_options(date(2024, 6, 15))

    assert [o["value"] for o in options] == [
        "2026-27", "2025-26", "2024-25", "2023-24",
        "2022-23", "2021-22", "2020-21", "2019-20",
    ]
    current = [o for o in options if o["is_current"]]
    assert len(current) == 1
    assert current[0]["value"] == "2024-25"
    assert current[0]["label"] == "FY 2024-25"


def test_cache_fresh_window():
    stamped = 1_000_000
    assert is_cache_fresh(stamped, stamped + 4 * 60 * 1000)
    assert not is_cache_fresh(stamped, stamped + 5 * 60 * 1000)
    assert not is_cache_fresh(stamped, stamped + 6 * 60 * 1000)
    assert not is_cache_fresh(None, stamped)


def test_now_ms_uses_clock():
    assert now_ms(lambda: 12.5) == 12500


def test_add_months_crosses_years():
    assert add_months(2024, 1, -1) == (2023, 12)
    assert add_months(2024, 12, 1) == (2025, 1)
    assert add_months(2024, 6, -18) == (2022, 12)


def test_months_ago_clamps_to_month_end():
    assert months_ago(date(2024, 8, 31), 6) == date(2024, 2, 29)
    assert months_ago(date(2023, 8, 31), 6) == date(2023, 2, 28)
    assert months_ago(date(2024, 6, 15), 12) == date(2023, 6, 15)


def test_month_name():
    assert month_name(1) == "Jan"
    assert month_name(12) == "Dec"


def test_parse_iso_date_reads_calendar_date_from_string():
    # Midnight UTC must not slide to the previous day in any local timezone
    assert parse_iso_date("2024-03-01T00:00:00.000Z") == date(2024, 3, 1)
    assert parse_iso_date("2024-03-31T23:59:59.000Z") == date(2024, 3, 31)
    assert parse_iso_date("2024-03-15") == date(2024, 3, 15)
    assert parse_iso_date(date(2024, 1, 2)) == date(2024, 1, 2)
    assert parse_iso_date(datetime(2024, 1, 2, 5)) == date(2024, 1, 2)


@pytest.mark.parametrize("value", [None, "", "not-a-date"])
def test_parse_iso_date_blank_or_invalid(value):
    assert parse_iso_date(value) is None


def test_parse_iso_datetime_handles_zulu():
    parsed = parse_iso_datetime("2024-06-01T10:30:00.000Z")
    assert parsed == datetime(2024, 6, 1, 10, 30, tzinfo=timezone.utc)
    assert parse_iso_datetime("2024-06-01T10:30:00").tzinfo == timezone.utc
    assert parse_iso_datetime("garbage") is None


def test_form_and_api_dates():
    assert to_form_date(date(2024, 4, 1)) == "2024-04-01"
    assert to_form_date(None) == ""
    assert to_api_date(date(2024, 4, 1)) == "2024-04-01T00:00:00.000Z"
    assert to_api_date(None) is None


def test_format_display_date():
    assert format_display_date(date(2024, 4, 1)) == "01/04/2024"
    assert format_display_date(None) == "Invalid Date"
