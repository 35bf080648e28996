from __future__ import annotations

from datetime import date, datetime, time

import pytest

from src.core.errors import BadRequestError
from src.shared.time import explicit_window, resolve_period, trailing_days_window, validate_period


def test_monthly_window_spans_whole_month() -> None:
    window = resolve_period("monthly", datetime(2024, 3, 20, 10, 0))
    assert window.start == datetime(2024, 3, 1, 0, 0)
    assert window.end == datetime.combine(date(2024, 3, 31), time.max)


def test_monthly_window_handles_leap_february() -> None:
    leap = resolve_period("monthly", datetime(2024, 2, 10))
    plain = resolve_period("monthly", datetime(2023, 2, 10))
    assert leap.end_date == date(2024, 2, 29)
    assert plain.end_date == date(2023, 2, 28)


def test_weekly_window_runs_monday_to_sunday() -> None:
    window = resolve_period("weekly", datetime(2024, 3, 20, 10, 0))
    assert window.start_date == date(2024, 3, 18)
    assert window.end_date == date(2024, 3, 24)
    assert window.end.time() == time.max


def test_weekly_window_on_sunday_belongs_to_the_ending_week() -> None:
    window = resolve_period("weekly", datetime(2024, 3, 24, 23, 0))
    assert window.start_date == date(2024, 3, 18)
    assert window.end_date == date(2024, 3, 24)


def test_yearly_and_ytd_windows() -> None:
    now = datetime(2024, 3, 20, 10, 0)
    yearly = resolve_period("yearly", now)
    ytd = resolve_period("ytd", now)
    assert (yearly.start_date, yearly.end_date) == (date(2024, 1, 1), date(2024, 12, 31))
    assert (ytd.start_date, ytd.end_date) == (date(2024, 1, 1), date(2024, 3, 20))


def test_unknown_token_defaults_to_monthly() -> None:
    now = datetime(2024, 3, 20)
    assert resolve_period("fortnightly", now) == resolve_period("monthly", now)


def test_window_contains_is_inclusive_on_both_ends() -> None:
    window = resolve_period("monthly", datetime(2024, 3, 20))
    assert window.contains(date(2024, 3, 1))
    assert window.contains(date(2024, 3, 31))
    assert not window.contains(date(2024, 4, 1))
    assert not window.contains(date(2024, 2, 29))


def test_trailing_window_ends_today() -> None:
    window = trailing_days_window(30, datetime(2024, 3, 20, 10, 0))
    assert window.start_date == date(2024, 2, 19)
    assert window.end_date == date(2024, 3, 20)


def test_explicit_window_rejects_reversed_range() -> None:
    with pytest.raises(BadRequestError) as excinfo:
        explicit_window(date(2024, 3, 10), date(2024, 3, 1))
    assert excinfo.value.code == "INVALID_DATE_RANGE"


def test_validate_period_lists_allowed_values() -> None:
    with pytest.raises(BadRequestError) as excinfo:
        validate_period("weekly", ("monthly", "ytd"))
    assert excinfo.value.code == "INVALID_PARAMETER"
    assert "monthly, ytd" in excinfo.value.message
