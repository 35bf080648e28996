from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Callable, Union

from src.core.errors import BadRequestError

Clock = Callable[[], datetime]


@dataclass(frozen=True)
class PeriodWindow:
    start: datetime
    end: datetime

    @property
    def start_date(self) -> date:
        return self.start.date()

    @property
    def end_date(self) -> date:
        return self.end.date()

    def contains(self, value: Union[date, datetime]) -> bool:
        if not isinstance(value, datetime):
            value = datetime.combine(value, time.min)
        return self.start <= value <= self.end


def system_clock() -> datetime:
    return datetime.now()


def start_of_day(value: date) -> datetime:
    return datetime.combine(value, time.min)


def end_of_day(value: date) -> datetime:
    return datetime.combine(value, time.max)


def resolve_period(token: str, now: datetime) -> PeriodWindow:
    """Map a period token to an inclusive window around ``now``.

    Every window runs from the start of its first day to the end of its last
    day. ``ytd`` ends with the day of ``now``. Unknown tokens fall back to
    ``monthly``.
    """
    today = now.date()
    if token == "weekly":
        monday = today - timedelta(days=today.weekday())
        return PeriodWindow(start=start_of_day(monday), end=end_of_day(monday + timedelta(days=6)))
    if token == "yearly":
        return PeriodWindow(
            start=start_of_day(date(today.year, 1, 1)),
            end=end_of_day(date(today.year, 12, 31)),
        )
    if token == "ytd":
        return PeriodWindow(start=start_of_day(date(today.year, 1, 1)), end=end_of_day(today))
    return month_window(today.year, today.month)


def month_window(year: int, month: int) -> PeriodWindow:
    last_day = calendar.monthrange(year, month)[1]
    return PeriodWindow(
        start=start_of_day(date(year, month, 1)),
        end=end_of_day(date(year, month, last_day)),
    )


def trailing_days_window(days: int, now: datetime) -> PeriodWindow:
    today = now.date()
    return PeriodWindow(start=start_of_day(today - timedelta(days=days)), end=end_of_day(today))


def explicit_window(start_date: date, end_date: date) -> PeriodWindow:
    if end_date < start_date:
        raise BadRequestError("Start date must not be after end date", code="INVALID_DATE_RANGE")
    return PeriodWindow(start=start_of_day(start_date), end=end_of_day(end_date))


def validate_period(token: str, allowed: tuple[str, ...]) -> str:
    if token not in allowed:
        raise BadRequestError(
            f"Invalid period. Must be one of: {', '.join(allowed)}",
            code="INVALID_PARAMETER",
        )
    return token
