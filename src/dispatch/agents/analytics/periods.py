"""Reporting periods and their calendar date ranges.

Weeks start on Monday. Ranges are inclusive and timezone-aware UTC, from
00:00 on the first day to the last microsecond of the last day.
"""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from enum import Enum


class TimePeriod(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime
    label: str

    def to_dict(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


def _span(first: date, last: date, label: str) -> DateRange:
    return DateRange(
        start=datetime.combine(first, time.min, tzinfo=timezone.utc),
        end=datetime.combine(last, time.max, tzinfo=timezone.utc),
        label=label,
    )


def _month_end(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def date_range_for_period(period: TimePeriod, reference: date | None = None) -> DateRange:
    """Return the calendar period of kind ``period`` containing ``reference``."""
    ref = reference or datetime.now(timezone.utc).date()
    period = TimePeriod(period)

    if period == TimePeriod.DAILY:
        return _span(ref, ref, f"{ref:%A}, {ref:%b} {ref.day}, {ref:%Y}")
    if period == TimePeriod.WEEKLY:
        monday = ref - timedelta(days=ref.weekday())
        return _span(monday, monday + timedelta(days=6), f"Week of {monday:%b} {monday.day}")
    if period == TimePeriod.MONTHLY:
        return _span(ref.replace(day=1), _month_end(ref.year, ref.month), f"{ref:%B %Y}")
    if period == TimePeriod.QUARTERLY:
        quarter = (ref.month - 1) // 3 + 1
        first_month = 3 * (quarter - 1) + 1
        return _span(
            date(ref.year, first_month, 1),
            _month_end(ref.year, first_month + 2),
            f"Q{quarter} {ref.year}",
        )
    return _span(date(ref.year, 1, 1), date(ref.year, 12, 31), str(ref.year))


def previous_period_reference(period: TimePeriod, reference: date) -> date:
    """Step ``reference`` back by one period, clamping to the month's last day."""
    period = TimePeriod(period)
    if period == TimePeriod.DAILY:
        return reference - timedelta(days=1)
    if period == TimePeriod.WEEKLY:
        return reference - timedelta(weeks=1)
    if period == TimePeriod.YEARLY:
        year = reference.year - 1
        last_day = _month_end(year, reference.month).day
        return reference.replace(year=year, day=min(reference.day, last_day))

    months_back = 1 if period == TimePeriod.MONTHLY else 3
    month_index = reference.year * 12 + reference.month - 1 - months_back
    year, month = divmod(month_index, 12)
    month += 1
    return date(year, month, min(reference.day, _month_end(year, month).day))


def previous_date_range(period: TimePeriod, reference: date | None = None) -> DateRange:
    ref = reference or datetime.now(timezone.utc).date()
    return date_range_for_period(period, previous_period_reference(period, ref))


def today_range() -> DateRange:
    return date_range_for_period(TimePeriod.DAILY)
