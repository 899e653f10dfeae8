"""Tests for reporting period date ranges."""

from datetime import date, datetime, time, timezone

import pytest

from src.dispatch.agents.analytics.periods import (
    TimePeriod,
    date_range_for_period,
    previous_date_range,
    previous_period_reference,
)

WEDNESDAY = date(2025, 1, 15)


def _day_start(value: date) -> datetime:
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def _day_end(value: date) -> datetime:
    return datetime.combine(value, time.max, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    ("period", "first", "last", "label"),
    [
        (TimePeriod.DAILY, date(2025, 1, 15), date(2025, 1, 15), "Wednesday, Jan 15, 2025"),
        (TimePeriod.WEEKLY, date(2025, 1, 13), date(2025, 1, 19), "Week of Jan 13"),
        (TimePeriod.MONTHLY, date(2025, 1, 1), date(2025, 1, 31), "January 2025"),
        (TimePeriod.QUARTERLY, date(2025, 1, 1), date(2025, 3, 31), "Q1 2025"),
        (TimePeriod.YEARLY, date(2025, 1, 1), date(2025, 12, 31), "2025"),
    ],
)
def test_date_range_for_period(period, first, last, label):
    date_range = date_range_for_period(period, WEDNESDAY)
    assert date_range.start == _day_start(first)
    assert date_range.end == _day_end(last)
    assert date_range.label == label


def test_period_accepts_plain_string():
    assert date_range_for_period("monthly", WEDNESDAY).label == "January 2025"


def test_quarter_end_in_leap_year():
    date_range = date_range_for_period(TimePeriod.QUARTERLY, date(2024, 2, 10))
    assert date_range.end == _day_end(date(2024, 3, 31))


def test_to_dict_is_iso():
    assert date_range_for_period(TimePeriod.DAILY, WEDNESDAY).to_dict() == {
        "start": "2025-01-15T00:00:00+00:00",
        "end": "2025-01-15T23:59:59.999999+00:00",
    }


# ── Previous Period ──────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    ("period", "reference", "expected"),
    [
        (TimePeriod.DAILY, date(2025, 3, 1), date(2025, 2, 28)),
        (TimePeriod.WEEKLY, date(2025, 1, 15), date(2025, 1, 8)),
        (TimePeriod.MONTHLY, date(2025, 3, 31), date(2025, 2, 28)),
        (TimePeriod.MONTHLY, date(2025, 1, 10), date(2024, 12, 10)),
        (TimePeriod.QUARTERLY, date(2025, 1, 15), date(2024, 10, 15)),
        (TimePeriod.YEARLY, date(2024, 2, 29), date(2023, 2, 28)),
    ],
)
def test_previous_period_reference(period, reference, expected):
    assert previous_period_reference(period, reference) == expected


def test_previous_quarter_range():
    date_range = previous_date_range(TimePeriod.QUARTERLY, WEDNESDAY)
    assert date_range.label == "Q4 2024"
    assert date_range.start == _day_start(date(2024, 10, 1))
    assert date_range.end == _day_end(date(2024, 12, 31))
