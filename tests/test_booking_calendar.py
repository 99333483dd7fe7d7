import calendar
from datetime import time

import pytest

from app.utils.booking_calendar import (
    available_time_slots,
    booking_date,
    days_in_month,
    first_weekday_offset,
    format_time_label,
    month_grid,
    parse_time_label,
    shift_month,
    time_slots,
)


@pytest.mark.parametrize("year", [2023, 2024, 2025, 2100])
def test_grid_matches_sunday_first_calendar(year):
    sunday_first = calendar.Calendar(firstweekday=calendar.SUNDAY)
    for month in range(1, 13):
        grid = month_grid(year, month)
        weeks = sunday_first.monthdayscalendar(year, month)
        leading = weeks[0].index(1)

        assert grid["empty_days"] == [None] * leading
        assert grid["days"] == list(range(1, calendar.monthrange(year, month)[1] + 1))
        assert 0 <= first_weekday_offset(year, month) <= 6


def test_known_months():
    # June 2025 starts on a Sunday, February 2024 on a Thursday
    assert first_weekday_offset(2025, 6) == 0
    assert first_weekday_offset(2024, 2) == 4
    assert days_in_month(2024, 2) == 29
    assert days_in_month(2023, 2) == 28


def test_invalid_month_is_rejected():
    with pytest.raises(ValueError):
        month_grid(2025, 13)


@pytest.mark.parametrize(
    "year, month, delta, expected",
    [
        (2025, 1, -1, (2024, 12)),
        (2025, 12, 1, (2026, 1)),
        (2025, 6, 0, (2025, 6)),
        (2025, 3, -15, (2023, 12)),
    ],
)
def test_shift_month(year, month, delta, expected):
    assert shift_month(year, month, delta) == expected


def test_booking_date_is_zero_padded():
    assert booking_date(2025, 3, 7) == "2025-03-07"


def test_slots():
    slots = time_slots()
    assert [slot["time"] for slot in slots] == [
        "08:00 AM", "10:30 AM", "01:00 PM", "03:30 PM", "06:00 PM", "08:30 PM",
    ]
    assert "06:00 PM" not in [slot["time"] for slot in available_time_slots()]

    slots[0]["avail"] = False
    assert time_slots()[0]["avail"] is True


@pytest.mark.parametrize(
    "label, expected",
    [
        ("08:00 AM", time(8, 0)),
        ("12:15 AM", time(0, 15)),
        ("12:30 PM", time(12, 30)),
        ("08:30 pm", time(20, 30)),
        ("14:45", time(14, 45)),
    ],
)
def test_parse_time_label(label, expected):
    assert parse_time_label(label) == expected


@pytest.mark.parametrize("label", ["25:00", "13:00 PM", "noon", ""])
def test_parse_time_label_rejects_garbage(label):
    with pytest.raises(ValueError):
        parse_time_label(label)


def test_format_time_label():
    assert format_time_label(time(15, 30)) == "03:30 PM"
