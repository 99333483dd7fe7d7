import calendar
import re
from datetime import date, time
from typing import Dict, List, Tuple

TIME_SLOTS = (
    {"time": "08:00 AM", "label": "Morning", "avail": True},
    {"time": "10:30 AM", "label": "Morning", "avail": True},
    {"time": "01:00 PM", "label": "Afternoon", "avail": True},
    {"time": "03:30 PM", "label": "Afternoon", "avail": True},
    {"time": "06:00 PM", "label": "Fully Booked", "avail": False},
    {"time": "08:30 PM", "label": "Evening", "avail": True},
)

_LABEL_PATTERN = re.compile(r"^(0?[1-9]|1[0-2]):([0-5][0-9])\s*([AaPp][Mm])$")
_24H_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):([0-5][0-9])$")


def _check_month(month: int) -> None:
    if not 1 <= month <= 12:
        raise ValueError(f"Month must be between 1 and 12, got {month}")


def days_in_month(year: int, month: int) -> int:
    _check_month(month)
    return calendar.monthrange(year, month)[1]


def first_weekday_offset(year: int, month: int) -> int:
    """Weekday of the 1st counted from Sunday (0) to Saturday (6)"""
    _check_month(month)
    return (date(year, month, 1).weekday() + 1) % 7


def month_grid(year: int, month: int) -> Dict:
    """Calendar cells for a month: leading blanks up to the first weekday, then day numbers"""
    return {
        "year": year,
        "month": month,
        "empty_days": [None] * first_weekday_offset(year, month),
        "days": list(range(1, days_in_month(year, month) + 1)),
    }


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    _check_month(month)
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def booking_date(year: int, month: int, day: int) -> str:
    return date(year, month, day).isoformat()


def time_slots() -> List[Dict]:
    return [dict(slot) for slot in TIME_SLOTS]


def available_time_slots() -> List[Dict]:
    return [slot for slot in time_slots() if slot["avail"]]


def parse_time_label(value: str) -> time:
    """Accept a slot label such as "10:30 AM" or a 24-hour "HH:MM" string"""
    value = value.strip()

    match = _LABEL_PATTERN.match(value)
    if match:
        hour, minute, meridiem = int(match.group(1)), int(match.group(2)), match.group(3).upper()
        if meridiem == "AM":
            hour = 0 if hour == 12 else hour
        else:
            hour = 12 if hour == 12 else hour + 12
        return time(hour, minute)

    match = _24H_PATTERN.match(value)
    if match:
        return time(int(match.group(1)), int(match.group(2)))

    raise ValueError("Invalid time format. Use HH:MM (24-hour) or hh:mm AM/PM")


def format_time_label(value: time) -> str:
    return value.strftime("%I:%M %p")
