"""
Date and time helpers shared by the booking and PDC services.

Dates are compared at day granularity everywhere; slot times are stored as
zero-padded "HH:MM" strings so that lexical order is chronological order.
"""

from datetime import date, datetime
from typing import Callable, Union

Clock = Callable[[], datetime]


def now() -> datetime:
    return datetime.now()


def today(clock: Clock = now) -> date:
    """Current day with the time of day dropped"""
    return clock().date()


def to_day(value: Union[date, datetime, str]) -> date:
    """
    Normalize a date, datetime or 'YYYY-MM-DD' string to a date.

    Raises:
        ValueError: If a string is not in ISO date format
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()


def parse_hhmm(value: str) -> str:
    """
    Normalize '9:00' / '09:00' to zero-padded 'HH:MM'.

    Raises:
        ValueError: If the value is not a valid 24-hour time
    """
    parsed = datetime.strptime(value.strip(), "%H:%M")
    return parsed.strftime("%H:%M")


def to_minutes(value: str) -> int:
    hours, minutes = (int(part) for part in value.split(":"))
    return hours * 60 + minutes


def from_minutes(total: int) -> str:
    return f"{total // 60:02d}:{total % 60:02d}"


def format_time_display(value: str) -> str:
    """Convert 'HH:MM' to a 12-hour label such as '9:00 AM' or '12:30 PM'"""
    hours, minutes = (int(part) for part in value.split(":"))
    period = "PM" if hours >= 12 else "AM"
    display_hours = hours % 12 or 12
    return f"{display_hours}:{minutes:02d} {period}"


def format_date_long(value: Union[date, datetime, str]) -> str:
    """'2025-06-02' -> 'Monday, June 2, 2025'"""
    day = to_day(value)
    return f"{day.strftime('%A, %B')} {day.day}, {day.year}"


def time_ago(moment: datetime, clock: Clock = now) -> str:
    """Human readable age of a timestamp for notification lists"""
    diff = clock() - moment
    minutes = int(diff.total_seconds() // 60)
    hours = minutes // 60
    days = hours // 24

    if minutes < 1:
        return "Just now"
    if minutes < 60:
        return f"{minutes} min ago"
    if hours < 24:
        return f"{hours} hour{'s' if hours > 1 else ''} ago"
    if days < 7:
        return f"{days} day{'s' if days > 1 else ''} ago"
    return moment.strftime("%m/%d/%Y")
