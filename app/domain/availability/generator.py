"""
Timeslot generation from working-hours settings.

Pure functions: no database access, so the same rules back both the
initialize endpoint and the duration-change regeneration.
"""

from datetime import date, timedelta
from typing import Iterator

from ...utils.clock import from_minutes, to_minutes
from .schemas import AvailabilitySettings


def weekday_number(day: date) -> int:
    """Weekday with 0 = Sunday ... 6 = Saturday"""
    return (day.weekday() + 1) % 7


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def slot_times(settings: AvailabilitySettings) -> list[str]:
    """
    Start times for one working day.

    Slots step by slotDuration from startTime while the start is before
    endTime, so a trailing partial slot is dropped. A start that falls inside
    a break [start, end) is skipped.
    """
    start_minutes = to_minutes(settings.startTime)
    end_minutes = to_minutes(settings.endTime)
    breaks = [(to_minutes(b.start), to_minutes(b.end)) for b in settings.breaks]

    times = []
    minutes = start_minutes
    while minutes < end_minutes:
        if not any(break_start <= minutes < break_end for break_start, break_end in breaks):
            times.append(from_minutes(minutes))
        minutes += settings.slotDuration
    return times


def generate_slots(start: date, end: date, settings: AvailabilitySettings) -> list[tuple[date, str]]:
    """All (date, time) pairs for working days in [start, end]"""
    times = slot_times(settings)
    working_days = set(settings.workingDays)
    return [
        (day, time)
        for day in iter_days(start, end)
        if weekday_number(day) in working_days
        for time in times
    ]
