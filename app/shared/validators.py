"""Shared validation utilities"""

import re
from typing import Optional

from ..utils.clock import parse_hhmm, to_day

MEETING_TYPES = {"phone", "onsite", "video"}


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Trimmed email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip()

    if not re.match(r"^\S+@\S+\.\S+$", email):
        raise ValueError("Invalid email format")

    return email


def validate_hhmm(value: str) -> str:
    """Validate a 24-hour 'HH:MM' time and return it zero-padded"""
    try:
        return parse_hhmm(value)
    except (ValueError, AttributeError):
        raise ValueError("Time must be in HH:MM format") from None


def validate_iso_date(value):
    """Accept a date or a 'YYYY-MM-DD' string"""
    try:
        return to_day(value)
    except (ValueError, AttributeError, TypeError):
        raise ValueError("Date must be in YYYY-MM-DD format") from None


def validate_meeting_type(value: str) -> str:
    value = value.strip().lower()
    if value not in MEETING_TYPES:
        raise ValueError(f"Meeting type must be one of: {', '.join(sorted(MEETING_TYPES))}")
    return value


def validate_working_days(days: list[int]) -> list[int]:
    """Working days use 0 = Sunday ... 6 = Saturday"""
    invalid = [d for d in days if d < 0 or d > 6]
    if invalid:
        raise ValueError(f"Invalid weekday(s): {invalid}. Use 0 (Sunday) to 6 (Saturday)")
    return sorted(set(days))
