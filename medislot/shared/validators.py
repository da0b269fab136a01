"""Shared validation utilities"""

import re
from datetime import date
from typing import Optional

from ..models import Weekday

_BY_ISO_WEEKDAY = list(Weekday)  # isoweekday() % 7 -> Sunday first

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def normalize_time(value: Optional[str]) -> str:
    """
    Validate a time-of-day string and return it as HH:MM.

    Raises:
        ValueError: If the value is not a 24h HH:MM time
    """
    if not value:
        raise ValueError("Time is required in the format HH:MM")

    value = value.strip()
    if not _TIME_RE.match(value):
        raise ValueError("The time must be in the format HH:MM")
    return value


def minutes_of_day(value: str) -> int:
    """Minutes since midnight for an HH:MM string"""
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def format_minutes(total: int) -> str:
    """HH:MM for minutes since midnight"""
    return f"{total // 60:02d}:{total % 60:02d}"


def normalize_weekday(value: Optional[str]) -> Weekday:
    """
    Resolve a case-insensitive English day name to a Weekday.

    Raises:
        ValueError: If the value is not a valid day name
    """
    if value:
        candidate = value.strip().capitalize()
        for day in Weekday:
            if day.value == candidate:
                return day
    raise ValueError("This is not a valid day")


def weekday_of(value: date) -> Weekday:
    """English weekday of a calendar date"""
    return _BY_ISO_WEEKDAY[value.isoweekday() % 7]


def validate_email(email: Optional[str]) -> str:
    """
    Validate email format.

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        raise ValueError("Email is required")

    email = email.strip().lower()
    if not _EMAIL_RE.match(email):
        raise ValueError("Invalid email format")

    return email
