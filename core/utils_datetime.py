"""
DateTime utilities for reservation dates and service-day times.
The service day is expressed in UTC; inputs are parsed once at the boundary.
"""
import re
from datetime import date, datetime, time
from typing import Union

import pytz

from core.exceptions import BadRequestError


# Timezone configuration
TIMEZONE = pytz.utc

DATE_FORMAT = "%Y-%m-%d"
TIME_PATTERN = re.compile(r'^(\d{1,2}):(\d{2})$')


def get_current_datetime() -> datetime:
    """Get current datetime in UTC."""
    return datetime.now(TIMEZONE)


def parse_date(value: Union[str, date], field: str = "date") -> date:
    """
    Parse a YYYY-MM-DD calendar date.

    Args:
        value: Raw date string (or an already parsed date)
        field: Field name reported in the validation detail

    Returns:
        date object

    Raises:
        BadRequestError: If the value is not a valid calendar date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    try:
        return datetime.strptime((value or "").strip(), DATE_FORMAT).date()
    except ValueError:
        raise BadRequestError(
            f"Invalid date format: '{value}'. Expected YYYY-MM-DD.",
            errors={field: ["Must be a valid calendar date (YYYY-MM-DD)."]},
        ) from None


def parse_time_of_day(value: Union[str, time], field: str = "time") -> time:
    """
    Parse an HH:MM time of day (24-hour clock).

    Args:
        value: Raw time string such as "13:30" or "7:05"
        field: Field name reported in the validation detail

    Returns:
        time object

    Raises:
        BadRequestError: If the value is not a valid time of day
    """
    if isinstance(value, time):
        return value

    match = TIME_PATTERN.match((value or "").strip())
    if match:
        hour, minute = int(match.group(1)), int(match.group(2))
        if 0 <= hour <= 23 and 0 <= minute <= 59:
            return time(hour, minute)

    raise BadRequestError(
        f"Invalid time format: '{value}'. Expected HH:MM.",
        errors={field: ["Must be a valid time of day (HH:MM)."]},
    )


def format_time(value: time) -> str:
    """Format a time of day as HH:MM."""
    return value.strftime("%H:%M")


def format_time_slot(time_from: time, time_to: time) -> str:
    """Format a slot as 'HH:MM - HH:MM'."""
    return f"{format_time(time_from)} - {format_time(time_to)}"


def minutes_of_day(value: time) -> int:
    """Minutes elapsed since midnight."""
    return value.hour * 60 + value.minute


def time_from_minutes(total_minutes: int) -> time:
    """Inverse of minutes_of_day; the value must stay within one day."""
    return time(total_minutes // 60, total_minutes % 60)


def combine_utc(day: date, time_of_day: time) -> datetime:
    """Combine a service date and time of day into an aware UTC datetime."""
    return TIMEZONE.localize(datetime.combine(day, time_of_day))


def to_utc(value: datetime) -> datetime:
    """Normalize a naive (assumed UTC) or aware datetime to aware UTC."""
    if value.tzinfo is None:
        return TIMEZONE.localize(value)
    return value.astimezone(TIMEZONE)
