"""
Business-calendar helpers.

Join dates and attendance dates are stored as ``dd/mm/yyyy`` strings and
matched by string equality, so every "today" in the app must come from
:func:`today_display_date`.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from app.core.config import settings

DISPLAY_DATE_FORMAT = "%d/%m/%Y"


def parse_utc_offset(tz_offset: str) -> timezone:
    """Turn ``+05:30`` / ``-04`` into a fixed-offset ``timezone``."""
    sign = 1 if tz_offset[0] == "+" else -1
    offset_parts = tz_offset[1:].split(":")
    offset_hours = int(offset_parts[0])
    offset_mins = int(offset_parts[1]) if len(offset_parts) > 1 else 0
    return timezone(timedelta(hours=sign * offset_hours, minutes=sign * offset_mins))


def business_now() -> datetime:
    return datetime.now(parse_utc_offset(settings.TIMEZONE_OFFSET))


def format_display_date(value: date) -> str:
    return value.strftime(DISPLAY_DATE_FORMAT)


def today_display_date() -> str:
    return format_display_date(business_now().date())
