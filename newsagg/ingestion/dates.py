"""Timestamp parsing for feed, page and Bot API dates."""

import calendar
import time
from datetime import date, datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional

import pendulum

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Convert a timestamp of any supported shape to an aware UTC datetime.

    Accepts datetimes, epoch seconds (or milliseconds), ``time.struct_time``
    as produced by feedparser, ISO-8601 strings and RFC-822 strings.
    Returns None for missing or unparseable input.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        return _as_utc(value)

    if isinstance(value, (int, float)):
        seconds = float(value)
        if abs(seconds) > 1e11:
            seconds /= 1000.0
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, time.struct_time):
        try:
            return datetime.fromtimestamp(calendar.timegm(value), tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = pendulum.parse(text)
            if isinstance(parsed, datetime):
                return _as_utc(parsed)
            if isinstance(parsed, date):
                return datetime(parsed.year, parsed.month, parsed.day, tzinfo=timezone.utc)
        except (TypeError, ValueError):
            pass
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError):
            return None
        return _as_utc(parsed) if parsed is not None else None

    return None
