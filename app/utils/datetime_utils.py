"""
Event datetime helpers

Event timestamps are kept as naive wall-clock times in settings.EVENT_TIMEZONE:
- parse_event_datetime: parse request text into a naive local datetime
- format_event_datetime: render a stored datetime in the wire format
- now_local: the current naive local time used to split progressing/done
"""

from datetime import datetime
from typing import Optional

import pytz

from app.core.config import settings

EVENT_DATETIME_FORMAT = "%Y-%m-%dT%H:%M:%S.%f"

def event_timezone():
    return pytz.timezone(settings.EVENT_TIMEZONE)

def parse_event_datetime(value: str) -> datetime:
    """
    Parse an event timestamp.

    Accepts the fixed format yyyy-MM-dd'T'HH:mm:ss.SSS and any other
    ISO-8601 local datetime. Offset-aware input is converted into the
    event timezone before the offset is dropped.

    Raises:
        ValueError: if the text is not a recognisable timestamp
    """
    try:
        parsed = datetime.strptime(value, EVENT_DATETIME_FORMAT)
    except ValueError:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))

    return to_event_local(parsed)

def to_event_local(value: datetime) -> datetime:
    """Convert an offset-aware datetime to naive event-timezone wall-clock time"""
    if value.tzinfo is not None:
        return value.astimezone(event_timezone()).replace(tzinfo=None)
    return value

def format_event_datetime(value: datetime) -> str:
    # Millisecond precision, e.g. 2024-06-15T18:30:00.000
    return value.strftime(EVENT_DATETIME_FORMAT)[:-3]

def now_local(reference: Optional[datetime] = None) -> datetime:
    """Current time in the event timezone, without tzinfo"""
    if reference is not None:
        return reference
    return datetime.now(event_timezone()).replace(tzinfo=None)
