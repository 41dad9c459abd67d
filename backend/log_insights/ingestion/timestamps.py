"""
Access log timestamp normalization.

Log lines carry local wall-clock time plus a fixed offset, e.g.
``06/Sep/2025:11:01:23 -0700``. Everything stored and compared downstream
is a UTC instant, so the offset is folded in here and nowhere else.
"""
import re
from datetime import datetime, timedelta, timezone
from typing import Optional

TIMESTAMP_PATTERN = re.compile(
    r'^(?P<day>\d{2})/(?P<month>[A-Za-z]{3})/(?P<year>\d{4}):'
    r'(?P<hour>\d{2}):(?P<minute>\d{2}):(?P<second>\d{2}) '
    r'(?P<sign>[+-])(?P<off_hours>\d{2})(?P<off_minutes>\d{2})$'
)

# strptime's %b depends on the process locale, so months are mapped explicitly
MONTHS = {
    'Jan': 1, 'Feb': 2, 'Mar': 3, 'Apr': 4, 'May': 5, 'Jun': 6,
    'Jul': 7, 'Aug': 8, 'Sep': 9, 'Oct': 10, 'Nov': 11, 'Dec': 12,
}

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def normalize_timestamp(timestamp_str: str) -> Optional[datetime]:
    """
    Convert a ``DD/Mon/YYYY:HH:MM:SS ±HHMM`` token to an aware UTC datetime.
    Returns None if the shape, month or calendar values are invalid.
    """
    match = TIMESTAMP_PATTERN.match(timestamp_str.strip())
    if not match:
        return None

    month = MONTHS.get(match.group('month'))
    if month is None:
        return None

    try:
        local = datetime(
            int(match.group('year')),
            month,
            int(match.group('day')),
            int(match.group('hour')),
            int(match.group('minute')),
            int(match.group('second')),
        )
    except ValueError:
        return None

    offset = timedelta(
        hours=int(match.group('off_hours')),
        minutes=int(match.group('off_minutes'))
    )
    # +HHMM is ahead of UTC: subtract it. -HHMM is behind: add it.
    if match.group('sign') == '+':
        utc = local - offset
    else:
        utc = local + offset

    return utc.replace(tzinfo=timezone.utc)


def to_epoch_ms(dt: datetime) -> int:
    """Milliseconds since the Unix epoch; naive datetimes are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    delta = dt - EPOCH
    return (delta.days * 86400 + delta.seconds) * 1000 + delta.microseconds // 1000


def from_epoch_ms(ms: int) -> datetime:
    return EPOCH + timedelta(milliseconds=ms)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_ms() -> int:
    return to_epoch_ms(utc_now())


def date_only(dt: datetime) -> str:
    """UTC calendar date as YYYY-MM-DD."""
    return dt.astimezone(timezone.utc).date().isoformat()
