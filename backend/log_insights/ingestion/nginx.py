import re
import logging
from typing import Iterable, List, Optional, Tuple

from log_insights.exceptions import LineParseFailure
from log_insights.ingestion.timestamps import normalize_timestamp
from log_insights.schemas import LogEntry

logger = logging.getLogger(__name__)

# Combined format plus an optional quoted X-Forwarded-For field.
# The request group is greedy in the middle so paths containing spaces
# keep everything between the method and the trailing protocol token.
LOG_PATTERN = re.compile(
    r'^(?P<ip>\S+) \S+ \S+ \[(?P<timestamp>[^\]]+)\] '
    r'"(?P<method>\S+) (?P<url>[^"]*) (?P<protocol>\S+)" '
    r'(?P<status>\S+) (?P<size>\S+) '
    r'"(?P<referrer>[^"]*)" "(?P<user_agent>[^"]*)"'
    r'(?:\s+"(?P<forwarded_for>[^"]*)")?'
)

_DIGITS = re.compile(r'[0-9]+\Z')

# Stored in signed 64-bit integer columns
MAX_INTEGER = 2 ** 63 - 1


def _to_integer(value: str) -> Optional[int]:
    """Non-negative decimal that fits a signed 64-bit column, else None."""
    if not _DIGITS.match(value):
        return None
    # int() refuses very long digit strings, so bound the length first
    digits = value.lstrip('0') or '0'
    if len(digits) > 19 or int(digits) > MAX_INTEGER:
        return None
    return int(digits)


def parse_log_line(line: str) -> Optional[LogEntry]:
    """
    Parse one access log line.
    Example: 172.16.6.142 - - [06/Sep/2025:11:01:23 -0700] "GET /js/script.js HTTP/1.1" 200 1650 "https://example.com/" "Mozilla/5.0..." "205.169.39.128"

    Returns None for blank lines and raises LineParseFailure for lines that
    do not match the grammar.
    """
    trimmed = line.strip()
    if not trimmed:
        return None

    match = LOG_PATTERN.match(trimmed)
    if not match:
        raise LineParseFailure("Failed to parse log line", line)

    timestamp = normalize_timestamp(match.group('timestamp'))
    if timestamp is None:
        raise LineParseFailure(f"Failed to parse timestamp {match.group('timestamp')!r}", line)

    status = match.group('status')
    size = match.group('size')
    status_code = _to_integer(status)
    response_size = 0 if size == '-' else _to_integer(size)
    if status_code is None or response_size is None:
        raise LineParseFailure(f"Failed to parse numeric values: status={status}, size={size}", line)

    referrer = match.group('referrer')
    return LogEntry(
        ip=match.group('ip'),
        timestamp=timestamp,
        method=match.group('method'),
        url=match.group('url'),
        protocol=match.group('protocol'),
        status_code=status_code,
        response_size=response_size,
        referrer='' if referrer == '-' else referrer,
        user_agent=match.group('user_agent'),
        forwarded_for=match.group('forwarded_for') or None,
    )


def parse_nginx_log(log_lines: Iterable[str]) -> Tuple[List[LogEntry], int]:
    """
    Parse every line, dropping the ones that fail.
    Returns the parsed entries and the number of lines that failed.
    Blank lines are skipped and not counted as failures.
    """
    events = []
    failures = 0

    for line in log_lines:
        try:
            entry = parse_log_line(line)
        except LineParseFailure as e:
            # Log parsing errors but continue processing
            logger.warning("%s", e)
            failures += 1
            continue
        if entry is not None:
            events.append(entry)

    return events, failures
