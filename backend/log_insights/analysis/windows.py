"""
Rolling time windows shared by the report queries.

Every report counts the same three half-open windows measured back from
the query time: an entry is inside the N-day window when its timestamp is
at or after ``now - N days``.
"""
import math
from datetime import datetime, timedelta
from typing import Dict, Optional

from sqlalchemy import and_, case, func

from log_insights.ingestion.timestamps import to_epoch_ms, utc_now
from log_insights.models import LogEntryRecord

WINDOW_DAYS = (1, 7, 30)


def window_cutoffs(now: Optional[datetime] = None) -> Dict[int, int]:
    """Map each window width in days to its cutoff in epoch milliseconds."""
    now = now or utc_now()
    return {days: to_epoch_ms(now - timedelta(days=days)) for days in WINDOW_DAYS}


def windowed_count(cutoff: int, *conditions):
    """Number of rows inside the window that also meet the extra conditions."""
    in_window = and_(LogEntryRecord.timestamp >= cutoff, *conditions)
    return func.coalesce(func.sum(case((in_window, 1), else_=0)), 0)


def windowed_distinct(cutoff: int, column):
    """COUNT DISTINCT of a column over rows inside the window."""
    return func.count(func.distinct(case((LogEntryRecord.timestamp >= cutoff, column))))


def request_counts(cutoffs: Dict[int, int]):
    """Labelled requests_1d, requests_7d and requests_30d columns."""
    return [
        windowed_count(cutoffs[days]).label(f"requests_{days}d")
        for days in WINDOW_DAYS
    ]


def round_half_up(value) -> int:
    """Round to the nearest integer with halves going up (2.5 -> 3)."""
    if value is None:
        return 0
    return int(math.floor(float(value) + 0.5))
