from datetime import datetime
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

import log_insights.models as models
import log_insights.schemas as schemas
from log_insights.analysis.windows import (
    WINDOW_DAYS, request_counts, window_cutoffs, windowed_count, windowed_distinct
)

def get_page_stats(db: Session, limit: int = 50, now: Optional[datetime] = None) -> List[schemas.PageStats]:
    """
    Requests, distinct IPs, and bot vs human requests per URL for each window.
    Every row is either bot or not, so bot + non-bot always equals requests.
    """
    cutoffs = window_cutoffs(now)
    Entry = models.LogEntryRecord

    columns = request_counts(cutoffs)
    for days in WINDOW_DAYS:
        columns.append(windowed_distinct(cutoffs[days], Entry.ip).label(f"unique_ips_{days}d"))
    for days in WINDOW_DAYS:
        columns.append(windowed_count(cutoffs[days], Entry.is_bot.is_(True)).label(f"bot_requests_{days}d"))
    for days in WINDOW_DAYS:
        columns.append(windowed_count(cutoffs[days], Entry.is_bot.is_(False)).label(f"non_bot_requests_{days}d"))

    rows = db.query(
        Entry.url,
        *columns
    ).group_by(
        Entry.url
    ).order_by(
        desc('requests_30d'),
        Entry.url
    ).limit(limit).all()

    return [schemas.PageStats(**row._asdict()) for row in rows]

def get_error_stats(db: Session, limit: int = 50, now: Optional[datetime] = None) -> List[schemas.ErrorStats]:
    """Client and server errors (status >= 400) per URL and status code."""
    cutoffs = window_cutoffs(now)
    Entry = models.LogEntryRecord

    rows = db.query(
        Entry.url,
        Entry.status_code,
        *request_counts(cutoffs)
    ).filter(
        Entry.status_code >= 400
    ).group_by(
        Entry.url,
        Entry.status_code
    ).order_by(
        desc('requests_30d'),
        Entry.url,
        Entry.status_code
    ).limit(limit).all()

    return [schemas.ErrorStats(**row._asdict()) for row in rows]
