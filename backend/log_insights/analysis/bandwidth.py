from typing import List

from sqlalchemy import desc, func
from sqlalchemy.orm import Session

import log_insights.models as models
import log_insights.schemas as schemas
from log_insights.analysis.windows import round_half_up

def get_bandwidth_stats(db: Session, days: int = 30) -> List[schemas.BandwidthStats]:
    """
    Bytes and requests per UTC calendar day, newest first.
    Not a rolling window: returns the most recent `days` dates that have data.
    """
    Entry = models.LogEntryRecord

    rows = db.query(
        Entry.date_only,
        func.coalesce(func.sum(Entry.response_size), 0).label('total_bytes'),
        func.count(Entry.id).label('total_requests')
    ).group_by(
        Entry.date_only
    ).order_by(
        desc(Entry.date_only)
    ).limit(days).all()

    results = []
    for row in rows:
        average = row.total_bytes / row.total_requests if row.total_requests else 0
        results.append(schemas.BandwidthStats(
            date=row.date_only,
            total_bytes=row.total_bytes,
            total_requests=row.total_requests,
            average_response_size=round_half_up(average)
        ))

    return results
