from datetime import datetime
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

import log_insights.models as models
import log_insights.schemas as schemas
from log_insights.analysis.windows import request_counts, window_cutoffs

def get_referrer_stats(db: Session, limit: int = 50, now: Optional[datetime] = None) -> List[schemas.ReferrerStats]:
    """Requests per referring URL; direct traffic (empty or "-") is left out."""
    cutoffs = window_cutoffs(now)
    Entry = models.LogEntryRecord

    rows = db.query(
        Entry.referrer,
        *request_counts(cutoffs)
    ).filter(
        Entry.referrer != '',
        Entry.referrer != '-'
    ).group_by(
        Entry.referrer
    ).order_by(
        desc('requests_30d'),
        Entry.referrer
    ).limit(limit).all()

    return [schemas.ReferrerStats(**row._asdict()) for row in rows]
