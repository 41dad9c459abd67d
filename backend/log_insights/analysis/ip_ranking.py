from datetime import datetime
from typing import List, Optional

from sqlalchemy import case, desc, func
from sqlalchemy.orm import Session

import log_insights.models as models
import log_insights.schemas as schemas
from log_insights.analysis.windows import request_counts, window_cutoffs

def get_top_ips(db: Session, limit: int = 50, now: Optional[datetime] = None) -> List[schemas.TopIPStats]:
    """
    Rank source IPs by 30 day request count.
    An IP is flagged as a bot if any of its requests ever was.
    """
    cutoffs = window_cutoffs(now)
    Entry = models.LogEntryRecord

    rows = db.query(
        Entry.ip,
        *request_counts(cutoffs),
        func.max(case((Entry.is_bot.is_(True), 1), else_=0)).label('any_bot')
    ).group_by(
        Entry.ip
    ).order_by(
        desc('requests_30d'),
        Entry.ip
    ).limit(limit).all()

    return [
        schemas.TopIPStats(
            ip=row.ip,
            requests_1d=row.requests_1d,
            requests_7d=row.requests_7d,
            requests_30d=row.requests_30d,
            is_bot=bool(row.any_bot)
        )
        for row in rows
    ]
