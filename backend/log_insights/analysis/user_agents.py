from datetime import datetime
from typing import List, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

import log_insights.models as models
import log_insights.schemas as schemas
from log_insights.analysis.windows import request_counts, window_cutoffs

def get_user_agent_stats(db: Session, limit: int = 50, now: Optional[datetime] = None) -> List[schemas.UserAgentStats]:
    """
    Requests per user agent over the 1/7/30 day windows.
    The bot label is the one stored at load time.
    """
    cutoffs = window_cutoffs(now)
    Entry = models.LogEntryRecord

    rows = db.query(
        Entry.user_agent,
        Entry.is_bot,
        *request_counts(cutoffs)
    ).group_by(
        Entry.user_agent,
        Entry.is_bot
    ).order_by(
        desc('requests_30d'),
        Entry.user_agent
    ).limit(limit).all()

    return [
        schemas.UserAgentStats(
            user_agent=row.user_agent,
            requests_1d=row.requests_1d,
            requests_7d=row.requests_7d,
            requests_30d=row.requests_30d,
            is_bot=bool(row.is_bot)
        )
        for row in rows
    ]
