from sqlalchemy import desc, func
from sqlalchemy.orm import Session

import log_insights.models as models
import log_insights.schemas as schemas
from log_insights.analysis.windows import round_half_up

def calculate_summary(db: Session, top_status_codes: int = 10) -> schemas.Summary:
    """
    Whole-history totals across every host.
    Percentages and averages are rounded half up to whole numbers.
    """
    Entry = models.LogEntryRecord

    totals = db.query(
        func.count(Entry.id).label('total_requests'),
        func.count(func.distinct(Entry.ip)).label('unique_ips'),
        func.coalesce(func.sum(Entry.response_size), 0).label('total_bytes'),
        func.avg(Entry.response_size).label('avg_size')
    ).one()

    total_requests = totals.total_requests or 0
    if total_requests == 0:
        return schemas.Summary()

    bot_requests = db.query(func.count(Entry.id)).filter(Entry.is_bot.is_(True)).scalar() or 0

    # Busiest UTC day; ties go to the most recent date
    busiest = db.query(
        Entry.date_only,
        func.count(Entry.id).label('request_count')
    ).group_by(
        Entry.date_only
    ).order_by(
        desc('request_count'),
        desc(Entry.date_only)
    ).first()

    status_rows = db.query(
        Entry.status_code,
        func.count(Entry.id).label('status_count')
    ).group_by(
        Entry.status_code
    ).order_by(
        desc('status_count'),
        Entry.status_code
    ).limit(top_status_codes).all()

    return schemas.Summary(
        total_requests=total_requests,
        total_unique_ips=totals.unique_ips,
        total_bandwidth=totals.total_bytes,
        avg_response_size=round_half_up(totals.avg_size),
        bot_traffic_percentage=round_half_up(bot_requests * 100 / total_requests),
        most_active_day=busiest.date_only if busiest else "N/A",
        top_status_codes=[
            schemas.StatusCodeCount(code=row.status_code, count=row.status_count)
            for row in status_rows
        ]
    )
