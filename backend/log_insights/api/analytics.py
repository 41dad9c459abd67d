from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from log_insights.analyzer import LogAnalyzer
from log_insights.config import settings
from log_insights.database import get_db
import log_insights.schemas as schemas

router = APIRouter(prefix="/api/analytics", tags=["analytics"])

@router.get("/", response_model=schemas.AnalysisResults)
def get_analytics(
    user_agent_limit: int = Query(settings.DEFAULT_REPORT_LIMIT, ge=1),
    page_limit: int = Query(settings.DEFAULT_REPORT_LIMIT, ge=1),
    referrer_limit: int = Query(settings.DEFAULT_REPORT_LIMIT, ge=1),
    error_limit: int = Query(settings.DEFAULT_REPORT_LIMIT, ge=1),
    ip_limit: int = Query(settings.DEFAULT_REPORT_LIMIT, ge=1),
    db: Session = Depends(get_db)
):
    """All 1/7/30 day reports plus the summary."""
    try:
        return LogAnalyzer(db).analyze(
            user_agent_limit=user_agent_limit,
            page_limit=page_limit,
            referrer_limit=referrer_limit,
            error_limit=error_limit,
            ip_limit=ip_limit
        )
    except SQLAlchemyError as e:
        raise HTTPException(status_code=500, detail=f"Analysis error: {e}")
