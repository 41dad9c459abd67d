from datetime import datetime, timezone
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from log_insights.analyzer import LogAnalyzer
from log_insights.database import get_db
from log_insights.exceptions import StorageFailure
import log_insights.schemas as schemas

router = APIRouter(prefix="/api/hosts", tags=["hosts"])

@router.get("/", response_model=List[schemas.HostInfo])
def list_hosts(db: Session = Depends(get_db)):
    """Tracked hostnames, alphabetical."""
    return LogAnalyzer(db).get_all_hosts()

@router.delete("/")
def clear_data(confirm: bool = False, db: Session = Depends(get_db)):
    """Delete all hosts and log entries."""
    if not confirm:
        raise HTTPException(status_code=400, detail="Confirm flag required")

    try:
        LogAnalyzer(db).clear_data()
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "message": "All data cleared successfully",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
