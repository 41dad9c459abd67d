import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from log_insights.database import get_db
from log_insights.exceptions import EmptyResult, InvalidHost, StorageFailure
from log_insights.ingestion.loader import ingest_lines
import log_insights.schemas as schemas

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/upload", tags=["upload"])

@router.post("/", response_model=schemas.UploadResponse)
async def upload_log(
    hostname: str = Query(...),
    file: UploadFile = File(...),
    db: Session = Depends(get_db)
):
    """Import an uploaded access log for a host."""
    content = await file.read()
    # Undecodable bytes become U+FFFD rather than failing the whole upload
    lines = content.decode('utf-8', errors='replace').split('\n')
    logger.info("Processing upload %s (%d lines) for host %s", file.filename, len(lines), hostname)

    try:
        report = ingest_lines(db, lines, hostname, source=file.filename)
    except InvalidHost as e:
        raise HTTPException(status_code=400, detail=str(e))
    except EmptyResult as e:
        raise HTTPException(status_code=422, detail=str(e))
    except StorageFailure as e:
        raise HTTPException(status_code=500, detail=str(e))

    return schemas.UploadResponse(
        filename=file.filename or "",
        hostname=report.hostname,
        events_ingested=report.entries_ingested,
        lines_skipped=report.lines_skipped,
        message=f"Imported {report.entries_ingested} log entries for {report.hostname}"
    )
