"""
Bulk loading of parsed access log entries.

A load resolves (or creates) the host row and inserts every parsed entry in
a single transaction: either all rows become visible or none do.
"""
import os
import logging
from typing import Iterable, List, Optional

from sqlalchemy import insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from log_insights.analysis.bot_detection import is_bot
from log_insights.exceptions import EmptyResult, InputNotFound, InvalidHost, StorageFailure
from log_insights.ingestion.nginx import parse_nginx_log
from log_insights.ingestion.timestamps import date_only, to_epoch_ms, utc_now_ms
from log_insights.models import FileMetadata, Host, LogEntryRecord
from log_insights.schemas import IngestReport, LogEntry

logger = logging.getLogger(__name__)


def require_hostname(hostname: Optional[str]) -> str:
    """
    Reject a missing or blank hostname. Surrounding whitespace is trimmed, so
    " example.com" and "example.com" are stored as the same host.
    """
    if hostname is None or not hostname.strip():
        raise InvalidHost()
    return hostname.strip()


def load_log_file(db: Session, file_path: str, hostname: str) -> IngestReport:
    """
    Parse a log file and import it for the given host.
    Raises InvalidHost, InputNotFound, EmptyResult or StorageFailure.
    """
    # Hostname is validated before the file system is touched
    hostname = require_hostname(hostname)
    if not os.path.isfile(file_path):
        raise InputNotFound(file_path)

    logger.info("Loading log file: %s for host: %s", file_path, hostname)
    with open(file_path, encoding='utf-8', errors='replace') as f:
        content = f.read()

    stat = os.stat(file_path)
    metadata = {
        "file_path": os.path.abspath(file_path),
        "last_modified": int(stat.st_mtime * 1000),
        "file_size": stat.st_size,
    }
    return ingest_lines(db, content.split('\n'), hostname, source=file_path, file_metadata=metadata)


def ingest_lines(
    db: Session,
    lines: Iterable[str],
    hostname: str,
    source: Optional[str] = None,
    file_metadata: Optional[dict] = None
) -> IngestReport:
    """Parse raw lines already in memory and import them for the given host."""
    hostname = require_hostname(hostname)
    entries, failures = parse_nginx_log(lines)

    if not entries:
        raise EmptyResult(source)

    logger.info("Parsed %d log entries (%d lines skipped)", len(entries), failures)
    host_id = ingest_entries(db, entries, hostname, file_metadata=file_metadata)
    logger.info("Imported %d log entries for host: %s", len(entries), hostname)

    return IngestReport(
        hostname=hostname,
        host_id=host_id,
        entries_ingested=len(entries),
        lines_skipped=failures
    )


def ingest_entries(
    db: Session,
    entries: List[LogEntry],
    hostname: str,
    file_metadata: Optional[dict] = None
) -> int:
    """
    Resolve the host and insert all entries in one transaction.
    Returns the host id. On any error nothing is persisted and the session is
    rolled back. Database errors surface as StorageFailure.
    """
    now_ms = utc_now_ms()
    try:
        host_id = get_or_create_host(db, hostname, now_ms)
        insert_batch(db, entries, host_id)
        if file_metadata:
            record_file_metadata(db, hostname=hostname, processed_at=now_ms, **file_metadata)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Import for host %s rolled back: %s", hostname, e)
        raise StorageFailure(f"Failed to import log entries for {hostname}: {e}") from e
    except Exception:
        # Drivers can raise outside SQLAlchemy, e.g. OverflowError from sqlite3
        db.rollback()
        logger.exception("Import for host %s rolled back", hostname)
        raise
    return host_id


def get_or_create_host(db: Session, hostname: str, now_ms: int) -> int:
    """Return the host id, bumping updated_at or inserting a new row."""
    host = db.execute(
        select(Host).where(Host.hostname == hostname)
    ).scalar_one_or_none()

    if host is not None:
        # Keep updated_at strictly increasing across loads
        host.updated_at = max(now_ms, host.updated_at + 1)
        db.flush()
        return host.id

    host = Host(hostname=hostname, created_at=now_ms, updated_at=now_ms)
    db.add(host)
    db.flush()
    return host.id


def insert_batch(db: Session, entries: List[LogEntry], host_id: int) -> None:
    """Insert entries for one host as a single executemany statement."""
    rows = [
        {
            "host_id": host_id,
            "ip": entry.ip,
            "timestamp": to_epoch_ms(entry.timestamp),
            "method": entry.method,
            "url": entry.url,
            "protocol": entry.protocol,
            "status_code": entry.status_code,
            "response_size": entry.response_size,
            "referrer": entry.referrer,
            "user_agent": entry.user_agent,
            "forwarded_for": entry.forwarded_for,
            "is_bot": is_bot(entry.user_agent),
            "date_only": date_only(entry.timestamp),
        }
        for entry in entries
    ]
    if rows:
        db.execute(insert(LogEntryRecord), rows)


def record_file_metadata(
    db: Session,
    file_path: str,
    hostname: str,
    last_modified: int,
    file_size: int,
    processed_at: int
) -> None:
    """Upsert the audit row for a processed file."""
    db.merge(FileMetadata(
        file_path=file_path,
        hostname=hostname,
        last_modified=last_modified,
        file_size=file_size,
        processed_at=processed_at
    ))
