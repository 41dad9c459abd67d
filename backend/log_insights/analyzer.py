"""
Entry point used by the CLI and the HTTP API.

LogAnalyzer loads access log files into the database and assembles the
report queries into a single AnalysisResults value.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import log_insights.models as models
import log_insights.schemas as schemas
from log_insights.analysis.bandwidth import get_bandwidth_stats
from log_insights.analysis.endpoint_frequency import get_error_stats, get_page_stats
from log_insights.analysis.ip_ranking import get_top_ips
from log_insights.analysis.referrers import get_referrer_stats
from log_insights.analysis.summary import calculate_summary
from log_insights.analysis.user_agents import get_user_agent_stats
from log_insights.config import settings
from log_insights.database import create_db_engine, init_db, make_session_factory
from log_insights.exceptions import StorageFailure
from log_insights.ingestion.loader import load_log_file
from log_insights.ingestion.timestamps import from_epoch_ms, utc_now

logger = logging.getLogger(__name__)


class LogAnalyzer:
    """
    Load access logs and run the 1/7/30 day reports over them.

    Use ``LogAnalyzer.connect(url)`` to open a database, or pass an existing
    Session (as the API routes do).
    """

    def __init__(self, db: Session, engine: Optional[Engine] = None):
        self.db = db
        self._engine = engine

    @classmethod
    def connect(cls, database_url: Optional[str] = None) -> "LogAnalyzer":
        engine = create_db_engine(database_url or settings.DATABASE_URL)
        init_db(engine)
        return cls(make_session_factory(engine)(), engine=engine)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def close(self) -> None:
        self.db.close()
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def load_log_file(self, file_path: str, hostname: str) -> schemas.IngestReport:
        """Parse and import a log file for a host. See ingestion.loader."""
        return load_log_file(self.db, file_path, hostname)

    def analyze(
        self,
        user_agent_limit: int = settings.DEFAULT_REPORT_LIMIT,
        page_limit: int = settings.DEFAULT_REPORT_LIMIT,
        referrer_limit: int = settings.DEFAULT_REPORT_LIMIT,
        error_limit: int = settings.DEFAULT_REPORT_LIMIT,
        ip_limit: int = settings.DEFAULT_REPORT_LIMIT,
        now: Optional[datetime] = None
    ) -> schemas.AnalysisResults:
        """Run every report against the windows anchored at `now`."""
        now = now or utc_now()
        logger.info("Running analysis...")

        return schemas.AnalysisResults(
            user_agents=get_user_agent_stats(self.db, user_agent_limit, now),
            pages=get_page_stats(self.db, page_limit, now),
            referrers=get_referrer_stats(self.db, referrer_limit, now),
            errors=get_error_stats(self.db, error_limit, now),
            bandwidth=get_bandwidth_stats(self.db, settings.BANDWIDTH_DAYS),
            top_ips=get_top_ips(self.db, ip_limit, now),
            summary=calculate_summary(self.db, settings.TOP_STATUS_CODES),
            generated_at=now
        )

    def get_all_hosts(self) -> List[schemas.HostInfo]:
        hosts = self.db.execute(
            select(models.Host).order_by(models.Host.hostname)
        ).scalars().all()

        return [
            schemas.HostInfo(
                id=host.id,
                hostname=host.hostname,
                created_at=from_epoch_ms(host.created_at),
                updated_at=from_epoch_ms(host.updated_at)
            )
            for host in hosts
        ]

    def clear_data(self) -> None:
        """Delete every entry, file record and host in one transaction."""
        try:
            self.db.execute(delete(models.LogEntryRecord))
            self.db.execute(delete(models.FileMetadata))
            self.db.execute(delete(models.Host))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageFailure(f"Failed to clear data: {e}") from e
        logger.info("Cleared all log data")
