from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime

# Parsed log line (never mutated after parsing)
class LogEntry(BaseModel):
    ip: str
    timestamp: datetime  # timezone-aware UTC
    method: str
    url: str
    protocol: str
    status_code: int
    response_size: int = 0
    referrer: str = ""
    user_agent: str
    forwarded_for: Optional[str] = None

    class Config:
        frozen = True

# Report rows
class UserAgentStats(BaseModel):
    user_agent: str
    requests_1d: int
    requests_7d: int
    requests_30d: int
    is_bot: bool

class PageStats(BaseModel):
    url: str
    requests_1d: int
    requests_7d: int
    requests_30d: int
    unique_ips_1d: int
    unique_ips_7d: int
    unique_ips_30d: int
    bot_requests_1d: int
    bot_requests_7d: int
    bot_requests_30d: int
    non_bot_requests_1d: int
    non_bot_requests_7d: int
    non_bot_requests_30d: int

class ReferrerStats(BaseModel):
    referrer: str
    requests_1d: int
    requests_7d: int
    requests_30d: int

class ErrorStats(BaseModel):
    url: str
    status_code: int
    requests_1d: int
    requests_7d: int
    requests_30d: int

class BandwidthStats(BaseModel):
    date: str
    total_bytes: int
    total_requests: int
    average_response_size: int

class TopIPStats(BaseModel):
    ip: str
    requests_1d: int
    requests_7d: int
    requests_30d: int
    is_bot: bool
    organization: Optional[str] = None

class StatusCodeCount(BaseModel):
    code: int
    count: int

class Summary(BaseModel):
    total_requests: int = 0
    total_unique_ips: int = 0
    total_bandwidth: int = 0
    avg_response_size: int = 0
    bot_traffic_percentage: int = 0
    most_active_day: str = "N/A"
    top_status_codes: List[StatusCodeCount] = []

class AnalysisResults(BaseModel):
    user_agents: List[UserAgentStats]
    pages: List[PageStats]
    referrers: List[ReferrerStats]
    errors: List[ErrorStats]
    bandwidth: List[BandwidthStats]
    top_ips: List[TopIPStats]
    summary: Summary
    generated_at: datetime

# Hosts and ingestion
class HostInfo(BaseModel):
    id: int
    hostname: str
    created_at: datetime
    updated_at: datetime

class IngestReport(BaseModel):
    hostname: str
    host_id: int
    entries_ingested: int
    lines_skipped: int = 0

class UploadResponse(BaseModel):
    filename: str
    hostname: str
    events_ingested: int
    lines_skipped: int
    message: str
