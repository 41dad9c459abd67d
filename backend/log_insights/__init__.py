"""Access log ingestion, bot classification and rolling traffic reports."""

from log_insights.analyzer import LogAnalyzer
from log_insights.analysis.bot_detection import is_bot
from log_insights.ingestion.nginx import parse_log_line, parse_nginx_log

__all__ = ["LogAnalyzer", "is_bot", "parse_log_line", "parse_nginx_log"]
