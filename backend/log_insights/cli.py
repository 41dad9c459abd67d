#!/usr/bin/env python3
"""
Website Log Insights command line interface.
Loads access logs into the database and prints the reports as JSON.
"""
import argparse
import json
import logging
import sys

from log_insights.analyzer import LogAnalyzer
from log_insights.config import configure_logging, settings
from log_insights.exceptions import LogInsightsError
from log_insights.utils.whois import OrganizationLookup

logger = logging.getLogger(__name__)

def analyze_file(args) -> dict:
    """Import a log file (optionally after clearing) and run every report."""
    with LogAnalyzer.connect(args.database) as analyzer:
        if args.clear:
            logger.info("Clearing existing data...")
            analyzer.clear_data()

        if args.file:
            analyzer.load_log_file(args.file, args.host)

        results = analyzer.analyze(
            user_agent_limit=args.user_agent_limit,
            page_limit=args.page_limit,
            referrer_limit=args.referrer_limit,
            error_limit=args.error_limit,
            ip_limit=args.ip_limit
        )

    if args.orgs and results.top_ips:
        organizations = OrganizationLookup().lookup_many(ip.ip for ip in results.top_ips)
        for ip_stats in results.top_ips:
            ip_stats.organization = organizations.get(ip_stats.ip) or None

    return results.model_dump(mode="json")

def list_hosts(args) -> list:
    with LogAnalyzer.connect(args.database) as analyzer:
        return [host.model_dump(mode="json") for host in analyzer.get_all_hosts()]

def clear_data(args) -> dict:
    with LogAnalyzer.connect(args.database) as analyzer:
        analyzer.clear_data()
    return {"message": "Database cleared successfully"}

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="log-insights", description="Analyze web server access logs")
    parser.add_argument("--log-level", default=settings.LOG_LEVEL, help="Logging level (default: %(default)s)")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Analyze command
    analyze_parser = subparsers.add_parser("analyze", help="Import a log file and print the reports")
    analyze_parser.add_argument("-f", "--file", help="Access log file to import")
    analyze_parser.add_argument("--host", help="Hostname the log file belongs to (e.g. example.com)")
    analyze_parser.add_argument("-d", "--database", help="Database URL (default: from settings)")
    analyze_parser.add_argument("--clear", action="store_true", help="Clear existing data before importing")
    analyze_parser.add_argument("--orgs", action="store_true", help="Look up organizations for top IPs")
    for name in ("user-agent", "page", "referrer", "error", "ip"):
        analyze_parser.add_argument(
            f"--{name}-limit", type=int, default=settings.DEFAULT_REPORT_LIMIT,
            help=f"Rows in the {name} report (default: %(default)s)"
        )
    analyze_parser.set_defaults(handler=analyze_file)

    # Hosts command
    hosts_parser = subparsers.add_parser("hosts", help="List tracked hosts")
    hosts_parser.add_argument("-d", "--database", help="Database URL (default: from settings)")
    hosts_parser.set_defaults(handler=list_hosts)

    # Clear command
    clear_parser = subparsers.add_parser("clear", help="Delete all data from the database")
    clear_parser.add_argument("-d", "--database", help="Database URL (default: from settings)")
    clear_parser.set_defaults(handler=clear_data)

    return parser

def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not getattr(args, "handler", None):
        parser.print_help()
        return 1

    configure_logging(args.log_level)
    try:
        output = args.handler(args)
    except LogInsightsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps(output, indent=2))
    return 0

if __name__ == "__main__":
    sys.exit(main())
