#!/usr/bin/env python3
"""
Approval Latency Reporter

Reads approval/rejection notes from a spreadsheet export or from Jira and
writes a CSV with one row per approved item: first approval week and year,
latency from creation, rejections before the first approval and later
(re)approvals.
"""
# /// script
# requires-python = ">=3.8"
# dependencies = [
#     "requests",
#     "pandas",
#     "python-dotenv",
#     "rich",
# ]
# ///

import argparse
import sys
from typing import List, Optional

from dotenv import load_dotenv

from approval_analyzer import ApprovalAnalyzer
from config import DEFAULT_TARGET_YEAR, DEFAULT_COLUMN_SCHEMA
from event_source import EventSource, EventSourceError
from jira_source import JiraConfig, JiraEventSource
from report_generator import ReportGenerator
from status_display import StatusDisplay
from tabular_source import ColumnSchema, TabularEventSource


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Report approval latency, rejections and rework per tracked item',
        epilog=f'''
Sources:
  csv FILE     Spreadsheet export; every cell containing "Approved in W<n>" or
               "Rejected in W<n>" is an event. Column positions default to:
               {', '.join(f"{k}={v}" for k, v in DEFAULT_COLUMN_SCHEMA.items())}
  jira         Issue comments from Jira Cloud. Requires JIRA_BASE_URL,
               JIRA_EMAIL and JIRA_API_TOKEN (a .env file is honoured).

Output:
  CSV on stdout (or --output FILE). Diagnostics go to stderr.
  Exit status is 1 when the source cannot be read.
        ''',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    parser.add_argument('--output', '-o', help='Write the CSV report to this file instead of stdout')
    parser.add_argument('--rework', action='store_true', help='Include first-time, quarter and rework columns')
    parser.add_argument('--quiet', '-q', action='store_true', help='Only print warnings and errors')

    subparsers = parser.add_subparsers(dest='source', required=True)

    csv_parser = subparsers.add_parser('csv', help='Read a pre-exported spreadsheet')
    csv_parser.add_argument('path', help='CSV export file')
    csv_parser.add_argument('--target-year', type=int, default=DEFAULT_TARGET_YEAR,
                            help=f'Only use events from this year (default: {DEFAULT_TARGET_YEAR}, 0 for all)')
    csv_parser.add_argument('--column', action='append', default=[], metavar='FIELD=INDEX',
                            help='Override a column position, e.g. --column product=12 (repeatable)')

    jira_parser = subparsers.add_parser('jira', help='Fetch issue comments from Jira')
    jira_parser.add_argument('--jql', help='Issue search query (default: JIRA_JQL or built-in query)')
    jira_parser.add_argument('--target-year', type=int, help='Only use events from this year')
    jira_parser.add_argument('--limit', type=int, help='Limit number of issues to fetch (for debugging)')

    return parser


def build_source(args: argparse.Namespace, status: StatusDisplay) -> Optional[EventSource]:
    """Create the event source selected on the command line, or None if misconfigured"""
    if args.source == 'csv':
        try:
            schema = ColumnSchema.with_overrides(args.column)
        except ValueError as e:
            status.error(f"Invalid column mapping: {e}")
            return None
        return TabularEventSource(args.path, schema=schema, target_year=args.target_year or None)

    load_dotenv()
    config = JiraConfig.from_env(jql=args.jql, target_year=args.target_year, limit=args.limit)
    missing = config.missing_settings()
    if missing:
        status.error(f"Please set {', '.join(missing)} environment variable(s)")
        return None
    return JiraEventSource(config, status=status)


def main(argv: Optional[List[str]] = None) -> int:
    """Main execution function"""
    args = build_parser().parse_args(argv)
    status = StatusDisplay(quiet=args.quiet)

    source = build_source(args, status)
    if source is None:
        return 2

    analyzer = ApprovalAnalyzer(source, status=status)
    try:
        result = analyzer.run()
    except EventSourceError as e:
        status.error(f"Unable to read events: {e}")
        return 1
    except KeyboardInterrupt:
        status.error("Process interrupted by user. No report generated.")
        return 130

    generator = ReportGenerator(include_rework=args.rework)
    try:
        generator.write_csv(result.summaries, args.output)
    except OSError as e:
        status.error(f"Unable to write report: {e}")
        return 1

    for line in generator.generate_summary_lines(result.summaries):
        status.print(line, style="blue")
    if args.output:
        status.print(f"💾 Report written to: {args.output}", style="blue")

    return 0


if __name__ == "__main__":
    sys.exit(main())
