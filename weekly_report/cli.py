"""Command-line entry point: prompt for credentials, run a report, print it."""

from __future__ import annotations

import argparse
import getpass
import logging
import sys
from datetime import date, datetime

import requests
import yaml
from jira import JIRAError

from weekly_report.core.bucket_config import load_bucket_config
from weekly_report.core.config import (
    DEFAULT_PROJECT_KEY,
    JIRA_DEFAULT_SERVER,
    JIRA_DEFAULT_USERNAME,
    REPORT_NAMES,
)
from weekly_report.core.jira_client import JiraAPI
from weekly_report.core.service import ReportService

logger = logging.getLogger(__name__)


def parse_date(value: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}, expected YYYY-MM-DD") from exc


def parse_members(value: str) -> list[str]:
    return [m.strip() for m in value.split(",") if m.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="weekly-report",
        description="Render a Jira weekly progress report or open bug list for a team.",
    )
    parser.add_argument(
        "members",
        nargs="?",
        type=parse_members,
        help="Comma-separated Jira user names, e.g. alice,bob",
    )
    parser.add_argument("--start", type=parse_date, help="First day of the window (YYYY-MM-DD)")
    parser.add_argument("--end", type=parse_date, help="Last day of the window (YYYY-MM-DD)")
    parser.add_argument("--report", choices=REPORT_NAMES, default="progress", help="Query preset to run")
    parser.add_argument(
        "--format",
        dest="fmt",
        choices=("html", "table"),
        help="Output format (default: html for progress, table for bugs)",
    )
    parser.add_argument("--issue", metavar="KEY", help="Print a single issue as a table row instead")
    parser.add_argument("--server", default=JIRA_DEFAULT_SERVER, help="Jira base URL")
    parser.add_argument("--project", default=DEFAULT_PROJECT_KEY, help="Jira project key")
    parser.add_argument("--buckets", metavar="PATH", help="YAML file with bucket keyword rules")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log debug output to stderr")
    return parser


def prompt_credentials() -> tuple[str, str]:
    username = input(f"jira user name? [{JIRA_DEFAULT_USERNAME}] " if JIRA_DEFAULT_USERNAME else "jira user name? ")
    username = username.strip() or JIRA_DEFAULT_USERNAME
    password = getpass.getpass("jira password? ")
    return username, password


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.issue and not args.members:
        parser.error("members are required unless --issue is given")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        buckets = load_bucket_config(args.buckets) if args.buckets else None
        username, password = prompt_credentials()
        api = JiraAPI(args.server, username, password)
        service = ReportService(api, project_key=args.project, buckets=buckets)
        if args.issue:
            output = service.issue_report(args.issue)
        else:
            output = service.report(args.report, args.members, args.start, args.end, fmt=args.fmt)
    except (JIRAError, requests.RequestException) as exc:
        logger.error("Jira request failed: %s", exc)
        return 1
    except (ValueError, OSError, yaml.YAMLError) as exc:
        # ValueError covers IssuePayloadError and bad bucket files
        logger.error("Report failed: %s", exc)
        return 1

    sys.stdout.write(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
