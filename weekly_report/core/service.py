"""ReportService: orchestrates query building, paging, mapping and rendering."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import date, datetime

from weekly_report.analytics.aggregations.buckets import classify, resolve_subtasks
from weekly_report.analytics.metrics.aging import now_local
from weekly_report.visual.html_report import render_grouped_html
from weekly_report.visual.tables import render_pipe_table

from .bucket_config import BucketConfig, load_bucket_config
from .config import (
    BUG_ISSUE_TYPES,
    BUG_PRIORITIES,
    BUG_STATUSES,
    DEFAULT_PROJECT_KEY,
    PROGRESS_CLASSIFICATION,
    PROGRESS_ISSUE_TYPES,
    PROGRESS_STATUSES,
)
from .jira_client import JiraAPI
from .mappers import map_issue, map_result_page
from .models import IssueModel, ResultPage
from .query import IssueQuery, build_jql, resolve_week_bounds

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int | None, int | None], None]


class ReportService:
    def __init__(
        self,
        api: JiraAPI,
        *,
        project_key: str = DEFAULT_PROJECT_KEY,
        buckets: BucketConfig | None = None,
    ):
        self.api = api
        self.project_key = project_key
        self.buckets = buckets or load_bucket_config()

    # ------------------ Query Presets ------------------
    def progress_query(
        self,
        members: Sequence[str],
        start: date | None = None,
        end: date | None = None,
        *,
        today: date | None = None,
    ) -> IssueQuery:
        start, end = resolve_week_bounds(start, end, today or now_local().date())
        return IssueQuery(
            project=self.project_key,
            issue_types=PROGRESS_ISSUE_TYPES,
            statuses=PROGRESS_STATUSES,
            classification=PROGRESS_CLASSIFICATION,
            start=start,
            end=end,
            members=tuple(members),
        )

    def bug_query(
        self,
        members: Sequence[str],
        start: date | None = None,
        end: date | None = None,
    ) -> IssueQuery:
        # Open bugs are listed regardless of age unless a bound is given;
        # a single bound is completed from its week like the progress preset.
        if start is not None or end is not None:
            start, end = resolve_week_bounds(start, end, now_local().date())
        return IssueQuery(
            project=self.project_key,
            issue_types=BUG_ISSUE_TYPES,
            statuses=BUG_STATUSES,
            priorities=BUG_PRIORITIES,
            start=start,
            end=end,
            members=tuple(members),
        )

    # ------------------ Fetch Methods ------------------
    def search_page(self, jql: str, start_at: int = 0) -> ResultPage:
        return map_result_page(self.api.search(jql, start_at))

    def fetch_all(self, query: IssueQuery, *, progress: ProgressCallback | None = None) -> list[IssueModel]:
        """Fetch every page of ``query`` sequentially, in server order."""
        jql = build_jql(query)
        logger.debug("JQL: %s", jql)
        issues: list[IssueModel] = []
        while True:
            page = self.search_page(jql, len(issues))
            issues.extend(page.issues)
            logger.debug("Fetched %s/%s issues", len(issues), page.total)
            if progress:
                progress("Fetching issues", len(issues), page.total)
            if not page.issues or len(issues) >= page.total:
                break
        return issues

    def fetch_issue(self, issue_key: str) -> IssueModel:
        return map_issue(self.api.fetch_issue_raw(issue_key))

    # ------------------ Reports ------------------
    def render(self, issues: Sequence[IssueModel], fmt: str, *, now: datetime | None = None) -> str:
        if fmt == "table":
            return render_pipe_table(issues, self.api.server, now)
        if fmt != "html":
            raise ValueError(f"Unknown report format: {fmt!r}")
        groups = classify(
            issues,
            self.buckets.rules,
            default_bucket=self.buckets.default_bucket,
            fallback_bucket=self.buckets.fallback_bucket,
        )
        subtasks = resolve_subtasks(issues)
        logger.info(
            "Grouped %s top-level issues into %s buckets (%s subtasks)",
            sum(len(v) for v in groups.values()),
            len(groups),
            len(subtasks),
        )
        return render_grouped_html(groups, subtasks, self.buckets.order)

    def report(
        self,
        name: str,
        members: Sequence[str],
        start: date | None = None,
        end: date | None = None,
        *,
        fmt: str | None = None,
        now: datetime | None = None,
        progress: ProgressCallback | None = None,
    ) -> str:
        """Run one preset query and render it.

        ``progress`` renders as grouped HTML by default, ``bugs`` as a pipe table.
        """
        if name == "progress":
            query = self.progress_query(members, start, end)
            fmt = fmt or "html"
        elif name == "bugs":
            query = self.bug_query(members, start, end)
            fmt = fmt or "table"
        else:
            raise ValueError(f"Unknown report: {name!r}")
        issues = self.fetch_all(query, progress=progress)
        logger.info("%s report: %s issues", name, len(issues))
        return self.render(issues, fmt, now=now)

    def issue_report(self, issue_key: str, *, now: datetime | None = None) -> str:
        return render_pipe_table([self.fetch_issue(issue_key)], self.api.server, now)
