"""Grouped HTML progress report: one section per bucket, subtasks under parents."""

from __future__ import annotations

import html
from collections.abc import Mapping, Sequence

from weekly_report.analytics.aggregations.buckets import subtasks_of
from weekly_report.core.config import BUCKET_DISPLAY_ORDER, HTML_REPORT_COLUMNS
from weekly_report.core.mappers import display_value
from weekly_report.core.models import IssueModel


def _row(bucket: str, issue: IssueModel) -> str:
    cells = (
        bucket,
        issue.summary or "",
        issue.key,
        display_value(issue.assignee),
        issue.status.name if issue.status else "",
        display_value(issue.ship_date),
    )
    return "<tr>" + "".join(f"<td>{html.escape(c)}</td>" for c in cells) + "</tr>"


def render_grouped_html(
    groups: Mapping[str, Sequence[IssueModel]],
    subtasks: Mapping[str, IssueModel],
    bucket_order: Sequence[str] = BUCKET_DISPLAY_ORDER,
) -> str:
    """Render classified issues as an HTML table.

    Buckets are emitted in ``bucket_order`` regardless of how ``groups`` was
    filled; buckets missing from the order follow in encounter order, and
    empty buckets produce no rows. Each parent row is followed by its
    retrieved subtasks with an empty bucket cell.
    """
    order = list(dict.fromkeys([*bucket_order, *groups]))
    lines = ["<table>"]
    lines.append("<tr>" + "".join(f"<th>{html.escape(c)}</th>" for c in HTML_REPORT_COLUMNS) + "</tr>")
    for bucket in order:
        issues = groups.get(bucket) or ()
        for issue in issues:
            lines.append(_row(bucket, issue))
            for sub in subtasks_of(issue, subtasks):
                lines.append(_row("", sub))
    lines.append("</table>")
    return "\n".join(lines) + "\n"
