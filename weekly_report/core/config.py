"""Central configuration: Jira connection, custom fields, report presets and buckets."""

from __future__ import annotations

import os
from collections.abc import Sequence

# =============================================================================
# Jira Connection Settings
# =============================================================================
JIRA_DEFAULT_SERVER = os.environ.get("JIRA_SERVER", "https://jira.mokahr.com")
JIRA_DEFAULT_USERNAME = os.environ.get("JIRA_USERNAME", "")
TIMEZONE = "Asia/Shanghai"
DEFAULT_PROJECT_KEY = "HCM"

# Search page size; the server may cap it lower and report the real total.
SEARCH_PAGE_SIZE: int = 100

# =============================================================================
# Jira Custom Field IDs
# =============================================================================
FIELD_IDS = {
    "ship_date": "customfield_10500",
    "tech_owner": "customfield_10501",
    "frontend_owner": "customfield_10502",
    "bug_importer": "customfield_10503",
    "product_line": "customfield_10504",
}


def jql_field(field_id: str) -> str:
    """Translate ``customfield_10500`` into the JQL form ``cf[10500]``."""
    if field_id.startswith("customfield_"):
        return f"cf[{field_id.removeprefix('customfield_')}]"
    return field_id


# Fields requested from the search endpoint
JIRA_FETCH_BASE_FIELDS = [
    "summary",
    "created",
    "updated",
    "assignee",
    "priority",
    "status",
    "components",
    "issuetype",
    "subtasks",
    FIELD_IDS["ship_date"],
    FIELD_IDS["tech_owner"],
    FIELD_IDS["frontend_owner"],
    FIELD_IDS["bug_importer"],
]

# Owner roles matched against the member list (assignee OR any owner field)
OWNER_ROLE_FIELDS: Sequence[str] = (
    "assignee",
    jql_field(FIELD_IDS["tech_owner"]),
    jql_field(FIELD_IDS["frontend_owner"]),
)

# Sort applied to every query; ship date is the designated custom field.
SORT_ORDER: Sequence[tuple[str, str]] = (
    ("created", "ASC"),
    (jql_field(FIELD_IDS["ship_date"]), "ASC"),
    ("status", "ASC"),
    ("priority", "DESC"),
    ("updated", "ASC"),
)

# =============================================================================
# Report Presets
# =============================================================================
# Weekly progress report: requirements owned by the team, grouped by module
PROGRESS_ISSUE_TYPES: Sequence[str] = ("Story", "Task", "Improvement", "Sub-task")
PROGRESS_STATUSES: Sequence[str] = (
    "To Do",
    "In Progress",
    "In Review",
    "Testing",
    "Ready For Release",
    "Done",
)
PROGRESS_CLASSIFICATION: tuple[str, str] = (jql_field(FIELD_IDS["product_line"]), "HCM")

# Open bug list: important bugs still open for the team
BUG_ISSUE_TYPES: Sequence[str] = ("Bug",)
BUG_STATUSES: Sequence[str] = ("Open", "Reopened", "In Progress")
BUG_PRIORITIES: Sequence[str] = ("Highest", "High")

REPORT_NAMES: Sequence[str] = ("progress", "bugs")

# =============================================================================
# Bucket Configuration
# =============================================================================
DEFAULT_BUCKET = "Engineering"
FALLBACK_BUCKET = "General Product"

# Keyword markers per bucket, checked in this order
DEFAULT_BUCKET_RULES: Sequence[tuple[str, Sequence[str]]] = (
    ("Approval", ("审批",)),
    ("Organization&Personnel", ("组织", "人事", "入职")),
    ("Attendance", ("考勤",)),
    ("Compensation", ("薪酬", "薪资")),
    ("Performance", ("绩效",)),
)

BUCKET_DISPLAY_ORDER: Sequence[str] = (
    "Approval",
    "Organization&Personnel",
    "Attendance",
    "Compensation",
    "Performance",
    FALLBACK_BUCKET,
    DEFAULT_BUCKET,
)

# =============================================================================
# Report Columns
# =============================================================================
PIPE_TABLE_COLUMNS: Sequence[str] = (
    "Priority",
    "Link",
    "Component",
    "Summary",
    "Importer",
    "Assignee",
    "Status",
    "Age",
)

HTML_REPORT_COLUMNS: Sequence[str] = (
    "Module",
    "Description",
    "Key",
    "Assignee",
    "Status",
    "Target Date",
)
