"""Jira API client wrapper (REST v2 search with offset pagination)."""

from __future__ import annotations

import json
from typing import Any

from jira import JIRA

from .config import JIRA_FETCH_BASE_FIELDS, SEARCH_PAGE_SIZE


class JiraAPI:
    def __init__(self, server: str, username: str, password: str):
        self.server = server.rstrip("/")
        self.client = JIRA(
            basic_auth=(username, password),
            options={"server": self.server},
            get_server_info=False,
            max_retries=0,
        )

    def search(
        self,
        jql: str,
        start_at: int = 0,
        fields: list[str] | None = None,
        page_size: int = SEARCH_PAGE_SIZE,
    ) -> dict[str, Any]:
        """Run one search request and return the raw response body.

        Exactly one POST is issued; the caller drives pagination with
        ``start_at``. The jira session raises ``JIRAError`` itself for any
        non-success status.
        """
        session = getattr(self.client, "_session", None)
        if session is None:
            raise RuntimeError("JIRA session unavailable")
        url = f"{self.server}/rest/api/2/search"
        payload = {
            "jql": jql,
            "startAt": start_at,
            "maxResults": page_size,
            "fields": list(fields or JIRA_FETCH_BASE_FIELDS),
        }
        resp = session.post(url, data=json.dumps(payload))
        return resp.json()

    def fetch_issue_raw(self, issue_key: str) -> dict[str, Any]:
        issue = self.client.issue(issue_key)
        if hasattr(issue, "raw"):
            return issue.raw
        if isinstance(issue, dict):
            return issue
        raise RuntimeError(f"Unexpected issue payload type for {issue_key}: {type(issue)!r}")
