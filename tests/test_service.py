from datetime import UTC, date, datetime

import pytest

from weekly_report.core.jira_client import JiraAPI
from weekly_report.core.mappers import IssuePayloadError
from weekly_report.core.service import ReportService


def _raw(key, components=(), subtask=False, subtasks=()):
    return {
        "key": key,
        "fields": {
            "summary": f"Summary {key}",
            "created": "2024-09-09T10:00:00.000+0000",
            "assignee": {"name": "alice", "displayName": "Alice"},
            "priority": {"name": "High"},
            "status": {"name": "In Progress"},
            "issuetype": {"name": "Sub-task" if subtask else "Story", "subtask": subtask},
            "components": [{"name": c} for c in components],
            "subtasks": [{"key": k} for k in subtasks],
        },
    }


class DummyAPI(JiraAPI):
    def __init__(self, issues, page_size=2):
        self.server = "https://jira.example.com"
        self.issues = issues
        self.page_size = page_size
        self.calls = []

    def search(self, jql, start_at=0, fields=None, page_size=None):
        self.calls.append((jql, start_at))
        return {"total": len(self.issues), "issues": self.issues[start_at : start_at + self.page_size]}

    def fetch_issue_raw(self, issue_key):
        return next(i for i in self.issues if i["key"] == issue_key)


def test_fetch_all_pages_sequentially():
    api = DummyAPI([_raw(f"HCM-{n}") for n in range(5)])
    svc = ReportService(api)
    events = []
    issues = svc.fetch_all(svc.bug_query(["alice"]), progress=lambda msg, cur, tot: events.append((cur, tot)))
    assert [i.key for i in issues] == [f"HCM-{n}" for n in range(5)]
    assert [start for _, start in api.calls] == [0, 2, 4]
    assert events == [(2, 5), (4, 5), (5, 5)]


def test_fetch_all_stops_on_empty_page():
    class ShortAPI(DummyAPI):
        def search(self, jql, start_at=0, fields=None, page_size=None):
            self.calls.append((jql, start_at))
            return {"total": 10, "issues": self.issues[start_at : start_at + self.page_size]}

    api = ShortAPI([_raw("HCM-1")])
    assert len(ReportService(api).fetch_all(ReportService(api).bug_query(["alice"]))) == 1
    assert len(api.calls) == 2


def test_progress_query_uses_week_bounds():
    svc = ReportService(DummyAPI([]))
    query = svc.progress_query(["alice"], end=date(2024, 9, 12))
    assert query.start == date(2024, 9, 10)
    assert query.members == ("alice",)
    assert query.classification is not None


def test_progress_report_renders_grouped_html():
    api = DummyAPI(
        [
            _raw("HCM-1", subtasks=["HCM-2", "HCM-99"]),
            _raw("HCM-2", subtask=True),
            _raw("HCM-3", components=["绩效管理"]),
        ]
    )
    out = ReportService(api).report("progress", ["alice"], date(2024, 9, 9), date(2024, 9, 15))
    assert out.index("HCM-3") < out.index("HCM-1") < out.index("HCM-2")
    assert "HCM-99" not in out
    assert out.count("<td>Engineering</td>") == 1
    jql = api.calls[0][0]
    assert "created >= '2024-09-09'" in jql
    assert "created < '2024-09-16'" in jql


def test_bug_report_renders_pipe_table():
    api = DummyAPI([_raw("HCM-7")])
    now = datetime(2024, 9, 12, 10, 0, tzinfo=UTC)
    out = ReportService(api).report("bugs", ["alice"], now=now)
    lines = out.splitlines()
    assert lines[1] == "|High|https://jira.example.com/browse/HCM-7||Summary HCM-7| |Alice|In Progress|3 days ago|"
    assert 'issuetype in ("Bug")' in api.calls[0][0]


def test_format_override_and_unknown_names():
    api = DummyAPI([_raw("HCM-7")])
    svc = ReportService(api)
    assert svc.report("bugs", ["alice"], fmt="html").startswith("<table>")
    with pytest.raises(ValueError):
        svc.report("weekly", ["alice"])
    with pytest.raises(ValueError):
        svc.render([], "csv")


def test_issue_report_fetches_by_key():
    api = DummyAPI([_raw("HCM-1"), _raw("HCM-2")])
    out = ReportService(api).issue_report("HCM-2")
    assert "/browse/HCM-2|" in out
    assert "HCM-1" not in out


def test_malformed_page_propagates():
    class BrokenAPI(DummyAPI):
        def search(self, jql, start_at=0, fields=None, page_size=None):
            return {"issues": []}

    with pytest.raises(IssuePayloadError):
        ReportService(BrokenAPI([])).fetch_all(ReportService(BrokenAPI([])).bug_query(["a"]))


def test_bug_query_completes_a_single_bound():
    svc = ReportService(DummyAPI([]))
    query = svc.bug_query(["alice"], end=date(2024, 9, 12))
    assert (query.start, query.end) == (date(2024, 9, 10), date(2024, 9, 12))
    query = svc.bug_query(["alice"], start=date(2024, 9, 10))
    assert (query.start, query.end) == (date(2024, 9, 10), date(2024, 9, 16))


def test_bug_query_without_bounds_has_no_date_filter():
    api = DummyAPI([])
    svc = ReportService(api)
    query = svc.bug_query(["alice"])
    assert query.start is None and query.end is None
    svc.report("bugs", ["alice"], end=date(2024, 9, 12))
    assert "created >= '2024-09-10'" in api.calls[0][0]
