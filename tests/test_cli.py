from datetime import date

import pytest
from jira import JIRAError

from weekly_report import cli
from weekly_report.core.jira_client import JiraAPI


class FakeAPI(JiraAPI):
    instances: list["FakeAPI"] = []

    def __init__(self, server, username, password):
        self.server = server
        self.username = username
        self.password = password
        self.queries = []
        FakeAPI.instances.append(self)

    def search(self, jql, start_at=0, fields=None, page_size=None):
        self.queries.append(jql)
        return {
            "total": 1,
            "issues": [
                {
                    "key": "HCM-1",
                    "fields": {
                        "summary": "Attendance export",
                        "created": "2024-09-09T10:00:00.000+0000",
                        "status": {"name": "Open"},
                        "components": [{"name": "考勤"}],
                        "issuetype": {"name": "Story", "subtask": False},
                    },
                }
            ],
        }


@pytest.fixture
def fake_env(monkeypatch):
    FakeAPI.instances = []
    monkeypatch.setattr(cli, "JiraAPI", FakeAPI)
    monkeypatch.setattr("builtins.input", lambda prompt="": "alice")
    monkeypatch.setattr(cli.getpass, "getpass", lambda prompt="": "secret")


def test_parse_members_and_dates():
    assert cli.parse_members("alice, bob,,carol ") == ["alice", "bob", "carol"]
    args = cli.build_parser().parse_args(["alice,bob", "--start", "2024-09-09", "--end", "2024-09-15"])
    assert args.members == ["alice", "bob"]
    assert args.start == date(2024, 9, 9)
    assert args.end == date(2024, 9, 15)
    assert args.report == "progress"


def test_bad_date_is_usage_error():
    with pytest.raises(SystemExit) as exc:
        cli.build_parser().parse_args(["alice", "--start", "09/09/2024"])
    assert exc.value.code == 2


def test_members_required_without_issue():
    with pytest.raises(SystemExit):
        cli.main([])


def test_progress_report_to_stdout(fake_env, capsys):
    rc = cli.main(["alice,bob", "--start", "2024-09-09", "--end", "2024-09-15", "--server", "https://jira.test"])
    assert rc == 0
    out = capsys.readouterr().out
    assert "<td>Attendance</td>" in out
    api = FakeAPI.instances[0]
    assert (api.server, api.username, api.password) == ("https://jira.test", "alice", "secret")
    assert 'assignee in ("alice", "bob")' in api.queries[0]


def test_table_format(fake_env, capsys):
    assert cli.main(["alice", "--report", "bugs", "--server", "https://jira.test"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("||Priority||Link||")
    assert "|https://jira.test/browse/HCM-1|考勤|Attendance export|" in out


def test_transport_failure_exits_nonzero(fake_env, monkeypatch, capsys):
    def boom(self, jql, start_at=0, fields=None, page_size=None):
        raise JIRAError("Unauthorized", status_code=401)

    monkeypatch.setattr(FakeAPI, "search", boom)
    assert cli.main(["alice"]) == 1
    assert capsys.readouterr().out == ""


def test_custom_bucket_file(fake_env, tmp_path, capsys):
    rules = tmp_path / "buckets.yaml"
    rules.write_text("rules:\n  - bucket: Time\n    markers: ['考勤']\n", encoding="utf-8")
    assert cli.main(["alice", "--buckets", str(rules), "--start", "2024-09-09"]) == 0
    assert "<td>Time</td>" in capsys.readouterr().out


def test_malformed_bucket_file_exits_nonzero(fake_env, tmp_path):
    rules = tmp_path / "buckets.yaml"
    rules.write_text("- bucket: Approval\n", encoding="utf-8")
    assert cli.main(["alice", "--buckets", str(rules)]) == 1
