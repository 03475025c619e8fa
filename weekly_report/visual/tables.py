"""Pipe-delimited (Jira wiki markup) issue table."""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import datetime

import pandas as pd

from weekly_report.analytics.metrics.aging import humanize_age
from weekly_report.core.config import PIPE_TABLE_COLUMNS
from weekly_report.core.mappers import issues_to_dataframe
from weekly_report.core.models import IssueModel

_LINE_BREAKS = re.compile(r"[\r\n]+")
PIPE_TABLE_HEADER = "||" + "||".join(PIPE_TABLE_COLUMNS) + "||"


def _cell(value) -> str:
    text = "" if value is None else str(value)
    text = _LINE_BREAKS.sub(" ", text)
    return text.replace("\\", "\\\\").replace("|", "\\|")


def _split_row(line: str) -> list[str]:
    """Split a ``|a|b|`` row on unescaped pipes, undoing ``_cell`` escapes."""
    cells: list[str] = []
    current: list[str] = []
    chars = iter(line)
    for ch in chars:
        if ch == "\\":
            current.append(next(chars, ""))
        elif ch == "|":
            cells.append("".join(current))
            current = []
        else:
            current.append(ch)
    cells.append("".join(current))
    # Drop the empty segments outside the leading and trailing pipes
    return cells[1:-1]


def add_ticket_link(df: pd.DataFrame, server: str, key_col: str = "key", label: str = "Link") -> pd.DataFrame:
    if df.empty or key_col not in df.columns:
        return df
    out = df.copy()
    base = server.rstrip("/")
    out[label] = out[key_col].astype(str).apply(lambda k: f"{base}/browse/{k}" if k and k != "nan" else "")
    return out


def pipe_table_frame(issues: Iterable[IssueModel], server: str, now: datetime | None = None) -> pd.DataFrame:
    """One row per issue with the eight display columns, in input order."""
    df = issues_to_dataframe(issues)
    if df.empty:
        return pd.DataFrame(columns=list(PIPE_TABLE_COLUMNS))
    df = add_ticket_link(df, server)
    out = pd.DataFrame(
        {
            "Priority": df["priority"],
            "Link": df["Link"],
            "Component": df["components"],
            "Summary": df["summary"],
            # Missing importer renders as a single space
            "Importer": df["bug_importer"].apply(lambda v: v or " "),
            "Assignee": df["assignee"],
            "Status": df["status"],
            "Age": df["created"].apply(lambda c: humanize_age(None if pd.isna(c) else c, now)),
        }
    )
    return out[list(PIPE_TABLE_COLUMNS)]


def render_pipe_table(issues: Iterable[IssueModel], server: str, now: datetime | None = None) -> str:
    frame = pipe_table_frame(issues, server, now)
    lines = [PIPE_TABLE_HEADER]
    for row in frame.itertuples(index=False):
        lines.append("|" + "|".join(_cell(v) for v in row) + "|")
    return "\n".join(lines) + "\n"


def parse_pipe_table(text: str) -> list[dict[str, str]]:
    """Read rows written by ``render_pipe_table`` back into column dicts.

    The header line is skipped; a ``key`` entry is derived from the link.
    """
    rows: list[dict[str, str]] = []
    for line in text.splitlines():
        if not line.startswith("|") or line == PIPE_TABLE_HEADER:
            continue
        parts = _split_row(line)
        if len(parts) != len(PIPE_TABLE_COLUMNS):
            raise ValueError(f"expected {len(PIPE_TABLE_COLUMNS)} cells, got {len(parts)}: {line!r}")
        row = dict(zip(PIPE_TABLE_COLUMNS, parts, strict=True))
        row["key"] = row["Link"].rsplit("/browse/", 1)[-1]
        rows.append(row)
    return rows
