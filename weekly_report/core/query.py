"""JQL construction for the report presets."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, timedelta

from .config import OWNER_ROLE_FIELDS, SORT_ORDER


@dataclass(slots=True, frozen=True)
class IssueQuery:
    project: str
    issue_types: Sequence[str] = ()
    statuses: Sequence[str] = ()
    priorities: Sequence[str] = ()
    classification: tuple[str, str] | None = None
    start: date | None = None
    end: date | None = None
    members: Sequence[str] = ()
    owner_roles: Sequence[str] = field(default=OWNER_ROLE_FIELDS)


def resolve_week_bounds(start: date | None, end: date | None, today: date) -> tuple[date, date]:
    """Fill in a missing date bound from the ISO week of the other one.

    A missing start becomes the day after the Monday of the end date's week,
    clamped to the end date when the end is itself a Monday; a missing end
    becomes the day after the Sunday of the start date's week. With neither
    bound, the current week (``today``) is used.
    """
    if start is not None and end is not None:
        if start > end:
            raise ValueError(f"start date {start} is after end date {end}")
        return start, end
    if start is None and end is None:
        anchor = today
        return _week_start(anchor) + timedelta(days=1), _week_end(anchor) + timedelta(days=1)
    if start is None:
        return min(_week_start(end) + timedelta(days=1), end), end
    return start, _week_end(start) + timedelta(days=1)


def _week_start(d: date) -> date:
    return d - timedelta(days=d.isoweekday() - 1)


def _week_end(d: date) -> date:
    return _week_start(d) + timedelta(days=6)


def quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _in_clause(field_name: str, values: Sequence[str]) -> str:
    return f"{field_name} in ({', '.join(quote(v) for v in values)})"


def build_jql(query: IssueQuery) -> str:
    conditions = [f"project = {quote(query.project)}"]
    if query.issue_types:
        conditions.append(_in_clause("issuetype", query.issue_types))
    if query.statuses:
        conditions.append(_in_clause("status", query.statuses))
    if query.priorities:
        conditions.append(_in_clause("priority", query.priorities))
    if query.classification:
        cls_field, cls_value = query.classification
        conditions.append(f"{cls_field} = {quote(cls_value)}")
    if query.start:
        conditions.append(f"created >= '{query.start.strftime('%Y-%m-%d')}'")
    if query.end:
        # Inclusive end date: strict bound on the following day
        end_plus = query.end + timedelta(days=1)
        conditions.append(f"created < '{end_plus.strftime('%Y-%m-%d')}'")
    members = [m.strip() for m in query.members if m and m.strip()]
    if members and query.owner_roles:
        roles = " OR ".join(_in_clause(role, members) for role in query.owner_roles)
        conditions.append(f"({roles})")

    jql = " AND ".join(conditions)
    order = ", ".join(f"{name} {direction}" for name, direction in SORT_ORDER)
    return f"{jql} ORDER BY {order}"
