"""Mapping raw Jira issue JSON into IssueModel / ResultPage instances."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import pandas as pd

from .config import FIELD_IDS
from .models import CustomValue, IssueModel, PersonRef, ResultPage, StatusModel


class IssuePayloadError(ValueError):
    """Raised when a record from Jira does not have the expected shape."""


def _require_dict(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise IssuePayloadError(f"{what} must be an object, got {type(value).__name__}")
    return value


def _optional_dict(fields: dict[str, Any], name: str, key: str) -> dict[str, Any] | None:
    value = fields.get(name)
    if value is None:
        return None
    return _require_dict(value, f"{key}: field '{name}'")


def _optional_list(fields: dict[str, Any], name: str, key: str) -> list[Any]:
    value = fields.get(name)
    if value is None:
        return []
    if not isinstance(value, list):
        raise IssuePayloadError(f"{key}: field '{name}' must be a list, got {type(value).__name__}")
    return value


def parse_dt(val):
    if not val:
        return None
    ts = pd.to_datetime(val, utc=True, errors="coerce")
    if ts is None or pd.isna(ts):
        return None
    return ts.to_pydatetime()


def map_person(value: dict[str, Any] | None) -> PersonRef | None:
    if not value:
        return None
    return PersonRef(name=value.get("name"), display_name=value.get("displayName"))


def map_custom_value(value: Any) -> CustomValue:
    """Custom fields come back as scalars, user objects or option objects."""
    if value is None or value == "":
        return None
    if isinstance(value, dict):
        # Select-list options carry their label under "value"
        if "value" in value:
            inner = value.get("value")
            return None if inner is None else str(inner)
        return map_person(value)
    if isinstance(value, list):
        joined = ", ".join(filter(None, (display_value(map_custom_value(v)) for v in value)))
        return joined or None
    return str(value)


def map_issue(raw: dict[str, Any]) -> IssueModel:
    raw = _require_dict(raw, "issue record")
    key = raw.get("key")
    if not isinstance(key, str) or not key:
        raise IssuePayloadError(f"issue record without a key: {str(raw)[:200]}")
    fields = _require_dict(raw.get("fields"), f"{key}: 'fields'")

    status_raw = _optional_dict(fields, "status", key)
    status = None
    if status_raw and status_raw.get("name"):
        category = (status_raw.get("statusCategory") or {}).get("name")
        status = StatusModel(name=status_raw["name"], category=category)

    issuetype = _optional_dict(fields, "issuetype", key) or {}
    priority = _optional_dict(fields, "priority", key) or {}

    components: list[str] = []
    for comp in _optional_list(fields, "components", key):
        name = _require_dict(comp, f"{key}: component").get("name")
        if name:
            components.append(name)

    subtask_keys: list[str] = []
    for sub in _optional_list(fields, "subtasks", key):
        sub_key = _require_dict(sub, f"{key}: subtask").get("key")
        if sub_key:
            subtask_keys.append(sub_key)

    return IssueModel(
        key=key,
        summary=fields.get("summary"),
        assignee=map_person(_optional_dict(fields, "assignee", key)),
        status=status,
        priority=priority.get("name"),
        created=parse_dt(fields.get("created")),
        updated=parse_dt(fields.get("updated")),
        issuetype=issuetype.get("name"),
        is_subtask=bool(issuetype.get("subtask", False)),
        components=tuple(components),
        subtask_keys=tuple(subtask_keys),
        ship_date=map_custom_value(fields.get(FIELD_IDS["ship_date"])),
        tech_owner=map_custom_value(fields.get(FIELD_IDS["tech_owner"])),
        frontend_owner=map_custom_value(fields.get(FIELD_IDS["frontend_owner"])),
        bug_importer=map_custom_value(fields.get(FIELD_IDS["bug_importer"])),
    )


def map_result_page(raw: dict[str, Any]) -> ResultPage:
    raw = _require_dict(raw, "search response")
    total = raw.get("total")
    if not isinstance(total, int) or isinstance(total, bool):
        raise IssuePayloadError(f"search response 'total' must be an integer, got {total!r}")
    issues_raw = raw.get("issues")
    if issues_raw is None:
        issues_raw = []
    if not isinstance(issues_raw, list):
        raise IssuePayloadError("search response 'issues' must be a list")
    return ResultPage(total=total, issues=[map_issue(r) for r in issues_raw])


def display_value(value: CustomValue) -> str:
    """Render a custom field value (or person) as plain text; empty when unset."""
    if value is None:
        return ""
    if isinstance(value, PersonRef):
        return value.display_name or value.name or ""
    return value


def issues_to_dataframe(issues: Iterable[IssueModel]) -> pd.DataFrame:
    rows = []
    for i in issues:
        rows.append(
            {
                "key": i.key,
                "summary": i.summary or "",
                "priority": i.priority or "",
                "status": i.status.name if i.status else "",
                "components": ",".join(i.components),
                "assignee": display_value(i.assignee),
                "bug_importer": display_value(i.bug_importer),
                "ship_date": display_value(i.ship_date),
                "created": i.created,
                "is_subtask": i.is_subtask,
            }
        )
    return pd.DataFrame(
        rows,
        columns=[
            "key",
            "summary",
            "priority",
            "status",
            "components",
            "assignee",
            "bug_importer",
            "ship_date",
            "created",
            "is_subtask",
        ],
    )
