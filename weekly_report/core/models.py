"""Domain data models for Jira issues and search result pages."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(slots=True, frozen=True)
class PersonRef:
    name: str | None
    display_name: str | None


@dataclass(slots=True, frozen=True)
class StatusModel:
    name: str
    category: str | None = None


# Custom fields hold either a plain value (dates, text) or a user reference.
CustomValue = str | PersonRef | None


@dataclass(slots=True, frozen=True)
class IssueModel:
    key: str
    summary: str | None
    assignee: PersonRef | None
    status: StatusModel | None
    priority: str | None
    created: datetime | None
    updated: datetime | None = None
    issuetype: str | None = None
    is_subtask: bool = False
    components: tuple[str, ...] = ()
    subtask_keys: tuple[str, ...] = ()

    # Optional custom fields
    ship_date: CustomValue = None
    tech_owner: CustomValue = None
    frontend_owner: CustomValue = None
    bug_importer: CustomValue = None


@dataclass(slots=True, frozen=True)
class ResultPage:
    total: int
    issues: list[IssueModel] = field(default_factory=list)
