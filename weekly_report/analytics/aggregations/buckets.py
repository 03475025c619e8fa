"""Product bucket classification and subtask lookup."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass

from weekly_report.core.models import IssueModel


@dataclass(slots=True, frozen=True)
class BucketRule:
    bucket: str
    markers: tuple[str, ...]

    def matches(self, tag: str) -> bool:
        return any(marker in tag for marker in self.markers)


def bucket_for(
    issue: IssueModel,
    rules: Sequence[BucketRule],
    *,
    default_bucket: str = "Engineering",
    fallback_bucket: str = "General Product",
) -> str:
    if not issue.components:
        return default_bucket
    # First component that matches any rule decides
    for tag in issue.components:
        for rule in rules:
            if rule.matches(tag):
                return rule.bucket
    return fallback_bucket


def classify(
    issues: Iterable[IssueModel],
    rules: Sequence[BucketRule],
    *,
    default_bucket: str = "Engineering",
    fallback_bucket: str = "General Product",
) -> dict[str, list[IssueModel]]:
    """Group top-level issues by bucket, keeping input order inside each bucket.

    Subtasks are skipped; they are rendered under their parent instead.
    """
    groups: dict[str, list[IssueModel]] = {}
    for issue in issues:
        if issue.is_subtask:
            continue
        bucket = bucket_for(
            issue,
            rules,
            default_bucket=default_bucket,
            fallback_bucket=fallback_bucket,
        )
        groups.setdefault(bucket, []).append(issue)
    return groups


def resolve_subtasks(issues: Iterable[IssueModel]) -> dict[str, IssueModel]:
    return {issue.key: issue for issue in issues if issue.is_subtask}


def subtasks_of(parent: IssueModel, lookup: dict[str, IssueModel]) -> Iterator[IssueModel]:
    """Yield the parent's subtasks in listed order, skipping keys not retrieved."""
    for key in parent.subtask_keys:
        sub = lookup.get(key)
        if sub is not None:
            yield sub
