"""Issue age as a human-relative duration (pure functions)."""

from __future__ import annotations

from datetime import datetime

import pandas as pd
import pytz

from weekly_report.core.config import TIMEZONE

# (upper bound in seconds, singular text, unit seconds, plural unit)
_THRESHOLDS = (
    (45, "a few seconds", None, None),
    (90, "a minute", None, None),
    (45 * 60, None, 60, "minutes"),
    (90 * 60, "an hour", None, None),
    (22 * 3600, None, 3600, "hours"),
    (36 * 3600, "a day", None, None),
    (26 * 86400, None, 86400, "days"),
    (45 * 86400, "a month", None, None),
    (320 * 86400, None, 30 * 86400, "months"),
    (548 * 86400, "a year", None, None),
)


def now_local() -> datetime:
    return datetime.now(tz=pytz.timezone(TIMEZONE))


def humanize_age(created: datetime | None, now: datetime | None = None) -> str:
    """Return ``"3 days ago"``-style text; empty when ``created`` is unknown."""
    if created is None:
        return ""
    now = now or now_local()
    delta = pd.Timestamp(now) - pd.Timestamp(created)
    seconds = abs(delta.total_seconds())
    suffix = "ago" if delta.total_seconds() >= 0 else "from now"
    for bound, text, unit, plural in _THRESHOLDS:
        if seconds < bound:
            if text is None:
                text = f"{max(2, round(seconds / unit))} {plural}"
            return f"{text} {suffix}"
    return f"{max(2, round(seconds / (365 * 86400)))} years {suffix}"
