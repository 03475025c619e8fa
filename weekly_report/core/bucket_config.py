"""Load bucket keyword rules from YAML (with fallbacks)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from weekly_report.analytics.aggregations.buckets import BucketRule

from .config import BUCKET_DISPLAY_ORDER, DEFAULT_BUCKET, DEFAULT_BUCKET_RULES, FALLBACK_BUCKET

logger = logging.getLogger(__name__)

_CACHE: BucketConfig | None = None


@dataclass(slots=True, frozen=True)
class BucketConfig:
    rules: tuple[BucketRule, ...]
    order: tuple[str, ...]
    default_bucket: str = DEFAULT_BUCKET
    fallback_bucket: str = FALLBACK_BUCKET


def default_bucket_config() -> BucketConfig:
    return BucketConfig(
        rules=tuple(BucketRule(bucket, tuple(markers)) for bucket, markers in DEFAULT_BUCKET_RULES),
        order=tuple(BUCKET_DISPLAY_ORDER),
    )


def parse_bucket_config(data: dict) -> BucketConfig:
    if not isinstance(data, dict):
        raise ValueError(f"bucket config must be a mapping, got {type(data).__name__}")
    fallback = default_bucket_config()
    rules_raw = data.get("rules")
    rules = fallback.rules
    if rules_raw:
        if not isinstance(rules_raw, list):
            raise ValueError(f"bucket rules must be a list, got {type(rules_raw).__name__}")
        parsed = []
        for entry in rules_raw:
            if not isinstance(entry, dict) or not entry.get("bucket"):
                raise ValueError(f"bucket rule needs a 'bucket' name: {entry!r}")
            markers = entry.get("markers") or []
            if not isinstance(markers, list):
                raise ValueError(f"markers for bucket {entry['bucket']!r} must be a list: {markers!r}")
            parsed.append(BucketRule(str(entry["bucket"]), tuple(str(m) for m in markers)))
        rules = tuple(parsed)
    default_bucket = str(data.get("default_bucket") or fallback.default_bucket)
    fallback_bucket = str(data.get("fallback_bucket") or fallback.fallback_bucket)
    order_raw = data.get("order") or []
    if not isinstance(order_raw, list):
        raise ValueError(f"bucket order must be a list, got {type(order_raw).__name__}")
    order = tuple(str(b) for b in order_raw)
    if not order:
        order = tuple(dict.fromkeys([*(r.bucket for r in rules), fallback_bucket, default_bucket]))
    return BucketConfig(rules=rules, order=order, default_bucket=default_bucket, fallback_bucket=fallback_bucket)


def load_bucket_config(path: str | Path | None = None) -> BucketConfig:
    """Read bucket rules; an explicit ``path`` bypasses the cache and must exist."""
    global _CACHE
    if path is not None:
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
        return parse_bucket_config(data)
    if _CACHE is not None:
        return _CACHE
    yaml_path = Path(__file__).resolve().parent.parent / "buckets.yaml"
    if not yaml_path.exists():
        _CACHE = default_bucket_config()
        return _CACHE
    try:
        data = yaml.safe_load(yaml_path.read_text(encoding="utf-8")) or {}
        _CACHE = parse_bucket_config(data)
    except (OSError, yaml.YAMLError, ValueError) as exc:
        logger.warning("Ignoring unreadable %s: %s", yaml_path, exc)
        _CACHE = default_bucket_config()
    return _CACHE
