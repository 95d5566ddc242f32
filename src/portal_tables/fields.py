"""Read boundary between schema-less records and the engine.

Every value the engine looks at goes through one of these helpers, so bad
data degrades to a sentinel instead of raising mid-render.
"""

from __future__ import annotations

import math
import re
import unicodedata
from collections.abc import Mapping
from datetime import date, datetime, time, timedelta, timezone
from typing import Any

NEGATIVE_INFINITY = float("-inf")
_EPOCH = datetime(1970, 1, 1)
_NUMBER_CHARS = re.compile(r"[^0-9.\-]")
_LEADING_NUMBER = re.compile(r"^-?(\d+\.?\d*|\.\d+)")
_END_OF_DAY = time(23, 59, 59, 999000)


def get_field(record: Any, path: str | None) -> Any:
    """Resolve a dot-separated path; any missing hop yields None."""
    if not path or not isinstance(record, Mapping):
        return None
    if path in record:
        return record[path]
    current: Any = record
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
        if current is None:
            return None
    return current


def text_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def fold_text(value: Any) -> str:
    decomposed = unicodedata.normalize("NFKD", text_value(value))
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return stripped.casefold()


def normalize_status(value: Any) -> str | None:
    # Legacy rows mix "in_progress" and "in-progress"; hyphen is the one we compare on.
    if value is None:
        return None
    clean = text_value(value).strip().lower()
    if not clean:
        return None
    return clean.replace("_", "-")


def parse_datetime(value: Any) -> datetime | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return _naive_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return _EPOCH + timedelta(milliseconds=value)
        except OverflowError:
            return None
    raw = text_value(value).strip()
    if not raw:
        return None
    if raw.endswith(("Z", "z")):
        raw = f"{raw[:-1]}+00:00"
    try:
        return _naive_utc(datetime.fromisoformat(raw))
    except ValueError:
        return None


def parse_timestamp(value: Any) -> float:
    parsed = parse_datetime(value)
    if parsed is None:
        return NEGATIVE_INFINITY
    return (parsed - _EPOCH).total_seconds()


def parse_number(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return NEGATIVE_INFINITY
    if isinstance(value, (int, float)):
        return float(value) if not math.isnan(value) else NEGATIVE_INFINITY
    cleaned = _NUMBER_CHARS.sub("", text_value(value))
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return NEGATIVE_INFINITY
    return float(match.group(0))


def parse_day(value: str | None) -> date | None:
    if not value:
        return None
    parsed = parse_datetime(value)
    return parsed.date() if parsed is not None else None


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min)


def end_of_day(day: date) -> datetime:
    return datetime.combine(day, _END_OF_DAY)


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
