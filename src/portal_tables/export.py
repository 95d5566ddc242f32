from __future__ import annotations

import csv
import io
import json
import math
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from .fields import get_field, parse_datetime, parse_number
from .logger import get_logger, log_event

logger = get_logger("portal_tables.export")

Record = Mapping[str, Any]
Formatter = Callable[[Any, Record], str]

LINE_BREAK = "\n"


class ColumnKind(str, Enum):
    TEXT = "text"
    DATE = "date"
    CURRENCY = "currency"


@dataclass(frozen=True)
class ExportColumn:
    path: str
    label: str
    formatter: Formatter | None = None
    kind: ColumnKind = ColumnKind.TEXT

    def render(self, record: Record) -> str:
        value = get_field(record, self.path)
        if self.formatter is not None:
            return self.formatter(value, record)
        if self.kind == ColumnKind.DATE:
            return format_date(value)
        if self.kind == ColumnKind.CURRENCY:
            return format_currency(value)
        return format_value(value)


def format_date(value: Any, _record: Record | None = None) -> str:
    parsed = parse_datetime(value) if value not in (None, "") else None
    return parsed.strftime("%Y-%m-%d") if parsed else ""


def format_currency(value: Any, _record: Record | None = None) -> str:
    amount = parse_number(value)
    if not math.isfinite(amount):
        return ""
    return f"{amount:.2f}"


def format_hours(value: Any, _record: Record | None = None) -> str:
    if value is None or isinstance(value, bool):
        return ""
    try:
        minutes = float(value)
    except (TypeError, ValueError):
        return ""
    if not math.isfinite(minutes):
        return ""
    return f"{minutes / 60:.2f}"


def format_billable_amount(_value: Any, record: Record) -> str:
    """Hours times hourly rate, only for billable entries."""
    rate = record.get("hourly_rate")
    minutes = record.get("duration_minutes")
    if not record.get("is_billable") or not rate or not minutes:
        return ""
    try:
        amount = float(minutes) / 60 * float(rate)
    except (TypeError, ValueError):
        return ""
    if not math.isfinite(amount):
        return ""
    return f"{amount:.2f}"


def format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return "; ".join(format_value(item) for item in value)
    if isinstance(value, Mapping):
        return json.dumps(value, ensure_ascii=False, default=str)
    return str(value)


def to_delimited_text(records: Iterable[Record], columns: Sequence[ExportColumn], delimiter: str = ",") -> str:
    """Header row of labels, then one row per record; fields quoted only when needed."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=delimiter, quoting=csv.QUOTE_MINIMAL, lineterminator=LINE_BREAK)
    writer.writerow([column.label for column in columns])
    for record in records:
        writer.writerow([column.render(record) for column in columns])
    return buffer.getvalue()


def to_json_payload(records: Sequence[Record], exported_at: datetime | None = None) -> str:
    stamp = exported_at or datetime.now(timezone.utc)
    return json.dumps(
        {"exportDate": stamp.isoformat(), "count": len(records), "data": list(records)},
        ensure_ascii=False,
        indent=2,
        default=str,
    )


def export_filename(base: str, today: date | None = None, extension: str = "csv") -> str:
    day = today or datetime.now(timezone.utc).date()
    return f"{base}_{day.strftime('%Y-%m-%d')}.{extension}"


def write_export(content: str, filename: str, output_dir: str | Path) -> Path:
    destination = Path(output_dir)
    destination.mkdir(parents=True, exist_ok=True)
    path = destination / filename
    path.write_text(content, encoding="utf-8")
    log_event(logger, "export", "write", "success", filename=filename, bytes=len(content.encode("utf-8")))
    return path
