from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from .fields import end_of_day, fold_text, get_field, normalize_status, parse_datetime, parse_day, start_of_day
from .models import FilterState, SortDirection, TableConfig

DEFAULT_SEARCH_DEBOUNCE_MS = 200

Record = Mapping[str, Any]


def apply_filters(records: Iterable[Record], state: FilterState, config: TableConfig) -> list[Record]:
    """Search, then status, then date range. Never mutates ``records``."""
    filtered = list(records)

    needle = fold_text(state.search_term.strip())
    if needle:
        filtered = [record for record in filtered if _matches_search(record, needle, config.search_fields)]

    wanted = {normalize_status(value) for value in state.status_filters} - {None}
    if wanted and config.status_field:
        filtered = [
            record for record in filtered if normalize_status(get_field(record, config.status_field)) in wanted
        ]

    start_day = parse_day(state.date_start)
    end_day = parse_day(state.date_end)
    if (start_day or end_day) and config.date_field:
        lower = start_of_day(start_day) if start_day else None
        upper = end_of_day(end_day) if end_day else None
        filtered = [record for record in filtered if _within_range(record, config.date_field, lower, upper)]

    return filtered


def _matches_search(record: Record, needle: str, search_fields: Sequence[str]) -> bool:
    return any(needle in fold_text(get_field(record, field)) for field in search_fields)


def _within_range(record: Record, date_field: str, lower, upper) -> bool:
    moment = parse_datetime(get_field(record, date_field))
    if moment is None:
        return False
    if lower is not None and moment < lower:
        return False
    if upper is not None and moment > upper:
        return False
    return True


def set_search_term(state: FilterState, term: str) -> FilterState:
    return state.model_copy(update={"search_term": term})


def set_status_filters(state: FilterState, values: Iterable[str]) -> FilterState:
    unique = tuple(dict.fromkeys(value for value in values if value))
    return state.model_copy(update={"status_filters": unique})


def toggle_status(state: FilterState, value: str) -> FilterState:
    if value in state.status_filters:
        return set_status_filters(state, [item for item in state.status_filters if item != value])
    return set_status_filters(state, [*state.status_filters, value])


def set_date_range(state: FilterState, start: str | None, end: str | None) -> FilterState:
    return state.model_copy(update={"date_start": start or None, "date_end": end or None})


def set_sort(state: FilterState, column: str | None, direction: SortDirection) -> FilterState:
    return state.model_copy(update={"sort_column": column or None, "sort_direction": direction})


def clear_filters(state: FilterState) -> FilterState:
    return FilterState(sort_column=state.sort_column, sort_direction=state.sort_direction)


def count_active_filters(state: FilterState) -> int:
    count = len(state.status_filters)
    if state.date_start:
        count += 1
    if state.date_end:
        count += 1
    return count


class SearchDebouncer:
    """Trailing-edge debounce for search keystrokes on the running event loop."""

    def __init__(self, callback: Callable[[str], Any], wait_ms: int = DEFAULT_SEARCH_DEBOUNCE_MS) -> None:
        self._callback = callback
        self.wait_ms = max(0, wait_ms)
        self._handle: asyncio.TimerHandle | None = None
        self._pending: str | None = None

    @property
    def pending(self) -> str | None:
        return self._pending

    def push(self, term: str) -> None:
        self._cancel_handle()
        self._pending = term
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.wait_ms / 1000, self._fire)

    def flush(self) -> None:
        if self._pending is None:
            return
        self._cancel_handle()
        self._fire()

    def cancel(self) -> None:
        self._cancel_handle()
        self._pending = None

    def _fire(self) -> None:
        term = self._pending
        self._handle = None
        self._pending = None
        if term is not None:
            self._callback(term)

    def _cancel_handle(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
