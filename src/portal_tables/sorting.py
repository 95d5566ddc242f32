from __future__ import annotations

import locale
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from .fields import fold_text, get_field, parse_number, parse_timestamp
from .models import ColumnType, FilterState, SortableColumn, SortDirection, TableConfig

Record = Mapping[str, Any]


def apply_sort(records: Iterable[Record], state: FilterState, config: TableConfig) -> list[Record]:
    """Stable sort by the active column; terminal statuses always end up last."""
    rows = list(records)
    column = config.column(state.sort_column)
    if column is not None:
        rows.sort(key=_sort_key(column, config), reverse=state.sort_direction == SortDirection.DESC)
    if config.status_field and config.terminal_statuses:
        rows.sort(key=lambda row: config.is_terminal(get_field(row, config.status_field)))
    return rows


def _sort_key(column: SortableColumn, config: TableConfig) -> Callable[[Record], Any]:
    if column.key == config.status_field:
        return lambda row: config.status_rank(get_field(row, column.key))
    if column.type == ColumnType.NUMBER:
        return lambda row: parse_number(get_field(row, column.key))
    if column.type == ColumnType.DATE:
        return lambda row: parse_timestamp(get_field(row, column.key))
    return lambda row: locale.strxfrm(fold_text(get_field(row, column.key)))


def next_sort_state(state: FilterState, column_key: str) -> FilterState:
    if state.sort_column == column_key:
        direction = SortDirection.ASC if state.sort_direction == SortDirection.DESC else SortDirection.DESC
    else:
        direction = SortDirection.DESC
    return state.model_copy(update={"sort_column": column_key, "sort_direction": direction})
