from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any

from .config import EngineConfig
from .exceptions import TableConfigError, UnknownInstanceError
from .export import ExportColumn, export_filename, to_delimited_text, to_json_payload, write_export
from .fields import get_field
from .filtering import apply_filters
from .logger import get_logger, log_event
from .models import FilterState, TableConfig
from .pagination import PaginationState, apply_pagination, change_page_size, goto_page, with_total_items
from .preferences import PreferenceStore, load_filter_state, load_page_size, save_filter_state, save_page_size
from .presets import ExportPreset
from .results import Result
from .selection import (
    BulkAction,
    BulkActionOutcome,
    BulkActionRunner,
    ConfirmFn,
    RowId,
    SelectionRegistry,
    SelectionStatus,
    SelectionSummary,
)
from .sorting import apply_sort, next_sort_state

logger = get_logger("portal_tables.table")

Record = Mapping[str, Any]


@dataclass
class TableInstance:
    config: TableConfig
    filter_state: FilterState
    pagination: PaginationState
    source: list[Record] = field(default_factory=list)


class TableEngine:
    """Registry of table instances and the read/write surface a view renders from.

    Every instance owns its source records, filter state and pagination state.
    Selections live in the shared :class:`SelectionRegistry`, keyed by instance id.
    """

    def __init__(
        self,
        preferences: PreferenceStore,
        selection: SelectionRegistry | None = None,
        config: EngineConfig | None = None,
    ) -> None:
        self.preferences = preferences
        self.selection = selection or SelectionRegistry()
        self.config = config or EngineConfig()
        self.bulk_runner = BulkActionRunner(self.selection)
        self._instances: dict[str, TableInstance] = {}

    def register(self, table_config: TableConfig, records: Iterable[Record] = ()) -> TableInstance:
        if table_config.instance_id in self._instances:
            raise TableConfigError(f"Table instance already registered: {table_config.instance_id}")
        default_size = (
            table_config.default_page_size
            if "default_page_size" in table_config.model_fields_set
            else self.config.default_page_size
        )
        page_size = load_page_size(self.preferences, table_config.pagination_storage_key, default_size)
        instance = TableInstance(
            config=table_config,
            filter_state=load_filter_state(self.preferences, table_config.storage_key),
            pagination=PaginationState(current_page=1, page_size=page_size),
            source=list(records),
        )
        self._instances[table_config.instance_id] = instance
        log_event(
            logger,
            "table",
            "register",
            "success",
            level=logging.DEBUG,
            instance_id=table_config.instance_id,
            page_size=page_size,
        )
        return instance

    def unregister(self, instance_id: str) -> None:
        self._instance(instance_id)
        del self._instances[instance_id]
        self.selection.drop(instance_id)

    def instance_ids(self) -> list[str]:
        return list(self._instances)

    def get_config(self, instance_id: str) -> TableConfig:
        return self._instance(instance_id).config

    def set_source(self, instance_id: str, records: Iterable[Record]) -> None:
        self._instance(instance_id).source = list(records)

    def get_source(self, instance_id: str) -> list[Record]:
        return list(self._instance(instance_id).source)

    def get_filter_state(self, instance_id: str) -> FilterState:
        return self._instance(instance_id).filter_state

    def set_filter_state(self, instance_id: str, state: FilterState) -> FilterState:
        instance = self._instance(instance_id)
        previous = instance.filter_state
        if state == previous:
            return previous
        instance.filter_state = state
        if _filter_criteria(state) != _filter_criteria(previous):
            instance.pagination = goto_page(instance.pagination, 1)
        save_filter_state(self.preferences, instance.config.storage_key, state)
        return state

    def apply_sort_click(self, instance_id: str, column: str) -> FilterState:
        state = self.get_filter_state(instance_id)
        return self.set_filter_state(instance_id, next_sort_state(state, column))

    def get_pagination_state(self, instance_id: str) -> PaginationState:
        return self._instance(instance_id).pagination

    def set_pagination_state(self, instance_id: str, state: PaginationState) -> PaginationState:
        """Store ``state`` with ``total_items`` derived from the filtered rows and the page clamped."""
        instance = self._instance(instance_id)
        state = with_total_items(state, len(self.get_filtered(instance_id)))
        if state.page_size != instance.pagination.page_size:
            save_page_size(self.preferences, instance.config.pagination_storage_key, state.page_size)
        instance.pagination = state
        return state

    def set_page_size(self, instance_id: str, page_size: int) -> PaginationState:
        current = self._sync_total(instance_id)
        return self.set_pagination_state(instance_id, change_page_size(current, page_size))

    def go_to_page(self, instance_id: str, page: int) -> PaginationState:
        current = self._sync_total(instance_id)
        return self.set_pagination_state(instance_id, goto_page(current, page))

    def get_filtered(self, instance_id: str) -> list[Record]:
        """Filtered and sorted rows, unpaginated. Prunes selections of vanished rows."""
        instance = self._instance(instance_id)
        id_field = instance.config.id_field
        self.selection.prune(instance_id, (get_field(record, id_field) for record in instance.source))
        rows = apply_filters(instance.source, instance.filter_state, instance.config)
        return apply_sort(rows, instance.filter_state, instance.config)

    def get_visible_page(self, instance_id: str) -> list[Record]:
        instance = self._instance(instance_id)
        rows = self.get_filtered(instance_id)
        instance.pagination = with_total_items(instance.pagination, len(rows))
        return apply_pagination(rows, instance.pagination)

    def filtered_ids(self, instance_id: str) -> list[RowId]:
        id_field = self._instance(instance_id).config.id_field
        return [get_field(record, id_field) for record in self.get_filtered(instance_id)]

    def get_selection_summary(self, instance_id: str) -> SelectionSummary:
        return self.selection.summary(instance_id, self.filtered_ids(instance_id))

    def toggle_row(self, instance_id: str, row_id: RowId) -> bool:
        self._instance(instance_id)
        return self.selection.toggle(instance_id, row_id)

    def toggle_all(self, instance_id: str) -> SelectionStatus:
        return self.selection.toggle_all(instance_id, self.filtered_ids(instance_id))

    def clear_selection(self, instance_id: str) -> None:
        self._instance(instance_id)
        self.selection.clear(instance_id)

    async def run_bulk_action(
        self,
        instance_id: str,
        action: BulkAction,
        confirm: ConfirmFn | None = None,
        value: str | None = None,
    ) -> Result[BulkActionOutcome, Exception]:
        self._instance(instance_id)
        return await self.bulk_runner.run(instance_id, action, confirm=confirm, value=value)

    def export_current_view(self, instance_id: str, columns: Sequence[ExportColumn], delimiter: str = ",") -> str:
        return to_delimited_text(self.get_filtered(instance_id), columns, delimiter)

    def export_current_view_json(self, instance_id: str, exported_at: datetime | None = None) -> str:
        return to_json_payload(self.get_filtered(instance_id), exported_at)

    def save_export(
        self,
        instance_id: str,
        preset: ExportPreset,
        today: date | None = None,
        output_dir: str | Path | None = None,
    ) -> Path:
        content = self.export_current_view(instance_id, preset.columns)
        return write_export(content, export_filename(preset.filename, today), output_dir or self.config.export_dir)

    def _sync_total(self, instance_id: str) -> PaginationState:
        instance = self._instance(instance_id)
        instance.pagination = with_total_items(instance.pagination, len(self.get_filtered(instance_id)))
        return instance.pagination

    def _instance(self, instance_id: str) -> TableInstance:
        instance = self._instances.get(instance_id)
        if instance is None:
            raise UnknownInstanceError(instance_id)
        return instance


def _filter_criteria(state: FilterState) -> tuple[Any, ...]:
    return (state.search_term, state.status_filters, state.date_start, state.date_end)
