from __future__ import annotations

import csv
import io
import json
from dataclasses import replace
from datetime import date
from pathlib import Path

import pytest

from portal_tables.config import EngineConfig
from portal_tables.exceptions import TableConfigError, UnknownInstanceError
from portal_tables.export import ExportColumn
from portal_tables.filtering import set_search_term, set_status_filters
from portal_tables.models import FilterState, SortDirection, TableConfig
from portal_tables.pagination import PaginationState
from portal_tables.preferences import MemoryPreferenceStore
from portal_tables.presets import LEADS_EXPORT
from portal_tables.selection import BulkAction, SelectionRegistry, SelectionStatus
from portal_tables.table import TableEngine


def _ids(records) -> list[int]:
    return [record["id"] for record in records]


def _many(count: int) -> list[dict]:
    return [{"id": index, "contact_name": f"Lead {index:03d}", "status": "new"} for index in range(1, count + 1)]


def test_register_rejects_duplicates_and_unknown_ids(preferences, leads_config) -> None:
    engine = TableEngine(preferences)
    engine.register(leads_config)

    with pytest.raises(TableConfigError):
        engine.register(leads_config)
    with pytest.raises(UnknownInstanceError):
        engine.get_filter_state("ghost")
    with pytest.raises(KeyError):
        engine.get_visible_page("ghost")


def test_register_hydrates_persisted_state(leads_config) -> None:
    store = MemoryPreferenceStore(
        {
            "admin_leads_filter": json.dumps({"searchTerm": "ana", "sortColumn": "budget", "sortDirection": "asc"}),
            "admin_leads_filter_pagination": json.dumps({"pageSize": 50}),
        }
    )

    engine = TableEngine(store)
    engine.register(leads_config)

    state = engine.get_filter_state("leads")
    assert state.search_term == "ana"
    assert state.sort_direction == SortDirection.ASC
    assert engine.get_pagination_state("leads") == PaginationState(current_page=1, page_size=50, total_items=0)


def test_default_page_size_comes_from_engine_config(preferences) -> None:
    engine = TableEngine(preferences, config=EngineConfig(default_page_size=10))
    engine.register(TableConfig(instance_id="plain"))
    engine.register(TableConfig(instance_id="explicit", default_page_size=50))

    assert engine.get_pagination_state("plain").page_size == 10
    assert engine.get_pagination_state("explicit").page_size == 50


def test_visible_page_runs_filter_sort_paginate(preferences, leads_config, lead_records) -> None:
    engine = TableEngine(preferences)
    engine.register(leads_config, lead_records)

    engine.set_filter_state("leads", FilterState(sort_column="budget", sort_direction=SortDirection.DESC))
    assert _ids(engine.get_visible_page("leads")) == [2, 1, 4, 3]

    engine.set_filter_state("leads", set_status_filters(engine.get_filter_state("leads"), ["won", "new"]))
    assert _ids(engine.get_visible_page("leads")) == [1, 4]
    assert engine.get_pagination_state("leads").total_items == 2


def test_filter_change_resets_page_and_persists(preferences, leads_config) -> None:
    engine = TableEngine(preferences)
    engine.register(leads_config, _many(60))
    engine.set_page_size("leads", 10)
    engine.go_to_page("leads", 4)
    assert engine.get_pagination_state("leads").current_page == 4

    engine.apply_sort_click("leads", "contact_name")
    assert engine.get_pagination_state("leads").current_page == 4

    engine.set_filter_state("leads", set_search_term(engine.get_filter_state("leads"), "lead 0"))
    assert engine.get_pagination_state("leads").current_page == 1

    persisted = json.loads(preferences.get("admin_leads_filter"))
    assert persisted["searchTerm"] == "lead 0"
    assert persisted["sortColumn"] == "contact_name"
    assert persisted["sortDirection"] == "desc"
    assert json.loads(preferences.get("admin_leads_filter_pagination")) == {"pageSize": 10}
    assert "currentPage" not in preferences.get("admin_leads_filter_pagination")


def test_page_size_change_clamps_like_pagination(preferences, leads_config) -> None:
    engine = TableEngine(preferences)
    engine.register(leads_config, _many(42))
    engine.set_page_size("leads", 10)
    engine.go_to_page("leads", 5)

    state = engine.set_page_size("leads", 25)

    assert (state.current_page, state.page_size) == (2, 25)
    assert _ids(engine.get_visible_page("leads")) == list(range(26, 43))


def test_set_pagination_state_derives_total_and_clamps_page(preferences, leads_config) -> None:
    engine = TableEngine(preferences)
    engine.register(leads_config, _many(42))
    engine.set_page_size("leads", 10)
    state = engine.go_to_page("leads", 5)

    resized = engine.set_pagination_state("leads", replace(state, page_size=25))

    assert resized == PaginationState(current_page=2, page_size=25, total_items=42)
    assert engine.get_pagination_state("leads") == resized
    assert json.loads(preferences.get("admin_leads_filter_pagination")) == {"pageSize": 25}

    forced = engine.set_pagination_state("leads", PaginationState(current_page=99, page_size=10, total_items=7))

    assert forced == PaginationState(current_page=5, page_size=10, total_items=42)
    assert _ids(engine.get_visible_page("leads")) == list(range(41, 43))


def test_shrinking_source_clamps_current_page(preferences, leads_config) -> None:
    engine = TableEngine(preferences)
    engine.register(leads_config, _many(30))
    engine.set_page_size("leads", 10)
    engine.go_to_page("leads", 3)

    engine.set_source("leads", _many(12))

    assert _ids(engine.get_visible_page("leads")) == [11, 12]
    assert engine.get_pagination_state("leads").current_page == 2


def test_sort_clicks_cycle(preferences, leads_config, lead_records) -> None:
    engine = TableEngine(preferences)
    engine.register(leads_config, lead_records)

    assert engine.apply_sort_click("leads", "contact_name").sort_direction == SortDirection.DESC
    assert engine.apply_sort_click("leads", "contact_name").sort_direction == SortDirection.ASC
    assert _ids(engine.get_filtered("leads")) == [1, 2, 4, 3]


def test_selection_is_pruned_when_rows_vanish(preferences, leads_config, lead_records) -> None:
    engine = TableEngine(preferences)
    engine.register(leads_config, lead_records)
    engine.toggle_row("leads", 1)
    engine.toggle_row("leads", 3)

    engine.set_source("leads", [record for record in lead_records if record["id"] != 3])
    summary = engine.get_selection_summary("leads")

    assert summary.selected_ids == frozenset({1})
    assert summary.count == 1
    assert summary.status == SelectionStatus.PARTIAL


def test_toggle_all_uses_filtered_rows(preferences, leads_config, lead_records) -> None:
    engine = TableEngine(preferences)
    engine.register(leads_config, lead_records)
    engine.set_filter_state("leads", FilterState(status_filters=("new", "in-progress")))

    assert engine.toggle_all("leads") == SelectionStatus.ALL
    assert engine.get_selection_summary("leads").selected_ids == frozenset({1, 2})

    assert engine.toggle_all("leads") == SelectionStatus.NONE
    assert engine.get_selection_summary("leads").count == 0


def test_instances_do_not_share_state(preferences, leads_config, lead_records) -> None:
    registry = SelectionRegistry()
    engine = TableEngine(preferences, selection=registry)
    engine.register(leads_config, lead_records)
    engine.register(TableConfig(instance_id="archive", search_fields=("contact_name",)), lead_records)

    engine.toggle_row("leads", 2)
    engine.set_filter_state("leads", FilterState(search_term="bruno"))

    assert registry.selected_ids("archive") == frozenset()
    assert engine.get_filter_state("archive") == FilterState()
    assert len(engine.get_filtered("archive")) == 4

    engine.unregister("leads")
    assert engine.instance_ids() == ["archive"]
    assert registry.selected_ids("leads") == frozenset()


@pytest.mark.asyncio
async def test_run_bulk_action_through_engine(preferences, leads_config, lead_records) -> None:
    engine = TableEngine(preferences)
    engine.register(leads_config, lead_records)
    engine.toggle_row("leads", 1)
    received: list[list] = []

    async def _handler(ids, value):
        received.append(ids)

    result = await engine.run_bulk_action("leads", BulkAction(id="archive", label="Archive", handler=_handler))

    assert result.ok
    assert received == [[1]]
    assert engine.get_selection_summary("leads").count == 0

    with pytest.raises(UnknownInstanceError):
        await engine.run_bulk_action("ghost", BulkAction(id="archive", label="Archive", handler=_handler))


def test_export_uses_filtered_sorted_unpaginated_rows(preferences, leads_config, lead_records) -> None:
    engine = TableEngine(preferences)
    engine.register(leads_config, lead_records)
    engine.set_page_size("leads", 10)
    engine.set_filter_state("leads", FilterState(sort_column="contact_name", sort_direction=SortDirection.DESC))
    columns = [ExportColumn(path="id", label="ID"), ExportColumn(path="company.name", label="Company")]

    rows = list(csv.reader(io.StringIO(engine.export_current_view("leads", columns))))

    assert rows == [["ID", "Company"], ["4", ""], ["2", "Contoso"], ["1", "Northwind"], ["3", ""]]
    assert engine.export_current_view("leads", columns, delimiter=";").splitlines()[0] == "ID;Company"

    payload = json.loads(engine.export_current_view_json("leads"))
    assert payload["count"] == 4


def test_save_export_writes_dated_file(tmp_path: Path, preferences, leads_config, lead_records) -> None:
    engine = TableEngine(preferences, config=EngineConfig(export_dir=tmp_path))
    engine.register(leads_config, lead_records)

    path = engine.save_export("leads", LEADS_EXPORT, today=date(2024, 6, 30))

    assert path == tmp_path / "leads_2024-06-30.csv"
    header = path.read_text(encoding="utf-8").splitlines()[0]
    assert header.startswith("ID,Contact Name,Email,Company")
