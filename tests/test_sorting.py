from __future__ import annotations

import pytest

from portal_tables.models import ColumnType, FilterState, SortableColumn, SortDirection, StatusOption, TableConfig
from portal_tables.sorting import apply_sort, next_sort_state


def _names(records) -> list[str]:
    return [record["name"] for record in records]


@pytest.fixture
def config() -> TableConfig:
    return TableConfig(
        instance_id="clients",
        status_field="status",
        status_options=(
            StatusOption(value="active", label="Active"),
            StatusOption(value="on_hold", label="On Hold"),
            StatusOption(value="archived", label="Archived"),
        ),
        terminal_statuses=("archived",),
        sortable_columns=(
            SortableColumn(key="name", label="Name"),
            SortableColumn(key="budget", label="Budget", type=ColumnType.NUMBER),
            SortableColumn(key="created_at", label="Created", type=ColumnType.DATE),
            SortableColumn(key="status", label="Status"),
        ),
    )


def test_terminal_records_sink_regardless_of_direction(config) -> None:
    records = [{"status": "active", "name": "B"}, {"status": "archived", "name": "A"}]

    ascending = FilterState(sort_column="name", sort_direction=SortDirection.ASC)
    descending = FilterState(sort_column="name", sort_direction=SortDirection.DESC)

    assert _names(apply_sort(records, ascending, config)) == ["B", "A"]
    assert _names(apply_sort(records, descending, config)) == ["B", "A"]


def test_string_sort_is_case_and_accent_insensitive(config) -> None:
    records = [{"name": "beta"}, {"name": "Álvaro"}, {"name": "alpha"}, {"name": None}]
    state = FilterState(sort_column="name", sort_direction=SortDirection.ASC)

    assert _names(apply_sort(records, state, config)) == [None, "alpha", "Álvaro", "beta"]


def test_number_sort_parses_permissively(config) -> None:
    records = [
        {"name": "a", "budget": "$1,200"},
        {"name": "b", "budget": 300},
        {"name": "c", "budget": "n/a"},
        {"name": "d", "budget": "45.5"},
    ]
    state = FilterState(sort_column="budget", sort_direction=SortDirection.DESC)

    assert _names(apply_sort(records, state, config)) == ["a", "b", "d", "c"]


def test_date_sort_puts_missing_dates_first_ascending(config) -> None:
    records = [
        {"name": "late", "created_at": "2024-03-01"},
        {"name": "missing", "created_at": None},
        {"name": "early", "created_at": "2023-12-31T23:00:00Z"},
    ]
    state = FilterState(sort_column="created_at", sort_direction=SortDirection.ASC)

    assert _names(apply_sort(records, state, config)) == ["missing", "early", "late"]


def test_status_column_sorts_by_option_order(config) -> None:
    records = [
        {"name": "x", "status": "unknown"},
        {"name": "y", "status": "on-hold"},
        {"name": "z", "status": "active"},
    ]
    state = FilterState(sort_column="status", sort_direction=SortDirection.ASC)

    assert _names(apply_sort(records, state, config)) == ["z", "y", "x"]


def test_sort_is_stable_and_keeps_input_without_column(config) -> None:
    records = [
        {"name": "same", "budget": 1, "tag": 1},
        {"name": "other", "budget": 2, "tag": 2, "status": "archived"},
        {"name": "same", "budget": 1, "tag": 3},
    ]

    by_name = apply_sort(records, FilterState(sort_column="name", sort_direction=SortDirection.DESC), config)
    assert [record["tag"] for record in by_name] == [1, 3, 2]

    unsorted = apply_sort(records, FilterState(), config)
    assert [record["tag"] for record in unsorted] == [1, 3, 2]

    unknown_column = apply_sort(records, FilterState(sort_column="nope"), config)
    assert [record["tag"] for record in unknown_column] == [1, 3, 2]


def test_apply_sort_is_idempotent_and_pure(config) -> None:
    records = [{"name": "b"}, {"name": "a"}]
    state = FilterState(sort_column="name", sort_direction=SortDirection.ASC)

    once = apply_sort(records, state, config)

    assert apply_sort(once, state, config) == once
    assert _names(records) == ["b", "a"]


def test_header_clicks_cycle_desc_asc_desc() -> None:
    first = next_sort_state(FilterState(), "name")
    second = next_sort_state(first, "name")
    third = next_sort_state(second, "name")
    switched = next_sort_state(second, "budget")

    assert (first.sort_column, first.sort_direction) == ("name", SortDirection.DESC)
    assert second.sort_direction == SortDirection.ASC
    assert third.sort_direction == SortDirection.DESC
    assert (switched.sort_column, switched.sort_direction) == ("budget", SortDirection.DESC)
