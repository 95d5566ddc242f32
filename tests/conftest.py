from __future__ import annotations

import sys
from pathlib import Path

import pytest

BASE_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = BASE_DIR / "src"

sys.path.insert(0, str(SRC_DIR))

from portal_tables.models import ColumnType, SortableColumn, StatusOption, TableConfig  # noqa: E402
from portal_tables.preferences import MemoryPreferenceStore  # noqa: E402


@pytest.fixture
def leads_config() -> TableConfig:
    return TableConfig(
        instance_id="leads",
        search_fields=("contact_name", "email", "company.name"),
        status_field="status",
        status_options=(
            StatusOption(value="new", label="New"),
            StatusOption(value="in-progress", label="In Progress"),
            StatusOption(value="won", label="Won"),
            StatusOption(value="archived", label="Archived"),
        ),
        terminal_statuses=("archived", "cancelled"),
        date_field="created_at",
        sortable_columns=(
            SortableColumn(key="contact_name", label="Contact"),
            SortableColumn(key="budget", label="Budget", type=ColumnType.NUMBER),
            SortableColumn(key="created_at", label="Created", type=ColumnType.DATE),
            SortableColumn(key="status", label="Status"),
        ),
        storage_key="admin_leads_filter",
    )


@pytest.fixture
def lead_records() -> list[dict]:
    return [
        {
            "id": 1,
            "contact_name": "Ana Pérez",
            "email": "ana@example.com",
            "company": {"name": "Northwind"},
            "status": "new",
            "budget": "$5,000",
            "created_at": "2024-01-15T10:00:00Z",
        },
        {
            "id": 2,
            "contact_name": "Bruno Díaz",
            "email": "bruno@example.com",
            "company": {"name": "Contoso"},
            "status": "in_progress",
            "budget": 12000,
            "created_at": "2024-01-31T23:59:59Z",
        },
        {
            "id": 3,
            "contact_name": "Carla Soto",
            "email": "carla@example.com",
            "company": None,
            "status": "archived",
            "budget": None,
            "created_at": "2024-02-01T00:00:00Z",
        },
        {
            "id": 4,
            "contact_name": "Diego Ruiz",
            "email": "diego@example.com",
            "status": "won",
            "budget": "n/a",
            "created_at": None,
        },
    ]


@pytest.fixture
def preferences() -> MemoryPreferenceStore:
    return MemoryPreferenceStore()
