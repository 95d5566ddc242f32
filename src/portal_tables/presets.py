"""Table, export and endpoint presets for the admin entity lists."""

from __future__ import annotations

from dataclasses import dataclass

from .export import ColumnKind, ExportColumn, format_billable_amount, format_hours
from .models import ColumnType, SortableColumn, StatusOption, TableConfig


@dataclass(frozen=True)
class EntityEndpoint:
    cache_key: str
    path: str
    collection_field: str | None = None
    status_path: str | None = None
    status_method: str = "PUT"
    dependants: tuple[str, ...] = ()

    def status_url(self, record_id: object) -> str:
        template = self.status_path or f"{self.path}/{{id}}/status"
        return template.format(id=record_id)

    @property
    def bulk_path(self) -> str:
        return f"{self.path}/bulk"


@dataclass(frozen=True)
class ExportPreset:
    filename: str
    columns: tuple[ExportColumn, ...]


def _status(*pairs: tuple[str, str]) -> tuple[StatusOption, ...]:
    return tuple(StatusOption(value=value, label=label) for value, label in pairs)


def _col(key: str, label: str, column_type: ColumnType = ColumnType.STRING) -> SortableColumn:
    return SortableColumn(key=key, label=label, type=column_type)


def _text(path: str, label: str) -> ExportColumn:
    return ExportColumn(path=path, label=label)


def _date(path: str, label: str) -> ExportColumn:
    return ExportColumn(path=path, label=label, kind=ColumnKind.DATE)


def _money(path: str, label: str) -> ExportColumn:
    return ExportColumn(path=path, label=label, kind=ColumnKind.CURRENCY)


LEADS_TABLE = TableConfig(
    instance_id="leads",
    search_fields=("contact_name", "email", "company_name", "project_type"),
    status_field="status",
    status_options=_status(
        ("pending", "Pending"),
        ("qualified", "Qualified"),
        ("contacted", "Contacted"),
        ("active", "Active"),
        ("in-progress", "In Progress"),
        ("converted", "Converted"),
        ("completed", "Completed"),
        ("lost", "Lost"),
    ),
    terminal_statuses=("lost", "archived", "cancelled", "rejected"),
    date_field="created_at",
    sortable_columns=(
        _col("created_at", "Date", ColumnType.DATE),
        _col("contact_name", "Contact"),
        _col("company_name", "Company"),
        _col("project_type", "Project Type"),
        _col("budget_range", "Budget"),
        _col("status", "Status"),
    ),
    storage_key="admin_leads_filter",
)

CONTACTS_TABLE = TableConfig(
    instance_id="contacts",
    search_fields=("name", "email", "company", "message"),
    status_field="status",
    status_options=_status(
        ("new", "New"),
        ("read", "Read"),
        ("responded", "Responded"),
        ("archived", "Archived"),
    ),
    terminal_statuses=("archived",),
    date_field="created_at",
    sortable_columns=(
        _col("created_at", "Date", ColumnType.DATE),
        _col("name", "Name"),
        _col("email", "Email"),
        _col("company", "Company"),
        _col("status", "Status"),
    ),
    storage_key="admin_contacts_filter",
)

PROJECTS_TABLE = TableConfig(
    instance_id="projects",
    search_fields=("name", "client_name", "project_type"),
    status_field="status",
    status_options=_status(
        ("active", "Active"),
        ("in-progress", "In Progress"),
        ("on-hold", "On Hold"),
        ("completed", "Completed"),
        ("cancelled", "Cancelled"),
    ),
    terminal_statuses=("cancelled", "archived"),
    date_field="created_at",
    sortable_columns=(
        _col("name", "Project"),
        _col("client_name", "Client"),
        _col("project_type", "Type"),
        _col("budget", "Budget", ColumnType.NUMBER),
        _col("status", "Status"),
    ),
    storage_key="admin_projects_filter",
)

CLIENTS_TABLE = TableConfig(
    instance_id="clients",
    search_fields=("name", "email", "company_name"),
    status_field="status",
    status_options=_status(("active", "Active"), ("inactive", "Inactive")),
    terminal_statuses=("inactive", "archived"),
    date_field="created_at",
    sortable_columns=(
        _col("name", "Name"),
        _col("client_type", "Type"),
        _col("email", "Email"),
        _col("status", "Status"),
        _col("created_at", "Created", ColumnType.DATE),
    ),
    storage_key="admin_clients_filter",
)

TABLE_PRESETS: dict[str, TableConfig] = {
    config.instance_id: config for config in (LEADS_TABLE, CONTACTS_TABLE, PROJECTS_TABLE, CLIENTS_TABLE)
}


CLIENTS_EXPORT = ExportPreset(
    filename="clients",
    columns=(
        _text("id", "ID"),
        _text("contact_name", "Contact Name"),
        _text("email", "Email"),
        _text("company_name", "Company"),
        _text("client_type", "Type"),
        _text("phone", "Phone"),
        _text("status", "Status"),
        _text("project_count", "Projects"),
        _text("health_score", "Health Score"),
        _date("created_at", "Created Date"),
        _text("billing_email", "Billing Email"),
        _text("billing_address", "Billing Address"),
        _text("billing_city", "City"),
        _text("billing_state", "State"),
        _text("billing_zip", "ZIP"),
        _text("billing_country", "Country"),
    ),
)

LEADS_EXPORT = ExportPreset(
    filename="leads",
    columns=(
        _text("id", "ID"),
        _text("contact_name", "Contact Name"),
        _text("email", "Email"),
        _text("company_name", "Company"),
        _text("project_type", "Project Type"),
        _text("budget_range", "Budget Range"),
        _text("timeline", "Timeline"),
        _text("status", "Status"),
        _text("source", "Source"),
        _text("phone", "Phone"),
        _text("description", "Description"),
        _text("features", "Features"),
        _text("score", "Lead Score"),
        _date("created_at", "Created Date"),
    ),
)

PROJECTS_EXPORT = ExportPreset(
    filename="projects",
    columns=(
        _text("id", "ID"),
        _text("project_name", "Project Name"),
        _text("contact_name", "Client Name"),
        _text("company_name", "Company"),
        _text("project_type", "Project Type"),
        _text("status", "Status"),
        _text("budget_range", "Budget"),
        _text("timeline", "Timeline"),
        _date("start_date", "Start Date"),
        _date("end_date", "End Date"),
        _date("created_at", "Created Date"),
    ),
)

CONTACTS_EXPORT = ExportPreset(
    filename="contacts",
    columns=(
        _text("id", "ID"),
        _text("name", "Name"),
        _text("email", "Email"),
        _text("company", "Company"),
        _text("phone", "Phone"),
        _text("status", "Status"),
        _text("message", "Message"),
        _date("created_at", "Created Date"),
    ),
)

INVOICES_EXPORT = ExportPreset(
    filename="invoices",
    columns=(
        _text("id", "ID"),
        _text("invoice_number", "Invoice Number"),
        _text("client_name", "Client"),
        _text("project_name", "Project"),
        _text("status", "Status"),
        _money("amount_total", "Total Amount"),
        _date("due_date", "Due Date"),
        _date("paid_at", "Paid Date"),
        _date("created_at", "Created Date"),
    ),
)

PROPOSALS_EXPORT = ExportPreset(
    filename="proposals",
    columns=(
        _text("id", "ID"),
        _text("client.name", "Client Name"),
        _text("client.company", "Company"),
        _text("client.email", "Client Email"),
        _text("project.name", "Project Name"),
        _text("projectType", "Project Type"),
        _text("selectedTier", "Tier"),
        _money("finalPrice", "Final Price"),
        _text("status", "Status"),
        _text("maintenanceOption", "Maintenance Option"),
        _date("createdAt", "Created Date"),
    ),
)

DOCUMENT_REQUESTS_EXPORT = ExportPreset(
    filename="document_requests",
    columns=(
        _text("id", "ID"),
        _text("title", "Title"),
        _text("client_name", "Client"),
        _text("type", "Type"),
        _text("status", "Status"),
        _date("due_date", "Due Date"),
        _date("created_at", "Created Date"),
    ),
)

KNOWLEDGE_BASE_EXPORT = ExportPreset(
    filename="knowledge_base",
    columns=(
        _text("id", "ID"),
        _text("title", "Title"),
        _text("category_name", "Category"),
        _text("slug", "Slug"),
        _text("is_featured", "Featured"),
        _text("is_published", "Published"),
        _date("updated_at", "Updated Date"),
    ),
)

TIME_ENTRIES_EXPORT = ExportPreset(
    filename="time_entries",
    columns=(
        _date("date", "Date"),
        _text("description", "Description"),
        _text("task_title", "Task"),
        ExportColumn(path="duration_minutes", label="Duration (hours)", formatter=format_hours),
        _text("is_billable", "Billable"),
        _text("hourly_rate", "Hourly Rate"),
        ExportColumn(path="amount", label="Amount", formatter=format_billable_amount),
    ),
)


LEADS = EntityEndpoint(cache_key="leads", path="/api/admin/leads", collection_field="leads", dependants=("projects",))
CONTACTS = EntityEndpoint(cache_key="contacts", path="/api/admin/contact-submissions", collection_field="submissions")
PROJECTS = EntityEndpoint(
    cache_key="projects",
    path="/api/projects",
    collection_field="projects",
    status_path="/api/projects/{id}",
    dependants=("leads",),
)
CLIENTS = EntityEndpoint(cache_key="clients", path="/api/admin/clients", collection_field="clients")

ENDPOINTS: dict[str, EntityEndpoint] = {
    endpoint.cache_key: endpoint for endpoint in (LEADS, CONTACTS, PROJECTS, CLIENTS)
}
