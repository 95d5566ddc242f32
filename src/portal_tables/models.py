from __future__ import annotations

from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .exceptions import TableConfigError
from .fields import normalize_status

DEFAULT_PAGE_SIZE_OPTIONS = (10, 25, 50, 100)


class ColumnType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    DATE = "date"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


class StatusOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str
    label: str


class SortableColumn(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str = Field(min_length=1)
    label: str
    type: ColumnType = ColumnType.STRING


class TableConfig(BaseModel):
    """Per-instance table configuration, validated once at construction."""

    model_config = ConfigDict(frozen=True)

    instance_id: str = Field(min_length=1)
    search_fields: tuple[str, ...] = ()
    status_field: str | None = None
    status_options: tuple[StatusOption, ...] = ()
    terminal_statuses: tuple[str, ...] = ()
    date_field: str | None = None
    sortable_columns: tuple[SortableColumn, ...] = ()
    storage_key: str | None = None
    page_size_options: tuple[int, ...] = DEFAULT_PAGE_SIZE_OPTIONS
    default_page_size: int = 25
    id_field: str = "id"

    def __init__(self, **data: Any) -> None:
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise TableConfigError(f"Invalid table config {data.get('instance_id')!r}: {exc}") from exc

    @field_validator("instance_id")
    @classmethod
    def _strip_instance_id(cls, value: str) -> str:
        clean = value.strip()
        if not clean:
            raise ValueError("instance_id must not be blank")
        return clean

    @field_validator("status_field", "date_field", "storage_key")
    @classmethod
    def _blank_to_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        clean = value.strip()
        return clean or None

    @model_validator(mode="after")
    def _check_consistency(self) -> "TableConfig":
        keys = [column.key for column in self.sortable_columns]
        duplicated = sorted({key for key in keys if keys.count(key) > 1})
        if duplicated:
            raise ValueError(f"duplicated sortable column keys: {duplicated}")
        if self.default_page_size < 1:
            raise ValueError("default_page_size must be >= 1")
        if any(size < 1 for size in self.page_size_options):
            raise ValueError("page_size_options must be positive")
        return self

    @property
    def pagination_storage_key(self) -> str | None:
        return f"{self.storage_key}_pagination" if self.storage_key else None

    def column(self, key: str | None) -> SortableColumn | None:
        if not key:
            return None
        return next((column for column in self.sortable_columns if column.key == key), None)

    def status_rank(self, value: Any) -> int:
        normalized = normalize_status(value)
        for index, option in enumerate(self.status_options):
            if normalize_status(option.value) == normalized:
                return index
        return len(self.status_options)

    def is_terminal(self, value: Any) -> bool:
        normalized = normalize_status(value)
        if normalized is None:
            return False
        return normalized in {normalize_status(status) for status in self.terminal_statuses}


class FilterState(BaseModel):
    """User-chosen filter and sort settings of one table instance."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    search_term: str = ""
    status_filters: tuple[str, ...] = ()
    date_start: str | None = None
    date_end: str | None = None
    sort_column: str | None = None
    sort_direction: SortDirection = SortDirection.DESC

    @field_validator("date_start", "date_end", "sort_column", mode="before")
    @classmethod
    def _empty_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_persisted(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_persisted(cls, payload: Mapping[str, Any] | None) -> "FilterState":
        if not isinstance(payload, Mapping):
            return cls()
        aliases = {field.alias or name for name, field in cls.model_fields.items()}
        known = {key: value for key, value in payload.items() if key in aliases or key in cls.model_fields}
        try:
            return cls.model_validate(known)
        except ValidationError as exc:
            rejected = {str(error["loc"][0]) for error in exc.errors() if error.get("loc")}
            kept = {key: value for key, value in known.items() if key not in rejected}
        try:
            return cls.model_validate(kept)
        except ValidationError:
            return cls()
