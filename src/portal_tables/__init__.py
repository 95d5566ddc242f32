from .cache import CacheEntry, ReadThroughCache
from .config import ConfigError, EngineConfig, load_config
from .data_service import AdminDataService
from .error_mapper import NormalizedError, map_error, normalize_error
from .exceptions import (
    ActionInFlightError,
    ApiError,
    BulkActionError,
    EmptySelectionError,
    TableConfigError,
    TransportError,
    UnknownInstanceError,
)
from .export import ExportColumn, export_filename, to_delimited_text, to_json_payload, write_export
from .filtering import SearchDebouncer, apply_filters
from .http_client import AsyncHttpClient
from .models import ColumnType, FilterState, SortableColumn, SortDirection, StatusOption, TableConfig
from .pagination import PaginationState, apply_pagination, visible_page_numbers
from .preferences import JsonFilePreferenceStore, MemoryPreferenceStore, PreferenceStore
from .results import Err, Ok
from .selection import BulkAction, BulkActionOutcome, BulkActionRunner, SelectionRegistry, SelectionStatus
from .sorting import apply_sort, next_sort_state
from .table import TableEngine

__all__ = [
    "ActionInFlightError",
    "AdminDataService",
    "ApiError",
    "AsyncHttpClient",
    "BulkAction",
    "BulkActionError",
    "BulkActionOutcome",
    "BulkActionRunner",
    "CacheEntry",
    "ColumnType",
    "ConfigError",
    "EmptySelectionError",
    "EngineConfig",
    "Err",
    "ExportColumn",
    "FilterState",
    "JsonFilePreferenceStore",
    "MemoryPreferenceStore",
    "NormalizedError",
    "Ok",
    "PaginationState",
    "PreferenceStore",
    "ReadThroughCache",
    "SearchDebouncer",
    "SelectionRegistry",
    "SelectionStatus",
    "SortDirection",
    "SortableColumn",
    "StatusOption",
    "TableConfig",
    "TableConfigError",
    "TableEngine",
    "TransportError",
    "UnknownInstanceError",
    "apply_filters",
    "apply_pagination",
    "apply_sort",
    "export_filename",
    "load_config",
    "map_error",
    "next_sort_state",
    "normalize_error",
    "to_delimited_text",
    "to_json_payload",
    "visible_page_numbers",
    "write_export",
]
