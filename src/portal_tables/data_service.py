from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from .cache import ReadThroughCache
from .exceptions import ApiError
from .http_client import AsyncHttpClient
from .logger import get_logger, log_event
from .models import StatusOption
from .presets import ENDPOINTS, LEADS, PROJECTS, EntityEndpoint
from .selection import ActionVariant, BulkAction, RowId

logger = get_logger("portal_tables.data_service")

ARCHIVE_CONFIRM = "Archive {count} selected items? They can be restored later."
DELETE_CONFIRM = "Permanently delete {count} selected items? This cannot be undone."

Entity = str | EntityEndpoint


class AdminDataService:
    """Cached reads and cache-aware mutations for the admin entity lists."""

    def __init__(
        self,
        http: AsyncHttpClient,
        cache: ReadThroughCache,
        endpoints: Mapping[str, EntityEndpoint] | None = None,
    ) -> None:
        self.http = http
        self.cache = cache
        self.endpoints = dict(endpoints or ENDPOINTS)
        self._records: dict[str, list[dict[str, Any]]] = {}

    def endpoint(self, entity: Entity) -> EntityEndpoint:
        if isinstance(entity, EntityEndpoint):
            return entity
        try:
            return self.endpoints[entity]
        except KeyError:
            raise KeyError(f"Unknown entity: {entity}") from None

    async def fetch_collection(self, entity: Entity) -> Any:
        endpoint = self.endpoint(entity)

        async def _fetch() -> Any:
            try:
                return await self.http.get(endpoint.path)
            except ApiError as exc:
                log_event(
                    logger,
                    "data_service",
                    f"fetch_{endpoint.cache_key}",
                    "error",
                    level=logging.ERROR,
                    code=exc.code,
                    trace_id=exc.trace_id,
                )
                raise

        payload = await self.cache.get_or_fetch(endpoint.cache_key, _fetch)
        self._records[endpoint.cache_key] = extract_records(payload, endpoint.collection_field)
        return payload

    async def fetch_records(self, entity: Entity) -> list[dict[str, Any]]:
        endpoint = self.endpoint(entity)
        await self.fetch_collection(endpoint)
        return self.records(endpoint)

    async def fetch_leads(self) -> Any:
        return await self.fetch_collection("leads")

    async def fetch_contacts(self) -> Any:
        return await self.fetch_collection("contacts")

    async def fetch_projects(self) -> Any:
        return await self.fetch_collection("projects")

    async def fetch_clients(self) -> Any:
        return await self.fetch_collection("clients")

    def records(self, entity: Entity) -> list[dict[str, Any]]:
        """Records of the last successful fetch, for detail views."""
        return list(self._records.get(self.endpoint(entity).cache_key, []))

    def get_by_id(self, entity: Entity, record_id: RowId, id_field: str = "id") -> dict[str, Any] | None:
        return next((record for record in self.records(entity) if record.get(id_field) == record_id), None)

    async def update_status(self, entity: Entity, record_id: RowId, status: str) -> Any:
        endpoint = self.endpoint(entity)
        result = await self.http.request(
            endpoint.status_method,
            endpoint.status_url(record_id),
            json_body={"status": status},
        )
        self._invalidate_with_dependants(endpoint)
        log_event(logger, "data_service", "update_status", "success", entity=endpoint.cache_key, id=record_id, status=status)
        return result

    async def invite_lead(self, lead_id: RowId) -> Any:
        payload = await self.http.post(f"{LEADS.path}/{lead_id}/invite")
        if isinstance(payload, Mapping) and payload.get("success") is False:
            raise ApiError(
                code="INVITE_FAILED",
                message=str(payload.get("error") or "Failed to send invitation"),
                details=None,
                trace_id=None,
                status_code=200,
                raw_payload=dict(payload),
            )
        self.invalidate_cache(LEADS.cache_key)
        self.invalidate_cache(PROJECTS.cache_key)
        return payload

    def bulk_archive(self, entity: Entity) -> BulkAction:
        endpoint = self.endpoint(entity)

        async def _archive(ids: list[RowId], _value: str | None) -> Any:
            return await self.http.post(f"{endpoint.bulk_path}/archive", json_body={"ids": ids})

        return BulkAction(
            id="archive",
            label="Archive",
            handler=_archive,
            confirm_message=ARCHIVE_CONFIRM,
            variant=ActionVariant.WARNING,
            on_success=lambda: self._invalidate_with_dependants(endpoint),
        )

    def bulk_delete(self, entity: Entity) -> BulkAction:
        endpoint = self.endpoint(entity)

        async def _delete(ids: list[RowId], _value: str | None) -> Any:
            return await self.http.delete(endpoint.bulk_path, json_body={"ids": ids})

        return BulkAction(
            id="delete",
            label="Delete",
            handler=_delete,
            confirm_message=DELETE_CONFIRM,
            variant=ActionVariant.DANGER,
            on_success=lambda: self._invalidate_with_dependants(endpoint),
        )

    def bulk_update_status(self, entity: Entity, status: str, label: str | None = None) -> BulkAction:
        endpoint = self.endpoint(entity)

        async def _update(ids: list[RowId], _value: str | None) -> Any:
            return await self.http.post(f"{endpoint.bulk_path}/status", json_body={"ids": ids, "status": status})

        return BulkAction(
            id=f"status-{status}",
            label=label or status.replace("-", " ").replace("_", " ").title(),
            handler=_update,
            on_success=lambda: self._invalidate_with_dependants(endpoint),
        )

    def bulk_status_menu(self, entity: Entity, options: Sequence[StatusOption], label: str = "Change status") -> BulkAction:
        """Status change whose target value is picked from a dropdown at run time."""
        endpoint = self.endpoint(entity)
        allowed = {option.value for option in options}

        async def _update(ids: list[RowId], value: str | None) -> Any:
            if value not in allowed:
                raise ValueError(f"Unsupported status for {endpoint.cache_key}: {value!r}")
            return await self.http.post(f"{endpoint.bulk_path}/status", json_body={"ids": ids, "status": value})

        return BulkAction(
            id="status",
            label=label,
            handler=_update,
            dropdown_options=tuple(options),
            on_success=lambda: self._invalidate_with_dependants(endpoint),
        )

    def invalidate_cache(self, key: str | None = None) -> None:
        if key:
            self.cache.invalidate(key)
        else:
            self.cache.invalidate_all()

    def refresh_all(self) -> None:
        self.cache.invalidate_all()

    def _invalidate_with_dependants(self, endpoint: EntityEndpoint) -> None:
        for key in _unique((endpoint.cache_key, *endpoint.dependants)):
            self.cache.invalidate(key)


def extract_records(payload: Any, collection_field: str | None) -> list[dict[str, Any]]:
    if collection_field and isinstance(payload, Mapping):
        payload = payload.get(collection_field) or []
    if not isinstance(payload, list):
        return []
    return [item for item in payload if isinstance(item, dict)]


def _unique(keys: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(keys))
