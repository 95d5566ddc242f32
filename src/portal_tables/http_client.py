from __future__ import annotations

import asyncio
import json
import logging
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from .config import EngineConfig
from .error_mapper import map_error
from .exceptions import TransportError
from .logger import get_logger, log_event

TRACE_HEADER = "X-Trace-ID"
TRACE_HEADER_ALIASES = (TRACE_HEADER, "X-Trace-Id", "x-trace-id")
RETRYABLE_METHODS = {"GET", "HEAD"}

Sleeper = Callable[[float], Awaitable[None]]

logger = get_logger("portal_tables.http_client")


class AsyncHttpClient:
    """JSON client for the admin API; only idempotent reads are retried."""

    def __init__(
        self,
        config: EngineConfig,
        client: httpx.AsyncClient | None = None,
        sleep: Sleeper | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.config = config
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=config.api_base_url, timeout=config.timeout_seconds)
        self._sleep = sleep or asyncio.sleep
        self._headers = {"Accept": "application/json", **(headers or {})}

    async def __aenter__(self) -> "AsyncHttpClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json_body: Any = None) -> Any:
        return await self.request("POST", path, json_body=json_body)

    async def put(self, path: str, json_body: Any = None) -> Any:
        return await self.request("PUT", path, json_body=json_body)

    async def delete(self, path: str, json_body: Any = None) -> Any:
        return await self.request("DELETE", path, json_body=json_body)

    async def request(
        self,
        method: str,
        path: str,
        *,
        json_body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        normalized_method = method.upper()
        trace_id = str(uuid.uuid4())
        headers = {**self._headers, TRACE_HEADER: trace_id}
        attempts = self.config.retries + 1 if normalized_method in RETRYABLE_METHODS else 1

        response: httpx.Response | None = None
        for attempt in range(attempts):
            try:
                response = await self._client.request(
                    normalized_method,
                    _build_path(path),
                    headers=headers,
                    json=json_body,
                    params=params,
                )
            except httpx.HTTPError as exc:
                if attempt >= attempts - 1:
                    log_event(
                        logger,
                        "http_client",
                        normalized_method,
                        "transport_error",
                        level=logging.ERROR,
                        path=path,
                        trace_id=trace_id,
                        error=str(exc),
                    )
                    raise TransportError(
                        code="TRANSPORT_ERROR",
                        message=str(exc) or type(exc).__name__,
                        details={"type": type(exc).__name__},
                        trace_id=trace_id,
                        status_code=0,
                        raw_payload=None,
                    ) from exc
            else:
                if response.status_code < 500 or attempt >= attempts - 1:
                    break
            await self._sleep(self.config.retry_backoff_seconds * (2**attempt))

        if response is None:
            raise RuntimeError(f"HTTP request failed without response: {normalized_method} {path}")
        trace_id = _trace_from_headers(response.headers) or trace_id
        if response.is_success:
            log_event(
                logger,
                "http_client",
                normalized_method,
                "success",
                level=logging.DEBUG,
                path=path,
                status_code=response.status_code,
            )
            if not response.content:
                return None
            return response.json()

        try:
            payload = response.json()
        except json.JSONDecodeError:
            payload = {"message": response.text}
        if not isinstance(payload, dict):
            payload = {"message": str(payload)}
        log_event(
            logger,
            "http_client",
            normalized_method,
            "error",
            level=logging.WARNING,
            path=path,
            status_code=response.status_code,
            trace_id=trace_id,
        )
        raise map_error(response.status_code, payload, trace_id)


def _build_path(path: str) -> str:
    return "/" + path.lstrip("/")


def _trace_from_headers(headers: httpx.Headers) -> str | None:
    for key in TRACE_HEADER_ALIASES:
        trace_id = headers.get(key)
        if trace_id:
            return trace_id
    return None
