from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from .logger import get_logger, log_event

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 30.0

logger = get_logger("portal_tables.cache")


@dataclass(frozen=True)
class CacheEntry:
    key: str
    data: Any
    fetched_at: float


class ReadThroughCache:
    """Small in-memory TTL cache in front of collection fetches."""

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, now: Callable[[], float] | None = None) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be > 0")
        self.ttl_seconds = ttl_seconds
        self._now = now or time.monotonic
        self._entries: dict[str, CacheEntry] = {}

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            log_event(logger, "cache", "get", "miss", level=logging.DEBUG, key=key)
            return None
        if self._now() - entry.fetched_at >= self.ttl_seconds:
            self._entries.pop(key, None)
            log_event(logger, "cache", "get", "stale", level=logging.DEBUG, key=key)
            return None
        log_event(logger, "cache", "get", "hit", level=logging.DEBUG, key=key)
        return entry.data

    def set(self, key: str, data: Any) -> None:
        self._entries[key] = CacheEntry(key=key, data=data, fetched_at=self._now())

    async def get_or_fetch(self, key: str, fetch: Callable[[], Awaitable[T]]) -> T:
        cached = self.get(key)
        if cached is not None:
            return cached
        data = await fetch()
        self.set(key, data)
        return data

    def invalidate(self, key: str) -> None:
        if self._entries.pop(key, None) is not None:
            log_event(logger, "cache", "invalidate", "removed", level=logging.DEBUG, key=key)

    def invalidate_prefix(self, prefix: str) -> None:
        stale_keys = [key for key in self._entries if key.startswith(prefix)]
        for key in stale_keys:
            self._entries.pop(key, None)

    def invalidate_all(self) -> None:
        self._entries.clear()
        log_event(logger, "cache", "invalidate_all", "cleared", level=logging.DEBUG)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)
