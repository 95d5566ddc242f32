from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Protocol

from .logger import get_logger, log_event
from .models import FilterState

logger = get_logger("portal_tables.preferences")


class PreferenceStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryPreferenceStore:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def snapshot(self) -> dict[str, str]:
        return dict(self._values)


class JsonFilePreferenceStore:
    """Key/value preferences kept in one JSON document on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def get(self, key: str) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        payload = self._load()
        payload[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            return payload if isinstance(payload, dict) else {}
        except (ValueError, OSError):
            return {}


def load_filter_state(store: PreferenceStore, storage_key: str | None) -> FilterState:
    if not storage_key:
        return FilterState()
    try:
        raw = store.get(storage_key)
        if not raw:
            return FilterState()
        return FilterState.from_persisted(json.loads(raw))
    except (ValueError, OSError) as exc:
        log_event(logger, "preferences", "load_filter_state", "error", level=logging.WARNING, storage_key=storage_key, error=str(exc))
        return FilterState()


def save_filter_state(store: PreferenceStore, storage_key: str | None, state: FilterState) -> None:
    if not storage_key:
        return
    try:
        store.set(storage_key, json.dumps(state.to_persisted()))
    except (ValueError, OSError) as exc:
        log_event(logger, "preferences", "save_filter_state", "error", level=logging.WARNING, storage_key=storage_key, error=str(exc))


def load_page_size(store: PreferenceStore, storage_key: str | None, default: int) -> int:
    if not storage_key:
        return default
    try:
        raw = store.get(storage_key)
        if not raw:
            return default
        payload = json.loads(raw)
    except (ValueError, OSError) as exc:
        log_event(logger, "preferences", "load_page_size", "error", level=logging.WARNING, storage_key=storage_key, error=str(exc))
        return default
    page_size = payload.get("pageSize") if isinstance(payload, dict) else None
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size < 1:
        return default
    return page_size


def save_page_size(store: PreferenceStore, storage_key: str | None, page_size: int) -> None:
    if not storage_key:
        return
    try:
        store.set(storage_key, json.dumps({"pageSize": page_size}))
    except (ValueError, OSError) as exc:
        log_event(logger, "preferences", "save_page_size", "error", level=logging.WARNING, storage_key=storage_key, error=str(exc))
