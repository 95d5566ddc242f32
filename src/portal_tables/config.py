from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_API_BASE_URL = "http://localhost:4000"
DEFAULT_PREFERENCES_PATH = Path.home() / ".portal_tables_preferences.json"


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class EngineConfig:
    api_base_url: str = DEFAULT_API_BASE_URL
    timeout_seconds: float = 10.0
    retries: int = 3
    retry_backoff_seconds: float = 0.3
    cache_ttl_seconds: float = 30.0
    search_debounce_ms: int = 200
    default_page_size: int = 25
    preferences_path: Path = DEFAULT_PREFERENCES_PATH
    export_dir: Path = Path("out") / "exports"


def _read_float(name: str, default: str) -> float:
    raw = os.getenv(name, default)
    try:
        return float(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name}: expected a number, got {raw!r}") from exc


def _read_int(name: str, default: str) -> int:
    raw = os.getenv(name, default)
    try:
        return int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid {name}: expected an integer, got {raw!r}") from exc


def _read_path(name: str, default: Path) -> Path:
    configured = (os.getenv(name) or "").strip()
    return Path(configured).expanduser() if configured else default


def _validate(condition: bool, message: str) -> None:
    if not condition:
        raise ConfigError(message)


def load_config(env_file: str | None = None) -> EngineConfig:
    """Load engine config from PORTAL_TABLES_* variables with optional .env override."""
    load_dotenv(env_file)

    api_base_url = (os.getenv("PORTAL_TABLES_API_BASE_URL") or "").strip() or DEFAULT_API_BASE_URL

    timeout_seconds = _read_float("PORTAL_TABLES_TIMEOUT_SECONDS", "10")
    _validate(timeout_seconds > 0, f"Invalid PORTAL_TABLES_TIMEOUT_SECONDS: expected > 0, got {timeout_seconds}")

    retries = _read_int("PORTAL_TABLES_RETRIES", "3")
    _validate(retries >= 0, f"Invalid PORTAL_TABLES_RETRIES: expected >= 0, got {retries}")

    retry_backoff_seconds = _read_float("PORTAL_TABLES_RETRY_BACKOFF_SECONDS", "0.3")
    _validate(
        retry_backoff_seconds >= 0,
        f"Invalid PORTAL_TABLES_RETRY_BACKOFF_SECONDS: expected >= 0, got {retry_backoff_seconds}",
    )

    cache_ttl_seconds = _read_float("PORTAL_TABLES_CACHE_TTL_SECONDS", "30")
    _validate(cache_ttl_seconds > 0, f"Invalid PORTAL_TABLES_CACHE_TTL_SECONDS: expected > 0, got {cache_ttl_seconds}")

    search_debounce_ms = _read_int("PORTAL_TABLES_SEARCH_DEBOUNCE_MS", "200")
    _validate(
        search_debounce_ms >= 0,
        f"Invalid PORTAL_TABLES_SEARCH_DEBOUNCE_MS: expected >= 0, got {search_debounce_ms}",
    )

    default_page_size = _read_int("PORTAL_TABLES_DEFAULT_PAGE_SIZE", "25")
    _validate(
        default_page_size >= 1,
        f"Invalid PORTAL_TABLES_DEFAULT_PAGE_SIZE: expected >= 1, got {default_page_size}",
    )

    return EngineConfig(
        api_base_url=api_base_url.rstrip("/"),
        timeout_seconds=timeout_seconds,
        retries=retries,
        retry_backoff_seconds=retry_backoff_seconds,
        cache_ttl_seconds=cache_ttl_seconds,
        search_debounce_ms=search_debounce_ms,
        default_page_size=default_page_size,
        preferences_path=_read_path("PORTAL_TABLES_PREFERENCES_PATH", DEFAULT_PREFERENCES_PATH),
        export_dir=_read_path("PORTAL_TABLES_EXPORT_DIR", Path("out") / "exports"),
    )
