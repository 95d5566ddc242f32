from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

MASKED_VALUE = "***"
SENSITIVE_KEYS = {"token", "access_token", "refresh_token", "secret", "password", "authorization"}


def get_logger(name: str) -> logging.Logger:
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger
    logger.setLevel(logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    return logger


def log_event(
    logger: logging.Logger,
    module: str,
    action: str,
    outcome: str,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    if not logger.isEnabledFor(level):
        return
    payload: dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "level": logging.getLevelName(level),
        "module": module,
        "action": action,
        "outcome": outcome,
    }
    for key, value in fields.items():
        payload[key] = MASKED_VALUE if key.lower() in SENSITIVE_KEYS else value
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))
