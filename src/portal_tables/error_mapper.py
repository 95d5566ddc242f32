from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from .exceptions import (
    ApiError,
    AuthError,
    BulkActionError,
    ConflictError,
    NotFoundError,
    PermissionError,
    RateLimitError,
    ServerError,
    TransportError,
    ValidationError,
)


@dataclass(frozen=True)
class NormalizedError:
    code: str
    message: str
    trace_id: str | None
    type: str


def map_error(status_code: int, payload: Mapping[str, object] | None, trace_id: str | None) -> ApiError:
    payload = payload or {}
    code = str(payload.get("code") or "HTTP_ERROR")
    message = str(payload.get("message") or payload.get("error") or "Request failed")
    details = payload.get("details")
    payload_trace_id = payload.get("trace_id")
    resolved_trace_id = str(payload_trace_id) if payload_trace_id is not None else trace_id
    mapped: type[ApiError]
    if status_code == 401:
        mapped = AuthError
    elif status_code == 403:
        mapped = PermissionError
    elif status_code == 404:
        mapped = NotFoundError
    elif status_code in {400, 422}:
        mapped = ValidationError
    elif status_code == 409:
        mapped = ConflictError
    elif status_code == 429:
        mapped = RateLimitError
    elif status_code >= 500:
        mapped = ServerError
    else:
        mapped = ApiError
    return mapped(
        code=code,
        message=message,
        details=details,
        trace_id=resolved_trace_id,
        status_code=status_code,
        raw_payload=dict(payload),
    )


def _error_type_from_status(status_code: int) -> str:
    if status_code in {401, 403}:
        return "auth"
    if status_code in {400, 404, 422}:
        return "validation"
    if status_code == 409:
        return "conflict"
    if status_code <= 0:
        return "network"
    return "internal"


def normalize_error(error: Exception) -> NormalizedError:
    if isinstance(error, TransportError):
        return NormalizedError(code=error.code, message=error.message, trace_id=error.trace_id, type="network")
    if isinstance(error, ApiError):
        return NormalizedError(
            code=error.code,
            message=error.message,
            trace_id=error.trace_id,
            type=_error_type_from_status(int(error.status_code or 0)),
        )
    if isinstance(error, BulkActionError):
        return NormalizedError(code=type(error).__name__, message=error.message, trace_id=None, type="action")
    return NormalizedError(code="INTERNAL_ERROR", message=str(error), trace_id=None, type="internal")
