"""
Error classification helpers mapping backend exceptions to `ErrorCode` values.

Implements HTTP status extraction, status-to-code mapping, backend error type
extraction and message-based heuristics as a fallback, so SDK exceptions of
any shape can be turned into a :class:`BackendError`.
"""
from __future__ import annotations

import asyncio
from typing import Any, Dict, Mapping, Optional

from .backend_error import BackendError
from .error_code import RETRYABLE_CODES, ErrorCode


def _extract_status(exc: BaseException) -> Optional[int]:
    """Attempt to extract an HTTP status code from a backend exception.

    Supported attribute shapes (checked in order):
    - ``exc.status_code``
    - ``exc.status``
    - ``exc.response.status_code``
    Returns ``None`` if no valid status can be found.
    """
    for attr in ("status_code", "status"):
        val = getattr(exc, attr, None)
        if isinstance(val, int) and 100 <= val < 600:
            return val
    resp = getattr(exc, "response", None)
    if resp is not None:
        sc = getattr(resp, "status_code", None)
        if isinstance(sc, int) and 100 <= sc < 600:
            return sc
    return None


def _extract_error_type(exc: BaseException) -> Optional[str]:
    """Return the backend's machine-readable error type, if the exception has one.

    Looks at ``exc.type`` first (OpenAI SDK errors) and then at an
    ``{"error": {"type": ...}}`` or ``{"type": ...}`` body.
    """
    val = getattr(exc, "type", None)
    if isinstance(val, str) and val:
        return val
    body = getattr(exc, "body", None)
    if isinstance(body, Mapping):
        inner = body.get("error", body)
        if isinstance(inner, Mapping) and isinstance(inner.get("type"), str):
            return inner["type"]
    return None


_HTTP_STATUS_MAP: Dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION,
    401: ErrorCode.AUTH,
    403: ErrorCode.AUTH,
    404: ErrorCode.NOT_FOUND,
    408: ErrorCode.TIMEOUT,
    409: ErrorCode.CONFLICT,
    422: ErrorCode.VALIDATION,
    429: ErrorCode.RATE_LIMIT,
    500: ErrorCode.SERVER_ERROR,
    502: ErrorCode.TRANSIENT,
    503: ErrorCode.UNAVAILABLE,
    504: ErrorCode.TIMEOUT,
}


def _heuristic_from_message(msg: str) -> Optional[ErrorCode]:
    """Substring heuristic mapping for exceptions without an HTTP status."""
    if "rate" in msg and "limit" in msg:
        return ErrorCode.RATE_LIMIT
    pattern_groups = (
        (ErrorCode.TIMEOUT, ("timeout", "timed out")),
        (ErrorCode.AUTH, ("auth", "api key", "unauthorized", "forbidden")),
        (ErrorCode.CONTENT_FILTER, ("content filter", "content_filter", "content management policy")),
        (ErrorCode.UNSUPPORTED, ("unsupported", "not supported")),
        (ErrorCode.NOT_FOUND, ("not found", "does not exist")),
        (ErrorCode.CONFLICT, ("conflict", "already exists")),
        (ErrorCode.UNAVAILABLE, ("unavailable", "temporarily down")),
        (ErrorCode.TRANSIENT, ("connection error", "connection reset")),
        (ErrorCode.VALIDATION, ("validation", "invalid", "malformed")),
        (ErrorCode.SERVER_ERROR, ("server error", "internal error")),
    )
    for code, patterns in pattern_groups:
        if any(p in msg for p in patterns):
            return code
    return None


def classify_exception(exc: BaseException) -> ErrorCode:
    """Classify an exception into a normalized :class:`ErrorCode`.

    Precedence:
        1. BackendError passthrough.
        2. Timeout exceptions (sync/async).
        3. HTTP status mapping.
        4. Substring heuristics on the message.
        5. ``UNKNOWN`` fallback.
    """
    if isinstance(exc, BackendError):
        return exc.code
    if isinstance(exc, (TimeoutError, asyncio.TimeoutError)):
        return ErrorCode.TIMEOUT
    status = _extract_status(exc)
    if status is not None and status in _HTTP_STATUS_MAP:
        return _HTTP_STATUS_MAP[status]
    code = _heuristic_from_message(str(exc).lower())
    return code if code is not None else ErrorCode.UNKNOWN


def to_backend_error(exc: BaseException, *, model: Optional[str] = None) -> BackendError:
    """Wrap an arbitrary backend exception into a :class:`BackendError`.

    ``BackendError`` instances are returned unchanged (with ``model`` filled in
    when missing).
    """
    if isinstance(exc, BackendError):
        if exc.model is None:
            exc.model = model
        return exc
    code = classify_exception(exc)
    message: Any = getattr(exc, "message", None) or str(exc) or type(exc).__name__
    return BackendError(
        code=code,
        message=str(message),
        status=_extract_status(exc),
        error_type=_extract_error_type(exc),
        model=model,
        retryable=code in RETRYABLE_CODES,
        raw=exc,
    )


__all__ = [
    "classify_exception",
    "to_backend_error",
    "_extract_status",
    "_HTTP_STATUS_MAP",
]
