"""
Normalized backend error codes (taxonomy).

Defines the `ErrorCode` enumeration attached to :class:`BackendError`. Values
are lowercase snake_case and are part of the structured logging contract.
"""
from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """Enumerated normalized error codes representing backend failure categories."""

    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    TRANSIENT = "transient"
    CONTENT_FILTER = "content_filter"
    UNSUPPORTED = "unsupported"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    SERVER_ERROR = "server_error"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"


#: Codes for which an immediate retry by the caller can reasonably succeed.
#: The library itself never retries; this only sets ``BackendError.retryable``.
RETRYABLE_CODES = (ErrorCode.TRANSIENT, ErrorCode.RATE_LIMIT, ErrorCode.TIMEOUT)


__all__ = ["ErrorCode", "RETRYABLE_CODES"]
