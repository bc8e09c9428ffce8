"""
Structured backend error exception type.

Wraps text-generation backend failures with a normalized `ErrorCode`, the
HTTP-like status and the backend's machine-readable error type so callers can
decide how to react without inspecting SDK exception classes.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .error_code import ErrorCode
from .session_errors import ChatRecapError


@dataclass(eq=False)
class BackendError(ChatRecapError):
    """Represents a rejected or failed backend request.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message from the backend.
        status: HTTP status when the backend answered, otherwise ``None``.
        error_type: Backend error type (e.g. ``"invalid_request_error"``).
        model: Model the request targeted, when known.
        retryable: Hint for callers that retry on their own (not
            authoritative). The session only logs it.
        raw: Original exception for diagnostics.
    """

    code: ErrorCode
    message: str
    status: Optional[int] = None
    error_type: Optional[str] = None
    model: Optional[str] = None
    retryable: bool = False
    raw: Optional[Any] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        status = self.status if self.status is not None else "-"
        return f"backend call returned {status} {self.error_type or self.code.value}: {self.message}"


__all__ = ["BackendError"]
