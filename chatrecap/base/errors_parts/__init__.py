"""Errors parts package public surface.

Re-exports individual error taxonomy components for optional direct imports.
Prefer importing from `chatrecap.base.errors` for the stable surface.
"""

from .error_code import ErrorCode, RETRYABLE_CODES
from .session_errors import (
    ChatRecapError,
    InvalidInputError,
    UnknownModelError,
    PromptTooLargeError,
    AccountingError,
    ResponseParseError,
)
from .backend_error import BackendError
from .classification import classify_exception, to_backend_error

__all__ = [
    "ErrorCode",
    "RETRYABLE_CODES",
    "ChatRecapError",
    "InvalidInputError",
    "UnknownModelError",
    "PromptTooLargeError",
    "AccountingError",
    "ResponseParseError",
    "BackendError",
    "classify_exception",
    "to_backend_error",
]
