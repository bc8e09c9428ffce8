"""Unified error taxonomy public surface.

This module re-exports the one-class-per-file implementations under
``chatrecap.base.errors_parts`` to maintain a stable import path.
"""

from .errors_parts.error_code import ErrorCode, RETRYABLE_CODES
from .errors_parts.session_errors import (
    ChatRecapError,
    InvalidInputError,
    UnknownModelError,
    PromptTooLargeError,
    AccountingError,
    ResponseParseError,
)
from .errors_parts.backend_error import BackendError
from .errors_parts.classification import classify_exception, to_backend_error

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
