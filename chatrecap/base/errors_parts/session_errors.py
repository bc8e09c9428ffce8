"""
Conversation-core exception types.

Every failure the session core raises derives from :class:`ChatRecapError`, so
callers may catch the family as a whole. Some classes also derive from the
builtin exception that best describes them (``ValueError`` for bad input,
``LookupError`` for missing models) to keep ordinary ``except`` clauses
working.
"""
from __future__ import annotations

from typing import Any, Optional


class ChatRecapError(Exception):
    """Base class for all errors raised by the conversation core."""


class InvalidInputError(ChatRecapError, ValueError):
    """Input to ``chat``/``query``/``count`` was not a non-empty string.

    Caller-fixable; never retried.
    """


class UnknownModelError(ChatRecapError, LookupError):
    """No usable model could be resolved from the catalog."""


class PromptTooLargeError(ChatRecapError):
    """The rendered prompt leaves no room for output within the model ceiling.

    Attributes:
        prompt_tokens: Token count of the rendered prompt.
        token_ceiling: Ceiling of the model the request was built for.
        model: Model identifier.
    """

    def __init__(self, prompt_tokens: int, token_ceiling: int, model: str) -> None:
        self.prompt_tokens = prompt_tokens
        self.token_ceiling = token_ceiling
        self.model = model
        super().__init__(
            f"The query is too big for the model {model}: {prompt_tokens} vs {token_ceiling} tokens"
        )


class AccountingError(ChatRecapError, RuntimeError):
    """Token bookkeeping produced an implausible total (history corruption)."""


class ResponseParseError(ChatRecapError):
    """The backend response did not have the expected shape.

    Attributes:
        raw: The unparsed response, kept for diagnostics.
    """

    def __init__(self, message: str, raw: Optional[Any] = None) -> None:
        self.raw = raw
        super().__init__(message)


__all__ = [
    "ChatRecapError",
    "InvalidInputError",
    "UnknownModelError",
    "PromptTooLargeError",
    "AccountingError",
    "ResponseParseError",
]
