"""Best-effort token accounting.

This module provides the default tiktoken-backed oracle and the
:class:`TokenAccountant` every other component uses to count tokens.

Contract
--------
``TokenAccountant.count`` never fails because of the oracle. When the oracle
raises, cannot load its encoding, or returns a value that is not a positive
integer within the largest known model ceiling, the anomaly is logged as a
``tokens.fallback`` event and the count degrades to ``ceil(len(text) / 4)``.
Only a non-string argument is an error (:class:`InvalidInputError`).
"""

from __future__ import annotations

import logging
import math
from typing import Any, Optional

import tiktoken

from ..constants import CHARS_PER_TOKEN
from ..errors import InvalidInputError
from ..interfaces import TokenOracle
from ..logging import get_logger, normalized_log_event

# Used by GPT-4 and GPT-3.5-turbo; close enough for budget decisions on the
# other catalog models.
DEFAULT_ENCODING = "cl100k_base"


class TiktokenOracle:
    """Token oracle backed by a tiktoken encoding.

    The encoding is loaded on first use; tiktoken may need to download it, and
    a failure there surfaces as an exception from :meth:`count` that the
    accountant turns into a fallback estimate.
    """

    def __init__(self, encoding_name: str = DEFAULT_ENCODING) -> None:
        self.encoding_name = encoding_name
        self._encoding: Optional[Any] = None

    def count(self, text: str) -> int:
        if self._encoding is None:
            self._encoding = tiktoken.get_encoding(self.encoding_name)
        return len(self._encoding.encode(text))


def estimate_tokens(text: str) -> int:
    """Return the character-based estimate ``ceil(len(text) / 4)``."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


class TokenAccountant:
    """Wraps a token oracle with a degraded, never-failing fallback.

    Attributes:
        oracle: The primary counter, or ``None`` to always estimate.
        plausible_ceiling: Largest count accepted from the oracle; normally
            the biggest token ceiling in the model catalog.
    """

    def __init__(self, oracle: Optional[TokenOracle] = None, plausible_ceiling: Optional[int] = None) -> None:
        self.oracle = oracle
        self.plausible_ceiling = plausible_ceiling
        self.logger = get_logger("tokens")

    @classmethod
    def with_tiktoken(cls, plausible_ceiling: Optional[int] = None, encoding_name: str = DEFAULT_ENCODING) -> "TokenAccountant":
        return cls(TiktokenOracle(encoding_name), plausible_ceiling)

    def count(self, text: str) -> int:
        """Count the tokens in ``text``.

        Raises:
            InvalidInputError: If ``text`` is not a string.
        """
        if not isinstance(text, str):
            raise InvalidInputError(f"Expected a string, got: {type(text).__name__}")
        if self.oracle is None:
            return estimate_tokens(text)
        try:
            tokens = self.oracle.count(text)
        except Exception as exc:  # noqa: BLE001 - any oracle failure degrades to the estimate
            return self._fallback(text, reason=f"{type(exc).__name__}: {exc}")
        if isinstance(tokens, bool) or not isinstance(tokens, int):
            return self._fallback(text, reason=f"oracle returned {tokens!r}")
        if tokens <= 0 and text:
            return self._fallback(text, reason=f"oracle returned {tokens}")
        if self.plausible_ceiling is not None and tokens > self.plausible_ceiling:
            return self._fallback(
                text, reason=f"oracle returned {tokens}, above the largest model ceiling {self.plausible_ceiling}"
            )
        return max(tokens, 0)

    def _fallback(self, text: str, *, reason: str) -> int:
        estimate = estimate_tokens(text)
        normalized_log_event(
            self.logger,
            "tokens.fallback",
            phase="count",
            level=logging.WARNING,
            tokens=estimate,
            reason=reason,
            chars=len(text),
        )
        return estimate


__all__ = ["TokenAccountant", "TiktokenOracle", "estimate_tokens", "DEFAULT_ENCODING"]
