"""TokenOracle Protocol (single-class module)."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class TokenOracle(Protocol):
    """Counts tokens in a string.

    Implementations may raise or return nonsense; callers go through
    :class:`chatrecap.base.tokens.TokenAccountant`, which tolerates both.
    """

    def count(self, text: str) -> int:
        ...


__all__ = ["TokenOracle"]
