"""
GenerationResult DTO: the normalized outcome of one backend call.

``raw`` keeps the backend payload for diagnostics; it is never logged in full.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from ..constants import FINISH_REASON_STOP


@dataclass(frozen=True)
class GenerationResult:
    """Text and finish reason extracted from a backend response."""

    text: str
    finish_reason: Optional[str]
    raw: Any = None

    @property
    def stopped_naturally(self) -> bool:
        return self.finish_reason == FINISH_REASON_STOP


__all__ = ["GenerationResult"]
