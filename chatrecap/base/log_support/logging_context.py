"""Structured logging context for conversation events.

:class:`LogContext` carries the fields most session events share (model,
usage, turn index) plus a free-form ``extra`` mapping. ``to_dict`` merges the
extras and prunes ``None`` values for clean structured output.
"""
from __future__ import annotations

from dataclasses import dataclass, asdict, field
from typing import Any, Dict, Optional


@dataclass
class LogContext:
    """Structured context for conversation logging events."""

    model: Optional[str] = None
    usage: Optional[str] = None
    turn: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        extra = data.pop("extra", {}) or {}
        data.update({k: v for k, v in extra.items() if v is not None})
        return {k: v for k, v in data.items() if v is not None}


__all__ = ["LogContext"]
