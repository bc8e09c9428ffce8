"""Mutable state of one conversation."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..models import ParticipantNames
from .store import HistoryStore


@dataclass
class ConversationState:
    """Running summary, turn history and participant names of a session.

    ``running_summary`` is only ever replaced as a whole, by a successful
    summarization.
    """

    running_summary: str = ""
    history: HistoryStore = field(default_factory=HistoryStore)
    names: ParticipantNames = field(default_factory=ParticipantNames)


__all__ = ["ConversationState"]
