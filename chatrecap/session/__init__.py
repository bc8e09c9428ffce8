"""Conversation session façade."""

from ..base.history import ConversationState
from .conversation import ConversationSession

__all__ = ["ConversationSession", "ConversationState"]
