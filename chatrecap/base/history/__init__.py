"""Conversation history storage."""

from .state import ConversationState
from .store import HistoryStore, RenderStyle, render_turns

__all__ = ["ConversationState", "HistoryStore", "RenderStyle", "render_turns"]
