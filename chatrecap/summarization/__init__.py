"""Conversation and per-turn summarization."""

from .prompts import conversation_summary_prompt, turn_summary_prompt
from .summarizer import QueryFn, Summarizer

__all__ = ["Summarizer", "QueryFn", "conversation_summary_prompt", "turn_summary_prompt"]
