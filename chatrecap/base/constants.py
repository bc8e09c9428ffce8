"""Shared constants for the conversation core.

Central location to avoid scattering magic strings and default numbers across
the token, request, history and summarization modules.
"""
from __future__ import annotations

# Summarization thresholds (tokens)
DEFAULT_SUMMARIZE_CUTOFF = 2048
DEFAULT_SUMMARIZE_TARGET = 512

# Per-turn gloss request shaping
TURN_SUMMARY_TEMPERATURE = 0.4
TURN_SUMMARY_MAX_TOKENS = 50

# Any history total above this is treated as bookkeeping corruption.
ACCOUNTING_SANITY_CEILING = 1_000_000

# Fallback estimator: roughly four characters per token.
CHARS_PER_TOKEN = 4

# Participant names; also used as stop sequences for transcript prompts.
DEFAULT_USER_NAME = "Human"
DEFAULT_ASSISTANT_NAME = "AI"

DEFAULT_PERSONA = "You are a helpful assistant."

FINISH_REASON_STOP = "stop"
TRUNCATION_WARNING = "\n[WARNING: stopped generating output because '{reason}']"

USAGE_CHAT = "chat"
USAGE_COMPLETION = "completion"

__all__ = [
    "DEFAULT_SUMMARIZE_CUTOFF",
    "DEFAULT_SUMMARIZE_TARGET",
    "TURN_SUMMARY_TEMPERATURE",
    "TURN_SUMMARY_MAX_TOKENS",
    "ACCOUNTING_SANITY_CEILING",
    "CHARS_PER_TOKEN",
    "DEFAULT_USER_NAME",
    "DEFAULT_ASSISTANT_NAME",
    "DEFAULT_PERSONA",
    "FINISH_REASON_STOP",
    "TRUNCATION_WARNING",
    "USAGE_CHAT",
    "USAGE_COMPLETION",
]
