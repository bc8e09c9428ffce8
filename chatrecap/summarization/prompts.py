"""Prompt templates for conversation and per-turn summaries."""

from __future__ import annotations

from typing import Sequence

from ..base.history import render_turns
from ..base.models import ParticipantNames, Turn

_SUBJECT = "conversation between yourself ({assistant}) and a human ({user})"

FRESH_SUMMARY_TEMPLATE = "Please summarize the following " + _SUBJECT + ":\n\n"

MERGE_SUMMARY_TEMPLATE = (
    "Please update the following summary of a " + _SUBJECT + " with the new messages which will follow."
    "\n\nExisting summary:\n{summary}\n\nNew messages:\n"
)

TURN_SUMMARY_TEMPLATE = (
    "Please summarize this question and answer in 1 sentence each. Do not add flourishes and try to keep "
    "it short while including the relevant information. If the question or answer is short enough just return the "
    "original string unaltered. Respond on 2 separate lines."
    "\n\nQ: {input}\n\nA: {output}"
)


def conversation_summary_prompt(existing_summary: str, turns: Sequence[Turn], names: ParticipantNames) -> str:
    """Return the fresh or merge prompt followed by the transcript of ``turns``."""
    if existing_summary:
        head = MERGE_SUMMARY_TEMPLATE.format(assistant=names.assistant, user=names.user, summary=existing_summary)
    else:
        head = FRESH_SUMMARY_TEMPLATE.format(assistant=names.assistant, user=names.user)
    return head + render_turns(turns, "transcript", names)


def turn_summary_prompt(input: str, output: str) -> str:
    return TURN_SUMMARY_TEMPLATE.format(input=input, output=output)


__all__ = [
    "FRESH_SUMMARY_TEMPLATE",
    "MERGE_SUMMARY_TEMPLATE",
    "TURN_SUMMARY_TEMPLATE",
    "conversation_summary_prompt",
    "turn_summary_prompt",
]
