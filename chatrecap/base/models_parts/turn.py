"""
Turn DTO and participant names.

A :class:`Turn` pairs one user input with the assistant's answer together with
the token accounting for both and the turn's summarization status.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..constants import DEFAULT_ASSISTANT_NAME, DEFAULT_USER_NAME


@dataclass(eq=False)
class Turn:
    """One recorded exchange of the conversation.

    Attributes:
        input: Raw user input.
        output: Assistant text as returned to the caller.
        input_tokens: Token count of ``input``.
        output_tokens: Token count of ``output``.
        summarized: Set once the exchange has been folded into the running
            summary. Never reset.
        turn_summary: Optional two-line gloss attached after the turn was
            recorded.
    """

    input: str
    output: str
    input_tokens: int
    output_tokens: int
    summarized: bool = False
    turn_summary: Optional[str] = None

    @property
    def tokens(self) -> int:
        """Return the combined token count of input and output."""
        return self.input_tokens + self.output_tokens


@dataclass(frozen=True)
class ParticipantNames:
    """Display names of the two speakers.

    They label transcript lines in summarization prompts and double as stop
    sequences for completion-style models.
    """

    user: str = DEFAULT_USER_NAME
    assistant: str = DEFAULT_ASSISTANT_NAME

    def for_role(self, role: str) -> str:
        return self.assistant if role == "assistant" else self.user


__all__ = ["Turn", "ParticipantNames"]
