"""Running-summary maintenance.

Once the unsummarized part of the history grows past ``cutoff`` tokens it is
folded into the running summary with a completion-style call capped at
``target`` tokens. The new summary replaces the old one in a single
assignment and only then are the covered turns marked summarized, so a failed
call leaves the state exactly as it was.

Summarizations never overlap. ``maybe_summarize`` skips while one is in
flight; the turns it would have covered stay unsummarized and are picked up
by the next trigger.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence

from ..base.constants import (
    DEFAULT_SUMMARIZE_CUTOFF,
    DEFAULT_SUMMARIZE_TARGET,
    TURN_SUMMARY_MAX_TOKENS,
    TURN_SUMMARY_TEMPERATURE,
    TRUNCATION_WARNING,
)
from ..base.errors import ResponseParseError
from ..base.history import ConversationState
from ..base.logging import get_logger, normalized_log_event
from ..base.models import Turn
from ..base.tasks import BackgroundTasks
from .prompts import conversation_summary_prompt, turn_summary_prompt

_MARKER_HEAD, _MARKER_TAIL = TRUNCATION_WARNING.split("{reason}")
_TRUNCATION_MARKER = re.compile(re.escape(_MARKER_HEAD) + r"(.*?)" + re.escape(_MARKER_TAIL) + r"\Z", re.DOTALL)

QueryFn = Callable[[str, Optional[Mapping[str, Any]]], Awaitable[str]]


class Summarizer:
    """Keeps ``state.running_summary`` in step with the history.

    Attributes:
        state: The session state the summarizer reads and updates.
        query: Stateless completion call, ``query(prompt, override) -> text``.
        tasks: Scheduler for the background work started by :meth:`schedule`.
        cutoff: Unsummarized token total that triggers a summary.
        target: ``max_tokens`` of the summary request.
    """

    def __init__(
        self,
        state: ConversationState,
        query: QueryFn,
        tasks: BackgroundTasks,
        cutoff: int = DEFAULT_SUMMARIZE_CUTOFF,
        target: int = DEFAULT_SUMMARIZE_TARGET,
    ) -> None:
        self.state = state
        self.query = query
        self.tasks = tasks
        self.cutoff = cutoff
        self.target = target
        self.logger = get_logger("summarizer")
        self._lock = asyncio.Lock()

    @property
    def in_flight(self) -> bool:
        return self._lock.locked()

    async def maybe_summarize(self, force: bool = False) -> Optional[str]:
        """Summarize the unsummarized turns when they exceed the cutoff.

        Returns the new summary, or ``None`` when nothing was done.
        """
        turns = self.state.history.unsummarized_turns()
        if not turns:
            return None
        tokens = self.state.history.tokens_of(turns)
        if not force and tokens <= self.cutoff:
            return None
        if self._lock.locked():
            normalized_log_event(
                self.logger,
                "summary.skipped",
                phase="summarize",
                level=logging.DEBUG,
                tokens=tokens,
                reason="summarization already in flight",
            )
            return None
        return await self.summarize(turns, tokens)

    async def summarize(self, turns: Optional[Sequence[Turn]] = None, tokens: Optional[int] = None) -> str:
        """Fold ``turns`` (default: the whole history) into the running summary.

        Raises:
            ResponseParseError: The summary was empty once the speaker label
                was stripped.
            BackendError, PromptTooLargeError: The summary call failed; the
                state is left untouched.
        """
        async with self._lock:
            history = self.state.history
            if turns is None:
                turns = list(history)
                tokens = None
            covered: List[Turn] = list(turns)
            if tokens is None:
                tokens = history.tokens_of(covered)
            normalized_log_event(
                self.logger,
                "summary.start",
                phase="summarize",
                level=logging.DEBUG,
                tokens=tokens,
                turns=len(covered),
            )

            prompt = conversation_summary_prompt(self.state.running_summary, covered, self.state.names)
            try:
                text = await self.query(prompt, {"max_tokens": self.target})
                summary = self._strip_label(self._drop_truncation_marker(text, "summary"))
                if not summary:
                    raise ResponseParseError("The summary was empty", raw=text)
            except Exception as exc:
                normalized_log_event(
                    self.logger,
                    "summary.failed",
                    phase="summarize",
                    level=logging.WARNING,
                    error_code=getattr(getattr(exc, "code", None), "value", None),
                    tokens=tokens,
                    error=f"{type(exc).__name__}: {exc}",
                )
                raise

            self.state.running_summary = summary
            history.mark_summarized(covered)
            normalized_log_event(
                self.logger,
                "summary.done",
                phase="summarize",
                tokens=tokens,
                turns=len(covered),
                chars=len(summary),
            )
            return summary

    async def summarize_turn(self, input: str, output: str) -> str:
        """Return a two-line gloss (question, answer) of one exchange."""
        override: Dict[str, Any] = {"temperature": TURN_SUMMARY_TEMPERATURE, "max_tokens": TURN_SUMMARY_MAX_TOKENS}
        text = await self.query(turn_summary_prompt(input, output), override)
        return self._drop_truncation_marker(text, "turn_summary").strip()

    def schedule(self, turn: Turn) -> None:
        """Start the turn gloss and the cutoff check in the background."""
        index = len(self.state.history)
        self.tasks.submit(self._attach_turn_summary(turn), name=f"turn-summary-{index}")
        self.tasks.submit(self.maybe_summarize(), name=f"maybe-summarize-{index}")

    async def _attach_turn_summary(self, turn: Turn) -> None:
        turn.turn_summary = await self.summarize_turn(turn.input, turn.output)

    def _drop_truncation_marker(self, text: str, kind: str) -> str:
        """Remove the truncation warning; stored summaries are fed back as context."""
        match = _TRUNCATION_MARKER.search(text)
        if match is None:
            return text
        normalized_log_event(
            self.logger,
            "summary.truncated",
            phase="summarize",
            level=logging.WARNING,
            kind=kind,
            finish_reason=match.group(1),
        )
        return text[: match.start()]

    def _strip_label(self, text: str) -> str:
        label = self.state.names.assistant + ":"
        text = text.strip()
        if text.startswith(label):
            text = text[len(label):]
        return text.strip()


__all__ = ["Summarizer", "QueryFn"]
