"""Ordered conversation history with a summarized/unsummarized partition.

Turns are kept in the order their foreground calls completed. A turn is
"unsummarized" until a successful summarization marks it; only unsummarized
turns count toward the summarization cutoff and are replayed to the model
alongside the running summary.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Literal, Sequence, Tuple, Union

from ..constants import ACCOUNTING_SANITY_CEILING
from ..errors import AccountingError, InvalidInputError
from ..models import ParticipantNames, Turn

RenderStyle = Literal["messages", "transcript"]


class HistoryStore:
    """Chronological store of :class:`Turn` objects."""

    def __init__(self, turns: Iterable[Turn] = ()) -> None:
        self._turns: List[Turn] = list(turns)

    def append(self, turn: Turn) -> None:
        self._turns.append(turn)

    @property
    def turns(self) -> Tuple[Turn, ...]:
        return tuple(self._turns)

    def __len__(self) -> int:
        return len(self._turns)

    def __iter__(self) -> Iterator[Turn]:
        return iter(tuple(self._turns))

    def unsummarized_turns(self) -> List[Turn]:
        """Return the live unsummarized turns, oldest first."""
        return [t for t in self._turns if not t.summarized]

    def tokens_of(self, turns: Sequence[Turn]) -> int:
        """Sum input and output tokens of ``turns``.

        Raises:
            AccountingError: The total is above the sanity ceiling, or turns
                were given but they add up to zero.
        """
        if not turns:
            return 0
        total = sum(t.input_tokens + t.output_tokens for t in turns)
        if total > ACCOUNTING_SANITY_CEILING:
            raise AccountingError(f"The token count is very high ({total}), please report this as a bug")
        if total <= 0:
            raise AccountingError(f"The token count is 0 or negative ({total}) for {len(turns)} turns")
        return total

    def mark_summarized(self, turns: Iterable[Turn]) -> None:
        for turn in turns:
            turn.summarized = True

    def delete_last(self, count: int = 1) -> List[Turn]:
        """Remove and return the last ``count`` turns (oldest first)."""
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise InvalidInputError(f"count must be a non-negative integer, got: {count!r}")
        if count == 0:
            return []
        removed = self._turns[-count:]
        del self._turns[-count:]
        return removed


def render_turns(
    turns: Sequence[Turn],
    style: RenderStyle,
    names: ParticipantNames,
) -> Union[List[Dict[str, str]], str]:
    """Render ``turns`` chronologically.

    ``"messages"`` yields chat ``{"role", "content"}`` entries; ``"transcript"``
    yields one ``" <name>: <content>\\n"`` line per message.
    """
    if style == "messages":
        messages: List[Dict[str, str]] = []
        for t in turns:
            messages.append({"role": "user", "content": t.input})
            messages.append({"role": "assistant", "content": t.output})
        return messages
    if style == "transcript":
        return "".join(f" {names.user}: {t.input}\n {names.assistant}: {t.output}\n" for t in turns)
    raise InvalidInputError(f"Unknown render style: {style!r}")


__all__ = ["HistoryStore", "render_turns", "RenderStyle"]
