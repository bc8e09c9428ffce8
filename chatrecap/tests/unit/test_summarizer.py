"""Cutoff detection, merge protocol and in-flight guard of ``Summarizer``."""
from __future__ import annotations

import asyncio
import json

import pytest

from chatrecap.base.errors import BackendError, ErrorCode, ResponseParseError
from chatrecap.base.history import ConversationState
from chatrecap.base.models import Turn
from chatrecap.base.tasks import BackgroundTasks
from chatrecap.summarization import Summarizer


class _FakeQuery:
    """Records prompts; replies with ``reply`` or raises it when it is an exception."""

    def __init__(self, reply="AI: the summary", gate: asyncio.Event | None = None):
        self.reply = reply
        self.gate = gate
        self.calls = []
        self.active = 0
        self.max_active = 0

    async def __call__(self, prompt, override=None):
        self.calls.append((prompt, dict(override or {})))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.gate is not None:
                await self.gate.wait()
            else:
                await asyncio.sleep(0)
            if isinstance(self.reply, Exception):
                raise self.reply
            return self.reply
        finally:
            self.active -= 1


def _summarizer(query, cutoff=2048, target=512):
    state = ConversationState()
    return state, Summarizer(state, query, BackgroundTasks(), cutoff=cutoff, target=target)


@pytest.mark.asyncio
async def test_cutoff_exceeded_triggers_summary():
    query = _FakeQuery()
    state, summarizer = _summarizer(query)
    state.history.append(Turn("q1", "a1", 600, 600))
    state.history.append(Turn("q2", "a2", 600, 600))

    assert await summarizer.maybe_summarize() == "the summary"  # nosec B101
    assert state.running_summary == "the summary"  # nosec B101
    assert all(t.summarized for t in state.history)  # nosec B101
    prompt, override = query.calls[0]
    assert prompt.startswith("Please summarize the following conversation between yourself (AI) and a human (Human)")  # nosec B101
    assert " Human: q1\n AI: a1\n Human: q2\n AI: a2\n" in prompt  # nosec B101
    assert override == {"max_tokens": 512}  # nosec B101


@pytest.mark.asyncio
async def test_below_cutoff_does_nothing():
    query = _FakeQuery()
    state, summarizer = _summarizer(query)
    state.history.append(Turn("q", "a", 250, 250))
    assert await summarizer.maybe_summarize() is None  # nosec B101
    assert query.calls == [] and state.running_summary == ""  # nosec B101


@pytest.mark.asyncio
async def test_force_and_empty_history():
    query = _FakeQuery("short")
    state, summarizer = _summarizer(query)
    assert await summarizer.maybe_summarize(force=True) is None  # nosec B101
    state.history.append(Turn("q", "a", 1, 1))
    assert await summarizer.maybe_summarize(force=True) == "short"  # nosec B101


@pytest.mark.asyncio
async def test_second_summary_merges_with_existing():
    query = _FakeQuery("merged")
    state, summarizer = _summarizer(query)
    state.running_summary = "old summary"
    state.history.append(Turn("q", "a", 1, 1))
    await summarizer.summarize()
    prompt = query.calls[0][0]
    assert prompt.startswith("Please update the following summary of a conversation")  # nosec B101
    assert "Existing summary:\nold summary\n\nNew messages:\n Human: q\n AI: a\n" in prompt  # nosec B101
    assert state.running_summary == "merged"  # nosec B101


@pytest.mark.asyncio
async def test_failure_leaves_state_untouched():
    query = _FakeQuery(BackendError(code=ErrorCode.RATE_LIMIT, message="slow down", status=429))
    state, summarizer = _summarizer(query)
    state.running_summary = "previous"
    state.history.append(Turn("q", "a", 1500, 1500))
    with pytest.raises(BackendError):
        await summarizer.maybe_summarize()
    assert state.running_summary == "previous"  # nosec B101
    assert not state.history.turns[0].summarized  # nosec B101


@pytest.mark.asyncio
async def test_empty_summary_after_label_is_rejected():
    query = _FakeQuery("AI:   ")
    state, summarizer = _summarizer(query)
    state.history.append(Turn("q", "a", 1, 1))
    with pytest.raises(ResponseParseError):
        await summarizer.summarize()
    assert state.running_summary == "" and not state.history.turns[0].summarized  # nosec B101


@pytest.mark.asyncio
async def test_summaries_never_overlap_and_late_turns_stay_unsummarized():
    gate = asyncio.Event()
    query = _FakeQuery("done", gate=gate)
    state, summarizer = _summarizer(query, cutoff=10)
    state.history.append(Turn("q1", "a1", 10, 10))

    first = asyncio.create_task(summarizer.maybe_summarize())
    await asyncio.sleep(0)
    assert summarizer.in_flight  # nosec B101

    # A turn recorded while the summary call is pending
    state.history.append(Turn("q2", "a2", 10, 10))
    assert await summarizer.maybe_summarize() is None  # nosec B101

    gate.set()
    assert await first == "done"  # nosec B101
    assert query.max_active == 1 and len(query.calls) == 1  # nosec B101
    assert [t.input for t in state.history.unsummarized_turns()] == ["q2"]  # nosec B101


@pytest.mark.asyncio
async def test_turn_gloss_request_shape():
    query = _FakeQuery(" Q: hi\nA: hello ")
    _, summarizer = _summarizer(query)
    assert await summarizer.summarize_turn("hi", "hello") == "Q: hi\nA: hello"  # nosec B101
    prompt, override = query.calls[0]
    assert override == {"temperature": 0.4, "max_tokens": 50}  # nosec B101
    assert prompt.endswith("\n\nQ: hi\n\nA: hello")  # nosec B101


@pytest.mark.asyncio
async def test_schedule_attaches_gloss_in_background():
    query = _FakeQuery("gloss")
    state, summarizer = _summarizer(query)
    turn = Turn("q", "a", 1, 1)
    state.history.append(turn)
    summarizer.schedule(turn)
    assert turn.turn_summary is None  # nosec B101
    await summarizer.tasks.drain()
    assert turn.turn_summary == "gloss"  # nosec B101
    assert state.running_summary == ""  # nosec B101


@pytest.mark.asyncio
async def test_truncation_marker_is_not_stored(capsys):
    query = _FakeQuery("AI: a cut-off summary\n[WARNING: stopped generating output because 'length']")
    state, summarizer = _summarizer(query)
    state.history.append(Turn("q", "a", 1, 1))
    assert await summarizer.summarize() == "a cut-off summary"  # nosec B101
    assert state.running_summary == "a cut-off summary"  # nosec B101

    query.reply = "Q: q\nA: a\n[WARNING: stopped generating output because 'length']"
    assert await summarizer.summarize_turn("q", "a") == "Q: q\nA: a"  # nosec B101

    events = [json.loads(line) for line in capsys.readouterr().err.splitlines() if line.startswith("{")]
    truncated = [e for e in events if e["event"] == "summary.truncated"]
    assert [e["kind"] for e in truncated] == ["summary", "turn_summary"]  # nosec B101
    assert truncated[0]["finish_reason"] == "length"  # nosec B101
