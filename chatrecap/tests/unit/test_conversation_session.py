"""End-to-end turn handling of ``ConversationSession`` on the scripted backend."""
from __future__ import annotations

import json

import pytest

from chatrecap.base.errors import BackendError, ErrorCode, InvalidInputError, PromptTooLargeError, ResponseParseError
from chatrecap.base.models import ParticipantNames
from chatrecap.base.tokens import TokenAccountant
from chatrecap.catalog import ModelCatalog
from chatrecap.mock import ScriptedBackend, chat_reply
from chatrecap.session import ConversationSession


@pytest.mark.asyncio
async def test_first_chat_prompt_is_persona_plus_input(session, backend):
    backend.queue("Hi! How can I help?")
    assert await session.chat("hello") == "Hi! How can I help?"  # nosec B101

    first = backend.requests[0]
    assert first.kind == "chat" and first.body["model"] == "chat-small"  # nosec B101
    assert first.body["messages"] == [  # nosec B101
        {"role": "system", "content": "You are a helpful assistant."},
        {"role": "user", "content": "hello"},
    ]
    assert first.body["stop"] == [" Human:", " AI:"]  # nosec B101
    assert len(session.history) == 1  # nosec B101
    turn = session.history.turns[0]
    assert turn.input_tokens == 1 and turn.output_tokens == 5  # nosec B101
    await session.drain()


@pytest.mark.asyncio
async def test_unsummarized_history_and_summary_are_replayed(session, backend):
    backend.queue("one", "gloss one")
    await session.chat("first")
    await session.drain()
    session.state.running_summary = "They greeted each other."
    session.history.mark_summarized(session.history.turns)

    backend.queue("two", "gloss two")
    await session.chat("second")
    await session.drain()
    backend.queue("three")
    await session.chat("third")

    messages = backend.bodies[-1]["messages"]
    assert messages == [  # nosec B101
        {"role": "system", "content": "They greeted each other."},
        {"role": "user", "content": "second"},
        {"role": "assistant", "content": "two"},
        {"role": "user", "content": "third"},
    ]
    await session.drain()


@pytest.mark.asyncio
async def test_truncated_answer_gets_warning_marker(session, backend):
    backend.queue(chat_reply("partial answer", finish_reason="length"))
    output = await session.chat("tell me everything")
    assert output == "partial answer\n[WARNING: stopped generating output because 'length']"  # nosec B101
    assert session.history.turns[0].output == output  # nosec B101
    await session.drain()


@pytest.mark.asyncio
async def test_failed_turn_records_nothing(session, backend):
    backend.queue(BackendError(code=ErrorCode.SERVER_ERROR, message="boom", status=500))
    with pytest.raises(BackendError) as info:
        await session.chat("hello")
    assert info.value.model == "chat-small"  # nosec B101
    assert len(session.history) == 0 and session.tasks.pending == 0  # nosec B101


@pytest.mark.asyncio
async def test_sdk_exceptions_are_wrapped(session, backend):
    class _Err(Exception):
        status_code = 429

    backend.queue(_Err("Too many requests"))
    with pytest.raises(BackendError) as info:
        await session.chat("hello")
    assert info.value.code is ErrorCode.RATE_LIMIT and info.value.retryable  # nosec B101


@pytest.mark.asyncio
async def test_unparseable_response_records_nothing(session, backend):
    backend.queue({"choices": []})
    with pytest.raises(ResponseParseError):
        await session.chat("hello")
    assert len(session.history) == 0  # nosec B101


@pytest.mark.asyncio
@pytest.mark.parametrize("bad", ["", None, 12])
async def test_invalid_input_rejected(session, backend, bad):
    with pytest.raises(InvalidInputError):
        await session.chat(bad)
    assert backend.requests == []  # nosec B101


@pytest.mark.asyncio
async def test_prompt_too_large_makes_no_call(session, backend):
    with pytest.raises(PromptTooLargeError):
        await session.chat("word " * 5000)
    assert backend.requests == [] and len(session.history) == 0  # nosec B101


@pytest.mark.asyncio
async def test_long_prompt_clamps_max_tokens(session, backend):
    backend.queue("ok")
    await session.chat("word " * 3500)
    sent = backend.bodies[0]["max_tokens"]
    assert 0 < sent < 1024  # nosec B101
    await session.drain()


@pytest.mark.asyncio
async def test_override_model_and_params_do_not_leak(session, backend):
    backend.queue("ok", "gloss", "ok again")
    await session.chat("hi", {"model": "text-small", "temperature": 0.2})
    await session.drain()
    await session.chat("hi again")

    first, gloss, second = backend.requests[:3]
    assert first.kind == "completion" and first.body["temperature"] == 0.2  # nosec B101
    assert first.body["prompt"].endswith(" Human: hi\n AI:")  # nosec B101
    assert gloss.kind == "completion" and gloss.body["temperature"] == 0.4  # nosec B101
    assert second.body["model"] == "chat-small" and second.body["temperature"] == 1.0  # nosec B101
    await session.drain()


@pytest.mark.asyncio
async def test_query_is_stateless_and_uses_completion_model(session, backend):
    backend.queue("answer")
    assert await session.query("What is 2+2?") == "answer"  # nosec B101
    assert backend.requests[0].kind == "completion"  # nosec B101
    assert backend.bodies[0]["prompt"] == "What is 2+2?"  # nosec B101
    assert len(session.history) == 0 and session.tasks.pending == 0  # nosec B101


@pytest.mark.asyncio
async def test_query_on_chat_model_sends_single_user_message(session, backend):
    backend.queue("answer")
    await session.query("ping", {"model": "chat-small"})
    assert backend.bodies[0]["messages"] == [{"role": "user", "content": "ping"}]  # nosec B101


@pytest.mark.asyncio
async def test_background_failures_go_to_error_sink(session, backend, errors):
    backend.queue("fine", RuntimeError("gloss failed"))
    assert await session.chat("hello") == "fine"  # nosec B101
    await session.drain()
    assert len(errors) == 1  # nosec B101
    exc, name = errors[0]
    assert isinstance(exc, BackendError) and name.startswith("turn-summary")  # nosec B101
    assert len(session.history) == 1 and session.history.turns[0].turn_summary is None  # nosec B101


@pytest.mark.asyncio
async def test_cutoff_triggers_background_summary(small_catalog, word_accountant, errors):
    backend = ScriptedBackend()
    session = ConversationSession(
        backend,
        catalog=small_catalog,
        accountant=word_accountant,
        summarize_cutoff=5,
        error_sink=lambda exc, name: errors.append((exc, name)),
    )
    backend.queue("a b c d e f", "gloss", "AI: They said hello.")
    await session.chat("hello there friend")
    await session.drain()
    assert errors == []  # nosec B101
    assert session.summary == "They said hello."  # nosec B101
    assert session.history.unsummarized_turns() == []  # nosec B101

    backend.queue("sure", "gloss 2")
    await session.chat("next")
    assert backend.bodies[-1]["messages"][0] == {"role": "system", "content": "They said hello."}  # nosec B101
    await session.drain()


@pytest.mark.asyncio
async def test_explicit_summarize_stats_and_delete(session, backend):
    backend.queue("one", "g1")
    await session.chat("first")
    await session.drain()
    backend.queue("two", "g2")
    await session.chat("second")
    await session.drain()

    stats = session.stats()
    assert stats["turns"] == 2 and stats["tokens"] == 4 and stats["unsummarized_turns"] == 2  # nosec B101

    backend.queue("Summary of both.")
    assert await session.summarize() == "Summary of both."  # nosec B101
    assert session.stats()["unsummarized_turns"] == 0  # nosec B101

    removed = session.delete_last(1)
    assert [t.input for t in removed] == ["second"] and len(session.history) == 1  # nosec B101
    assert session.summary == "Summary of both."  # nosec B101


def test_configure_persists_between_turns(session):
    previous = session.configure(temperature=0.5)
    assert previous.temperature == 1.0 and session.config.temperature == 0.5  # nosec B101


def test_user_name_sets_stop_sequences(small_catalog, word_accountant):
    session = ConversationSession(ScriptedBackend(), catalog=small_catalog, accountant=word_accountant, user_name="Ada")
    assert session.names == ParticipantNames("Ada", "AI")  # nosec B101
    assert session.config.stop_sequences == [" Ada:", " AI:"]  # nosec B101


def test_from_config(small_catalog, word_accountant):
    cfg = {"model": "text-small", "user_name": "Ada", "summarize_cutoff": 100, "summarize_target": 20}
    session = ConversationSession.from_config(cfg, ScriptedBackend(), catalog=small_catalog, accountant=word_accountant)
    assert session.default_model == "text-small" and session.names.user == "Ada"  # nosec B101
    assert session.summarizer.cutoff == 100 and session.summarizer.target == 20  # nosec B101


@pytest.mark.asyncio
async def test_init_refreshes_online_models(session, backend):
    backend.models = ["chat-small"]
    await session.init()
    assert session.catalog.online_models == {"chat-small"}  # nosec B101


@pytest.mark.asyncio
async def test_long_turn_is_summarized_on_the_chat_model(errors):
    catalog = ModelCatalog.default()
    backend = ScriptedBackend()
    session = ConversationSession(
        backend,
        catalog=catalog,
        accountant=TokenAccountant(None, catalog.max_token_ceiling),
        error_sink=lambda exc, name: errors.append((exc, name)),
    )
    backend.queue("noted", "Q: words\nA: noted", "AI: A long list of words.")
    await session.chat("word " * 4000)
    await session.drain()

    assert errors == []  # nosec B101
    assert session.summary == "A long list of words."  # nosec B101
    assert session.history.unsummarized_turns() == []  # nosec B101
    gloss, summary = backend.requests[1:3]
    assert gloss.kind == "chat" and gloss.body["model"] == "gpt-4o-mini"  # nosec B101
    assert summary.kind == "chat" and summary.body["max_tokens"] == 512  # nosec B101

    backend.queue("4")
    await session.query("What is 2+2?")
    assert backend.bodies[-1]["model"] == "gpt-3.5-turbo-instruct"  # nosec B101


@pytest.mark.asyncio
async def test_backend_error_event_carries_retry_hint(capsys, small_catalog, word_accountant):
    backend = ScriptedBackend()
    session = ConversationSession(backend, catalog=small_catalog, accountant=word_accountant)
    backend.queue(BackendError(code=ErrorCode.RATE_LIMIT, message="slow down", status=429, retryable=True))
    with pytest.raises(BackendError):
        await session.chat("hello")

    events = [json.loads(line) for line in capsys.readouterr().err.splitlines() if line.startswith("{")]
    failure = next(e for e in events if e["event"] == "backend.error")
    assert failure["error_code"] == "rate_limit" and failure["retryable"] is True  # nosec B101
    assert failure["model"] == "chat-small"  # nosec B101
