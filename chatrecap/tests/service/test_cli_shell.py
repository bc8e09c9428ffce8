"""Interactive shell driven with scripted input lines (no terminal)."""
from __future__ import annotations

import asyncio

import pytest

from chatrecap.mock import ScriptedBackend
from chatrecap.service.cli import build_session, main
from chatrecap.service.cli.cli_parser import build_parser
from chatrecap.service.cli.cli_shell import ChatShell
from chatrecap.session import ConversationSession


def _reader(lines):
    it = iter(lines)

    async def read(prompt):
        await asyncio.sleep(0)
        return next(it, None)

    return read


def _shell(session, lines, eof="\n"):
    out = []
    return ChatShell(session, eof=eof, reader=_reader(lines), printer=out.append), out


@pytest.mark.asyncio
async def test_chat_then_commands(session, backend):
    backend.queue("Hello Human!", "Q: hi\nA: greeting")
    shell, out = _shell(session, ["hi", "\\stats", "\\history", "\\summary", "\\nope", "\\h", "\\quit"])
    assert await shell.run() == 0  # nosec B101
    assert "Hello Human!" in out  # nosec B101
    assert "The conversation contains 1 turns and a total of 3 tokens." in out  # nosec B101
    assert "0.\tQ: hi\n\tA: greeting" in out  # nosec B101
    assert "There is no summary yet. Use the command \\summarize to create one." in out  # nosec B101
    assert "No such command: nope" in out  # nosec B101
    assert any(line.startswith("The available commands are:") for line in out)  # nosec B101


@pytest.mark.asyncio
async def test_summarize_and_delete(session, backend):
    backend.queue("one", "g1", "Short summary.")
    shell, out = _shell(session, ["first", "\\summarize", "\\delete 1", "\\delete x"])
    await shell.run()
    assert "Short summary." in out and session.summary == "Short summary."  # nosec B101
    assert "Deleted the last 1 turns" in out and len(session.history) == 0  # nosec B101
    assert any("should be followed by the number" in line for line in out)  # nosec B101


@pytest.mark.asyncio
async def test_backend_errors_are_printed_not_raised(session, backend):
    backend.queue(RuntimeError("network down"))
    shell, out = _shell(session, ["hi"])
    assert await shell.run() == 0  # nosec B101
    assert any(line.startswith("Error:") for line in out)  # nosec B101


@pytest.mark.asyncio
async def test_multiline_messages_with_eof_marker(session, backend):
    backend.queue("ok")
    shell, _ = _shell(session, ["line one", "line two END"], eof="END")
    await shell.run()
    assert backend.bodies[0]["messages"][-1]["content"] == "line one\nline two "  # nosec B101


def test_parser_defaults():
    args = build_parser().parse_args(["--mock", "--name", "Ada", "--log-level", "debug"])
    assert args.mock and args.name == "Ada" and args.log_level == "DEBUG" and args.model is None  # nosec B101


def test_build_session_mock_uses_config():
    args = build_parser().parse_args(["--mock", "--name", "Ada", "--model", "gpt-4"])
    session, cfg = build_session(args)
    assert isinstance(session, ConversationSession) and isinstance(session.backend, ScriptedBackend)  # nosec B101
    assert session.names.user == "Ada" and session.default_model == "gpt-4"  # nosec B101
    assert cfg["eof"] == "\n"  # nosec B101


def test_main_mock_exits_on_eof(monkeypatch, capsys):
    def _eof(prompt=""):
        raise EOFError

    monkeypatch.setattr("builtins.input", _eof)
    assert main(["--mock", "--name", "Ada", "--log-level", "ERROR"]) == 0  # nosec B101
    assert "Hi Ada. What's on your mind?" in capsys.readouterr().out  # nosec B101
