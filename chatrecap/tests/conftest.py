"""Pytest configuration for the chatrecap test suite.

Fixtures build sessions on a small in-memory catalog, a deterministic
word-count token oracle and the offline ``ScriptedBackend`` so no test
touches the network or downloads a tiktoken encoding.
"""

from __future__ import annotations

import logging
import sys
from typing import Iterator, List, Tuple

import pytest

from chatrecap.base.logging import configure_logger, get_logger
from chatrecap.base.models import ModelDescriptor
from chatrecap.base.tokens import TokenAccountant
from chatrecap.catalog import ModelCatalog
from chatrecap.config import reset_config_cache
from chatrecap.mock import ScriptedBackend
from chatrecap.session import ConversationSession

CHAT_PARAMS = frozenset(
    {"max_tokens", "temperature", "top_p", "frequency_penalty", "presence_penalty", "stop", "n", "stream", "logit_bias"}
)
COMPLETION_PARAMS = CHAT_PARAMS | {"suffix", "logprobs", "echo", "best_of"}


class WordOracle:
    """Counts whitespace-separated words; predictable in assertions."""

    def __init__(self) -> None:
        self.calls = 0

    def count(self, text: str) -> int:
        self.calls += 1
        return len(text.split())


@pytest.fixture()
def small_catalog() -> ModelCatalog:
    """Chat model first, then a completion model, then a non-callable one."""
    return ModelCatalog(
        [
            ModelDescriptor("chat-small", 4096, CHAT_PARAMS, "chat", "chat", "test"),
            ModelDescriptor("text-small", 2048, COMPLETION_PARAMS, "completion", "completion", "test"),
            ModelDescriptor("base-only", 16384, frozenset(), None, "fine-tune", "test"),
        ]
    )


@pytest.fixture()
def word_accountant(small_catalog: ModelCatalog) -> TokenAccountant:
    return TokenAccountant(WordOracle(), small_catalog.max_token_ceiling)


@pytest.fixture()
def backend() -> ScriptedBackend:
    return ScriptedBackend()


@pytest.fixture()
def errors() -> List[Tuple[BaseException, str]]:
    """Collects background failures routed to the session's error sink."""
    return []


@pytest.fixture()
def session(backend, small_catalog, word_accountant, errors) -> ConversationSession:
    return ConversationSession(
        backend,
        catalog=small_catalog,
        accountant=word_accountant,
        error_sink=lambda exc, name: errors.append((exc, name)),
    )


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Keep real env vars and any local ``.env`` out of config-dependent tests."""
    for name in (
        "CHATRECAP_MODEL",
        "CHATRECAP_USER_NAME",
        "CHATRECAP_SUMMARIZE_CUTOFF",
        "CHATRECAP_SUMMARIZE_TARGET",
        "CHATRECAP_EOF",
        "CHATRECAP_CONFIG_FILE",
        "CHATRECAP_LOG_LEVEL",
        "OPENAI_BASE_URL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DOTENV_FILE", str(tmp_path / "missing.env"))
    reset_config_cache()
    yield
    reset_config_cache()
    configure_logger(level="INFO")



@pytest.hookimpl(hookwrapper=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> Iterator[None]:
    """Point the shared console log handler at the stderr active for this test call.

    Loggers are created at import time, so their stream handler would otherwise
    keep writing to a stderr that pytest's capture has since replaced (and closed).
    """
    for handler in get_logger().handlers:
        if getattr(handler, "_chatrecap_console_handler", False) and isinstance(handler, logging.StreamHandler):
            handler.acquire()
            try:
                handler.stream = sys.stderr
            finally:
                handler.release()
    yield
