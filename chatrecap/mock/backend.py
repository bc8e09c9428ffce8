"""Deterministic scripted backend for offline runs and tests.

Purpose
-------
Implements the ``TextBackend`` contract without any network traffic. Replies
come from a queue (consumed in order) or, once the queue is empty, from a
``responder`` callable. Every request body is recorded so tests can assert on
exactly what would have been sent.

Queue entries may be:

* ``str`` - wrapped into an OpenAI-shaped response for the call kind;
* a mapping or object - returned as the raw response unchanged;
* an ``Exception`` instance - raised from the call.
"""

from __future__ import annotations

import asyncio
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Dict, Iterable, List, Mapping, Optional, Sequence

from ..base.logging import get_logger, normalized_log_event
from ..base.log_support import LogContext

Responder = Callable[[str, Mapping[str, Any]], Any]


def chat_reply(text: str, finish_reason: str = "stop") -> Dict[str, Any]:
    """Return a chat-completion shaped response dict."""
    return {"choices": [{"message": {"role": "assistant", "content": text}, "finish_reason": finish_reason}]}


def completion_reply(text: str, finish_reason: str = "stop") -> Dict[str, Any]:
    """Return a completion shaped response dict."""
    return {"choices": [{"text": text, "finish_reason": finish_reason}]}


def echo_responder(kind: str, body: Mapping[str, Any]) -> str:
    """Default responder: a short canned line mentioning the call kind."""
    if kind == "chat":
        messages = body.get("messages") or [{}]
        last = messages[-1].get("content", "")
        return f"(mock) You said: {last}"
    return f"(mock) {kind} for a {len(body.get('prompt') or '')} character prompt"


@dataclass
class RecordedRequest:
    kind: str
    body: Dict[str, Any]


@dataclass
class ScriptedBackend:
    """Offline ``TextBackend`` replaying scripted replies.

    Attributes:
        replies: Queue of replies consumed in call order.
        responder: Called with ``(kind, body)`` when the queue is empty.
        models: Ids returned by :meth:`list_models`.
        delay: Optional await before each reply, to let background tasks
            interleave in tests.
    """

    replies: Iterable[Any] = ()
    responder: Optional[Responder] = echo_responder
    models: Sequence[str] = ()
    delay: float = 0.0
    requests: List[RecordedRequest] = field(default_factory=list)

    def __post_init__(self) -> None:
        self._queue: Deque[Any] = deque(self.replies)
        self._logger = get_logger("backends.mock")

    def queue(self, *replies: Any) -> None:
        self._queue.extend(replies)

    @property
    def bodies(self) -> List[Dict[str, Any]]:
        return [r.body for r in self.requests]

    async def list_models(self) -> List[str]:
        return list(self.models)

    async def create_chat_completion(self, body: Mapping[str, Any]) -> Any:
        return await self._reply("chat", body)

    async def create_completion(self, body: Mapping[str, Any]) -> Any:
        return await self._reply("completion", body)

    async def _reply(self, kind: str, body: Mapping[str, Any]) -> Any:
        self.requests.append(RecordedRequest(kind=kind, body=dict(body)))
        normalized_log_event(
            self._logger,
            "mock.request",
            LogContext(model=body.get("model")),
            phase=kind,
            queued=len(self._queue),
        )
        if self.delay:
            await asyncio.sleep(self.delay)
        if self._queue:
            reply = self._queue.popleft()
        elif self.responder is not None:
            reply = self.responder(kind, body)
        else:
            raise RuntimeError(f"ScriptedBackend has no reply left for a {kind} request")
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, str):
            return chat_reply(reply) if kind == "chat" else completion_reply(reply)
        return reply


__all__ = ["ScriptedBackend", "RecordedRequest", "chat_reply", "completion_reply", "echo_responder"]
