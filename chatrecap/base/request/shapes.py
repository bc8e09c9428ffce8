"""Request-shape adapters for chat and completion models.

Purpose
-------
Each model in the catalog speaks one of two request shapes. A shape knows how
to place the conversation into a request body, how to render that body back
into text for token accounting, which backend capability to call, and how to
pull the text and finish reason out of the raw response.

Responses are OpenAI-shaped and may arrive either as mappings or as SDK
objects; both are read through :func:`_first_choice`.

Failure semantics
-----------------
A response without the expected fields, or with empty text, raises
:class:`ResponseParseError` carrying the raw response.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

from ..errors import ResponseParseError
from ..interfaces import TextBackend
from ..models import GenerationResult, ParticipantNames


def _get(obj: Any, key: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(key)
    return getattr(obj, key, None)


def _first_choice(raw: Any) -> Any:
    choices = _get(raw, "choices")
    if not choices:
        raise ResponseParseError("Response has no choices", raw=raw)
    try:
        return choices[0]
    except (TypeError, IndexError, KeyError) as exc:
        raise ResponseParseError("Response choices are not a sequence", raw=raw) from exc


class RequestShape(Protocol):
    """Adapter interface shared by chat and completion models."""

    kind: str

    def attach_messages(self, params: Dict[str, Any], messages: Sequence[Dict[str, str]], names: ParticipantNames) -> None:
        ...

    def attach_prompt(self, params: Dict[str, Any], prompt: str) -> None:
        ...

    def render_prompt(self, params: Mapping[str, Any]) -> str:
        ...

    async def send(self, backend: TextBackend, params: Dict[str, Any]) -> Any:
        ...

    def extract_text(self, raw: Any) -> str:
        ...

    def extract_finish_reason(self, raw: Any) -> Optional[str]:
        ...

    def parse(self, raw: Any) -> GenerationResult:
        ...


class _BaseShape:
    kind = ""

    def extract_finish_reason(self, raw: Any) -> Optional[str]:
        reason = _get(_first_choice(raw), "finish_reason")
        return str(reason) if reason is not None else None

    def extract_text(self, raw: Any) -> str:  # pragma: no cover - abstract
        raise NotImplementedError

    def parse(self, raw: Any) -> GenerationResult:
        """Return the stripped text and finish reason of ``raw``."""
        text = self.extract_text(raw)
        if not isinstance(text, str):
            raise ResponseParseError(f"Response text is not a string: {type(text).__name__}", raw=raw)
        text = text.strip()
        if not text:
            raise ResponseParseError("The response was empty (at least what we extracted)", raw=raw)
        return GenerationResult(text=text, finish_reason=self.extract_finish_reason(raw), raw=raw)


class ChatShape(_BaseShape):
    """Chronological ``messages`` list of ``{"role", "content"}`` entries."""

    kind = "chat"

    def attach_messages(self, params: Dict[str, Any], messages: Sequence[Dict[str, str]], names: ParticipantNames) -> None:
        params["messages"] = [dict(m) for m in messages]

    def attach_prompt(self, params: Dict[str, Any], prompt: str) -> None:
        params["messages"] = [{"role": "user", "content": prompt}]

    def render_prompt(self, params: Mapping[str, Any]) -> str:
        messages: List[Mapping[str, Any]] = params.get("messages") or []
        return "\n".join(f"{m['role']}: {m['content']}\n" for m in messages)

    async def send(self, backend: TextBackend, params: Dict[str, Any]) -> Any:
        return await backend.create_chat_completion(params)

    def extract_text(self, raw: Any) -> str:
        message = _get(_first_choice(raw), "message")
        if message is None:
            raise ResponseParseError("Chat response choice has no message", raw=raw)
        return _get(message, "content")


class CompletionShape(_BaseShape):
    """Single ``prompt`` string; conversations are rendered as a transcript."""

    kind = "completion"

    def attach_messages(self, params: Dict[str, Any], messages: Sequence[Dict[str, str]], names: ParticipantNames) -> None:
        preamble = ""
        lines: List[str] = []
        for m in messages:
            if m["role"] == "system":
                preamble = m["content"] + "\n\n"
            else:
                lines.append(f" {names.for_role(m['role'])}: {m['content']}\n")
        params["prompt"] = preamble + "".join(lines) + f" {names.assistant}:"

    def attach_prompt(self, params: Dict[str, Any], prompt: str) -> None:
        params["prompt"] = prompt

    def render_prompt(self, params: Mapping[str, Any]) -> str:
        return params.get("prompt") or ""

    async def send(self, backend: TextBackend, params: Dict[str, Any]) -> Any:
        return await backend.create_completion(params)

    def extract_text(self, raw: Any) -> str:
        return _get(_first_choice(raw), "text")


_SHAPES: Dict[str, RequestShape] = {
    "chat": ChatShape(),
    "completion": CompletionShape(),
}


def shape_for(kind: Optional[str]) -> Optional[RequestShape]:
    """Return the shared shape adapter for ``kind`` (``None`` when unknown)."""
    if kind is None:
        return None
    return _SHAPES.get(kind)


__all__ = ["RequestShape", "ChatShape", "CompletionShape", "shape_for"]
