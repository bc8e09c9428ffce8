"""TextBackend Protocol (single-class module).

Defines the capability contract the conversation core needs from a remote
text-generation service.
"""

from __future__ import annotations

from typing import Any, Dict, Protocol, Sequence, runtime_checkable


@runtime_checkable
class TextBackend(Protocol):
    """Asynchronous text-generation backend.

    Responses are returned raw (OpenAI-shaped mappings or SDK objects); the
    model's request shape extracts text and finish reason from them.
    Implementations raise :class:`chatrecap.base.errors.BackendError` when the
    service rejects or fails a request.
    """

    async def list_models(self) -> Sequence[str]:
        """Return the identifiers of the models the service exposes."""
        ...

    async def create_chat_completion(self, body: Dict[str, Any]) -> Any:
        """Run a chat request whose body carries a chronological ``messages`` list."""
        ...

    async def create_completion(self, body: Dict[str, Any]) -> Any:
        """Run a completion request whose body carries a ``prompt`` string."""
        ...


__all__ = ["TextBackend"]
