"""OpenAI text backend built on ``openai.AsyncOpenAI``.

The backend is a thin pass-through: bodies are already shaped and budgeted by
the session, so it only forwards them to the SDK and returns the raw
response objects. SDK exceptions are mapped onto :class:`BackendError` with
a normalized :class:`ErrorCode`, the HTTP status and the API error type.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from openai import AsyncOpenAI

from ..base.errors import BackendError, to_backend_error
from ..base.logging import get_logger, normalized_log_event
from ..base.log_support import LogContext
from ..config import get_session_config

__all__ = ["OpenAIBackend"]


class OpenAIBackend:
    """``TextBackend`` implementation for the OpenAI API.

    Args:
        api_key: API key; defaults to the ``api_key`` of the session config
            (``OPENAI_API_KEY``).
        base_url: Alternative API base URL (``OPENAI_BASE_URL``).
        client: Pre-built client, mainly for tests.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        client: Optional[Any] = None,
    ) -> None:
        if client is None:
            cfg = get_session_config()
            client = AsyncOpenAI(
                api_key=api_key or cfg.get("api_key"),
                base_url=base_url or cfg.get("base_url"),
            )
        self._client = client
        self._logger = get_logger("backends.openai")

    async def list_models(self) -> List[str]:
        try:
            page = await self._client.models.list()
            ids = [m.id async for m in page] if hasattr(page, "__aiter__") else [m.id for m in page.data]
        except BackendError:
            raise
        except Exception as exc:
            raise self._wrap(exc, None, "list_models") from exc
        return ids

    async def create_chat_completion(self, body: Mapping[str, Any]) -> Any:
        return await self._invoke(self._client.chat.completions.create, body, "chat")

    async def create_completion(self, body: Mapping[str, Any]) -> Any:
        return await self._invoke(self._client.completions.create, body, "completion")

    async def _invoke(self, create: Any, body: Mapping[str, Any], operation: str) -> Any:
        params: Dict[str, Any] = dict(body)
        model = params.get("model")
        try:
            return await create(**params)
        except BackendError:
            raise
        except Exception as exc:
            raise self._wrap(exc, model, operation) from exc

    def _wrap(self, exc: Exception, model: Optional[str], operation: str) -> BackendError:
        error = to_backend_error(exc, model=model)
        normalized_log_event(
            self._logger,
            "backend.sdk_error",
            LogContext(model=model),
            phase=operation,
            error_code=error.code.value,
            status=error.status,
            error_type=error.error_type,
        )
        return error
