"""Conversation session façade.

``ConversationSession`` runs one turn at a time against a text backend:

1. validate the input;
2. build a request for the chosen model from the persisted config plus a
   one-shot override;
3. send the running summary (or the default persona) as system context,
   followed by the unsummarized turns and the new message;
4. clamp the output length to the model's remaining budget and call the
   backend;
5. record the turn and start the per-turn gloss and the cutoff check in the
   background.

A turn that fails anywhere before step 5 leaves no trace in the history.
Background failures never reach the caller; they go to ``error_sink``.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from ..base.constants import (
    DEFAULT_PERSONA,
    DEFAULT_SUMMARIZE_CUTOFF,
    DEFAULT_SUMMARIZE_TARGET,
    FINISH_REASON_STOP,
    TRUNCATION_WARNING,
    USAGE_CHAT,
    USAGE_COMPLETION,
)
from ..base.errors import BackendError, InvalidInputError, ResponseParseError, to_backend_error
from ..base.history import ConversationState, HistoryStore, render_turns
from ..base.interfaces import TextBackend
from ..base.log_support import LogContext
from ..base.logging import get_logger, normalized_log_event
from ..base.models import ParticipantNames, RequestConfig, Turn
from ..base.request import RequestBody, RequestBuilder
from ..base.tasks import BackgroundTasks, ErrorSink
from ..base.tokens import TokenAccountant
from ..catalog import ModelCatalog
from ..summarization import Summarizer

Override = Union[RequestConfig, Mapping[str, Any], None]


class ConversationSession:
    """One conversation with a bounded-memory history.

    Args:
        backend: Text-generation backend.
        catalog: Model catalog; defaults to the bundled ``models.yaml``.
        accountant: Token accountant; defaults to tiktoken bounded by the
            catalog's largest ceiling.
        config: Persisted request config; defaults to one whose stop sequences
            match ``names``.
        names: Participant names. ``user_name`` is a shortcut for
            ``ParticipantNames(user=user_name)``.
        default_model: Model used by ``chat`` when the override names none.
        summarize_cutoff: Unsummarized token total that triggers a summary.
        summarize_target: ``max_tokens`` of summary requests.
        error_sink: Receives ``(exception, task_name)`` for background
            failures. Defaults to logging a ``task.error`` event.
        persona: System message used while there is no running summary.
    """

    def __init__(
        self,
        backend: TextBackend,
        *,
        catalog: Optional[ModelCatalog] = None,
        accountant: Optional[TokenAccountant] = None,
        config: Optional[RequestConfig] = None,
        names: Optional[ParticipantNames] = None,
        user_name: Optional[str] = None,
        default_model: Optional[str] = None,
        summarize_cutoff: int = DEFAULT_SUMMARIZE_CUTOFF,
        summarize_target: int = DEFAULT_SUMMARIZE_TARGET,
        error_sink: Optional[ErrorSink] = None,
        persona: str = DEFAULT_PERSONA,
    ) -> None:
        if names is None:
            names = ParticipantNames(user=user_name) if user_name else ParticipantNames()
        self.backend = backend
        self.catalog = catalog if catalog is not None else ModelCatalog.default()
        self.accountant = accountant or TokenAccountant.with_tiktoken(self.catalog.max_token_ceiling or None)
        self.default_model = default_model
        self.persona = persona
        self.logger = get_logger("session")

        self.state = ConversationState(names=names)
        self.builder = RequestBuilder(self.catalog, self.accountant, config, names)
        self.tasks = BackgroundTasks(error_sink)
        self.summarizer = Summarizer(self.state, self._summary_query, self.tasks, summarize_cutoff, summarize_target)

    @classmethod
    def from_config(cls, config: Mapping[str, Any], backend: TextBackend, **kwargs: Any) -> "ConversationSession":
        """Build a session from a ``get_session_config()`` mapping."""
        kwargs.setdefault("default_model", config.get("model"))
        kwargs.setdefault("user_name", config.get("user_name"))
        kwargs.setdefault("summarize_cutoff", int(config.get("summarize_cutoff", DEFAULT_SUMMARIZE_CUTOFF)))
        kwargs.setdefault("summarize_target", int(config.get("summarize_target", DEFAULT_SUMMARIZE_TARGET)))
        if config.get("persona"):
            kwargs.setdefault("persona", config["persona"])
        return cls(backend, **kwargs)

    # ---- properties ----------------------------------------------------

    @property
    def summary(self) -> str:
        return self.state.running_summary

    @property
    def history(self) -> HistoryStore:
        return self.state.history

    @property
    def names(self) -> ParticipantNames:
        return self.state.names

    @property
    def config(self) -> RequestConfig:
        return self.builder.config

    # ---- operations ----------------------------------------------------

    async def init(self) -> None:
        """Refresh the catalog's online model list (failures only warn)."""
        await self.catalog.refresh(self.backend)

    def configure(self, **changes: Any) -> RequestConfig:
        """Persist request-config changes; returns the previous config."""
        return self.builder.configure(changes)

    async def chat(self, input: str, override: Override = None) -> str:
        """Send ``input`` with the conversation context and record the turn.

        Raises:
            InvalidInputError: ``input`` is not a non-empty string or the
                override is invalid.
            UnknownModelError: No usable model.
            PromptTooLargeError: The context leaves no room for output.
            BackendError: The backend call failed.
            ResponseParseError: The response had no usable text.
        """
        self._check_input(input)
        body = self.builder.build(self._model_from(override, self.default_model), override, USAGE_CHAT)
        body.attach_messages(self._messages_for(input))
        self.builder.adjust_for_budget(body)

        input_tokens = self.accountant.count(input)
        output = await self._call(body)
        turn = Turn(
            input=input,
            output=output,
            input_tokens=input_tokens,
            output_tokens=self.accountant.count(output),
        )
        self.state.history.append(turn)
        normalized_log_event(
            self.logger,
            "turn.recorded",
            LogContext(model=body.model, usage=USAGE_CHAT, turn=len(self.state.history)),
            phase="chat",
            level=logging.DEBUG,
            tokens={"input": turn.input_tokens, "output": turn.output_tokens},
        )
        self.summarizer.schedule(turn)
        return output

    async def query(self, input: str, override: Override = None) -> str:
        """Send a single stateless prompt; nothing is recorded."""
        self._check_input(input)
        body = self.builder.build(self._model_from(override, None), override, USAGE_COMPLETION)
        body.attach_prompt(input)
        self.builder.adjust_for_budget(body)
        return await self._call(body)

    async def summarize(self) -> str:
        """Summarize the whole history now, regardless of the cutoff."""
        return await self.summarizer.summarize()

    def stats(self) -> Dict[str, int]:
        history = self.state.history
        return {
            "turns": len(history),
            "tokens": history.tokens_of(history.turns),
            "unsummarized_turns": len(history.unsummarized_turns()),
        }

    def delete_last(self, count: int = 1) -> List[Turn]:
        """Drop the last ``count`` turns; the running summary is kept as is."""
        removed = self.state.history.delete_last(count)
        normalized_log_event(
            self.logger,
            "history.deleted",
            phase="delete",
            level=logging.DEBUG,
            turns=len(removed),
        )
        return removed

    async def drain(self) -> None:
        """Wait for every background summary task to finish."""
        await self.tasks.drain()

    # ---- internals -----------------------------------------------------

    @staticmethod
    def _check_input(input: Any) -> None:
        if not isinstance(input, str) or not input:
            raise InvalidInputError(f"The input must be a non-empty string, got: {input!r}")

    @staticmethod
    def _model_from(override: Override, default: Optional[str]) -> Optional[str]:
        if isinstance(override, Mapping) and override.get("model"):
            return str(override["model"])
        return default

    async def _summary_query(self, prompt: str, override: Optional[Mapping[str, Any]] = None) -> str:
        """``query`` for summaries and glosses.

        The completion model can have a smaller ceiling than the chat model
        whose turns it summarizes. When the prompt plus the requested output
        does not fit it, the call goes to the chat model instead.
        """
        params: Dict[str, Any] = dict(override or {})
        if "model" not in params:
            completion = self.catalog.resolve(None, USAGE_COMPLETION)
            needed = self.accountant.count(prompt) + int(params.get("max_tokens") or 0)
            if needed > completion.token_ceiling:
                chat = self.catalog.resolve(self.default_model, USAGE_CHAT)
                if chat.shape is not None and chat.token_ceiling > completion.token_ceiling:
                    normalized_log_event(
                        self.logger,
                        "summary.model_switch",
                        LogContext(model=chat.id, usage=USAGE_COMPLETION),
                        phase="summarize",
                        level=logging.DEBUG,
                        tokens={"needed": needed, "ceiling": completion.token_ceiling},
                        replaced=completion.id,
                    )
                    params["model"] = chat.id
        return await self.query(prompt, params)

    def _messages_for(self, input: str) -> List[Dict[str, str]]:
        messages: List[Dict[str, str]] = [
            {"role": "system", "content": self.state.running_summary or self.persona}
        ]
        messages.extend(render_turns(self.state.history.unsummarized_turns(), "messages", self.state.names))
        messages.append({"role": "user", "content": input})
        return messages

    async def _call(self, body: RequestBody) -> str:
        shape = body.descriptor.shape
        ctx = LogContext(model=body.model, usage=body.descriptor.usage)
        try:
            raw = await shape.send(self.backend, body.params)
        except BackendError as exc:
            if exc.model is None:
                exc.model = body.model
            self._log_failure(ctx, exc)
            raise
        except Exception as exc:
            error = to_backend_error(exc, model=body.model)
            self._log_failure(ctx, error)
            raise error from exc

        try:
            result = shape.parse(raw)
        except ResponseParseError as exc:
            normalized_log_event(
                self.logger,
                "response.unparseable",
                ctx,
                phase="parse",
                level=logging.ERROR,
                error=str(exc),
                raw=repr(exc.raw)[:500],
            )
            raise

        output = result.text
        if result.finish_reason != FINISH_REASON_STOP:
            output += TRUNCATION_WARNING.format(reason=result.finish_reason)
        return output

    def _log_failure(self, ctx: LogContext, exc: BackendError) -> None:
        normalized_log_event(
            self.logger,
            "backend.error",
            ctx,
            phase="call",
            level=logging.ERROR,
            error_code=exc.code.value,
            status=exc.status,
            error_type=exc.error_type,
            retryable=exc.retryable,
            error=exc.message,
        )


__all__ = ["ConversationSession"]
