"""Per-model request construction and token-budget enforcement.

``RequestBuilder`` owns the session's persisted :class:`RequestConfig`. Every
call derives a one-shot config from it (``merged``) and keeps only the
parameters the target model accepts, so per-call overrides never leak.

Budget rule: the rendered prompt plus the requested output may not exceed the
model's token ceiling. When it would, ``max_tokens`` is clamped to what is
left; when nothing is left the request is refused with
:class:`PromptTooLargeError`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Sequence, Union

from ..constants import USAGE_CHAT
from ..errors import PromptTooLargeError, UnknownModelError
from ..log_support import LogContext
from ..logging import get_logger, normalized_log_event
from ..models import ModelDescriptor, ParticipantNames, RequestConfig
from ..tokens import TokenAccountant

if TYPE_CHECKING:  # pragma: no cover
    from ...catalog import ModelCatalog

Override = Union[RequestConfig, Mapping[str, Any], None]


@dataclass
class RequestBody:
    """A request for one model, keyed by backend API parameter names."""

    descriptor: ModelDescriptor
    params: Dict[str, Any] = field(default_factory=dict)
    names: ParticipantNames = field(default_factory=ParticipantNames)

    @property
    def model(self) -> str:
        return self.descriptor.id

    @property
    def max_output_tokens(self) -> Optional[int]:
        return self.params.get("max_tokens")

    def attach_messages(self, messages: Sequence[Dict[str, str]]) -> "RequestBody":
        self.descriptor.shape.attach_messages(self.params, messages, self.names)
        return self

    def attach_prompt(self, prompt: str) -> "RequestBody":
        self.descriptor.shape.attach_prompt(self.params, prompt)
        return self

    def rendered_prompt(self) -> str:
        """Return the prompt text as the token accountant should see it."""
        return self.descriptor.shape.render_prompt(self.params)


class RequestBuilder:
    """Builds budget-checked request bodies from catalog metadata.

    Attributes:
        catalog: Model lookup used to resolve ids.
        accountant: Token counter for prompt sizing.
        config: The persisted session config. Replace it through
            :meth:`configure`; per-call overrides go through :meth:`build`.
    """

    def __init__(
        self,
        catalog: "ModelCatalog",
        accountant: TokenAccountant,
        config: Optional[RequestConfig] = None,
        names: Optional[ParticipantNames] = None,
    ) -> None:
        self.catalog = catalog
        self.accountant = accountant
        self.names = names or ParticipantNames()
        self.config = config or RequestConfig.for_names(self.names.user, self.names.assistant)
        self.logger = get_logger("request")

    def build(self, model_id: Optional[str], override: Override = None, usage: str = USAGE_CHAT) -> RequestBody:
        """Return a body for ``model_id`` carrying the merged, filtered parameters.

        Raises:
            UnknownModelError: The catalog is empty or the resolved model has
                no request shape.
            InvalidInputError: ``override`` holds an invalid value.
        """
        if isinstance(override, Mapping) and "model" in override:
            override = {k: v for k, v in override.items() if k != "model"}
        descriptor = self.catalog.resolve(model_id, usage)
        if descriptor.shape is None:
            raise UnknownModelError(f"Model {descriptor.id} cannot serve {usage} requests")

        params = {
            name: value
            for name, value in self.config.merged(override).to_params().items()
            if descriptor.accepts(name)
        }
        params["model"] = descriptor.id
        return RequestBody(descriptor=descriptor, params=params, names=self.names)

    def adjust_for_budget(self, body: RequestBody, rendered_prompt: Optional[str] = None) -> RequestBody:
        """Clamp ``max_tokens`` so prompt plus output fits the token ceiling.

        Raises:
            PromptTooLargeError: The prompt alone fills the ceiling.
        """
        ceiling = body.descriptor.token_ceiling
        prompt = rendered_prompt if rendered_prompt is not None else body.rendered_prompt()
        prompt_tokens = self.accountant.count(prompt)
        if prompt_tokens >= ceiling:
            raise PromptTooLargeError(prompt_tokens, ceiling, body.model)

        requested = body.max_output_tokens
        if requested is not None and prompt_tokens + requested > ceiling:
            clamped = ceiling - prompt_tokens
            body.params["max_tokens"] = clamped
            normalized_log_event(
                self.logger,
                "request.clamp",
                LogContext(model=body.model),
                phase="budget",
                level=logging.WARNING,
                tokens={"prompt": prompt_tokens, "requested": requested, "clamped": clamped, "ceiling": ceiling},
            )
        return body

    def configure(self, changes: Override) -> RequestConfig:
        """Persist ``changes`` into the session config and return the old one.

        A ``max_output_tokens`` above every model's ceiling is logged and
        dropped; the remaining changes are still applied.
        """
        previous = self.config
        if not changes:
            return previous
        if isinstance(changes, RequestConfig):
            changes = changes.model_dump(exclude_unset=True)
        updates = dict(changes)
        requested = updates.get("max_output_tokens", updates.get("max_tokens"))
        limit = self.catalog.max_token_ceiling
        if requested is not None and limit and requested > limit:
            normalized_log_event(
                self.logger,
                "config.rejected",
                phase="configure",
                level=logging.ERROR,
                tokens={"requested": requested, "limit": limit},
                reason="max_tokens exceeds every model's token ceiling",
            )
            updates.pop("max_output_tokens", None)
            updates.pop("max_tokens", None)
        self.config = previous.merged(updates)
        return previous


__all__ = ["RequestBody", "RequestBuilder"]
