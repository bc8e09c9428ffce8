"""
Pydantic request configuration owned by each conversation session.

Purpose
-------
``RequestConfig`` holds the session-scoped sampling defaults sent to the
backend on every call. It is immutable: a one-shot override produces a
*derived* config through :meth:`RequestConfig.merged` and the persisted value
is never touched, so overrides cannot leak into later turns.

Field names follow the conversation domain (``max_output_tokens``,
``stop_sequences`` ...); aliases carry the backend API parameter names
(``max_tokens``, ``stop`` ...). Both spellings are accepted on input and
:meth:`RequestConfig.to_params` emits API names.

Failure semantics
-----------------
Out-of-range values or unknown keys raise :class:`InvalidInputError` wrapping
the underlying ``pydantic.ValidationError``.
"""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..constants import DEFAULT_ASSISTANT_NAME, DEFAULT_USER_NAME
from ..errors import InvalidInputError


def stop_sequences_for(user: str, assistant: str) -> List[str]:
    """Return the speaker-label stop sequences for a pair of participant names."""
    return [f" {user}:", f" {assistant}:"]


class RequestConfig(BaseModel):
    """Session-scoped sampling defaults for backend requests.

    Attributes:
        max_output_tokens: Requested completion length (``max_tokens``).
        top_p: Nucleus sampling mass, change this or ``temperature``.
        temperature: Sampling temperature, lower is more deterministic.
        frequency_penalty: Penalizes repeating the same tokens.
        presence_penalty: Penalizes tokens already present at all.
        stop_sequences: Up to four stop strings (``stop``).
        sample_count: Number of choices to generate (``n``).
        logit_bias: Token-id to bias mapping.
        log_probs: Number of log probabilities to return (``logprobs``).
        echo: Echo the prompt back (completion models only).
        best_of: Server-side candidates (completion models only).
        suffix: Text after the insertion point (completion models only).
        streaming: Request a streamed response (``stream``).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    max_output_tokens: Optional[int] = Field(default=1024, gt=0, alias="max_tokens")
    top_p: Optional[float] = Field(default=1.0, ge=0.0, le=1.0)
    temperature: Optional[float] = Field(default=1.0, ge=0.0, le=2.0)
    frequency_penalty: Optional[float] = Field(default=0.1, ge=-2.0, le=2.0)
    presence_penalty: Optional[float] = Field(default=0.6, ge=-2.0, le=2.0)
    stop_sequences: Optional[List[str]] = Field(
        default_factory=lambda: stop_sequences_for(DEFAULT_USER_NAME, DEFAULT_ASSISTANT_NAME),
        max_length=4,
        alias="stop",
    )
    sample_count: Optional[int] = Field(default=1, ge=1, alias="n")
    logit_bias: Optional[Dict[str, float]] = None
    log_probs: Optional[int] = Field(default=None, ge=0, alias="logprobs")
    echo: Optional[bool] = False
    best_of: Optional[int] = Field(default=1, ge=1)
    suffix: Optional[str] = None
    streaming: Optional[bool] = Field(default=False, alias="stream")

    @classmethod
    def for_names(cls, user: str, assistant: str, **fields: Any) -> "RequestConfig":
        """Build a config whose stop sequences match the given participant names."""
        fields.setdefault("stop_sequences", stop_sequences_for(user, assistant))
        return cls.from_mapping(fields)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "RequestConfig":
        """Validate a mapping (domain or API names) into a config."""
        try:
            return cls.model_validate(dict(data))
        except ValidationError as exc:
            raise InvalidInputError(f"Invalid request configuration: {exc}") from exc

    def merged(self, override: Union["RequestConfig", Mapping[str, Any], None] = None) -> "RequestConfig":
        """Return a new config with ``override`` applied on top of this one.

        ``self`` is left untouched. For a ``RequestConfig`` override only the
        fields explicitly set on it are applied.
        """
        if not override:
            return self
        if isinstance(override, RequestConfig):
            updates = override.model_dump(exclude_unset=True)
        else:
            updates = {_FIELD_BY_ALIAS.get(k, k): v for k, v in override.items()}
        data = self.model_dump()
        data.update(updates)
        return RequestConfig.from_mapping(data)

    def to_params(self) -> Dict[str, Any]:
        """Return the non-``None`` fields keyed by backend API parameter name."""
        return self.model_dump(by_alias=True, exclude_none=True)


_FIELD_BY_ALIAS: Dict[str, str] = {
    info.alias: name for name, info in RequestConfig.model_fields.items() if info.alias
}

#: Every backend parameter name a ``RequestConfig`` can produce.
API_PARAMETER_NAMES = frozenset(info.alias or name for name, info in RequestConfig.model_fields.items())


__all__ = ["RequestConfig", "API_PARAMETER_NAMES", "stop_sequences_for"]
