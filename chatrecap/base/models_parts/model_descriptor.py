"""
ModelDescriptor DTO describing one entry of the model catalog.

Descriptors are immutable and loaded once. ``request_kind`` tags the request
shape the model speaks (``"chat"`` messages or ``"completion"`` prompt) and
``shape`` returns the matching adapter that builds payloads and parses responses.
Models with no request kind (e.g. fine-tune-only bases) can be listed but not
called.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Literal, Optional

if TYPE_CHECKING:  # pragma: no cover
    from ..request.shapes import RequestShape

RequestKind = Literal["chat", "completion"]


@dataclass(frozen=True)
class ModelDescriptor:
    """Static capabilities of a single model.

    Attributes:
        id: Backend model identifier.
        token_ceiling: Maximum prompt + output tokens per call.
        accepted_parameters: Backend parameter names the model accepts.
        request_kind: ``"chat"``, ``"completion"`` or ``None`` when the model
            cannot serve generation requests.
        usage: Declared purpose used for default selection.
        family: Informational model family.
    """

    id: str
    token_ceiling: int
    accepted_parameters: FrozenSet[str] = frozenset()
    request_kind: Optional[RequestKind] = None
    usage: Optional[str] = None
    family: Optional[str] = None

    @property
    def shape(self) -> Optional["RequestShape"]:
        """Return the request-shape adapter for ``request_kind``."""
        from ..request.shapes import shape_for

        return shape_for(self.request_kind)

    def accepts(self, parameter: str) -> bool:
        return parameter in self.accepted_parameters

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable view (without the shape adapter)."""
        return {
            "id": self.id,
            "family": self.family,
            "token_ceiling": self.token_ceiling,
            "usage": self.usage,
            "request_kind": self.request_kind,
            "accepted_parameters": sorted(self.accepted_parameters),
        }


__all__ = ["ModelDescriptor", "RequestKind"]
