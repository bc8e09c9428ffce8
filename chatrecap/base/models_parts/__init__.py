"""Models parts package public surface.

Re-exports individual DTOs so callers can import from
`chatrecap.base.models_parts` if needed, while `chatrecap.base.models` remains
the primary stable import path.
"""

from .turn import Turn, ParticipantNames
from .request_config import RequestConfig, API_PARAMETER_NAMES, stop_sequences_for
from .model_descriptor import ModelDescriptor, RequestKind
from .generation import GenerationResult

__all__ = [
    "Turn",
    "ParticipantNames",
    "RequestConfig",
    "API_PARAMETER_NAMES",
    "stop_sequences_for",
    "ModelDescriptor",
    "RequestKind",
    "GenerationResult",
]
