"""
Conversation-core domain models (DTOs) public surface.

Re-exports the one-class-per-file implementations under
``chatrecap.base.models_parts``.
"""

from .models_parts.turn import Turn, ParticipantNames
from .models_parts.request_config import RequestConfig, API_PARAMETER_NAMES, stop_sequences_for
from .models_parts.model_descriptor import ModelDescriptor, RequestKind
from .models_parts.generation import GenerationResult

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
