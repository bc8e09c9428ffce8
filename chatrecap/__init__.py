"""chatrecap package

Conversation sessions with bounded memory: older turns of a conversation are
folded into a running summary instead of being dropped, so every request
stays within the model's token budget.

Public API (re-exported):
    - Version: ``__version__``
    - Session: :class:`ConversationSession`
    - Catalog: :class:`ModelCatalog`
    - Configuration DTOs: :class:`RequestConfig`, :class:`ParticipantNames`,
      :class:`Turn`
    - Backends: :class:`ScriptedBackend` (``chatrecap.openai.OpenAIBackend``
      is imported on demand)
    - Exceptions: :class:`ChatRecapError` and subclasses, :class:`ErrorCode`
"""

from .base.errors import (
    AccountingError,
    BackendError,
    ChatRecapError,
    ErrorCode,
    InvalidInputError,
    PromptTooLargeError,
    ResponseParseError,
    UnknownModelError,
)
from .base.models import ParticipantNames, RequestConfig, Turn
from .base.tokens import TokenAccountant
from .catalog import ModelCatalog
from .mock import ScriptedBackend
from .session import ConversationSession

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ConversationSession",
    "ModelCatalog",
    "TokenAccountant",
    "RequestConfig",
    "ParticipantNames",
    "Turn",
    "ScriptedBackend",
    "ChatRecapError",
    "InvalidInputError",
    "UnknownModelError",
    "PromptTooLargeError",
    "AccountingError",
    "BackendError",
    "ResponseParseError",
    "ErrorCode",
]
