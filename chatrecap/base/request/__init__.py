"""Request shaping: shape adapters plus the budget-aware builder."""

from .builder import RequestBody, RequestBuilder
from .shapes import ChatShape, CompletionShape, RequestShape, shape_for

__all__ = [
    "RequestBody",
    "RequestBuilder",
    "RequestShape",
    "ChatShape",
    "CompletionShape",
    "shape_for",
]
