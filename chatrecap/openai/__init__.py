"""OpenAI backend adapter."""

from .backend import OpenAIBackend

__all__ = ["OpenAIBackend"]
