"""Interface parts package: one protocol per module."""

from .text_backend import TextBackend
from .token_oracle import TokenOracle

__all__ = ["TextBackend", "TokenOracle"]
