"""Collaborator interfaces public surface.

Re-exports the protocols under ``chatrecap.base.interfaces_parts``.
"""

from .interfaces_parts.text_backend import TextBackend
from .interfaces_parts.token_oracle import TokenOracle

__all__ = ["TextBackend", "TokenOracle"]
