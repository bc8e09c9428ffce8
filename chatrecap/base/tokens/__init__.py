"""Token accounting: oracle wrapper with a character-based fallback."""

from .accountant import TokenAccountant, TiktokenOracle, estimate_tokens, DEFAULT_ENCODING

__all__ = ["TokenAccountant", "TiktokenOracle", "estimate_tokens", "DEFAULT_ENCODING"]
