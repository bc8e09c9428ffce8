"""chatrecap.config.env
=====================

Environment variable names understood by the session configuration, plus the
placeholder heuristic used by the ``.env`` loader.

Helpers never raise on unset variables; callers decide how to proceed.
"""

from __future__ import annotations

import os
from typing import Dict, Optional

# Config field -> environment variable
ENV_FIELD_MAP: Dict[str, str] = {
    "model": "CHATRECAP_MODEL",
    "user_name": "CHATRECAP_USER_NAME",
    "summarize_cutoff": "CHATRECAP_SUMMARIZE_CUTOFF",
    "summarize_target": "CHATRECAP_SUMMARIZE_TARGET",
    "eof": "CHATRECAP_EOF",
    "api_key": "OPENAI_API_KEY",  # pragma: allowlist secret - env var name, not a secret
    "base_url": "OPENAI_BASE_URL",
}

INT_FIELDS = ("summarize_cutoff", "summarize_target")

CONFIG_FILE_ENV = "CHATRECAP_CONFIG_FILE"
DOTENV_FILE_ENV = "DOTENV_FILE"

_PLACEHOLDER_MARKERS = ("placeholder", "changeme", "example")


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if ``val`` looks like a placeholder/test value.

    Heuristics: contains 'placeholder', 'changeme' or 'example', or starts
    with 'test_'. Case-insensitive; surrounding spaces are ignored.
    """
    if val is None:
        return False
    s = val.strip().lower()
    if not s:
        return False
    return any(m in s for m in _PLACEHOLDER_MARKERS) or s.startswith("test_")


def read_env(field: str) -> Optional[str]:
    """Return the environment value for a config ``field`` (``None`` if unset)."""
    name = ENV_FIELD_MAP.get(field)
    return os.getenv(name) if name else None


__all__ = ["ENV_FIELD_MAP", "INT_FIELDS", "CONFIG_FILE_ENV", "DOTENV_FILE_ENV", "is_placeholder", "read_env"]
