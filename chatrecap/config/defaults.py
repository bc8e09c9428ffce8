"""chatrecap.config.defaults
==========================

Central place for small, stable default values of the session and the CLI.
They can be overridden via a config file, environment variables or explicit
overrides (see :func:`chatrecap.config.get_session_config`).

Only plain constants live here; no I/O and no imports from other chatrecap
packages besides the core constants.
"""

from __future__ import annotations

from ..base.constants import (
    DEFAULT_PERSONA,
    DEFAULT_SUMMARIZE_CUTOFF,
    DEFAULT_SUMMARIZE_TARGET,
    DEFAULT_USER_NAME,
)

# ---- Session ----
# Chat model used when neither config nor the CLI names one.
SESSION_DEFAULT_MODEL = "gpt-4o-mini"
SESSION_DEFAULT_USER_NAME = DEFAULT_USER_NAME
SESSION_DEFAULT_PERSONA = DEFAULT_PERSONA
SESSION_DEFAULT_SUMMARIZE_CUTOFF = DEFAULT_SUMMARIZE_CUTOFF
SESSION_DEFAULT_SUMMARIZE_TARGET = DEFAULT_SUMMARIZE_TARGET

# ---- CLI ----
# End-of-message marker; a bare newline sends on <Enter>.
CLI_DEFAULT_EOF = "\n"
CLI_DEFAULT_LOG_LEVEL = "WARNING"

__all__ = [
    "SESSION_DEFAULT_MODEL",
    "SESSION_DEFAULT_USER_NAME",
    "SESSION_DEFAULT_PERSONA",
    "SESSION_DEFAULT_SUMMARIZE_CUTOFF",
    "SESSION_DEFAULT_SUMMARIZE_TARGET",
    "CLI_DEFAULT_EOF",
    "CLI_DEFAULT_LOG_LEVEL",
]
