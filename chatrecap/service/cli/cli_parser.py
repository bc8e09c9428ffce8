"""CLI parser construction for the ``chatrecap`` shell.

Contains no execution logic; see ``cli_shell`` for the interactive loop.
Flags left unset fall back to ``get_session_config()`` values.
"""

from __future__ import annotations

import argparse

from ...config.defaults import CLI_DEFAULT_LOG_LEVEL


def build_parser() -> argparse.ArgumentParser:
    """Return the argument parser of the interactive shell."""
    p = argparse.ArgumentParser(
        prog="chatrecap",
        description="Chat with a text-generation model; older turns are folded into a running summary.",
    )
    p.add_argument("--model", default=None, help="Chat model id (default: CHATRECAP_MODEL or gpt-4o-mini)")
    p.add_argument("--name", default=None, help="Your name as shown to the model (default: CHATRECAP_USER_NAME)")
    p.add_argument(
        "--mock",
        action="store_true",
        help="Use the offline scripted backend instead of the OpenAI API",
    )
    p.add_argument(
        "--log-level",
        default=CLI_DEFAULT_LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Console log level (JSON lines on stderr)",
    )
    p.add_argument(
        "--eof",
        default=None,
        help=r"End-of-message marker; '\n' sends on <Enter> (default: CHATRECAP_EOF)",
    )
    return p


__all__ = ["build_parser"]
