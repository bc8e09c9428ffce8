"""Interactive chat CLI (package entrypoint).

Wires argument parsing, configuration and logging to :class:`ChatShell`.
No conversation logic lives here.

Public API re-exports:
- ``main``: CLI entrypoint callable
- ``build_session``: session factory used by ``main`` and tests
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import Any, Dict, Optional

from ...base.logging import configure_logger
from ...config import get_session_config
from ...mock import ScriptedBackend
from ...session import ConversationSession
from .cli_parser import build_parser
from .cli_shell import ChatShell


def build_session(args: argparse.Namespace) -> tuple[ConversationSession, Dict[str, Any]]:
    """Return the session and the merged config for parsed ``args``."""
    cfg = get_session_config({"model": args.model, "user_name": args.name, "eof": args.eof})
    if args.mock:
        backend: Any = ScriptedBackend(models=())
    else:
        # Local import keeps --mock runs free of SDK client construction.
        from ...openai import OpenAIBackend

        backend = OpenAIBackend(api_key=cfg.get("api_key"), base_url=cfg.get("base_url"))
    return ConversationSession.from_config(cfg, backend), cfg


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entrypoint.

    Parameters
    ----------
    argv: Optional[list[str]]
        Argument vector; when ``None`` uses ``sys.argv[1:]``.

    Returns
    -------
    int
        Process exit code (0 success, non-zero on error).
    """
    args = build_parser().parse_args(list(sys.argv[1:] if argv is None else argv))
    configure_logger(level=args.log_level)
    session, cfg = build_session(args)
    shell = ChatShell(session, eof=cfg["eof"])
    try:
        return asyncio.run(shell.run())
    except KeyboardInterrupt:
        return 130


__all__ = ["main", "build_session"]


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
