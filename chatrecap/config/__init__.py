"""Unified configuration layer for the session and the CLI.

Goals
-----
* Centralize defaults (model, user name, summarization thresholds, EOF marker).
* Merge sources in a predictable order (later wins):
    1. Built-in defaults (``chatrecap.config.defaults``)
    2. Optional external config file (JSON or YAML) pointed to by
       ``CHATRECAP_CONFIG_FILE``
    3. Environment variables (``CHATRECAP_MODEL``, ``OPENAI_API_KEY`` ...)
    4. In-code overrides passed to the helper
* Provide a single call site: ``get_session_config(overrides)``.

A ``.env`` file (``DOTENV_FILE``, default ``.env``) is read once before the
environment is consulted. It never replaces real values, only unset ones or
ones that look like placeholders.

External Config File (Optional)
-------------------------------
JSON is tried first, then YAML. Structure example:

```
model: gpt-4
user_name: Ada
summarize_cutoff: 3000
summarize_target: 600
persona: "You are a terse assistant."
```

Public API
----------
* get_session_config(overrides: dict | None = None) -> dict
* reset_config_cache() -> None
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..base.logging import get_logger, normalized_log_event
from .defaults import (
    CLI_DEFAULT_EOF,
    SESSION_DEFAULT_MODEL,
    SESSION_DEFAULT_PERSONA,
    SESSION_DEFAULT_SUMMARIZE_CUTOFF,
    SESSION_DEFAULT_SUMMARIZE_TARGET,
    SESSION_DEFAULT_USER_NAME,
)
from .env import CONFIG_FILE_ENV, DOTENV_FILE_ENV, ENV_FIELD_MAP, INT_FIELDS, is_placeholder

DEFAULTS: Dict[str, Any] = {
    "model": SESSION_DEFAULT_MODEL,
    "user_name": SESSION_DEFAULT_USER_NAME,
    "persona": SESSION_DEFAULT_PERSONA,
    "summarize_cutoff": SESSION_DEFAULT_SUMMARIZE_CUTOFF,
    "summarize_target": SESSION_DEFAULT_SUMMARIZE_TARGET,
    "eof": CLI_DEFAULT_EOF,
}

_FILE_CACHE: Optional[Dict[str, Any]] = None
_DOTENV_LOADED = False

_logger = get_logger("config")


def _load_dotenv_once() -> None:
    """Parse KEY=VALUE lines of the ``.env`` file into ``os.environ`` once."""
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    path = os.getenv(DOTENV_FILE_ENV, ".env")
    if not os.path.isfile(path):
        _DOTENV_LOADED = True
        return
    try:
        with open(path, "r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                k, v = line.split("=", 1)
                k = k.strip()
                v = v.strip().strip('"').strip("'")
                if k and (k not in os.environ or is_placeholder(os.environ.get(k))):
                    os.environ[k] = v
    finally:
        _DOTENV_LOADED = True


def _load_external_config() -> Dict[str, Any]:
    global _FILE_CACHE
    if _FILE_CACHE is not None:
        return _FILE_CACHE
    path = os.getenv(CONFIG_FILE_ENV)
    if not path or not Path(path).exists():
        _FILE_CACHE = {}
        return _FILE_CACHE
    text = Path(path).read_text(encoding="utf-8")
    try:
        data: Any = json.loads(text)
    except ValueError:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            normalized_log_event(
                _logger,
                "config.file_invalid",
                phase="load",
                level=logging.WARNING,
                path=path,
                error=str(exc),
            )
            data = {}
    if not isinstance(data, dict):
        data = {}
    _FILE_CACHE = data
    return data


def _env_overrides() -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for field, name in ENV_FIELD_MAP.items():
        val = os.getenv(name)
        if val is not None and val != "":
            out[field] = val
    return out


def _coerce(cfg: Dict[str, Any]) -> Dict[str, Any]:
    for field in INT_FIELDS:
        val = cfg.get(field)
        if isinstance(val, str):
            try:
                cfg[field] = int(val)
            except ValueError:
                normalized_log_event(
                    _logger,
                    "config.invalid_value",
                    phase="load",
                    level=logging.WARNING,
                    field=field,
                    value=val,
                )
                cfg[field] = DEFAULTS[field]
    eof = cfg.get("eof")
    if isinstance(eof, str):
        cfg["eof"] = eof.replace("\\n", "\n")
    return cfg


def get_session_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return the merged session configuration.

    Merge order (later wins): defaults -> external config -> env vars -> overrides.
    ``None`` values in ``overrides`` are ignored.
    """
    _load_dotenv_once()
    cfg: Dict[str, Any] = dict(DEFAULTS)
    cfg |= _load_external_config()
    cfg |= _env_overrides()
    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}
    return _coerce(cfg)


def reset_config_cache() -> None:
    """Forget the cached config file and ``.env`` state (used by tests)."""
    global _FILE_CACHE, _DOTENV_LOADED
    _FILE_CACHE = None
    _DOTENV_LOADED = False


__all__ = ["get_session_config", "reset_config_cache", "DEFAULTS"]
