"""YAML loader for the bundled model catalog.

YAML Schema
-----------

.. code-block:: yaml

    models:
      - id: gpt-4
        family: gpt-4
        token_ceiling: 8192
        usage: chat
        request_kind: chat
        accepted_parameters: [max_tokens, temperature, stop]

Only ``id`` and ``token_ceiling`` are required per entry. A top-level
``parameter_sets`` block may hold YAML anchors shared between entries and is
otherwise ignored.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..base.models import ModelDescriptor

_REQUEST_KINDS = ("chat", "completion")


def default_catalog_path() -> Path:
    """Return the path of ``models.yaml`` shipped next to this module."""
    return Path(__file__).resolve().parent / "models.yaml"


def _load_yaml_document(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    data: Any = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Catalog file {path} must contain a mapping at top level.")
    return data


def _descriptor_from_entry(entry: Dict[str, Any]) -> ModelDescriptor:
    """Convert one catalog entry into a :class:`ModelDescriptor`.

    Raises
    ------
    ValueError
        If ``id`` is missing, ``token_ceiling`` is not a positive integer or
        ``request_kind`` is not one of the known shapes.
    """
    mid = entry.get("id")
    if not mid:
        raise ValueError(f"Catalog entry without id: {entry!r}")
    try:
        ceiling = int(entry.get("token_ceiling"))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Catalog entry {mid} has an invalid token_ceiling") from exc
    if ceiling <= 0:
        raise ValueError(f"Catalog entry {mid} has a non-positive token_ceiling")
    kind = entry.get("request_kind")
    if kind is not None and kind not in _REQUEST_KINDS:
        raise ValueError(f"Catalog entry {mid} has unknown request_kind {kind!r}")
    family = entry.get("family")
    usage = entry.get("usage")
    return ModelDescriptor(
        id=str(mid),
        token_ceiling=ceiling,
        accepted_parameters=frozenset(str(p) for p in entry.get("accepted_parameters") or ()),
        request_kind=kind,
        usage=str(usage) if usage is not None else None,
        family=str(family) if family is not None else None,
    )


def load_catalog(path: Optional[Path] = None) -> List[ModelDescriptor]:
    """Parse the catalog file into descriptors, preserving file order."""
    doc = _load_yaml_document(path or default_catalog_path())
    entries = doc.get("models") or []
    if not isinstance(entries, list):
        raise ValueError("Catalog 'models' must be a list.")
    return [_descriptor_from_entry(e) for e in entries if isinstance(e, dict)]


__all__ = ["load_catalog", "default_catalog_path"]
