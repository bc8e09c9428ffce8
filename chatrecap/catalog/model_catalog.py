"""In-memory model catalog.

The catalog is a read-only lookup table built once from ``models.yaml``. An
optional :meth:`ModelCatalog.refresh` asks the backend which models it
actually serves; that list is advisory only and never blocks a request.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Set

from ..base.errors import UnknownModelError
from ..base.interfaces import TextBackend
from ..base.log_support import LogContext
from ..base.logging import get_logger, normalized_log_event
from ..base.models import ModelDescriptor
from .loader import load_catalog


class ModelCatalog:
    """Ordered mapping of model id to :class:`ModelDescriptor`.

    Attributes:
        online_models: Ids reported by the backend after a successful
            :meth:`refresh`, else ``None``.
    """

    def __init__(self, descriptors: Iterable[ModelDescriptor] = ()) -> None:
        self._models: Dict[str, ModelDescriptor] = {}
        for d in descriptors:
            self._models.setdefault(d.id, d)
        self.online_models: Optional[Set[str]] = None
        self.logger = get_logger("catalog")

    @classmethod
    def default(cls) -> "ModelCatalog":
        """Build the catalog from the bundled ``models.yaml``."""
        return cls(load_catalog())

    def get(self, model_id: str) -> Optional[ModelDescriptor]:
        return self._models.get(model_id)

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._models

    def __iter__(self) -> Iterator[ModelDescriptor]:
        return iter(list(self._models.values()))

    def __len__(self) -> int:
        return len(self._models)

    @property
    def ids(self) -> List[str]:
        return list(self._models)

    @property
    def max_token_ceiling(self) -> int:
        """Largest token ceiling of any model (0 for an empty catalog)."""
        return max((d.token_ceiling for d in self._models.values()), default=0)

    def resolve(self, candidate_id: Optional[str], fallback_usage: Optional[str]) -> ModelDescriptor:
        """Return the descriptor to use for ``candidate_id``.

        Unknown or missing ids fall back to the first model whose usage is
        ``fallback_usage`` and then to the first model in the catalog.

        Raises:
            UnknownModelError: The catalog is empty.
        """
        if not self._models:
            raise UnknownModelError("The model catalog is empty")

        descriptor = self._models.get(candidate_id) if candidate_id else None
        if descriptor is None:
            descriptor = next((d for d in self._models.values() if d.usage == fallback_usage), None)
            if descriptor is not None and candidate_id:
                self._warn_fallback(candidate_id, descriptor, fallback_usage, "unknown model, using usage default")
        if descriptor is None:
            descriptor = next(iter(self._models.values()))
            self._warn_fallback(candidate_id, descriptor, fallback_usage, "no model for usage, using first model")

        if self.online_models is not None and descriptor.id not in self.online_models:
            normalized_log_event(
                self.logger,
                "catalog.offline_model",
                LogContext(model=descriptor.id, usage=fallback_usage),
                phase="resolve",
                level=logging.WARNING,
                reason="model is not in the backend's model list",
            )
        return descriptor

    async def refresh(self, backend: TextBackend) -> Optional[Set[str]]:
        """Fetch the backend's model list; failures only log a warning."""
        try:
            listed = await backend.list_models()
        except Exception as exc:  # noqa: BLE001 - the online list is advisory
            self.online_models = None
            normalized_log_event(
                self.logger,
                "catalog.refresh_failed",
                phase="refresh",
                level=logging.WARNING,
                error_code=getattr(getattr(exc, "code", None), "value", None),
                error=f"{type(exc).__name__}: {exc}",
            )
            return None
        # An empty listing carries no information.
        self.online_models = {str(m) for m in listed} or None
        normalized_log_event(
            self.logger,
            "catalog.refreshed",
            phase="refresh",
            level=logging.DEBUG,
            online=len(self.online_models or ()),
        )
        return self.online_models

    def _warn_fallback(
        self, candidate_id: Optional[str], chosen: ModelDescriptor, usage: Optional[str], reason: str
    ) -> None:
        normalized_log_event(
            self.logger,
            "catalog.fallback",
            LogContext(model=chosen.id, usage=usage),
            phase="resolve",
            level=logging.WARNING,
            requested=candidate_id,
            reason=reason,
        )


__all__ = ["ModelCatalog"]
