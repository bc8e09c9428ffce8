"""Static model catalog bundled as ``models.yaml``."""

from .loader import default_catalog_path, load_catalog
from .model_catalog import ModelCatalog

__all__ = ["ModelCatalog", "load_catalog", "default_catalog_path"]
