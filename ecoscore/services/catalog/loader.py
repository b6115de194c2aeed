"""Category catalog loading.

The catalog is loaded once per process and shared read-only. Changing it
requires a restart or an explicit reload_catalog() call.
"""
import json
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

import structlog
from pydantic import ValidationError

from ecoscore.config import engine_settings
from ecoscore.errors import CatalogError
from ecoscore.models.catalog import CategoryCatalog

logger = structlog.get_logger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parents[2] / "data" / "categories.json"


def parse_catalog(document: dict) -> CategoryCatalog:
    """Validate a catalog document already decoded from JSON.

    Raises:
        CatalogError: If the document does not validate
    """
    try:
        return CategoryCatalog.model_validate(document)
    except ValidationError as e:
        raise CatalogError(f"Invalid category catalog: {e}") from e


def load_catalog(path: Optional[Union[str, Path]] = None) -> CategoryCatalog:
    """Load and validate a catalog JSON document.

    Args:
        path: Catalog file (packaged catalog when None)

    Raises:
        CatalogError: If the file cannot be read or is invalid
    """
    catalog_path = Path(path) if path else DEFAULT_CATALOG_PATH
    try:
        document = json.loads(catalog_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise CatalogError(f"Cannot read category catalog {catalog_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise CatalogError(f"Category catalog {catalog_path} is not valid JSON: {e}") from e

    catalog = parse_catalog(document)
    logger.info(
        "catalog_loaded",
        path=str(catalog_path),
        version=catalog.version,
        categories=len(catalog.categories),
    )
    return catalog


@lru_cache
def get_catalog() -> CategoryCatalog:
    """Get the process-wide catalog configured by ENGINE_CATALOG_PATH."""
    return load_catalog(engine_settings.catalog_path)


def reload_catalog() -> CategoryCatalog:
    """Drop the cached catalog and load it again."""
    get_catalog.cache_clear()
    return get_catalog()
