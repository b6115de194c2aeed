"""Category catalog loading."""
from ecoscore.services.catalog.loader import (
    DEFAULT_CATALOG_PATH,
    parse_catalog,
    load_catalog,
    get_catalog,
    reload_catalog,
)

__all__ = [
    "DEFAULT_CATALOG_PATH",
    "parse_catalog",
    "load_catalog",
    "get_catalog",
    "reload_catalog",
]
