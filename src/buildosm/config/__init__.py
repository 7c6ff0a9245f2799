from .catalog import DEFAULT_TAG_CATALOG, DEFAULT_TYPE_CATALOG, TagCatalog, TypeCatalog
from .options import DEFAULT_OPTIONS, PROJECTIONS, ConversionOptions

__all__ = [
    "ConversionOptions",
    "DEFAULT_OPTIONS",
    "DEFAULT_TAG_CATALOG",
    "DEFAULT_TYPE_CATALOG",
    "PROJECTIONS",
    "TagCatalog",
    "TypeCatalog",
]
