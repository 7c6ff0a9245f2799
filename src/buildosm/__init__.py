"""Convert IFC building models into georeferenced OSM indoor footprints."""

from .assemble import OsmData, OsmNode, OsmWay, assemble
from .classify import ClassifiedEntities, classify_entities
from .config import ConversionOptions, DEFAULT_OPTIONS, TagCatalog, TypeCatalog
from .conversion import ConversionResult, CorruptionSignal, convert, convert_model
from .errors import (
    ConversionError,
    MissingGeodeticOriginError,
    MissingRootError,
    ModelLoadError,
    UnsupportedSchemaError,
)
from .types import ElementRole, GeoObject, PreparedObject

__version__ = "0.1.0"

__all__ = [
    "ClassifiedEntities",
    "ConversionError",
    "ConversionOptions",
    "ConversionResult",
    "CorruptionSignal",
    "DEFAULT_OPTIONS",
    "ElementRole",
    "GeoObject",
    "MissingGeodeticOriginError",
    "MissingRootError",
    "ModelLoadError",
    "OsmData",
    "OsmNode",
    "OsmWay",
    "PreparedObject",
    "TagCatalog",
    "TypeCatalog",
    "UnsupportedSchemaError",
    "assemble",
    "classify_entities",
    "convert",
    "convert_model",
]
