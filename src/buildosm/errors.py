"""Model-level failures. Per-element failures never raise; see
:class:`buildosm.resolve_frame.IncompletePlacement` and
:class:`buildosm.process_shape.IncompleteShape`."""

from __future__ import annotations


class ConversionError(Exception):
    """Base class for failures that abort a whole conversion."""


class MissingRootError(ConversionError):
    """The model has no IfcSite, or the site has no object placement."""


class MissingGeodeticOriginError(ConversionError):
    """The site lacks usable RefLatitude/RefLongitude values."""


class UnsupportedSchemaError(ConversionError):
    """The IFC file declares a schema this converter does not handle."""


class ModelLoadError(ConversionError):
    """ifcopenshell could not parse the IFC file."""


__all__ = [
    "ConversionError",
    "MissingGeodeticOriginError",
    "MissingRootError",
    "ModelLoadError",
    "UnsupportedSchemaError",
]
