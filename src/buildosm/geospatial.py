from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
from ifcopenshell.util.unit import calculate_unit_scale
from pyproj import CRS, Transformer

from .config.options import normalize_projection
from .errors import MissingGeodeticOriginError
from .process_shape import RepresentationKind, identify_representations
from .types import LatLon, Point3D
from .utils.ifc import as_floats, entity_id, enum_label, instances_of, pad3, read_coordinates, read_direction
from .utils.matrix_utils import angle_between_vectors, rotate_points, rotation_about_z

LOG = logging.getLogger(__name__)

# WGS84 semi-major axis (metres).
EARTH_RADIUS = 6378137.0

_TRANSFORMER_CACHE: Dict[Tuple[float, float], Transformer] = {}


class LengthUnit(str, Enum):
    METRE = "m"
    CENTIMETRE = "cm"
    MILLIMETRE = "mm"

    @property
    def to_metres(self) -> float:
        return _LENGTH_FACTORS[self]

    @classmethod
    def from_scale(cls, scale: float) -> Optional["LengthUnit"]:
        """The named unit whose metre factor is ``scale``, if any."""
        for unit, factor in _LENGTH_FACTORS.items():
            if math.isclose(scale, factor, rel_tol=1e-9):
                return unit
        return None


_LENGTH_FACTORS = {
    LengthUnit.METRE: 1.0,
    LengthUnit.CENTIMETRE: 0.01,
    LengthUnit.MILLIMETRE: 0.001,
}


class AngleUnit(str, Enum):
    RADIAN = "rad"
    DEGREE = "deg"


@dataclass(frozen=True)
class ModelUnits:
    """Model length and angle units.

    ``metres_per_unit`` is the scale actually applied to coordinates; when
    left out it follows ``length``. ``length`` stays METRE for scales that
    have no named unit (feet, kilometres).
    """

    length: LengthUnit = LengthUnit.METRE
    angle: AngleUnit = AngleUnit.RADIAN
    metres_per_unit: Optional[float] = None

    def __post_init__(self) -> None:
        if self.metres_per_unit is None:
            object.__setattr__(self, "metres_per_unit", self.length.to_metres)


# ---------------- Units ----------------

def _length_unit_label(model) -> str:
    for unit in _assigned_units(model):
        if enum_label(getattr(unit, "UnitType", None)) == "LENGTHUNIT":
            prefix = enum_label(getattr(unit, "Prefix", None))
            name = enum_label(getattr(unit, "Name", None))
            return " ".join(part for part in (prefix, name) if part) or "unnamed"
    return "unnamed"


def _assigned_units(model) -> List[Any]:
    assignments = instances_of(model, "IfcUnitAssignment")
    if not assignments:
        return []
    return list(getattr(assignments[0], "Units", None) or [])


def _angle_unit(unit) -> Optional[AngleUnit]:
    name = enum_label(getattr(unit, "Name", None))
    if name == "DEGREE":
        return AngleUnit.DEGREE
    if name == "RADIAN":
        return AngleUnit.RADIAN
    return None


def read_units(model) -> ModelUnits:
    """Length and plane-angle units declared by the model's first IfcUnitAssignment.

    The metre scale comes from ``ifcopenshell.util.unit.calculate_unit_scale``,
    which resolves SI prefixes and conversion-based units (feet, inches).
    """
    if not instances_of(model, "IfcUnitAssignment"):
        LOG.warning("Model declares no IfcUnitAssignment; assuming metres and radians")
        return ModelUnits()

    scale = float(calculate_unit_scale(model))
    if not math.isfinite(scale) or scale <= 0.0:
        LOG.warning("Model length unit has unusable scale %r; assuming metres", scale)
        scale = 1.0
    length = LengthUnit.from_scale(scale)
    if length is None:
        LOG.warning(
            "Length unit %s (%g m) is not m/cm/mm; coordinates are scaled by %g",
            _length_unit_label(model),
            scale,
            scale,
        )
        length = LengthUnit.METRE

    angle: Optional[AngleUnit] = None
    for unit in _assigned_units(model):
        if enum_label(getattr(unit, "UnitType", None)) == "PLANEANGLEUNIT":
            angle = _angle_unit(unit)
            break

    units = ModelUnits(length=length, angle=angle or AngleUnit.RADIAN, metres_per_unit=scale)
    LOG.info("Model units: length=%s (%g m) angle=%s", units.length.value, scale, units.angle.value)
    return units


# ---------------- Site origin ----------------

def dms_to_decimal(degrees: float, minutes: float = 0.0, seconds: float = 0.0, millionths: float = 0.0) -> float:
    """Degrees/minutes/seconds(/millionths of a second) to decimal degrees.

    IFC stores every component of a negative angle with the same sign, so the
    components are simply summed.
    """
    return degrees + minutes / 60.0 + seconds / 3600.0 + millionths / 3.6e9


def compound_angle(value: Any) -> Optional[float]:
    """Decimal degrees of an IfcCompoundPlaneAngleMeasure (3 or 4 components)."""
    parts = as_floats(value)
    if parts is None or not 3 <= len(parts) <= 4:
        return None
    return dms_to_decimal(*parts)


def _site_box_corner(site) -> Optional[Point3D]:
    box = identify_representations(site).get(RepresentationKind.BOX)
    if box is None:
        return None
    items = list(getattr(box, "Items", None) or [])
    if not items:
        return None
    return read_coordinates(getattr(items[0], "Corner", None))


def site_origin(site, units: ModelUnits = ModelUnits(), projection: str = "equirectangular") -> LatLon:
    """Geodetic (lat, lon) of the building's local origin.

    Starts from the site's RefLatitude/RefLongitude. When the site carries a
    bounding-box representation whose corner is offset in both x and y, the
    reference point is taken to sit at that corner and the origin is moved back
    by the offset.
    """
    if site is None:
        raise MissingGeodeticOriginError("No IfcSite to read RefLatitude/RefLongitude from")
    lat = compound_angle(getattr(site, "RefLatitude", None))
    lon = compound_angle(getattr(site, "RefLongitude", None))
    if lat is None or lon is None:
        raise MissingGeodeticOriginError(
            f"IfcSite #{entity_id(site)} has no usable RefLatitude/RefLongitude"
        )

    corner = _site_box_corner(site)
    if corner is not None and corner[0] != 0.0 and corner[1] != 0.0:
        LOG.info("Shifting site origin by bounding-box corner (%.3f, %.3f)", corner[0], corner[1])
        context = TransformContext(origin=(lat, lon), units=units, projection=projection)
        return context.to_geodetic([(-corner[0], -corner[1], 0.0)])[0]
    return (lat, lon)


# ---------------- North ----------------

def _first_context(model):
    projects = instances_of(model, "IfcProject")
    if not projects:
        return None
    contexts = list(getattr(projects[0], "RepresentationContexts", None) or [])
    return contexts[0] if contexts else None


def _north_vector(direction) -> Optional[Point3D]:
    ratios = read_direction(direction)
    if ratios is None:
        return None
    return pad3(ratios)


def read_true_north(model) -> Optional[Point3D]:
    return _north_vector(getattr(_first_context(model), "TrueNorth", None))


def read_project_north(model) -> Optional[Point3D]:
    wcs = getattr(_first_context(model), "WorldCoordinateSystem", None)
    return _north_vector(getattr(wcs, "RefDirection", None))


def building_rotation(model) -> Optional[np.ndarray]:
    """Z rotation by the angle between true north and project north, if both are declared."""
    true_north = read_true_north(model)
    project_north = read_project_north(model)
    if true_north is None or project_north is None:
        LOG.debug("True north or project north missing; no building rotation applied")
        return None
    angle = angle_between_vectors(true_north, project_north)
    if angle is None:
        LOG.warning("Degenerate north vectors %s / %s; no building rotation applied", true_north, project_north)
        return None
    LOG.info("Building rotation: %.4f rad", angle)
    return rotation_about_z(angle)


# ---------------- Projection ----------------

def _equirectangular(origin: LatLon, east: np.ndarray, north: np.ndarray) -> List[LatLon]:
    lat0, lon0 = origin
    cos_lat0 = math.cos(math.radians(lat0))
    lats = lat0 + np.degrees(north / EARTH_RADIUS)
    lons = lon0 + np.degrees(east / (EARTH_RADIUS * cos_lat0))
    return [(float(lat), float(lon)) for lat, lon in zip(lats, lons)]


def _aeqd_transformer(origin: LatLon) -> Transformer:
    transformer = _TRANSFORMER_CACHE.get(origin)
    if transformer is None:
        local = CRS.from_dict(
            {"proj": "aeqd", "lat_0": origin[0], "lon_0": origin[1], "datum": "WGS84", "units": "m"}
        )
        transformer = Transformer.from_crs(local, CRS.from_epsg(4326), always_xy=True)
        _TRANSFORMER_CACHE[origin] = transformer
    return transformer


def _aeqd(origin: LatLon, east: np.ndarray, north: np.ndarray) -> List[LatLon]:
    lons, lats = _aeqd_transformer(origin).transform(east, north)
    return [(float(lat), float(lon)) for lat, lon in zip(np.atleast_1d(lats), np.atleast_1d(lons))]


_PROJECTORS = {
    "equirectangular": _equirectangular,
    "aeqd": _aeqd,
}


@dataclass(frozen=True)
class TransformContext:
    """Building-wide part of the local -> geodetic transform."""

    origin: LatLon
    units: ModelUnits = ModelUnits()
    rotation: Optional[np.ndarray] = None
    projection: str = "equirectangular"

    def __post_init__(self) -> None:
        object.__setattr__(self, "projection", normalize_projection(self.projection))

    def to_geodetic(self, points: Sequence[Sequence[float]]) -> List[LatLon]:
        """Rotate, scale to metres and project building-frame points to (lat, lon)."""
        arr = np.asarray(points, dtype=float).reshape(-1, 3)
        if arr.shape[0] == 0:
            return []
        arr = rotate_points(arr, self.rotation) * self.units.metres_per_unit
        return _PROJECTORS[self.projection](self.origin, arr[:, 0], arr[:, 1])


__all__ = [
    "AngleUnit",
    "EARTH_RADIUS",
    "LengthUnit",
    "ModelUnits",
    "TransformContext",
    "building_rotation",
    "compound_angle",
    "dms_to_decimal",
    "read_project_north",
    "read_true_north",
    "read_units",
    "site_origin",
]
