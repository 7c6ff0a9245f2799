"""Local footprint extraction from IFC shape representations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from .types import LOOP_BREAK, RawPoint
from .utils.ifc import as_float, entity_id, is_a, point_list_entry, read_coordinates

LOG = logging.getLogger(__name__)


class RepresentationKind(str, Enum):
    BODY = "body"
    BOX = "box"
    AXIS = "axis"


EXTRACTION_ORDER: Tuple[RepresentationKind, ...] = (
    RepresentationKind.BODY,
    RepresentationKind.BOX,
    RepresentationKind.AXIS,
)

_TYPE_KINDS: Dict[str, RepresentationKind] = {
    "sweptsolid": RepresentationKind.BODY,
    "advancedsweptsolid": RepresentationKind.BODY,
    "brep": RepresentationKind.BODY,
    "advancedbrep": RepresentationKind.BODY,
    "clipping": RepresentationKind.BODY,
    "csg": RepresentationKind.BODY,
    "tessellation": RepresentationKind.BODY,
    "mappedrepresentation": RepresentationKind.BODY,
    "boundingbox": RepresentationKind.BOX,
    "curve": RepresentationKind.AXIS,
    "curve2d": RepresentationKind.AXIS,
    "curve3d": RepresentationKind.AXIS,
}

@dataclass(frozen=True)
class ExtractedShape:
    strategy: RepresentationKind
    points: List[RawPoint] = field(default_factory=list)


@dataclass(frozen=True)
class IncompleteShape:
    reason: str


ShapeOutcome = Union[ExtractedShape, IncompleteShape]

# Readers return the points they found or the reason they could not read them.
PointsOrReason = Union[List[RawPoint], IncompleteShape]


def representation_kind(representation) -> Optional[RepresentationKind]:
    """Classify one IfcShapeRepresentation by identifier, then by type."""
    identifier = str(getattr(representation, "RepresentationIdentifier", "") or "").strip().lower()
    for kind in RepresentationKind:
        if identifier == kind.value:
            return kind
    rep_type = str(getattr(representation, "RepresentationType", "") or "").strip().lower()
    return _TYPE_KINDS.get(rep_type)


def identify_representations(product) -> Dict[RepresentationKind, Any]:
    """Map each known representation kind of ``product`` to its first representation."""
    found: Dict[RepresentationKind, Any] = {}
    definition = getattr(product, "Representation", None)
    for representation in getattr(definition, "Representations", None) or []:
        kind = representation_kind(representation)
        if kind is None:
            LOG.debug(
                "Skipping representation #%s (%s/%s) of #%s",
                entity_id(representation),
                getattr(representation, "RepresentationIdentifier", None),
                getattr(representation, "RepresentationType", None),
                entity_id(product),
            )
            continue
        found.setdefault(kind, representation)
    return found


# ---------------- coordinate readers ----------------

def _points(points) -> PointsOrReason:
    out: List[RawPoint] = []
    for point in points or []:
        coords = read_coordinates(point)
        if coords is None:
            return IncompleteShape(f"unreadable IfcCartesianPoint #{entity_id(point)}")
        out.append(coords)
    return out


def _coord_list(point_list) -> PointsOrReason:
    out: List[RawPoint] = []
    for entry in getattr(point_list, "CoordList", None) or []:
        coord = point_list_entry(entry)
        if coord is None:
            return IncompleteShape(f"unreadable CoordList entry in #{entity_id(point_list)}")
        out.append(coord)
    return out


def _index(raw_index, size: int) -> Optional[int]:
    """0-based index of a 1-based IfcPositiveInteger, or None when out of range."""
    value = getattr(raw_index, "wrappedValue", raw_index)
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    idx = value - 1
    if idx < 0 or idx >= size:
        return None
    return idx


def _indexed_polycurve_points(curve) -> PointsOrReason:
    """Expand an IfcIndexedPolyCurve into explicit XYZ points."""
    coords = _coord_list(getattr(curve, "Points", None))
    if isinstance(coords, IncompleteShape) or not coords:
        return coords

    segments = list(getattr(curve, "Segments", None) or [])
    if not segments:
        return coords

    result: List[RawPoint] = []
    for segment in segments:
        for raw_index in getattr(segment, "wrappedValue", segment) or ():
            idx = _index(raw_index, len(coords))
            if idx is None:
                return IncompleteShape(f"segment index {raw_index} outside CoordList of #{entity_id(curve)}")
            point = coords[idx]
            if result and result[-1] == point:
                continue
            result.append(point)
    return result


def _curve_points(item) -> PointsOrReason:
    """Traverse curve and curve-set items and gather their 3D points."""
    if item is None:
        return []
    if is_a(item, "IfcPolyline"):
        return _points(getattr(item, "Points", None))
    if is_a(item, "IfcIndexedPolyCurve"):
        return _indexed_polycurve_points(item)
    if is_a(item, "IfcCompositeCurve"):
        pts: List[RawPoint] = []
        for segment in getattr(item, "Segments", None) or []:
            part = _curve_points(getattr(segment, "ParentCurve", None))
            if isinstance(part, IncompleteShape):
                return part
            pts.extend(part)
        return pts
    if is_a(item, "IfcTrimmedCurve"):
        return _curve_points(getattr(item, "BasisCurve", None))
    if is_a(item, "IfcGeometricSet"):
        return _items_points(getattr(item, "Elements", None) or [], _curve_points)
    if is_a(item, "IfcMappedItem"):
        mapped = getattr(getattr(item, "MappingSource", None), "MappedRepresentation", None)
        return _items_points(getattr(mapped, "Items", None) or [], _curve_points)
    LOG.debug("Unsupported curve type %s", item.is_a() if hasattr(item, "is_a") else type(item).__name__)
    return []


def _append_loop(out: List[RawPoint], loop: List[RawPoint]) -> None:
    if not loop:
        return
    if out:
        out.append(LOOP_BREAK)
    out.extend(loop)


# ---------------- body ----------------

def _rectangle_profile(profile) -> PointsOrReason:
    x_dim = as_float(getattr(profile, "XDim", None))
    y_dim = as_float(getattr(profile, "YDim", None))
    if x_dim is None or y_dim is None:
        return IncompleteShape(f"IfcRectangleProfileDef #{entity_id(profile)} lacks XDim/YDim")
    cx = cy = 0.0
    position = getattr(profile, "Position", None)
    if position is not None:
        centre = read_coordinates(getattr(position, "Location", None))
        if centre is None:
            return IncompleteShape(f"profile position #{entity_id(position)} has no readable Location")
        cx, cy = centre[0], centre[1]
    hx, hy = x_dim / 2.0, y_dim / 2.0
    corners: List[RawPoint] = [
        (cx - hx, cy - hy, 0.0),
        (cx + hx, cy - hy, 0.0),
        (cx + hx, cy + hy, 0.0),
        (cx - hx, cy + hy, 0.0),
    ]
    return corners + [corners[0]]


def _profile_points(profile) -> PointsOrReason:
    """Boundary loops of a profile: outer curve first, then any voids."""
    if is_a(profile, "IfcRectangleProfileDef"):
        return _rectangle_profile(profile)
    if is_a(profile, "IfcArbitraryProfileDefWithVoids"):
        curves = [getattr(profile, "OuterCurve", None)] + list(getattr(profile, "InnerCurves", None) or [])
        return _items_points(curves, _curve_points)
    if is_a(profile, "IfcArbitraryClosedProfileDef"):
        return _curve_points(getattr(profile, "OuterCurve", None))
    LOG.debug("Unsupported profile %s", profile.is_a() if hasattr(profile, "is_a") else profile)
    return []


def _extruded_area_points(solid) -> PointsOrReason:
    offset = (0.0, 0.0, 0.0)
    position = getattr(solid, "Position", None)
    if position is not None:
        location = read_coordinates(getattr(position, "Location", None))
        if location is None:
            return IncompleteShape(f"extrusion position #{entity_id(position)} has no readable Location")
        offset = location
    points = _profile_points(getattr(solid, "SweptArea", None))
    if isinstance(points, IncompleteShape):
        return points
    return [
        p if p is LOOP_BREAK else (p[0] + offset[0], p[1] + offset[1], p[2] + offset[2])
        for p in points
    ]


def _faceted_brep_points(brep) -> PointsOrReason:
    out: List[RawPoint] = []
    shell = getattr(brep, "Outer", None)
    for face in getattr(shell, "CfsFaces", None) or []:
        for bound in getattr(face, "Bounds", None) or []:
            loop = _points(getattr(getattr(bound, "Bound", None), "Polygon", None))
            if isinstance(loop, IncompleteShape):
                return loop
            _append_loop(out, loop)
    return out


def _face_set_points(face_set) -> PointsOrReason:
    coords = _coord_list(getattr(face_set, "Coordinates", None))
    if isinstance(coords, IncompleteShape):
        return coords
    out: List[RawPoint] = []
    for face in getattr(face_set, "Faces", None) or []:
        loop: List[RawPoint] = []
        for raw_index in getattr(face, "CoordIndex", None) or ():
            idx = _index(raw_index, len(coords))
            if idx is None:
                return IncompleteShape(f"face index {raw_index} outside CoordList of #{entity_id(face_set)}")
            loop.append(coords[idx])
        _append_loop(out, loop)
    return out


def _body_item_points(item) -> PointsOrReason:
    if is_a(item, "IfcExtrudedAreaSolid"):
        return _extruded_area_points(item)
    if is_a(item, "IfcFacetedBrep"):
        return _faceted_brep_points(item)
    if is_a(item, "IfcPolygonalFaceSet"):
        return _face_set_points(item)
    if is_a(item, "IfcBooleanResult"):
        return _body_item_points(getattr(item, "FirstOperand", None))
    if is_a(item, "IfcMappedItem"):
        mapped = getattr(getattr(item, "MappingSource", None), "MappedRepresentation", None)
        return _items_points(getattr(mapped, "Items", None) or [], _body_item_points)
    if item is not None:
        LOG.debug("Unsupported body item %s #%s", item.is_a() if hasattr(item, "is_a") else item, entity_id(item))
    return []


def _items_points(items, reader: Callable[[Any], PointsOrReason]) -> PointsOrReason:
    """Read every item, separating their point runs with LOOP_BREAK."""
    out: List[RawPoint] = []
    for item in items:
        points = reader(item)
        if isinstance(points, IncompleteShape):
            return points
        _append_loop(out, points)
    return out


# ---------------- box ----------------

def _box_points(item) -> PointsOrReason:
    if not is_a(item, "IfcBoundingBox"):
        return []
    corner = read_coordinates(getattr(item, "Corner", None))
    if corner is None:
        return IncompleteShape(f"IfcBoundingBox #{entity_id(item)} has no readable Corner")
    x_dim = as_float(getattr(item, "XDim", None))
    y_dim = as_float(getattr(item, "YDim", None))
    if x_dim is None or y_dim is None:
        return IncompleteShape(f"IfcBoundingBox #{entity_id(item)} lacks XDim/YDim")
    x, y, z = corner
    corners: List[RawPoint] = [
        (x, y, z),
        (x + x_dim, y, z),
        (x + x_dim, y + y_dim, z),
        (x, y + y_dim, z),
    ]
    return corners + [corners[0]]


_READERS: Dict[RepresentationKind, Callable[[Any], PointsOrReason]] = {
    RepresentationKind.BODY: _body_item_points,
    RepresentationKind.BOX: _box_points,
    RepresentationKind.AXIS: _curve_points,
}


def extract_shape(product, *, use_body: bool = True) -> ShapeOutcome:
    """Return the local point list of ``product`` from its best representation.

    Strategies are tried in the order body, box, axis (body skipped when
    ``use_body`` is false); the first one that yields points wins. Loops of a
    multi-part shape are separated by :data:`~buildosm.types.LOOP_BREAK`.
    An unreadable coordinate in the chosen representation makes the whole
    shape incomplete.
    """
    representations = identify_representations(product)
    if not representations:
        return IncompleteShape("element has no usable shape representation")

    for kind in EXTRACTION_ORDER:
        if kind is RepresentationKind.BODY and not use_body:
            continue
        representation = representations.get(kind)
        if representation is None:
            continue
        points = _items_points(getattr(representation, "Items", None) or [], _READERS[kind])
        if isinstance(points, IncompleteShape):
            return IncompleteShape(f"{kind.value} representation #{entity_id(representation)}: {points.reason}")
        if points:
            return ExtractedShape(strategy=kind, points=points)
        LOG.debug("%s representation of #%s yielded no points", kind.value, entity_id(product))

    return IncompleteShape("no representation yielded any points")


__all__ = [
    "EXTRACTION_ORDER",
    "ExtractedShape",
    "IncompleteShape",
    "RepresentationKind",
    "ShapeOutcome",
    "extract_shape",
    "identify_representations",
    "representation_kind",
]
