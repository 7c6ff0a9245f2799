"""Attribute readers for ifcopenshell entities.

Every reader returns ``None`` for a missing attribute or a value that cannot be
turned into a number, so callers can map it onto a typed "incomplete" outcome
instead of catching exceptions.
"""

from __future__ import annotations

import logging
import math
from typing import Any, List, Optional, Sequence, Tuple

from ..types import Point3D

LOG = logging.getLogger(__name__)


def as_float(value: Any) -> Optional[float]:
    """Parse an IFC numeric value (float, wrapped measure or STEP string)."""
    if value is None or isinstance(value, bool):
        return None
    if hasattr(value, "wrappedValue"):
        value = value.wrappedValue
    if isinstance(value, str):
        value = value.strip()
    try:
        result = float(value)
    except (TypeError, ValueError):
        LOG.debug("Unparseable numeric value %r", value)
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


def as_floats(values: Any) -> Optional[List[float]]:
    if values is None:
        return None
    try:
        items = list(values)
    except TypeError:
        return None
    out: List[float] = []
    for item in items:
        number = as_float(item)
        if number is None:
            return None
        out.append(number)
    return out


def pad3(values: Sequence[float]) -> Point3D:
    xs = list(values) + [0.0, 0.0, 0.0]
    return (float(xs[0]), float(xs[1]), float(xs[2]))


def read_coordinates(point) -> Optional[Point3D]:
    """Coordinates of an IfcCartesianPoint, 2D points padded with z=0."""
    if point is None:
        return None
    coords = as_floats(getattr(point, "Coordinates", None))
    if coords is None or len(coords) < 2:
        return None
    return pad3(coords[:3])


def read_direction(direction) -> Optional[Tuple[float, ...]]:
    """DirectionRatios of an IfcDirection, keeping their 2D/3D dimension."""
    if direction is None:
        return None
    ratios = as_floats(getattr(direction, "DirectionRatios", None))
    if ratios is None or len(ratios) not in (2, 3):
        return None
    return tuple(ratios)


def point_list_entry(entry) -> Optional[Point3D]:
    """One entry of an IfcCartesianPointList CoordList (2D or 3D)."""
    coords = as_floats(entry)
    if coords is None or len(coords) < 2:
        return None
    return pad3(coords[:3])


def enum_label(value: Any) -> str:
    """Normalize an IFC enumeration to its bare upper-case label ('.ROOF.' -> 'ROOF')."""
    if value is None:
        return ""
    return str(value).strip().strip(".").upper()


def entity_id(entity) -> Optional[int]:
    if entity is None:
        return None
    try:
        return int(entity.id())
    except (AttributeError, TypeError, ValueError):
        return None


def is_a(entity, type_name: str) -> bool:
    if entity is None or not hasattr(entity, "is_a"):
        return False
    try:
        return bool(entity.is_a(type_name))
    except RuntimeError:
        return False


def instances_of(model, type_name: str, *, include_subtypes: bool = False) -> list:
    """``model.by_type`` that tolerates entity names unknown to the file's schema."""
    try:
        return list(model.by_type(type_name, include_subtypes=include_subtypes) or [])
    except RuntimeError:
        LOG.debug("Schema has no entity %s; skipping", type_name)
        return []


def entity_label(entity) -> str:
    """Return a user-friendly label for log messages."""
    for attr in ("Name", "LongName", "Description"):
        value = getattr(entity, attr, None)
        if isinstance(value, str) and value.strip():
            return value.strip()
    label = entity.is_a() if hasattr(entity, "is_a") else "IfcEntity"
    step_id = entity_id(entity)
    return f"{label}_{step_id}" if step_id is not None else label


__all__ = [
    "as_float",
    "as_floats",
    "entity_id",
    "entity_label",
    "enum_label",
    "instances_of",
    "is_a",
    "pad3",
    "point_list_entry",
    "read_coordinates",
    "read_direction",
]
