"""Shared value types passed between the conversion stages."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

import numpy as np

Point3D = Tuple[float, float, float]
LatLon = Tuple[float, float]

# Separates independent loops packed into one raw point list.
LOOP_BREAK = None

RawPoint = Optional[Point3D]


class ElementRole(str, Enum):
    SITE = "site"
    AREA = "area"
    WALL = "wall"
    COLUMN = "column"
    DOOR = "door"
    WINDOW = "window"
    STAIR = "stair"

    @classmethod
    def parse(cls, value: "str | ElementRole") -> "ElementRole":
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        for role in cls:
            if role.value == key:
                return role
        raise ValueError(f"Unknown element role: {value!r}")


MAPPED_ROLES: Tuple[ElementRole, ...] = (
    ElementRole.AREA,
    ElementRole.WALL,
    ElementRole.COLUMN,
    ElementRole.DOOR,
    ElementRole.WINDOW,
    ElementRole.STAIR,
)


@dataclass
class PreparedObject:
    """One loop of an element, placed in the building's local frame."""

    source_id: int
    role: ElementRole
    points: np.ndarray

    def __post_init__(self) -> None:
        self.points = np.asarray(self.points, dtype=float).reshape(-1, 3)
        if self.points.shape[0] == 0:
            raise ValueError(f"PreparedObject #{self.source_id} has an empty loop")


@dataclass
class GeoObject:
    """Prepared loop converted to (lat, lon) pairs plus its storey level."""

    source_id: int
    role: ElementRole
    coordinates: List[LatLon]
    level: Optional[int] = None

    @property
    def has_level(self) -> bool:
        return self.level is not None


def split_loops(raw_points: Iterable[RawPoint]) -> List[List[Point3D]]:
    """Split a raw point list at every ``LOOP_BREAK`` into non-empty loops."""
    loops: List[List[Point3D]] = []
    current: List[Point3D] = []
    for point in raw_points:
        if point is LOOP_BREAK:
            if current:
                loops.append(current)
            current = []
            continue
        current.append(point)
    if current:
        loops.append(current)
    return loops


__all__ = [
    "ElementRole",
    "GeoObject",
    "LatLon",
    "LOOP_BREAK",
    "MAPPED_ROLES",
    "Point3D",
    "PreparedObject",
    "RawPoint",
    "split_loops",
]
