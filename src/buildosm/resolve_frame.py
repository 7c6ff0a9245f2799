"""Placement-chain resolution.

An element's ``ObjectPlacement`` is an IfcLocalPlacement whose
``PlacementRelTo`` points at its parent's placement, and so on up to the site.
This module walks that chain up to the site's placement (the root) and folds
it into one translation and one rotation.

Inherited policy, kept for parity with earlier releases of the converter:

* Hop translations are summed directly; a hop's offset is *not* rotated into
  its parent frame first.
* The rotation angle is the sum of unsigned angles between consecutive hops'
  direction vectors (``acos`` of the normalized dot product), wrapped back
  into ``[-2π, 2π]`` whenever the running sum leaves that range.

Both are approximations of the exact frame composition and only agree with it
for chains that rotate about a single axis in one direction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple, Union

import numpy as np

from .errors import MissingRootError
from .types import Point3D
from .utils.ifc import entity_id, is_a, read_coordinates, read_direction
from .utils.matrix_utils import angle_between_vectors, rotation_about_y, rotation_about_z, wrap_angle

LOG = logging.getLogger(__name__)

DEFAULT_REF_DIRECTION: Tuple[float, ...] = (1.0, 0.0, 0.0)
DEFAULT_AXIS: Tuple[float, ...] = (0.0, 0.0, 1.0)


@dataclass(frozen=True)
class ResolvedPlacement:
    translation: Point3D
    x_angle: float
    z_angle: float
    hops: int

    @property
    def rotation(self) -> np.ndarray:
        """Combined rotation: about Y by the axis angle, then about Z by the x-direction angle."""
        return rotation_about_z(self.x_angle) @ rotation_about_y(self.z_angle)


@dataclass(frozen=True)
class IncompletePlacement:
    reason: str


PlacementOutcome = Union[ResolvedPlacement, IncompletePlacement]


def root_placement_id(site) -> int:
    """Step id of the site's ObjectPlacement, the root of every placement chain."""
    if site is None:
        raise MissingRootError("IFC model does not contain an IfcSite element")
    placement_id = entity_id(getattr(site, "ObjectPlacement", None))
    if placement_id is None:
        raise MissingRootError(f"IfcSite #{entity_id(site)} has no ObjectPlacement")
    return placement_id


def relative_placements_to_root(
    object_placement, root_id: int, *, max_depth: int = 64
) -> Union[List[Any], IncompletePlacement]:
    """Collect the RelativePlacement of every hop from ``object_placement`` up to
    (excluding) the placement with step id ``root_id``."""
    chain: List[Any] = []
    visited: set[int] = set()
    current = object_placement
    while True:
        if current is None:
            return IncompletePlacement("placement chain ends before reaching the site placement")
        current_id = entity_id(current)
        if current_id == root_id:
            return chain
        if current_id is not None:
            if current_id in visited:
                return IncompletePlacement(f"placement chain loops back to #{current_id}")
            visited.add(current_id)
        if len(chain) >= max_depth:
            return IncompletePlacement(f"placement chain deeper than {max_depth} hops")
        relative = getattr(current, "RelativePlacement", None)
        if relative is None:
            return IncompletePlacement(f"placement #{current_id} has no RelativePlacement")
        chain.append(relative)
        current = getattr(current, "PlacementRelTo", None)


def _accumulate_angle(directions: List[Tuple[float, ...]]) -> Optional[float]:
    total = 0.0
    parent: Optional[Tuple[float, ...]] = None
    for direction in directions:
        if parent is not None:
            step = angle_between_vectors(parent, direction)
            if step is None:
                return None
            total = wrap_angle(total + step)
        parent = direction
    return total


def resolve_placement(
    object_placement,
    root_id: int,
    *,
    assume_default_axes: bool = False,
    max_depth: int = 64,
) -> PlacementOutcome:
    """Fold an element's placement chain into a :class:`ResolvedPlacement`.

    Any hop without a readable Location, RefDirection or (for 3D placements)
    Axis makes the whole placement incomplete. With ``assume_default_axes`` the
    IFC defaults for the two optional direction attributes are used instead.
    """
    if object_placement is None:
        return IncompletePlacement("element has no ObjectPlacement")

    chain = relative_placements_to_root(object_placement, root_id, max_depth=max_depth)
    if isinstance(chain, IncompletePlacement):
        return chain

    tx = ty = tz = 0.0
    ref_directions: List[Tuple[float, ...]] = []
    axes: List[Tuple[float, ...]] = []

    for relative in chain:
        rel_id = entity_id(relative)
        location = read_coordinates(getattr(relative, "Location", None))
        if location is None:
            return IncompletePlacement(f"placement #{rel_id} has no readable Location")
        tx += location[0]
        ty += location[1]
        tz += location[2]

        ref_direction = read_direction(getattr(relative, "RefDirection", None))
        if ref_direction is None:
            if not assume_default_axes:
                return IncompletePlacement(f"placement #{rel_id} has no readable RefDirection")
            ref_direction = DEFAULT_REF_DIRECTION
        ref_directions.append(ref_direction)

        if not is_a(relative, "IfcAxis2Placement3D"):
            continue
        axis = read_direction(getattr(relative, "Axis", None))
        if axis is None:
            if not assume_default_axes:
                return IncompletePlacement(f"placement #{rel_id} has no readable Axis")
            axis = DEFAULT_AXIS
        axes.append(axis)

    x_angle = _accumulate_angle(ref_directions)
    if x_angle is None:
        return IncompletePlacement("zero-length RefDirection in placement chain")
    z_angle = _accumulate_angle(axes)
    if z_angle is None:
        return IncompletePlacement("zero-length Axis in placement chain")

    return ResolvedPlacement(
        translation=(tx, ty, tz),
        x_angle=x_angle,
        z_angle=z_angle,
        hops=len(chain),
    )


__all__ = [
    "IncompletePlacement",
    "PlacementOutcome",
    "ResolvedPlacement",
    "relative_placements_to_root",
    "resolve_placement",
    "root_placement_id",
]
