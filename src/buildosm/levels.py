"""Storey elevation -> integer level mapping."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .utils.ifc import as_float, entity_id, instances_of, is_a

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class LevelTable:
    """Sorted storey elevations with the level each one maps to.

    The elevation closest to zero is level 0; every other elevation gets its
    offset from it in the sorted order.
    """

    elevations: Tuple[float, ...] = ()
    zero_index: int = 0

    @classmethod
    def from_elevations(cls, values: Iterable[float]) -> "LevelTable":
        # Repeated elevations collapse to one entry, so levels have no gaps.
        ordered = tuple(sorted(set(float(v) for v in values)))
        if not ordered:
            return cls()
        zero_index = 0
        nearest = abs(ordered[0])
        for index, elevation in enumerate(ordered):
            if abs(elevation) < nearest:
                zero_index, nearest = index, abs(elevation)
        return cls(elevations=ordered, zero_index=zero_index)

    def level_for(self, elevation: Optional[float]) -> Optional[int]:
        """Exact-match lookup; an elevation not in the table has no level."""
        if elevation is None:
            return None
        for index, value in enumerate(self.elevations):
            if value == elevation:
                return index - self.zero_index
        return None

    def as_dict(self) -> Dict[float, int]:
        return {value: index - self.zero_index for index, value in enumerate(self.elevations)}


def _storey_elevation(structure) -> Optional[float]:
    return as_float(getattr(structure, "Elevation", None))


@dataclass
class LevelClassifier:
    table: LevelTable
    # element step id -> containing structures, in relation file order
    containers: Dict[int, List[Any]] = field(default_factory=dict)

    @classmethod
    def from_model(cls, model) -> "LevelClassifier":
        containers: Dict[int, List[Any]] = {}
        elevations: List[float] = []
        for rel in instances_of(model, "IfcRelContainedInSpatialStructure"):
            structure = getattr(rel, "RelatingStructure", None)
            for element in getattr(rel, "RelatedElements", None) or []:
                step_id = entity_id(element)
                if step_id is not None:
                    containers.setdefault(step_id, []).append(structure)
            if is_a(structure, "IfcBuildingStorey"):
                elevation = _storey_elevation(structure)
                if elevation is not None:
                    elevations.append(elevation)
                else:
                    LOG.debug("Storey #%s has no readable Elevation", entity_id(structure))
        table = LevelTable.from_elevations(elevations)
        LOG.info("Level table: %s", table.as_dict())
        return cls(table=table, containers=containers)

    def level_of(self, element_id: int) -> Optional[int]:
        """Level of the element with step id ``element_id``.

        Its containment relations are visited in file order. A container that
        is not a building storey puts the element on level 0 straight away;
        otherwise the last storey with a matching elevation wins. ``None``
        means the element is not on any known level.
        """
        level: Optional[int] = None
        for structure in self.containers.get(element_id, ()):
            if not is_a(structure, "IfcBuildingStorey"):
                return 0
            matched = self.table.level_for(_storey_elevation(structure))
            if matched is not None:
                level = matched
        return level


__all__ = ["LevelClassifier", "LevelTable"]
