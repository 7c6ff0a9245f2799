from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

import numpy as np

from .config.options import DEFAULT_OPTIONS, ConversionOptions
from .process_shape import IncompleteShape, extract_shape
from .resolve_frame import IncompletePlacement, resolve_placement
from .types import ElementRole, PreparedObject, split_loops
from .utils.ifc import entity_id, entity_label
from .utils.matrix_utils import rotate_points

LOG = logging.getLogger(__name__)


@dataclass
class PreparationReport:
    """Prepared loops for a batch of elements plus the ones that were dropped."""

    objects: List[PreparedObject] = field(default_factory=list)
    dropped: Dict[int, str] = field(default_factory=dict)
    element_count: int = 0

    @property
    def prepared_ids(self) -> List[int]:
        seen: Dict[int, None] = {}
        for obj in self.objects:
            seen.setdefault(obj.source_id, None)
        return list(seen)

    @property
    def prepared_element_count(self) -> int:
        return len(self.prepared_ids)

    def extend(self, other: "PreparationReport") -> None:
        self.objects.extend(other.objects)
        self.dropped.update(other.dropped)
        self.element_count += other.element_count


def prepare_element(
    entity,
    role: ElementRole,
    root_id: int,
    options: ConversionOptions = DEFAULT_OPTIONS,
) -> "List[PreparedObject] | str":
    """Place one element's loops in the building frame, or return why it was dropped."""
    placement = resolve_placement(
        getattr(entity, "ObjectPlacement", None),
        root_id,
        assume_default_axes=options.assume_default_axes,
        max_depth=options.max_placement_depth,
    )
    if isinstance(placement, IncompletePlacement):
        return placement.reason

    shape = extract_shape(entity, use_body=options.uses_body(role))
    if isinstance(shape, IncompleteShape):
        return shape.reason

    loops = split_loops(shape.points)
    if not loops:
        return f"{shape.strategy.value} representation yielded no loop"

    rotation = placement.rotation
    translation = np.asarray(placement.translation, dtype=float)
    source_id = entity_id(entity)
    prepared: List[PreparedObject] = []
    for loop in loops:
        placed = rotate_points(loop, rotation) + translation
        prepared.append(PreparedObject(source_id=source_id, role=role, points=placed))
    return prepared


def prepare_objects(
    entities: Iterable[Any],
    role: ElementRole,
    root_id: int,
    options: Optional[ConversionOptions] = None,
) -> PreparationReport:
    """Resolve placement and shape for every entity of one role.

    Each loop of an element becomes its own :class:`PreparedObject`; elements
    that cannot be placed or shaped are recorded in ``dropped`` and skipped.
    """
    options = options or DEFAULT_OPTIONS
    report = PreparationReport()
    for entity in entities:
        report.element_count += 1
        outcome = prepare_element(entity, role, root_id, options)
        if isinstance(outcome, str):
            step_id = entity_id(entity)
            LOG.debug("Dropping %s %s: %s", role.value, entity_label(entity), outcome)
            report.dropped[step_id if step_id is not None else -report.element_count] = outcome
            continue
        report.objects.extend(outcome)
    LOG.info(
        "Prepared %d/%d %s element(s) into %d loop(s)",
        report.prepared_element_count,
        report.element_count,
        role.value,
        len(report.objects),
    )
    return report


__all__ = ["PreparationReport", "prepare_element", "prepare_objects"]
