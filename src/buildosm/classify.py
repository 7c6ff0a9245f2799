"""Bucket IFC entities into the element roles the converter maps."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .config.catalog import DEFAULT_TYPE_CATALOG, TypeCatalog
from .types import MAPPED_ROLES, ElementRole
from .utils.ifc import entity_id, enum_label, instances_of

LOG = logging.getLogger(__name__)

_EXCLUDED_AREA_TYPES = frozenset({"ROOF"})


@dataclass(frozen=True)
class ClassifiedEntities:
    site: Optional[Any] = None
    groups: Dict[ElementRole, Tuple[Any, ...]] = field(default_factory=dict)

    def for_role(self, role: ElementRole) -> Tuple[Any, ...]:
        if role is ElementRole.SITE:
            return (self.site,) if self.site is not None else ()
        return self.groups.get(role, ())

    def count(self, roles: Iterable[ElementRole] = MAPPED_ROLES) -> int:
        return sum(len(self.for_role(role)) for role in roles)

    def counts(self) -> Dict[str, int]:
        return {role.value: len(self.for_role(role)) for role in ElementRole}


def _collect(model, type_names: Iterable[str]) -> List[Any]:
    seen: set[int] = set()
    out: List[Any] = []
    for name in type_names:
        for entity in instances_of(model, name):
            key = entity_id(entity)
            if key is None:
                key = id(entity)
            if key in seen:
                continue
            seen.add(key)
            out.append(entity)
    return out


def _is_floor_area(entity) -> bool:
    return enum_label(getattr(entity, "PredefinedType", None)) not in _EXCLUDED_AREA_TYPES


def classify_entities(model, catalog: TypeCatalog = DEFAULT_TYPE_CATALOG) -> ClassifiedEntities:
    """Group the model's entities by role.

    Each IFC type is looked up without subtypes so overlapping catalog entries
    (IfcWall / IfcWallStandardCase) never produce duplicates; remaining overlaps
    are removed by step id. Area entities with a ``ROOF`` predefined type are
    dropped since they are not walkable floor.
    """
    sites = _collect(model, catalog.types_for(ElementRole.SITE))
    if len(sites) > 1:
        LOG.warning("Model has %d IfcSite entities; using the first (#%s)", len(sites), entity_id(sites[0]))

    groups: Dict[ElementRole, Tuple[Any, ...]] = {}
    for role in MAPPED_ROLES:
        entities = _collect(model, catalog.types_for(role))
        if role is ElementRole.AREA:
            kept = [e for e in entities if _is_floor_area(e)]
            if len(kept) != len(entities):
                LOG.debug("Filtered %d roof area(s)", len(entities) - len(kept))
            entities = kept
        groups[role] = tuple(entities)

    classified = ClassifiedEntities(site=sites[0] if sites else None, groups=groups)
    LOG.info(
        "Classified elements: %s",
        ", ".join(f"{name}={count}" for name, count in classified.counts().items()),
    )
    return classified


__all__ = ["ClassifiedEntities", "classify_entities"]
