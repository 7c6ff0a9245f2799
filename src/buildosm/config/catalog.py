from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from ..types import ElementRole

log = logging.getLogger(__name__)


def _default_tags() -> Dict[ElementRole, Dict[str, str]]:
    return {
        ElementRole.AREA: {"indoor": "room"},
        ElementRole.WALL: {"indoor": "wall", "material": "concrete"},
        ElementRole.COLUMN: {"indoor": "wall", "material": "concrete"},
        ElementRole.DOOR: {"indoor": "door", "access": "private"},
        ElementRole.WINDOW: {"indoor": "wall", "material": "glass"},
        ElementRole.STAIR: {"highway": "steps", "indoor": "yes"},
    }


def _default_types() -> Dict[ElementRole, Tuple[str, ...]]:
    return {
        ElementRole.SITE: ("IfcSite",),
        ElementRole.AREA: ("IfcSlab", "IfcSlabStandardCase", "IfcSlabElementedCase"),
        ElementRole.WALL: ("IfcWall", "IfcWallStandardCase", "IfcWallElementedCase"),
        ElementRole.COLUMN: ("IfcColumn", "IfcColumnStandardCase"),
        ElementRole.DOOR: ("IfcDoor", "IfcDoorStandardCase"),
        ElementRole.WINDOW: ("IfcWindow", "IfcWindowStandardCase"),
        ElementRole.STAIR: ("IfcStair", "IfcStairFlight"),
    }


@dataclass(frozen=True)
class TagCatalog:
    """OSM tags attached to the ways produced for each element role."""

    tags: Mapping[ElementRole, Mapping[str, str]] = field(default_factory=_default_tags)

    def tags_for(self, role: ElementRole) -> Dict[str, str]:
        return dict(self.tags.get(role, {}))

    @classmethod
    def from_mapping(
        cls, data: Optional[Mapping[str, Any]], fallback: Optional["TagCatalog"] = None
    ) -> "TagCatalog":
        """Overlay role entries from ``data`` onto ``fallback`` (or the defaults).

        An explicit empty mapping for a role clears its tags.
        """
        base = dict((fallback or cls()).tags)
        if not data:
            return cls(tags=base)
        if not isinstance(data, Mapping):
            raise ValueError(f"Tag catalog must be a mapping of role -> tags, got {type(data).__name__}")
        for raw_role, raw_tags in data.items():
            role = ElementRole.parse(raw_role)
            if raw_tags is None:
                raw_tags = {}
            if not isinstance(raw_tags, Mapping):
                raise ValueError(f"Tags for role '{role.value}' must be a mapping, got {raw_tags!r}")
            base[role] = {str(k): str(v) for k, v in raw_tags.items()}
        return cls(tags=base)


@dataclass(frozen=True)
class TypeCatalog:
    """IFC entity names collected for each element role."""

    types: Mapping[ElementRole, Tuple[str, ...]] = field(default_factory=_default_types)

    def types_for(self, role: ElementRole) -> Tuple[str, ...]:
        return tuple(self.types.get(role, ()))

    @classmethod
    def from_mapping(
        cls, data: Optional[Mapping[str, Any]], fallback: Optional["TypeCatalog"] = None
    ) -> "TypeCatalog":
        base = dict((fallback or cls()).types)
        if not data:
            return cls(types=base)
        if not isinstance(data, Mapping):
            raise ValueError(f"Type catalog must be a mapping of role -> IFC types, got {type(data).__name__}")
        for raw_role, names in data.items():
            role = ElementRole.parse(raw_role)
            base[role] = _as_names(names, role)
        return cls(types=base)


def _as_names(names: Any, role: ElementRole) -> Tuple[str, ...]:
    if isinstance(names, str):
        names = [names]
    if not isinstance(names, Iterable):
        raise ValueError(f"IFC types for role '{role.value}' must be a list of names, got {names!r}")
    cleaned = tuple(str(n).strip() for n in names if str(n).strip())
    if not cleaned:
        log.warning("Role '%s' has no IFC types configured; it will never match", role.value)
    return cleaned


DEFAULT_TAG_CATALOG = TagCatalog()
DEFAULT_TYPE_CATALOG = TypeCatalog()


__all__ = [
    "DEFAULT_TAG_CATALOG",
    "DEFAULT_TYPE_CATALOG",
    "TagCatalog",
    "TypeCatalog",
]
