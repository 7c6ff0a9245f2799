from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

import yaml

from ..types import MAPPED_ROLES, ElementRole
from .catalog import DEFAULT_TAG_CATALOG, DEFAULT_TYPE_CATALOG, TagCatalog, TypeCatalog

log = logging.getLogger(__name__)

PROJECTIONS: Tuple[str, ...] = ("equirectangular", "aeqd")
DEFAULT_SUPPORTED_SCHEMAS: Tuple[str, ...] = ("IFC2X3", "IFC4")

_KNOWN_KEYS = {
    "roles",
    "fallback_roles",
    "projection",
    "assume_default_axes",
    "max_placement_depth",
    "tags",
    "types",
    "supported_schemas",
}


def _parse_roles(values: Any, key: str) -> Tuple[ElementRole, ...]:
    if isinstance(values, (str, ElementRole)):
        values = [values]
    if not isinstance(values, Iterable):
        raise ValueError(f"'{key}' must be a list of element roles, got {values!r}")
    roles = []
    for value in values:
        role = ElementRole.parse(value)
        if role not in roles:
            roles.append(role)
    return tuple(roles)


def normalize_projection(value: Optional[str]) -> str:
    name = (value or "equirectangular").strip().lower()
    if name not in PROJECTIONS:
        raise ValueError(f"Unknown projection '{value}'; expected one of {', '.join(PROJECTIONS)}")
    return name


@dataclass(frozen=True)
class ConversionOptions:
    """High-level knobs for one IFC -> OSM conversion."""

    roles: Tuple[ElementRole, ...] = MAPPED_ROLES
    # Roles whose body geometry does not reduce to a clean footprint; they use box/axis.
    fallback_roles: Tuple[ElementRole, ...] = (ElementRole.WALL, ElementRole.DOOR)
    projection: str = "equirectangular"
    assume_default_axes: bool = False
    max_placement_depth: int = 64
    tag_catalog: TagCatalog = field(default_factory=lambda: DEFAULT_TAG_CATALOG)
    type_catalog: TypeCatalog = field(default_factory=lambda: DEFAULT_TYPE_CATALOG)
    supported_schemas: Tuple[str, ...] = DEFAULT_SUPPORTED_SCHEMAS

    def __post_init__(self) -> None:
        object.__setattr__(self, "roles", _parse_roles(self.roles, "roles"))
        object.__setattr__(self, "fallback_roles", _parse_roles(self.fallback_roles, "fallback_roles"))
        if ElementRole.SITE in self.roles:
            raise ValueError("The site is the georeference anchor and cannot be a mapped role")
        if self.max_placement_depth < 1:
            raise ValueError("max_placement_depth must be at least 1")
        object.__setattr__(self, "projection", normalize_projection(self.projection))

    def uses_body(self, role: ElementRole) -> bool:
        return role not in self.fallback_roles

    @classmethod
    def from_mapping(cls, data: Optional[Dict[str, Any]], base: Optional["ConversionOptions"] = None) -> "ConversionOptions":
        options = base or cls()
        if not data:
            return options
        if not isinstance(data, dict):
            raise ValueError("Configuration must define a mapping at the top level")
        unknown = sorted(set(data) - _KNOWN_KEYS)
        if unknown:
            log.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))

        changes: Dict[str, Any] = {}
        if "roles" in data:
            changes["roles"] = _parse_roles(data["roles"], "roles")
        if "fallback_roles" in data:
            changes["fallback_roles"] = _parse_roles(data["fallback_roles"] or [], "fallback_roles")
        if "projection" in data:
            changes["projection"] = normalize_projection(data["projection"])
        if "assume_default_axes" in data:
            changes["assume_default_axes"] = bool(data["assume_default_axes"])
        if "max_placement_depth" in data:
            try:
                changes["max_placement_depth"] = int(data["max_placement_depth"])
            except (TypeError, ValueError) as exc:
                raise ValueError(f"Invalid max_placement_depth: {data['max_placement_depth']!r}") from exc
        if "tags" in data:
            changes["tag_catalog"] = TagCatalog.from_mapping(data["tags"], fallback=options.tag_catalog)
        if "types" in data:
            changes["type_catalog"] = TypeCatalog.from_mapping(data["types"], fallback=options.type_catalog)
        if "supported_schemas" in data:
            schemas = data["supported_schemas"]
            if isinstance(schemas, str):
                schemas = [schemas]
            changes["supported_schemas"] = tuple(str(s).strip().upper() for s in schemas)
        return replace(options, **changes)

    @classmethod
    def from_file(cls, path: Path, base: Optional["ConversionOptions"] = None) -> "ConversionOptions":
        text = Path(path).read_text(encoding="utf-8")
        return cls.from_text(text, suffix=Path(path).suffix, base=base)

    @classmethod
    def from_text(cls, text: str, *, suffix: str, base: Optional["ConversionOptions"] = None) -> "ConversionOptions":
        data = cls._load_data_from_text(text, suffix=suffix)
        return cls.from_mapping(data, base=base)

    @staticmethod
    def _load_data_from_text(text: str, *, suffix: str) -> Dict[str, Any]:
        ext = (suffix or "").lower()
        if ext in {".yaml", ".yml"}:
            loaded = yaml.safe_load(text)
            if loaded is None:
                return {}
            if not isinstance(loaded, dict):
                raise ValueError("YAML configuration must define a mapping at the top level")
            return loaded
        if ext == ".json":
            loaded = json.loads(text)
            if not isinstance(loaded, dict):
                raise ValueError("JSON configuration must define a mapping at the top level")
            return loaded
        raise ValueError(f"Unsupported configuration type: {suffix}")


DEFAULT_OPTIONS = ConversionOptions()


__all__ = [
    "ConversionOptions",
    "DEFAULT_OPTIONS",
    "DEFAULT_SUPPORTED_SCHEMAS",
    "PROJECTIONS",
    "normalize_projection",
]
