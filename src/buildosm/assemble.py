"""Pack geodetic loops into OSM nodes and ways."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from .config.catalog import DEFAULT_TAG_CATALOG, TagCatalog
from .types import ElementRole, GeoObject

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class OsmNode:
    id: int
    lat: float
    lon: float


@dataclass
class OsmWay:
    id: int
    node_ids: List[int]
    tags: Dict[str, str] = field(default_factory=dict)
    source_id: Optional[int] = None
    role: Optional[ElementRole] = None

    @property
    def is_closed(self) -> bool:
        return len(self.node_ids) > 2 and self.node_ids[0] == self.node_ids[-1]


@dataclass
class OsmData:
    nodes: List[OsmNode] = field(default_factory=list)
    ways: List[OsmWay] = field(default_factory=list)

    def node_index(self) -> Dict[int, OsmNode]:
        return {node.id: node for node in self.nodes}


def assemble(geo_objects: Iterable[GeoObject], tag_catalog: TagCatalog = DEFAULT_TAG_CATALOG) -> OsmData:
    """Build one way per GeoObject.

    Ids are negative and allocated from -1 in input order. A loop whose first
    and last coordinates are identical is closed by referencing its first node
    again instead of emitting a duplicate node. Nodes are never shared between
    ways.
    """
    data = OsmData()
    next_node_id = -1
    next_way_id = -1

    for obj in geo_objects:
        coords = list(obj.coordinates)
        if not coords:
            LOG.debug("Skipping empty loop of #%s", obj.source_id)
            continue
        closed = len(coords) > 1 and coords[0] == coords[-1]
        if closed:
            coords = coords[:-1]

        node_ids: List[int] = []
        for lat, lon in coords:
            data.nodes.append(OsmNode(id=next_node_id, lat=lat, lon=lon))
            node_ids.append(next_node_id)
            next_node_id -= 1
        if closed:
            node_ids.append(node_ids[0])

        tags = tag_catalog.tags_for(obj.role)
        if obj.has_level:
            tags["level"] = str(obj.level)
        data.ways.append(
            OsmWay(id=next_way_id, node_ids=node_ids, tags=tags, source_id=obj.source_id, role=obj.role)
        )
        next_way_id -= 1

    LOG.info("Assembled %d node(s) and %d way(s)", len(data.nodes), len(data.ways))
    return data


__all__ = ["OsmData", "OsmNode", "OsmWay", "assemble"]
