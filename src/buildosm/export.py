from __future__ import annotations

import json
import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, List, Optional

from .assemble import OsmData, OsmWay
from .io_utils import PathLike

LOG = logging.getLogger(__name__)

OSM_API_VERSION = "0.6"
GENERATOR = "buildosm"

_FORMAT_SUFFIXES = {
    ".osm": "osm",
    ".geojson": "geojson",
    ".json": "geojson",
}
OUTPUT_FORMATS = ("osm", "geojson")


def _coord(value: float) -> str:
    return f"{value:.9f}"


def osm_tree(data: OsmData) -> ET.ElementTree:
    root = ET.Element("osm", {"version": OSM_API_VERSION, "generator": GENERATOR, "upload": "false"})
    for node in data.nodes:
        ET.SubElement(
            root,
            "node",
            {"id": str(node.id), "action": "modify", "visible": "true", "lat": _coord(node.lat), "lon": _coord(node.lon)},
        )
    for way in data.ways:
        way_el = ET.SubElement(root, "way", {"id": str(way.id), "action": "modify", "visible": "true"})
        for ref in way.node_ids:
            ET.SubElement(way_el, "nd", {"ref": str(ref)})
        for key in sorted(way.tags):
            ET.SubElement(way_el, "tag", {"k": key, "v": way.tags[key]})
    return ET.ElementTree(root)


def write_osm(data: OsmData, path: PathLike) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    tree = osm_tree(data)
    ET.indent(tree, space="  ")
    tree.write(out, encoding="utf-8", xml_declaration=True)
    LOG.info("Wrote %d node(s) and %d way(s) to %s", len(data.nodes), len(data.ways), out)
    return out


def _way_geometry(way: OsmWay, index: Dict[int, Any]) -> Dict[str, Any]:
    ring: List[List[float]] = [[index[ref].lon, index[ref].lat] for ref in way.node_ids]
    if way.is_closed:
        return {"type": "Polygon", "coordinates": [ring]}
    if len(ring) == 1:
        return {"type": "Point", "coordinates": ring[0]}
    return {"type": "LineString", "coordinates": ring}


def geojson_document(data: OsmData) -> Dict[str, Any]:
    index = data.node_index()
    features = []
    for way in data.ways:
        properties: Dict[str, Any] = dict(way.tags)
        properties["osm_id"] = way.id
        if way.source_id is not None:
            properties["ifc_id"] = way.source_id
        if way.role is not None:
            properties["role"] = way.role.value
        features.append({"type": "Feature", "geometry": _way_geometry(way, index), "properties": properties})
    return {"type": "FeatureCollection", "features": features}


def write_geojson(data: OsmData, path: PathLike) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(geojson_document(data), indent=2), encoding="utf-8")
    LOG.info("Wrote %d feature(s) to %s", len(data.ways), out)
    return out


def resolve_format(path: PathLike, fmt: Optional[str] = None) -> str:
    if fmt:
        name = fmt.strip().lower()
        if name not in OUTPUT_FORMATS:
            raise ValueError(f"Unknown output format '{fmt}'; expected one of {', '.join(OUTPUT_FORMATS)}")
        return name
    suffix = Path(path).suffix.lower()
    if suffix not in _FORMAT_SUFFIXES:
        raise ValueError(f"Cannot infer output format from '{path}'; use .osm or .geojson")
    return _FORMAT_SUFFIXES[suffix]


def write_output(data: OsmData, path: PathLike, fmt: Optional[str] = None) -> Path:
    if resolve_format(path, fmt) == "geojson":
        return write_geojson(data, path)
    return write_osm(data, path)


__all__ = [
    "OUTPUT_FORMATS",
    "geojson_document",
    "osm_tree",
    "resolve_format",
    "write_geojson",
    "write_osm",
    "write_output",
]
