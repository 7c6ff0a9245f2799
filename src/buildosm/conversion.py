from __future__ import annotations

import logging
import math
import sys
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .assemble import OsmData, assemble
from .classify import ClassifiedEntities, classify_entities
from .cli import parse_args as _cli_parse_args
from .config.options import DEFAULT_OPTIONS, ConversionOptions
from .errors import ConversionError
from .export import write_output
from .geospatial import ModelUnits, TransformContext, building_rotation, read_units, site_origin
from .io_utils import PathLike, load_model
from .levels import LevelClassifier
from .process_ifc import PreparationReport, prepare_objects
from .resolve_frame import root_placement_id
from .types import GeoObject, LatLon, PreparedObject

__all__ = [
    "ConversionResult",
    "CorruptionSignal",
    "convert",
    "convert_model",
    "main",
    "run",
    "to_geo_objects",
]

LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class CorruptionSignal:
    """Raised (as a value, not an exception) when elements went missing on the way."""

    classified_count: int
    prepared_count: int
    prepared_object_count: int
    geo_object_count: int

    @property
    def message(self) -> str:
        parts = []
        if self.prepared_count != self.classified_count:
            parts.append(
                f"{self.prepared_count} of {self.classified_count} classified elements produced geometry"
            )
        if self.geo_object_count != self.prepared_object_count:
            parts.append(
                f"{self.geo_object_count} of {self.prepared_object_count} prepared loops were georeferenced"
            )
        return "Model data looks corrupted: " + "; ".join(parts)

    @classmethod
    def check(
        cls,
        classified_count: int,
        prepared_count: int,
        prepared_object_count: int,
        geo_object_count: int,
    ) -> Optional["CorruptionSignal"]:
        if classified_count == prepared_count and prepared_object_count == geo_object_count:
            return None
        return cls(classified_count, prepared_count, prepared_object_count, geo_object_count)


@dataclass
class ConversionResult:
    """Artifacts produced for a single converted IFC model."""

    data: OsmData
    geo_objects: List[GeoObject]
    units: ModelUnits
    origin: LatLon
    element_count: int
    prepared_element_count: int
    dropped: Dict[int, str] = field(default_factory=dict)
    corruption: Optional[CorruptionSignal] = None
    counts: Dict[str, int] = field(default_factory=dict)
    source_path: Optional[Path] = None

    @property
    def is_corrupted(self) -> bool:
        return self.corruption is not None

    def as_dict(self) -> dict[str, Any]:
        """Summary view of the conversion result."""
        return {
            "ifc": str(self.source_path) if self.source_path else None,
            "origin": {"lat": self.origin[0], "lon": self.origin[1]},
            "units": {
                "length": self.units.length.value,
                "metres_per_unit": self.units.metres_per_unit,
                "angle": self.units.angle.value,
            },
            "counts": dict(self.counts),
            "elements": self.element_count,
            "prepared_elements": self.prepared_element_count,
            "nodes": len(self.data.nodes),
            "ways": len(self.data.ways),
            "dropped": dict(self.dropped),
            "corruption": self.corruption.message if self.corruption else None,
        }


def to_geo_objects(
    objects: Sequence[PreparedObject],
    context: TransformContext,
    levels: LevelClassifier,
    dropped: Optional[Dict[int, str]] = None,
) -> List[GeoObject]:
    """Georeference prepared loops and attach their storey level."""
    geo_objects: List[GeoObject] = []
    for obj in objects:
        coordinates = context.to_geodetic(obj.points)
        if not coordinates or not all(math.isfinite(lat) and math.isfinite(lon) for lat, lon in coordinates):
            LOG.debug("Loop of #%s did not project to finite coordinates", obj.source_id)
            if dropped is not None:
                dropped.setdefault(obj.source_id, "loop did not project to finite coordinates")
            continue
        geo_objects.append(
            GeoObject(
                source_id=obj.source_id,
                role=obj.role,
                coordinates=coordinates,
                level=levels.level_of(obj.source_id),
            )
        )
    return geo_objects


def _prepare_roles(
    classified: ClassifiedEntities, root_id: int, options: ConversionOptions
) -> PreparationReport:
    report = PreparationReport()
    for role in options.roles:
        report.extend(prepare_objects(classified.for_role(role), role, root_id, options))
    return report


def convert_model(model, options: Optional[ConversionOptions] = None) -> ConversionResult:
    """Run the whole IFC -> OSM pipeline over an opened ifcopenshell model.

    Raises :class:`~buildosm.errors.MissingRootError` or
    :class:`~buildosm.errors.MissingGeodeticOriginError` when the model cannot
    be georeferenced at all. Per-element problems only show up in ``dropped``
    and, when counts disagree, in ``corruption``.
    """
    options = options or DEFAULT_OPTIONS
    classified = classify_entities(model, options.type_catalog)
    root_id = root_placement_id(classified.site)
    units = read_units(model)
    origin = site_origin(classified.site, units, options.projection)
    LOG.info("Site origin: lat=%.8f lon=%.8f", origin[0], origin[1])
    context = TransformContext(
        origin=origin,
        units=units,
        rotation=building_rotation(model),
        projection=options.projection,
    )

    report = _prepare_roles(classified, root_id, options)
    levels = LevelClassifier.from_model(model)
    dropped = dict(report.dropped)
    geo_objects = to_geo_objects(report.objects, context, levels, dropped)
    data = assemble(geo_objects, options.tag_catalog)

    classified_count = classified.count(options.roles)
    corruption = CorruptionSignal.check(
        classified_count=classified_count,
        prepared_count=report.prepared_element_count,
        prepared_object_count=len(report.objects),
        geo_object_count=len(geo_objects),
    )
    if corruption is not None:
        LOG.warning(corruption.message)

    counts = {role.value: len(classified.for_role(role)) for role in options.roles}
    return ConversionResult(
        data=data,
        geo_objects=geo_objects,
        units=units,
        origin=origin,
        element_count=classified_count,
        prepared_element_count=report.prepared_element_count,
        dropped=dropped,
        corruption=corruption,
        counts=counts,
    )


def convert(path: PathLike, options: Optional[ConversionOptions] = None) -> ConversionResult:
    options = options or DEFAULT_OPTIONS
    model = load_model(path, options.supported_schemas)
    result = convert_model(model, options)
    result.source_path = Path(path)
    return result


def _options_from_args(args) -> ConversionOptions:
    options = DEFAULT_OPTIONS
    if getattr(args, "config_path", None):
        options = ConversionOptions.from_file(Path(args.config_path), base=options)
        LOG.info("Loaded configuration from %s", args.config_path)
    changes: Dict[str, Any] = {}
    if getattr(args, "projection", None):
        changes["projection"] = args.projection
    if getattr(args, "roles", None):
        changes["roles"] = tuple(args.roles)
    if getattr(args, "assume_default_axes", False):
        changes["assume_default_axes"] = True
    return replace(options, **changes) if changes else options


def _default_output_path(input_path: Path, fmt: Optional[str]) -> Path:
    return input_path.with_suffix(".geojson" if fmt == "geojson" else ".osm")


def run(argv: Sequence[str] | None = None) -> ConversionResult:
    """Parse CLI arguments, convert the model and write the output file."""
    args = _cli_parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if getattr(args, "verbose", False) else logging.INFO,
        format="%(levelname)s: %(message)s",
    )
    input_path = Path(args.input_path)
    fmt = getattr(args, "output_format", None)
    output_path = Path(args.output_path) if args.output_path else _default_output_path(input_path, fmt)

    try:
        options = _options_from_args(args)
        result = convert(input_path, options)
        written = write_output(result.data, output_path, fmt)
    except (ConversionError, OSError, ValueError, yaml.YAMLError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(2) from exc

    if result.corruption is not None:
        print(f"Warning: {result.corruption.message}", file=sys.stderr)
    LOG.info(
        "Converted %d/%d element(s) into %d way(s): %s",
        result.prepared_element_count,
        result.element_count,
        len(result.data.ways),
        written,
    )
    return result


def main(argv: Sequence[str] | None = None) -> int:
    run(argv)
    return 0


if __name__ == "__main__":
    sys.exit(main())
