from __future__ import annotations

import argparse
from typing import Sequence

from .config.options import PROJECTIONS
from .export import OUTPUT_FORMATS
from .types import MAPPED_ROLES


class _JoinPathAction(argparse.Action):
    """Join successive CLI tokens into a single path string (handles spaces gracefully)."""

    def __call__(self, parser, namespace, values, option_string=None):
        joined = " ".join(values).strip()
        setattr(namespace, self.dest, joined or None)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse the CLI arguments for the IFC -> OSM converter."""

    parser = argparse.ArgumentParser(
        prog="buildosm",
        description="Convert an IFC building model into georeferenced OSM footprints",
    )
    parser.add_argument(
        "input_path",
        nargs="+",
        action=_JoinPathAction,
        help="Path to the IFC file to convert",
    )
    parser.add_argument(
        "--output",
        dest="output_path",
        nargs="+",
        action=_JoinPathAction,
        default=None,
        help="Output file (default: the input path with a .osm suffix)",
    )
    parser.add_argument(
        "--format",
        dest="output_format",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format; inferred from the output suffix when omitted",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        nargs="+",
        action=_JoinPathAction,
        default=None,
        help="Path to a YAML or JSON file with conversion options, tag and type catalogs",
    )
    parser.add_argument(
        "--projection",
        dest="projection",
        choices=PROJECTIONS,
        default=None,
        help="Local Cartesian -> geodetic projection (default: equirectangular)",
    )
    parser.add_argument(
        "--roles",
        dest="roles",
        nargs="+",
        choices=[role.value for role in MAPPED_ROLES],
        default=None,
        help="Element roles to convert (default: all)",
    )
    parser.add_argument(
        "--assume-default-axes",
        dest="assume_default_axes",
        action="store_true",
        help="Use IFC default axes for placements lacking RefDirection/Axis instead of dropping the element",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        dest="verbose",
        action="store_true",
        help="Log per-element decisions at DEBUG level",
    )

    return parser.parse_args(argv)
