from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Optional, Sequence, Union

import ifcopenshell

from .config.options import DEFAULT_SUPPORTED_SCHEMAS
from .errors import ModelLoadError, UnsupportedSchemaError

LOG = logging.getLogger(__name__)

PathLike = Union[str, Path]

_FILE_SCHEMA_RE = re.compile(r"FILE_SCHEMA\s*\(\s*\(\s*'([^']+)'", re.IGNORECASE)


def detect_schema(path: PathLike) -> Optional[str]:
    """Read the schema identifier from the STEP header of an IFC file.

    Only the header section (up to ``DATA;``) is scanned.
    """
    header_lines = []
    with open(path, "r", encoding="utf-8", errors="replace") as handle:
        for line in handle:
            if line.strip().upper().startswith("DATA;"):
                break
            header_lines.append(line)
    match = _FILE_SCHEMA_RE.search("".join(header_lines))
    if match is None:
        return None
    return match.group(1).strip().upper()


def _is_supported(schema: str, supported: Sequence[str]) -> bool:
    # Addendum suffixes (IFC4_ADD2, IFC2X3_TC1) belong to the same family.
    for name in supported:
        name = name.upper()
        if schema == name:
            return True
        if schema.startswith(name) and not schema[len(name):][:1].isalnum():
            return True
    return False


def load_model(path: PathLike, supported: Sequence[str] = DEFAULT_SUPPORTED_SCHEMAS):
    """Open an IFC file with ifcopenshell after checking its schema."""
    ifc_path = Path(path)
    if not ifc_path.is_file():
        raise FileNotFoundError(f"IFC file not found: {ifc_path}")

    schema = detect_schema(ifc_path)
    if schema is None:
        raise UnsupportedSchemaError(f"Could not detect the IFC schema of {ifc_path}")
    if not _is_supported(schema, supported):
        raise UnsupportedSchemaError(
            f"Unsupported IFC schema {schema} in {ifc_path}; expected one of {', '.join(supported)}"
        )

    LOG.info("Loading %s (%s)", ifc_path, schema)
    try:
        return ifcopenshell.open(ifc_path.as_posix())
    except (ifcopenshell.Error, RuntimeError, OSError) as exc:
        raise ModelLoadError(f"ifcopenshell failed to read {ifc_path}: {exc}") from exc


__all__ = ["PathLike", "detect_schema", "load_model"]
