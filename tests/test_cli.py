"""Tests for argument parsing and the buildosm command."""

import json
import xml.etree.ElementTree as ET

import pytest

from buildosm.cli import parse_args
from buildosm.conversion import main, run


class TestParseArgs:

    def test_path_with_spaces_is_joined(self):
        args = parse_args(["my", "model.ifc", "--projection", "aeqd"])
        assert args.input_path == "my model.ifc"
        assert args.projection == "aeqd"
        assert args.output_path is None

    def test_roles_and_flags(self):
        args = parse_args(["model.ifc", "--assume-default-axes", "-v", "--roles", "wall", "door"])
        assert args.roles == ["wall", "door"]
        assert args.assume_default_axes
        assert args.verbose

    def test_site_is_not_a_role_choice(self):
        with pytest.raises(SystemExit):
            parse_args(["model.ifc", "--roles", "site"])


class TestMain:

    def test_writes_osm_next_to_input(self, ifc_path):
        assert main([str(ifc_path)]) == 0
        output = ifc_path.with_suffix(".osm")
        root = ET.parse(output).getroot()
        assert len(root.findall("way")) == 1
        assert len(root.findall("node")) == 4

    def test_geojson_output(self, ifc_path, tmp_path):
        output = tmp_path / "out" / "walls.json"
        result = run([str(ifc_path), "--format", "geojson", "--output", str(output)])
        doc = json.loads(output.read_text(encoding="utf-8"))
        assert len(doc["features"]) == len(result.data.ways) == 1

    def test_default_geojson_suffix(self, ifc_path):
        run([str(ifc_path), "--format", "geojson"])
        assert ifc_path.with_suffix(".geojson").is_file()

    def test_config_file(self, ifc_path, tmp_path):
        config = tmp_path / "options.yaml"
        config.write_text("tags:\n  wall:\n    indoor: wall\n    material: brick\n", encoding="utf-8")
        result = run([str(ifc_path), "--config", str(config)])
        assert result.data.ways[0].tags["material"] == "brick"

    def test_roles_filter(self, ifc_path):
        result = run([str(ifc_path), "--roles", "door"])
        assert result.data.ways == []

    def test_missing_file_exits_with_error(self, tmp_path, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main([str(tmp_path / "missing.ifc")])
        assert excinfo.value.code == 2
        assert "Error:" in capsys.readouterr().err

    def test_malformed_config_exits_with_error(self, ifc_path, tmp_path, capsys):
        config = tmp_path / "broken.yaml"
        config.write_text("roles: [wall\n", encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            main([str(ifc_path), "--config", str(config)])
        assert excinfo.value.code == 2
        assert "Error:" in capsys.readouterr().err

    def test_unwritable_output_exits_with_error(self, ifc_path, tmp_path, capsys):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory", encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            main([str(ifc_path), "--output", str(blocker / "model.osm")])
        assert excinfo.value.code == 2
        assert "Error:" in capsys.readouterr().err

    def test_unknown_output_suffix_exits(self, ifc_path, tmp_path, capsys):
        with pytest.raises(SystemExit) as excinfo:
            main([str(ifc_path), "--output", str(tmp_path / "out.txt")])
        assert excinfo.value.code == 2
        assert "infer output format" in capsys.readouterr().err

    def test_corruption_is_reported(self, wall_model, tmp_path, capsys):
        b, _ = wall_model
        axis = b.representation("Axis", "Curve2D", [b.polyline([(0, 0), (1, 0)])])
        b.element("IfcWall", None, [axis])
        path = tmp_path / "broken.ifc"
        b.file.write(str(path))
        result = run([str(path)])
        assert result.is_corrupted
        assert "Warning: Model data looks corrupted" in capsys.readouterr().err
