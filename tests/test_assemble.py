"""Tests for OSM node/way assembly."""

from buildosm.assemble import assemble
from buildosm.config.catalog import TagCatalog
from buildosm.types import ElementRole, GeoObject

P0, P1, P2 = (52.0, 13.0), (52.0001, 13.0), (52.0001, 13.0001)


class TestAssemble:

    def test_closed_loop_shares_first_node(self):
        data = assemble([GeoObject(1, ElementRole.AREA, [P0, P1, P2, P0])])
        assert [(n.lat, n.lon) for n in data.nodes] == [P0, P1, P2]
        assert len(data.ways) == 1
        way = data.ways[0]
        assert way.node_ids == [-1, -2, -3, -1]
        assert way.is_closed

    def test_open_loop_kept_as_is(self):
        data = assemble([GeoObject(1, ElementRole.WALL, [P0, P1, P2])])
        assert len(data.nodes) == 3
        assert data.ways[0].node_ids == [-1, -2, -3]
        assert not data.ways[0].is_closed

    def test_ids_are_negative_and_sequential_across_ways(self):
        data = assemble(
            [
                GeoObject(1, ElementRole.WALL, [P0, P1]),
                GeoObject(2, ElementRole.DOOR, [P1, P2, P1]),
            ]
        )
        assert [n.id for n in data.nodes] == [-1, -2, -3, -4]
        assert [w.id for w in data.ways] == [-1, -2]
        assert data.ways[1].node_ids == [-3, -4, -3]

    def test_nodes_not_shared_between_ways(self):
        data = assemble([GeoObject(1, ElementRole.WALL, [P0, P1]), GeoObject(2, ElementRole.WALL, [P0, P1])])
        assert len(data.nodes) == 4

    def test_role_tags_and_level(self):
        data = assemble(
            [
                GeoObject(1, ElementRole.WALL, [P0, P1], level=2),
                GeoObject(2, ElementRole.AREA, [P0, P1, P2, P0], level=0),
                GeoObject(3, ElementRole.STAIR, [P0, P1]),
            ]
        )
        wall, area, stair = data.ways
        assert wall.tags == {"indoor": "wall", "material": "concrete", "level": "2"}
        assert area.tags == {"indoor": "room", "level": "0"}
        assert stair.tags == {"highway": "steps", "indoor": "yes"}

    def test_custom_catalog(self):
        catalog = TagCatalog.from_mapping({"door": {"door": "hinged"}})
        data = assemble([GeoObject(1, ElementRole.DOOR, [P0, P1])], catalog)
        assert data.ways[0].tags == {"door": "hinged"}

    def test_catalog_not_mutated_by_level_tags(self):
        catalog = TagCatalog()
        assemble([GeoObject(1, ElementRole.WALL, [P0, P1], level=1)], catalog)
        assert "level" not in catalog.tags_for(ElementRole.WALL)

    def test_way_remembers_source(self):
        data = assemble([GeoObject(42, ElementRole.WINDOW, [P0, P1])])
        assert data.ways[0].source_id == 42
        assert data.ways[0].role is ElementRole.WINDOW
        assert data.ways[0].tags == {"indoor": "wall", "material": "glass"}
