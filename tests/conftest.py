"""
Pytest configuration and fixtures for buildosm tests.

Provides reusable fixtures for:
- In-memory IFC4 models (project, units, site, placements, representations)
- A georeferenced model with a single axis-represented wall
"""

import pytest

import ifcopenshell
import ifcopenshell.guid


class ModelBuilder:
    """Small helper around ``ifcopenshell.file`` for assembling test models."""

    def __init__(self, schema: str = "IFC4"):
        self.file = ifcopenshell.file(schema=schema)
        self.context = self.file.create_entity(
            "IfcGeometricRepresentationContext",
            ContextType="Model",
            CoordinateSpaceDimension=3,
            Precision=1e-5,
            WorldCoordinateSystem=self.axis3d(),
        )
        self.project = None
        self.site = None

    # -- geometry primitives ------------------------------------------------

    def point(self, *coords):
        return self.file.create_entity("IfcCartesianPoint", Coordinates=tuple(float(c) for c in coords))

    def direction(self, *ratios):
        return self.file.create_entity("IfcDirection", DirectionRatios=tuple(float(r) for r in ratios))

    def axis3d(self, location=(0.0, 0.0, 0.0), axis=(0.0, 0.0, 1.0), ref_direction=(1.0, 0.0, 0.0)):
        return self.file.create_entity(
            "IfcAxis2Placement3D",
            Location=self.point(*location),
            Axis=self.direction(*axis) if axis is not None else None,
            RefDirection=self.direction(*ref_direction) if ref_direction is not None else None,
        )

    def axis2d(self, location=(0.0, 0.0), ref_direction=(1.0, 0.0)):
        return self.file.create_entity(
            "IfcAxis2Placement2D",
            Location=self.point(*location),
            RefDirection=self.direction(*ref_direction) if ref_direction is not None else None,
        )

    def placement(self, relative_to=None, relative_placement=None, **axis_kwargs):
        return self.file.create_entity(
            "IfcLocalPlacement",
            PlacementRelTo=relative_to,
            RelativePlacement=relative_placement if relative_placement is not None else self.axis3d(**axis_kwargs),
        )

    def polyline(self, points):
        return self.file.create_entity("IfcPolyline", Points=[self.point(*p) for p in points])

    def representation(self, identifier, rep_type, items):
        return self.file.create_entity(
            "IfcShapeRepresentation",
            ContextOfItems=self.context,
            RepresentationIdentifier=identifier,
            RepresentationType=rep_type,
            Items=list(items),
        )

    def product_shape(self, representations):
        return self.file.create_entity("IfcProductDefinitionShape", Representations=list(representations))

    def extruded_rectangle(self, x_dim, y_dim, location=(0.0, 0.0, 0.0)):
        profile = self.file.create_entity("IfcRectangleProfileDef", ProfileType="AREA", XDim=float(x_dim), YDim=float(y_dim))
        return self.file.create_entity(
            "IfcExtrudedAreaSolid",
            SweptArea=profile,
            Position=self.axis3d(location=location),
            ExtrudedDirection=self.direction(0.0, 0.0, 1.0),
            Depth=3.0,
        )

    def bounding_box(self, corner, x_dim, y_dim, z_dim=1.0):
        return self.file.create_entity(
            "IfcBoundingBox",
            Corner=self.point(*corner),
            XDim=float(x_dim),
            YDim=float(y_dim),
            ZDim=float(z_dim),
        )

    # -- model structure ----------------------------------------------------

    def with_project(self, true_north=None, wcs_ref_direction=(1.0, 0.0, 0.0)):
        self.context.WorldCoordinateSystem = self.axis3d(ref_direction=wcs_ref_direction)
        if true_north is not None:
            self.context.TrueNorth = self.direction(*true_north)
        self.project = self.file.create_entity(
            "IfcProject",
            GlobalId=ifcopenshell.guid.new(),
            Name="Test project",
            RepresentationContexts=[self.context],
        )
        return self

    def _dimensions(self, length=0):
        return self.file.create_entity(
            "IfcDimensionalExponents",
            LengthExponent=length,
            MassExponent=0,
            TimeExponent=0,
            ElectricCurrentExponent=0,
            ThermodynamicTemperatureExponent=0,
            AmountOfSubstanceExponent=0,
            LuminousIntensityExponent=0,
        )

    def with_units(self, length_prefix=None, angle="DEGREE", length_conversion=None):
        """Attach a unit assignment.

        ``length_conversion`` is a ``(name, metres)`` pair such as
        ``("FOOT", 0.3048)`` for a conversion-based length unit.
        """
        metre = self.file.create_entity("IfcSIUnit", UnitType="LENGTHUNIT", Prefix=length_prefix, Name="METRE")
        if length_conversion is not None:
            name, factor = length_conversion
            measure = self.file.create_entity(
                "IfcMeasureWithUnit",
                ValueComponent=self.file.create_entity("IfcLengthMeasure", float(factor)),
                UnitComponent=metre,
            )
            units = [
                self.file.create_entity(
                    "IfcConversionBasedUnit",
                    Dimensions=self._dimensions(length=1),
                    UnitType="LENGTHUNIT",
                    Name=name,
                    ConversionFactor=measure,
                )
            ]
        else:
            units = [metre]
        if angle == "DEGREE":
            units.append(
                self.file.create_entity(
                    "IfcConversionBasedUnit", Dimensions=self._dimensions(), UnitType="PLANEANGLEUNIT", Name="DEGREE"
                )
            )
        elif angle == "RADIAN":
            units.append(self.file.create_entity("IfcSIUnit", UnitType="PLANEANGLEUNIT", Name="RADIAN"))
        assignment = self.file.create_entity("IfcUnitAssignment", Units=units)
        if self.project is not None:
            self.project.UnitsInContext = assignment
        return self

    def with_site(self, lat=(52, 0, 0), lon=(13, 0, 0), box_corner=None):
        representation = None
        if box_corner is not None:
            box = self.representation("Box", "BoundingBox", [self.bounding_box(box_corner, 100.0, 100.0)])
            representation = self.product_shape([box])
        self.site = self.file.create_entity(
            "IfcSite",
            GlobalId=ifcopenshell.guid.new(),
            Name="Site",
            ObjectPlacement=self.placement(),
            Representation=representation,
            RefLatitude=lat,
            RefLongitude=lon,
        )
        return self

    @property
    def site_placement(self):
        return self.site.ObjectPlacement

    def element(self, ifc_class, placement=None, representations=(), **attributes):
        shape = self.product_shape(representations) if representations else None
        return self.file.create_entity(
            ifc_class,
            GlobalId=ifcopenshell.guid.new(),
            ObjectPlacement=placement,
            Representation=shape,
            **attributes,
        )

    def axis_element(self, ifc_class, points, location=(0.0, 0.0, 0.0), **attributes):
        """Element placed relative to the site with a single axis polyline."""
        placement = self.placement(self.site_placement, location=location)
        axis = self.representation("Axis", "Curve3D", [self.polyline(points)])
        return self.element(ifc_class, placement, [axis], **attributes)

    def storey(self, elevation, name=None):
        return self.file.create_entity(
            "IfcBuildingStorey",
            GlobalId=ifcopenshell.guid.new(),
            Name=name or f"Storey {elevation}",
            Elevation=float(elevation),
        )

    def contain(self, structure, elements):
        return self.file.create_entity(
            "IfcRelContainedInSpatialStructure",
            GlobalId=ifcopenshell.guid.new(),
            RelatedElements=list(elements),
            RelatingStructure=structure,
        )


WALL_LOOP = [(0.0, 0.0, 0.0), (2.0, 0.0, 0.0), (2.0, 0.3, 0.0), (0.0, 0.3, 0.0)]


# =============================================================================
# MODEL FIXTURES
# =============================================================================

@pytest.fixture
def builder() -> ModelBuilder:
    """Empty IFC4 model with a geometric representation context."""
    return ModelBuilder()


@pytest.fixture
def site_builder() -> ModelBuilder:
    """IFC4 model with project, metre/degree units and a site at 52N 13E."""
    return ModelBuilder().with_project().with_units().with_site()


@pytest.fixture
def wall_model(site_builder):
    """Site model holding one axis wall offset (10, 5, 0) from the site."""
    wall = site_builder.axis_element("IfcWall", WALL_LOOP, location=(10.0, 5.0, 0.0), Name="Wall A")
    return site_builder, wall


@pytest.fixture
def ifc_path(tmp_path, wall_model):
    """The wall model written to disk as an IFC4 STEP file."""
    builder, _ = wall_model
    path = tmp_path / "building.ifc"
    builder.file.write(str(path))
    return path
