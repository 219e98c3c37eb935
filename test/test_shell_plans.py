"""
Tests für Shell- und Deckel-Planung (Maß-Invarianten, ohne Kernel).

Run: pytest test/test_shell_plans.py -v
"""

import pytest

from boxcad.lids import plan_lid
from boxcad.parameters import ShapeKind, ShapeParameters, ThicknessMode, round_to
from boxcad.profiles import build_profile
from boxcad.shells import plan_box_shell, plan_cylinder_shell, plan_shell


BOX_CASES = [
    ShapeParameters(),
    ShapeParameters(inside_width=40, inside_depth=25, inside_height=12, thickness=2.2),
    ShapeParameters(include_inside_radius=False, clearance=0.0),
    ShapeParameters(thickness_mode=ThicknessMode.CUSTOM, wall_thickness=1.2, top_thickness=3.0,
                    bottom_thickness=0.8, inside_radius=20.0),
]


class TestBoxShellPlan:

    @pytest.mark.parametrize("params", BOX_CASES)
    def test_outer_minus_two_walls_equals_inside(self, params):
        """Test: Außen-Footprint - 2*Wand == Innen-Footprint (3 Stellen)."""
        plan = plan_box_shell(params)
        wall = plan.inner_origin[0]

        assert round_to(plan.outer_width - 2 * wall) == round_to(params.inside_width)
        assert round_to(plan.outer_depth - 2 * wall) == round_to(params.inside_depth)
        assert plan.inner_footprint == (round_to(params.inside_width), round_to(params.inside_depth))

    def test_default_box(self):
        plan = plan_box_shell(ShapeParameters())

        assert plan.outer_footprint == (13.34, 13.34)
        assert round_to(plan.outer_height) == 11.67
        assert round_to(plan.outer_radius) == 4.17
        assert plan.inner_origin == (1.67, 1.67, 1.67)
        assert plan.inner_height == 10.0
        assert plan.inner_radius == 2.5
        assert plan.is_translated is False

    @pytest.mark.parametrize("include_lid", [True, False])
    def test_box_height_never_adds_top(self, include_lid):
        """Test: Box-Höhe = Innenhöhe + Boden, mit und ohne Deckel."""
        params = ShapeParameters(thickness_mode=ThicknessMode.CUSTOM, wall_thickness=1.0,
                                 top_thickness=5.0, bottom_thickness=2.0, include_lid=include_lid)

        assert plan_box_shell(params).outer_height == 12.0

    def test_square_corners(self):
        plan = plan_box_shell(ShapeParameters(include_inside_radius=False))

        assert plan.outer_radius == 0.0
        assert plan.inner_radius == 0.0

    def test_degenerate_radius_clamps(self):
        """Test: 10x10, Radius 20 -> effektiver Innenradius 4.99, Innenspanne bleibt positiv."""
        plan = plan_box_shell(ShapeParameters(inside_radius=20.0))

        assert round_to(plan.effective_inner_radius) == 4.99
        assert plan.inner_width > 0 and plan.inner_depth > 0

    def test_degenerate_radius_reaches_cavity_profile(self):
        """Test: Der Profile Builder bekommt denselben geklemmten Radius wie der Plan."""
        plan = plan_box_shell(ShapeParameters(inside_radius=20.0))
        profile = build_profile(plan.inner_origin, plan.inner_width, plan.inner_depth, plan.inner_radius)

        assert profile.edge_count == 8
        assert round_to(profile.radius) == round_to(plan.effective_inner_radius) == 4.99


class TestCylinderShellPlan:

    def test_radii(self):
        plan = plan_cylinder_shell(ShapeParameters(shape=ShapeKind.CYLINDER, inside_width=20.0, thickness=2.0))

        assert plan.inner_radius == 10.0
        assert plan.outer_radius == 12.0
        assert plan.inner_origin == (0.0, 0.0, 2.0)
        assert plan.outer_footprint == (24.0, 24.0)

    def test_top_added_only_without_lid(self):
        base = dict(shape=ShapeKind.CYLINDER, thickness_mode=ThicknessMode.CUSTOM,
                    wall_thickness=1.0, top_thickness=3.0, bottom_thickness=2.0, inside_height=10.0)

        assert plan_cylinder_shell(ShapeParameters(include_lid=True, **base)).outer_height == 12.0
        assert plan_cylinder_shell(ShapeParameters(include_lid=False, **base)).outer_height == 15.0

    def test_plan_shell_dispatch(self):
        assert plan_shell(ShapeParameters(shape=ShapeKind.CYLINDER)).kind == ShapeKind.CYLINDER
        assert plan_shell(ShapeParameters()).kind == ShapeKind.BOX


class TestLidPlan:

    @pytest.mark.parametrize("clearance", [0.0, 0.2, 0.5, 1.25])
    def test_lid_inner_equals_base_outer_plus_two_clearance(self, clearance):
        """Test: Deckel-Innen = Basis-Außen + 2*Spiel, auch bei Spiel 0 (bündig)."""
        params = ShapeParameters(clearance=clearance)
        base = plan_box_shell(params)
        lid = plan_lid(params, base)

        assert lid.inner_footprint == (
            round_to(base.outer_width + 2 * clearance),
            round_to(base.outer_depth + 2 * clearance),
        )

    def test_lid_outer_is_inner_plus_two_walls(self):
        params = ShapeParameters()
        lid = plan_lid(params)

        assert round_to(lid.outer_width - lid.inner_width) == round_to(2 * 1.67)

    def test_lid_height_spans_base(self):
        params = ShapeParameters(thickness_mode=ThicknessMode.CUSTOM, wall_thickness=1.0,
                                 top_thickness=3.0, bottom_thickness=2.0, inside_height=10.0)
        lid = plan_lid(params)

        assert lid.outer_height == 15.0
        assert lid.inner_height == 12.0
        assert lid.inner_origin[2] == 0.0
        # Kavitätsdecke liegt bündig auf dem Basis-Rand
        assert lid.inner_height == plan_box_shell(params).outer_height

    def test_radius_chain(self):
        """Test: Basis-Außenradius -> +Spiel -> +Wand."""
        params = ShapeParameters(inside_radius=2.5, thickness=1.67, clearance=0.2)
        lid = plan_lid(params)

        assert round_to(lid.inner_radius) == round_to(2.5 + 1.67 + 0.2)
        assert round_to(lid.outer_radius) == round_to(2.5 + 1.67 + 0.2 + 1.67)

    def test_square_base_gets_clearance_radius(self):
        lid = plan_lid(ShapeParameters(include_inside_radius=False, clearance=0.3))
        assert lid.inner_radius == 0.3

    def test_box_lid_is_translated_concentric(self):
        """Test: Verschiebung -(Spiel+Wand) -> Kavität konzentrisch zur Basis."""
        params = ShapeParameters(clearance=0.2, thickness=1.67)
        base = plan_box_shell(params)
        lid = plan_lid(params, base)

        assert lid.offset[0] == pytest.approx(-(0.2 + 1.67))
        assert lid.offset[1] == pytest.approx(-(0.2 + 1.67))
        assert lid.offset[2] == 0.0
        cavity_x0 = lid.inner_origin[0] + lid.offset[0]
        assert cavity_x0 + lid.inner_width / 2 == pytest.approx(base.outer_width / 2)

    def test_cylinder_lid_concentric_without_translation(self):
        params = ShapeParameters(shape=ShapeKind.CYLINDER, inside_width=20.0, thickness=2.0, clearance=0.5)
        base = plan_cylinder_shell(params)
        lid = plan_lid(params, base)

        assert lid.is_translated is False
        assert lid.inner_radius == base.outer_radius + 0.5
        assert lid.outer_radius == lid.inner_radius + 2.0
