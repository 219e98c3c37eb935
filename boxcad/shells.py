"""
BoxCad - Shell Builder
======================

Hohlkörper = Außen-Solid minus Innen-Kavität.

Die Maße werden zuerst rein rechnerisch geplant (ShellPlan, ohne Kernel)
und dann in build_shell() über den KernelAdapter gebaut. Die Schnitt-
Reihenfolge ist immer cut(outer, inner).

Box:       origin = untere linke Ecke, Radius = Eckradius
Zylinder:  origin = Kreismitte der Grundfläche, Radius = Kreisradius
"""

from dataclasses import dataclass
from typing import Any, Tuple

from loguru import logger

from boxcad.parameters import (
    ResolvedThickness, ShapeKind, ShapeParameters, clamp_radius, resolve_thickness, round_to,
)
from boxcad.profiles import build_circle_profile, build_profile
from boxcad.solids import extrude_profile

Point = Tuple[float, float, float]


@dataclass(frozen=True)
class ShellPlan:
    """Vollständig aufgelöste Maße eines Hohlkörpers (Basis oder Deckel)."""
    kind: ShapeKind
    outer_origin: Point
    outer_width: float
    outer_depth: float
    outer_height: float
    outer_radius: float
    inner_origin: Point
    inner_width: float
    inner_depth: float
    inner_height: float
    inner_radius: float
    offset: Point = (0.0, 0.0, 0.0)

    @property
    def outer_footprint(self) -> Tuple[float, float]:
        return (round_to(self.outer_width), round_to(self.outer_depth))

    @property
    def inner_footprint(self) -> Tuple[float, float]:
        return (round_to(self.inner_width), round_to(self.inner_depth))

    @property
    def effective_inner_radius(self) -> float:
        """Innenradius nach Klemmung (Box) bzw. Kreisradius (Zylinder)."""
        if self.kind == ShapeKind.CYLINDER:
            return self.inner_radius
        return clamp_radius(self.inner_radius, self.inner_width, self.inner_depth)

    @property
    def is_translated(self) -> bool:
        return any(abs(v) > 0.0 for v in self.offset)


def plan_box_shell(params: ShapeParameters, thickness: ResolvedThickness = None) -> ShellPlan:
    """
    Box-Basis: außen = innen + 2*Wand, Höhe = Innenhöhe + Boden.

    Die Oberseite bleibt offen (mit Deckel deckt der Deckel sie ab).
    """
    t = thickness or resolve_thickness(params)
    inner_radius = params.inside_radius if params.include_inside_radius else 0.0
    outer_radius = params.inside_radius + t.wall if params.include_inside_radius else 0.0
    return ShellPlan(
        kind=ShapeKind.BOX,
        outer_origin=(0.0, 0.0, 0.0),
        outer_width=params.inside_width + 2 * t.wall,
        outer_depth=params.inside_depth + 2 * t.wall,
        outer_height=params.inside_height + t.bottom,
        outer_radius=outer_radius,
        inner_origin=(t.wall, t.wall, t.bottom),
        inner_width=params.inside_width,
        inner_depth=params.inside_depth,
        inner_height=params.inside_height,
        inner_radius=inner_radius,
    )


def plan_cylinder_shell(params: ShapeParameters, thickness: ResolvedThickness = None) -> ShellPlan:
    """
    Zylinder-Basis: Innenradius = insideWidth/2, Deckelstärke nur ohne Deckel.

    inside_depth wird ignoriert (Kreisquerschnitt).
    """
    t = thickness or resolve_thickness(params)
    inner_radius = params.inside_width / 2.0
    outer_radius = inner_radius + t.wall
    top = 0.0 if params.include_lid else t.top
    return ShellPlan(
        kind=ShapeKind.CYLINDER,
        outer_origin=(0.0, 0.0, 0.0),
        outer_width=2 * outer_radius,
        outer_depth=2 * outer_radius,
        outer_height=params.inside_height + t.bottom + top,
        outer_radius=outer_radius,
        inner_origin=(0.0, 0.0, t.bottom),
        inner_width=2 * inner_radius,
        inner_depth=2 * inner_radius,
        inner_height=params.inside_height,
        inner_radius=inner_radius,
    )


def plan_shell(params: ShapeParameters, thickness: ResolvedThickness = None) -> ShellPlan:
    if params.shape == ShapeKind.CYLINDER:
        return plan_cylinder_shell(params, thickness)
    return plan_box_shell(params, thickness)


def build_outer(kernel: Any, plan: ShellPlan) -> Any:
    if plan.kind == ShapeKind.CYLINDER:
        profile = build_circle_profile(plan.outer_origin, plan.outer_radius)
    else:
        profile = build_profile(plan.outer_origin, plan.outer_width, plan.outer_depth, plan.outer_radius)
    return extrude_profile(kernel, profile, plan.outer_height)


def build_inner(kernel: Any, plan: ShellPlan) -> Any:
    if plan.kind == ShapeKind.CYLINDER:
        profile = build_circle_profile(plan.inner_origin, plan.inner_radius)
    else:
        profile = build_profile(plan.inner_origin, plan.inner_width, plan.inner_depth, plan.inner_radius)
    return extrude_profile(kernel, profile, plan.inner_height)


def build_shell(kernel: Any, plan: ShellPlan) -> Any:
    """Baut outer und inner, schneidet, verschiebt optional um plan.offset."""
    logger.debug(
        f"Shell {plan.kind.value}: außen {plan.outer_width:.3f}x{plan.outer_depth:.3f}x{plan.outer_height:.3f} "
        f"r={plan.outer_radius:.3f}, innen {plan.inner_width:.3f}x{plan.inner_depth:.3f}x{plan.inner_height:.3f} "
        f"r={plan.inner_radius:.3f}"
    )
    outer = build_outer(kernel, plan)
    inner = build_inner(kernel, plan)
    shell = kernel.cut(outer, inner)
    if plan.is_translated:
        shell = kernel.translate(shell, *plan.offset)
    return shell
