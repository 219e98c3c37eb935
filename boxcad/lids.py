"""
BoxCad - Lid Builder
====================

Der Deckel ist eine Hülse, die mit gleichmäßigem Spiel über die Basis
gleitet: Innenkontur = Außenkontur der Basis + 2*clearance, Außenkontur =
Innenkontur + 2*Wand, Höhe = Innenhöhe + Boden + Deckel.

Radius-Kette (Box): Basis-Außenradius -> +clearance -> Deckel-Innenradius
-> +Wand -> Deckel-Außenradius. Ein Basis-Außenradius von 0 ergibt mit
clearance > 0 trotzdem gerundete Innenecken (Offset einer scharfen Ecke).
"""

from typing import Any

from boxcad.parameters import ResolvedThickness, ShapeKind, ShapeParameters, resolve_thickness
from boxcad.shells import ShellPlan, build_shell, plan_shell


def plan_lid(params: ShapeParameters, base: ShellPlan = None, thickness: ResolvedThickness = None) -> ShellPlan:
    """
    Deckel-Plan relativ zur Basis.

    Box: gebaut mit Außenecke im Ursprung, dann um -(clearance + wall) in X/Y
    verschoben, damit die Kavität konzentrisch zur Basis liegt.
    Zylinder: bereits um die Achse zentriert, keine Verschiebung.
    """
    t = thickness or resolve_thickness(params)
    base = base or plan_shell(params, t)
    c = params.clearance
    lid_height = params.inside_height + t.bottom + t.top
    cavity_height = lid_height - t.top

    if base.kind == ShapeKind.CYLINDER:
        # Profil ist achszentriert: Deckel liegt ohne -(clearance + wall) Verschiebung konzentrisch
        inner_radius = base.outer_radius + c
        outer_radius = inner_radius + t.wall
        return ShellPlan(
            kind=ShapeKind.CYLINDER,
            outer_origin=(0.0, 0.0, 0.0),
            outer_width=2 * outer_radius,
            outer_depth=2 * outer_radius,
            outer_height=lid_height,
            outer_radius=outer_radius,
            inner_origin=(0.0, 0.0, 0.0),
            inner_width=2 * inner_radius,
            inner_depth=2 * inner_radius,
            inner_height=cavity_height,
            inner_radius=inner_radius,
        )

    inner_width = base.outer_width + 2 * c
    inner_depth = base.outer_depth + 2 * c
    inner_radius = base.outer_radius + c
    shift = -(c + t.wall)
    return ShellPlan(
        kind=ShapeKind.BOX,
        outer_origin=(0.0, 0.0, 0.0),
        outer_width=inner_width + 2 * t.wall,
        outer_depth=inner_depth + 2 * t.wall,
        outer_height=lid_height,
        outer_radius=inner_radius + t.wall,
        inner_origin=(t.wall, t.wall, 0.0),
        inner_width=inner_width,
        inner_depth=inner_depth,
        inner_height=cavity_height,
        inner_radius=inner_radius,
        offset=(shift, shift, 0.0),
    )


def build_lid(kernel: Any, plan: ShellPlan) -> Any:
    """Deckel-Solid aus plan_lid() (Schnitt + Verschiebung)."""
    return build_shell(kernel, plan)
