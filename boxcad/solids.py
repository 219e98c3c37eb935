"""
BoxCad - Solid Synthesizer
==========================

Extrudiert ein Profil entlang +Z zu einem Solid.

Pfade (in Reihenfolge):
1. Wire -> planare Face -> Prism
2. Pipe-Sweep des Wires entlang einer geraden Spine (Flag prism_sweep_fallback)
3. Box-/Zylinder-Primitiv, nur für einfache Rechtecke und Kreise
   (Flag primitive_solid_fallback)

Alle Pfade liefern dieselbe Außenkontur und Höhe.
"""

from typing import Any, Union

from loguru import logger

from config.feature_flags import is_enabled
from boxcad.errors import PrimitiveConstructionError
from boxcad.profiles import CircleProfile, Profile, profile_to_wire


def _spine_start(profile: Union[Profile, CircleProfile]):
    if isinstance(profile, CircleProfile):
        cx, cy, z = profile.center
        return (cx + profile.radius, cy, z)
    return profile.segments[0].start


def _sweep(kernel: Any, wire: Any, profile: Union[Profile, CircleProfile], height: float) -> Any:
    x, y, z = _spine_start(profile)
    spine_edge = kernel.line_edge(kernel.point(x, y, z), kernel.point(x, y, z + height))
    spine = kernel.wire([spine_edge])
    return kernel.pipe(wire, spine)


def _primitive(kernel: Any, profile: Union[Profile, CircleProfile], height: float) -> Any:
    if isinstance(profile, CircleProfile):
        cx, cy, z = profile.center
        return kernel.cylinder(profile.radius, height, cx, cy, z)
    x, y, z = profile.origin
    return kernel.box((x, y, z), (x + profile.width, y + profile.depth, z + height))


def extrude_profile(kernel: Any, profile: Union[Profile, CircleProfile], height: float) -> Any:
    """
    Profil -> Solid der Höhe ``height``.

    Raises:
        PrimitiveConstructionError: Wenn alle Pfade scheitern (fatal für den Build)
    """
    if height <= 0:
        raise ValueError(f"Extrusionshöhe muss positiv sein: {height}")

    wire = profile_to_wire(kernel, profile)
    try:
        face = kernel.face(wire)
        return kernel.prism(face, 0.0, 0.0, height)
    except PrimitiveConstructionError as prism_error:
        first_error = prism_error

    logger.warning(f"Face/Prism fehlgeschlagen ({first_error.primitive}) - versuche Fallback")

    if is_enabled("prism_sweep_fallback"):
        try:
            solid = _sweep(kernel, wire, profile, height)
            kernel.note_fallback("pipe_sweep")
            logger.warning(f"Profil per Pipe-Sweep extrudiert (Höhe {height:.3f})")
            return solid
        except PrimitiveConstructionError as sweep_error:
            logger.debug(f"Pipe-Sweep fehlgeschlagen: {sweep_error.message}")

    plain = isinstance(profile, CircleProfile) or profile.is_plain_rectangle
    if plain and is_enabled("primitive_solid_fallback"):
        solid = _primitive(kernel, profile, height)
        kernel.note_fallback("primitive_solid")
        logger.warning("Profil durch Box-/Zylinder-Primitiv ersetzt")
        return solid

    raise first_error
