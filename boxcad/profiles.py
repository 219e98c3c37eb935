"""
BoxCad - Profile Builder
========================

Geschlossene Randkurve eines Rechtecks mit optional gerundeten Ecken
(4 Linien + 4 tangentiale Bögen) oder eines Kreises, in einer Z-Ebene.

Die Geometrie wird zuerst rein als Segmentliste beschrieben (testbar ohne
Kernel) und erst in profile_to_wire() über den KernelAdapter in Kanten
übersetzt.
"""

import math
from dataclasses import dataclass
from typing import Any, List, Tuple, Union

from loguru import logger

from boxcad.parameters import clamp_radius

Point = Tuple[float, float, float]


@dataclass(frozen=True)
class LineSegment:
    start: Point
    end: Point

    @property
    def length(self) -> float:
        return math.dist(self.start, self.end)


@dataclass(frozen=True)
class ArcSegment:
    """Viertelkreis über drei Punkte; mid liegt auf der Diagonale durch die Ecke."""
    start: Point
    mid: Point
    end: Point
    center: Point
    radius: float


Segment = Union[LineSegment, ArcSegment]


@dataclass(frozen=True)
class Profile:
    """
    Rechteck-Profil (origin = untere linke Ecke).

    Attributes:
        radius: Effektiver Eckradius (0 = eckige Ecken)
        requested_radius: Nominaler Radius vor Klemmung/Degradierung
        segments: Geschlossene Kantenfolge, Ende -> Start ohne Lücke
    """
    origin: Point
    width: float
    depth: float
    radius: float
    requested_radius: float
    segments: Tuple[Segment, ...]

    @property
    def edge_count(self) -> int:
        return len(self.segments)

    @property
    def is_rounded(self) -> bool:
        return self.radius > 0

    @property
    def lines(self) -> List[LineSegment]:
        return [s for s in self.segments if isinstance(s, LineSegment)]

    @property
    def arcs(self) -> List[ArcSegment]:
        return [s for s in self.segments if isinstance(s, ArcSegment)]

    @property
    def is_plain_rectangle(self) -> bool:
        return not self.arcs


@dataclass(frozen=True)
class CircleProfile:
    """Kreis-Profil für die Zylinder-Variante (center = Kreismitte)."""
    center: Point
    radius: float

    @property
    def edge_count(self) -> int:
        return 1


def build_profile(origin: Point, width: float, depth: float, radius: float = 0.0, rounded: bool = True) -> Profile:
    """
    Rechteck-Profil mit optional gerundeten Ecken.

    Der Radius wird auf min(width, depth)/2 - Epsilon geklemmt. Ist der
    geklemmte Radius <= 0 oder lässt er keine positive Geradenspanne übrig,
    entsteht ein einfaches Rechteck (kein Fehler).

    Kantenfolge (fest): Linie unten, Bogen, Linie rechts, Bogen, Linie oben,
    Bogen, Linie links, Bogen.
    """
    x0, y0, z = origin
    x1 = x0 + width
    y1 = y0 + depth
    requested = radius if rounded else 0.0
    r = clamp_radius(requested, width, depth) if rounded else 0.0

    if r <= 0 or width - 2 * r <= 0 or depth - 2 * r <= 0:
        if rounded and requested > 0:
            logger.debug(
                f"Profil {width:.3f}x{depth:.3f}: Radius {requested:.3f} degradiert zu eckigem Rechteck"
            )
        corners = [(x0, y0, z), (x1, y0, z), (x1, y1, z), (x0, y1, z)]
        segments = tuple(LineSegment(corners[i], corners[(i + 1) % 4]) for i in range(4))
        return Profile(origin, width, depth, 0.0, requested, segments)

    diag = r / math.sqrt(2.0)
    p1 = (x0 + r, y0, z)
    p2 = (x1 - r, y0, z)
    p3 = (x1, y0 + r, z)
    p4 = (x1, y1 - r, z)
    p5 = (x1 - r, y1, z)
    p6 = (x0 + r, y1, z)
    p7 = (x0, y1 - r, z)
    p8 = (x0, y0 + r, z)

    def corner(start: Point, end: Point, cx: float, cy: float, sx: float, sy: float) -> ArcSegment:
        mid = (cx + sx * diag, cy + sy * diag, z)
        return ArcSegment(start, mid, end, (cx, cy, z), r)

    segments = (
        LineSegment(p1, p2),
        corner(p2, p3, x1 - r, y0 + r, 1, -1),
        LineSegment(p3, p4),
        corner(p4, p5, x1 - r, y1 - r, 1, 1),
        LineSegment(p5, p6),
        corner(p6, p7, x0 + r, y1 - r, -1, 1),
        LineSegment(p7, p8),
        corner(p8, p1, x0 + r, y0 + r, -1, -1),
    )
    return Profile(origin, width, depth, r, requested, segments)


def build_circle_profile(center: Point, radius: float) -> CircleProfile:
    if radius <= 0:
        raise ValueError(f"Kreisradius muss positiv sein: {radius}")
    return CircleProfile(center, radius)


def profile_to_wire(kernel: Any, profile: Union[Profile, CircleProfile]) -> Any:
    """Übersetzt ein Profil über den KernelAdapter in einen geschlossenen Wire."""
    if isinstance(profile, CircleProfile):
        return kernel.wire([kernel.circle_edge(profile.center, profile.radius)])

    # Ein Kernel-Punkt pro Ecke: Ende einer Kante == Start der nächsten, bitgenau
    points = {}

    def point(coords: Point) -> Any:
        if coords not in points:
            points[coords] = kernel.point(*coords)
        return points[coords]

    edges = []
    for segment in profile.segments:
        if isinstance(segment, ArcSegment):
            edges.append(kernel.arc_edge(point(segment.start), kernel.point(*segment.mid), point(segment.end)))
        else:
            edges.append(kernel.line_edge(point(segment.start), point(segment.end)))
    return kernel.wire(edges)
