"""
BoxCad - Geometry Kernel Adapter
================================

Typisierte Konstruktoren über dem OpenCASCADE-Kernel. Jede Operation wird über
eine geordnete Kandidaten-Liste aufgelöst (siehe boxcad.strategies), weil
Binding-Generationen dieselben Primitive unter verschiedenen Namen/Overloads
anbieten. Kein Kandidat ist garantiert vorhanden.

Der Rest der Pipeline spricht den Kernel NUR über diese Klasse an.

Verwendung:
    with session.build(trace) as kernel:
        p1 = kernel.point(0, 0, 0)
        p2 = kernel.point(10, 0, 0)
        edge = kernel.line_edge(p1, p2)
"""

import math
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple

from loguru import logger

from boxcad.diagnostics import DiagnosticTrace
from boxcad.kernel_namespace import KernelNamespace
from boxcad.strategies import ProbeCache, Strategy, first_success, _not_none

Vec3 = Tuple[float, float, float]


# =============================================================================
# Vektor-Hilfen (reine Mathematik, kein Kernel)
# =============================================================================

def _sub(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def _cross(a: Vec3, b: Vec3) -> Vec3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def _dot(a: Vec3, b: Vec3) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def _norm(a: Vec3) -> float:
    return math.sqrt(_dot(a, a))


def _unit(a: Vec3) -> Vec3:
    length = _norm(a)
    if length < 1e-12:
        raise ValueError("Nullvektor kann nicht normiert werden")
    return (a[0] / length, a[1] / length, a[2] / length)


def circle_through(start: Vec3, mid: Vec3, end: Vec3) -> Tuple[Vec3, float, Vec3]:
    """
    Kreis durch drei Punkte.

    Returns:
        (center, radius, normal) - normal ist so orientiert, dass
        start -> mid -> end im mathematisch positiven Sinn um normal läuft.

    Raises:
        ValueError: Wenn die Punkte kollinear sind
    """
    a = _sub(start, end)
    b = _sub(mid, end)
    axb = _cross(a, b)
    denom = 2.0 * _dot(axb, axb)
    if denom < 1e-18:
        raise ValueError("Arc-Punkte sind kollinear")
    aa = _dot(a, a)
    bb = _dot(b, b)
    lhs = (aa * b[0] - bb * a[0], aa * b[1] - bb * a[1], aa * b[2] - bb * a[2])
    offset = _cross(lhs, axb)
    center = (end[0] + offset[0] / denom, end[1] + offset[1] / denom, end[2] + offset[2] / denom)
    radius = _norm(_sub(start, center))
    normal = _unit(_cross(_sub(mid, start), _sub(end, mid)))
    return center, radius, normal


def sweep_angle(center: Vec3, normal: Vec3, start: Vec3, end: Vec3) -> float:
    """Winkel von start nach end um normal, im Bereich (0, 2*pi]."""
    u = _unit(_sub(start, center))
    v = _unit(_sub(end, center))
    angle = math.atan2(_dot(_cross(u, v), normal), _dot(u, v))
    if angle <= 0.0:
        angle += 2.0 * math.pi
    return angle


def xyz_of(point: Any) -> Vec3:
    """Koordinaten eines Kernel-Punkts (gp_Pnt, gp_Vec, gp_Dir)."""
    return (float(point.X()), float(point.Y()), float(point.Z()))


# =============================================================================
# Adapter
# =============================================================================

class KernelAdapter:
    """
    Fester Capability-Satz über einer Kernel-Binding.

    Args:
        ns: Geladene Kernel-Symbole
        trace: Diagnose-Trace des aktuellen Builds (gehört dem Aufrufer)
        cache: ProbeCache der Session (Gewinner pro Primitiv)
    """

    def __init__(self, ns: KernelNamespace, trace: DiagnosticTrace, cache: Optional[ProbeCache] = None):
        self.ns = ns
        self.trace = trace
        self.cache = cache if cache is not None else ProbeCache()
        self.fallbacks_used: List[str] = []

    # --- Infrastruktur ---

    def probe(self, primitive: str, strategies: Sequence[Strategy], **operands: Any) -> Any:
        """Löst ein Primitiv über die geordneten Kandidaten auf."""
        return first_success(primitive, strategies, self.trace, operands=operands, cache=self.cache)

    def static_candidates(self, owners: Sequence[str], method: str) -> List[Tuple[str, Callable]]:
        """
        Kandidaten für eine statische Methode über alle Binding-Stile:
        ``Owner.method_s`` (OCP), ``Owner.method`` (pythonocc >= 7.7),
        ``Owner_method`` (ältere pythonocc).
        """
        found = []
        for owner in owners:
            cls = self.ns.get(owner)
            if cls is not None:
                for attr in (f"{method}_s", method):
                    fn = getattr(cls, attr, None)
                    if callable(fn):
                        found.append((f"{owner}.{attr}", fn))
            fn = self.ns.get(f"{owner}_{method}")
            if callable(fn):
                found.append((f"{owner}_{method}", fn))
        return found

    def static_call(self, primitive: str, owners: Sequence[str], method: str, *args: Any,
                    accept: Callable[[Any], bool] = _not_none) -> Any:
        strategies = [
            Strategy(name, (lambda fn=fn: fn(*args)), accept)
            for name, fn in self.static_candidates(owners, method)
        ]
        return self.probe(primitive, strategies)

    def enum_value(self, name: str, enum_owner: Optional[str] = None) -> Any:
        value = self.ns.get(name)
        if value is None and enum_owner is not None:
            owner = self.ns.get(enum_owner)
            value = getattr(owner, name, None) if owner is not None else None
        if value is None:
            raise AttributeError(f"Kernel-Enum {name} nicht verfügbar")
        return value

    def note_fallback(self, label: str) -> None:
        self.fallbacks_used.append(label)

    # --- Punkte, Richtungen, Vektoren ---

    def _coord_strategies(self, cls_name: str, x: float, y: float, z: float) -> List[Strategy]:
        ns = self.ns

        def direct():
            return ns.require(cls_name)(x, y, z)

        def set_coord():
            obj = ns.require(cls_name)()
            obj.SetCoord(x, y, z)
            return obj

        def set_xyz():
            obj = ns.require(cls_name)()
            obj.SetX(x)
            obj.SetY(y)
            obj.SetZ(z)
            return obj

        def from_xyz():
            return ns.require(cls_name)(ns.require("gp_XYZ")(x, y, z))

        return [
            Strategy(f"{cls_name}(x, y, z)", direct),
            Strategy(f"{cls_name}().SetCoord", set_coord),
            Strategy(f"{cls_name}().SetX/Y/Z", set_xyz),
            Strategy(f"{cls_name}(gp_XYZ)", from_xyz),
        ]

    def point(self, x: float, y: float, z: float) -> Any:
        return self.probe("point", self._coord_strategies("gp_Pnt", x, y, z), x=x, y=y, z=z)

    def direction(self, x: float, y: float, z: float) -> Any:
        return self.probe("direction", self._coord_strategies("gp_Dir", x, y, z), x=x, y=y, z=z)

    def vector(self, x: float, y: float, z: float) -> Any:
        ns = self.ns
        strategies = self._coord_strategies("gp_Vec", x, y, z)
        strategies.append(Strategy(
            "gp_Vec(gp_Pnt, gp_Pnt)",
            lambda: ns.require("gp_Vec")(ns.require("gp_Pnt")(0.0, 0.0, 0.0), ns.require("gp_Pnt")(x, y, z)),
        ))
        return self.probe("vector", strategies, x=x, y=y, z=z)

    def axis_frame(self, origin: Vec3, normal: Vec3 = (0.0, 0.0, 1.0), x_dir: Optional[Vec3] = None) -> Any:
        """gp_Ax2 am Ursprung mit Normalen (und optional expliziter X-Richtung)."""
        ns = self.ns
        location = self.point(*origin)
        main = self.direction(*normal)
        strategies = []
        if x_dir is not None:
            x_axis = self.direction(*x_dir)
            strategies.append(Strategy("gp_Ax2(P, N, Vx)", lambda: ns.require("gp_Ax2")(location, main, x_axis)))
        else:
            strategies.append(Strategy("gp_Ax2(P, N)", lambda: ns.require("gp_Ax2")(location, main)))

        def with_setters():
            ax2 = ns.require("gp_Ax2")()
            ax2.SetLocation(location)
            ax2.SetDirection(main)
            if x_dir is not None:
                ax2.SetXDirection(self.direction(*x_dir))
            return ax2

        strategies.append(Strategy("gp_Ax2().SetLocation/SetDirection", with_setters))
        return self.probe("axis_frame", strategies, origin=origin, normal=normal)

    # --- Kanten, Wires, Faces ---

    @staticmethod
    def _finish_edge(maker: Any) -> Any:
        is_done = getattr(maker, "IsDone", None)
        if callable(is_done) and not is_done():
            raise RuntimeError("MakeEdge nicht abgeschlossen")
        return maker.Edge()

    def line_edge(self, p1: Any, p2: Any) -> Any:
        ns = self.ns
        self.trace.record("line_edge", p1=p1, p2=p2)

        def via_segment():
            segment = ns.require("GC_MakeSegment")(p1, p2)
            return self._finish_edge(ns.require("BRepBuilderAPI_MakeEdge")(segment.Value()))

        def via_init():
            maker = ns.require("BRepBuilderAPI_MakeEdge")()
            maker.Init(ns.require("GC_MakeSegment")(p1, p2).Value())
            return self._finish_edge(maker)

        return self.probe("line_edge", [
            Strategy("MakeEdge(P1, P2)", lambda: self._finish_edge(ns.require("BRepBuilderAPI_MakeEdge")(p1, p2))),
            Strategy("MakeEdge(GC_MakeSegment)", via_segment),
            Strategy("MakeEdge().Init(GC_MakeSegment)", via_init),
        ], p1=p1, p2=p2)

    def arc_edge(self, p1: Any, pmid: Any, p2: Any) -> Any:
        """Kreisbogen durch drei Punkte (Start, Punkt auf dem Bogen, Ende)."""
        ns = self.ns
        self.trace.record("arc_edge", p1=p1, pmid=pmid, p2=p2)

        def via_gc():
            arc = ns.require("GC_MakeArcOfCircle")(p1, pmid, p2)
            is_done = getattr(arc, "IsDone", None)
            if callable(is_done) and not is_done():
                raise RuntimeError("GC_MakeArcOfCircle nicht abgeschlossen")
            return self._finish_edge(ns.require("BRepBuilderAPI_MakeEdge")(arc.Value()))

        def circle_frame():
            center, radius, normal = circle_through(xyz_of(p1), xyz_of(pmid), xyz_of(p2))
            x_dir = _unit(_sub(xyz_of(p1), center))
            return center, radius, normal, self.axis_frame(center, normal, x_dir)

        def via_circ_points():
            _, radius, _, ax2 = circle_frame()
            circ = ns.require("gp_Circ")(ax2, radius)
            return self._finish_edge(ns.require("BRepBuilderAPI_MakeEdge")(circ, p1, p2))

        def via_geom_params():
            center, radius, normal, ax2 = circle_frame()
            curve = ns.require("Geom_Circle")(ns.require("gp_Circ")(ax2, radius))
            angle = sweep_angle(center, normal, xyz_of(p1), xyz_of(p2))
            return self._finish_edge(ns.require("BRepBuilderAPI_MakeEdge")(curve, 0.0, angle))

        return self.probe("arc_edge", [
            Strategy("GC_MakeArcOfCircle(P1, Pm, P2)", via_gc),
            Strategy("MakeEdge(gp_Circ, P1, P2)", via_circ_points),
            Strategy("MakeEdge(Geom_Circle, u1, u2)", via_geom_params),
        ], p1=p1, pmid=pmid, p2=p2)

    def circle_edge(self, center: Vec3, radius: float) -> Any:
        """Vollkreis in der Z-Ebene von center."""
        ns = self.ns
        self.trace.record("circle_edge", center=center, radius=radius)
        ax2 = self.axis_frame(center)
        return self.probe("circle_edge", [
            Strategy("MakeEdge(gp_Circ)",
                     lambda: self._finish_edge(ns.require("BRepBuilderAPI_MakeEdge")(ns.require("gp_Circ")(ax2, radius)))),
            Strategy("MakeEdge(Geom_Circle)",
                     lambda: self._finish_edge(ns.require("BRepBuilderAPI_MakeEdge")(
                         ns.require("Geom_Circle")(ns.require("gp_Circ")(ax2, radius))))),
        ], center=center, radius=radius)

    def wire(self, edges: Sequence[Any]) -> Any:
        ns = self.ns
        edges = list(edges)
        self.trace.record("wire", edge_count=len(edges))

        def finish(maker):
            is_done = getattr(maker, "IsDone", None)
            if callable(is_done) and not is_done():
                raise RuntimeError("MakeWire nicht abgeschlossen (Lücke zwischen Kanten?)")
            return maker.Wire()

        def add_each():
            maker = ns.require("BRepBuilderAPI_MakeWire")()
            for edge in edges:
                maker.Add(edge)
            return finish(maker)

        def add_list():
            shapes = ns.require("TopTools_ListOfShape")()
            for edge in edges:
                self._append(shapes, edge)
            maker = ns.require("BRepBuilderAPI_MakeWire")()
            maker.Add(shapes)
            return finish(maker)

        strategies = [
            Strategy("MakeWire().Add(edge)", add_each),
            Strategy("MakeWire().Add(ListOfShape)", add_list),
        ]
        if 1 <= len(edges) <= 4:
            strategies.append(Strategy(
                f"MakeWire({len(edges)} edges)",
                lambda: finish(ns.require("BRepBuilderAPI_MakeWire")(*edges)),
            ))
        return self.probe("wire", strategies, edge_count=len(edges))

    def face(self, wire: Any) -> Any:
        """Planare Face aus einem geschlossenen Wire."""
        ns = self.ns
        self.trace.record("face", wire=wire)

        def finish(maker):
            is_done = getattr(maker, "IsDone", None)
            if callable(is_done) and not is_done():
                raise RuntimeError("MakeFace nicht abgeschlossen")
            return maker.Face()

        def via_shape_cast():
            maker = ns.require("BRepBuilderAPI_MakeFace")(wire)
            return self.cast("face", maker.Shape())

        return self.probe("face", [
            Strategy("MakeFace(wire, OnlyPlane=True)", lambda: finish(ns.require("BRepBuilderAPI_MakeFace")(wire, True))),
            Strategy("MakeFace(wire)", lambda: finish(ns.require("BRepBuilderAPI_MakeFace")(wire))),
            Strategy("MakeFace(wire).Shape() -> cast", via_shape_cast),
        ], wire=wire)

    def cast(self, kind: str, shape: Any) -> Any:
        """Downcast eines TopoDS_Shape (kind: face, solid, wire, edge, compound)."""
        method = kind.capitalize()
        return self.static_call(f"cast_{kind}", ("TopoDS", "topods"), method, shape)

    # --- Solids ---

    def prism(self, shape: Any, dx: float, dy: float, dz: float) -> Any:
        """Lineare Extrusion (Face -> Solid) entlang des Vektors."""
        ns = self.ns
        self.trace.record("prism", shape=shape, vector=(dx, dy, dz))
        vec = self.vector(dx, dy, dz)

        def finish(maker):
            is_done = getattr(maker, "IsDone", None)
            if callable(is_done) and not is_done():
                raise RuntimeError("MakePrism nicht abgeschlossen")
            return maker.Shape()

        return self.probe("prism", [
            Strategy("MakePrism(shape, vec)", lambda: finish(ns.require("BRepPrimAPI_MakePrism")(shape, vec)),
                     self.has_solid),
            Strategy("MakePrism(shape, vec, Copy=False, Canonize=True)",
                     lambda: finish(ns.require("BRepPrimAPI_MakePrism")(shape, vec, False, True)), self.has_solid),
        ], vector=(dx, dy, dz))

    def pipe(self, profile: Any, spine: Any) -> Any:
        """Sweep eines Profil-Wires entlang einer Spine (Ergebnis: Solid)."""
        ns = self.ns
        self.trace.record("pipe", profile=profile, spine=spine)

        def pipe_shell(*add_args):
            def build():
                shell = ns.require("BRepOffsetAPI_MakePipeShell")(spine)
                shell.Add(profile, *add_args)
                shell.Build()
                if not shell.MakeSolid():
                    raise RuntimeError("MakePipeShell.MakeSolid fehlgeschlagen")
                return shell.Shape()
            return build

        return self.probe("pipe", [
            Strategy("MakePipeShell.Add(wire, False, False)", pipe_shell(False, False), self.has_solid),
            Strategy("MakePipeShell.Add(wire, True, False)", pipe_shell(True, False), self.has_solid),
            Strategy("MakePipeShell.Add(wire)", pipe_shell(), self.has_solid),
            Strategy("MakePipe(spine, wire)", lambda: ns.require("BRepOffsetAPI_MakePipe")(spine, profile).Shape(),
                     self.has_solid),
        ])

    def cylinder(self, radius: float, height: float, x: float = 0.0, y: float = 0.0, z: float = 0.0) -> Any:
        """Zylinder-Primitiv mit Achse +Z, Basiskreis-Mitte in (x, y, z)."""
        ns = self.ns
        self.trace.record("cylinder", radius=radius, height=height, base=(x, y, z))

        def at_frame():
            ax2 = self.axis_frame((x, y, z))
            return ns.require("BRepPrimAPI_MakeCylinder")(ax2, radius, height).Shape()

        def at_origin_then_move():
            shape = ns.require("BRepPrimAPI_MakeCylinder")(radius, height).Shape()
            if x == 0.0 and y == 0.0 and z == 0.0:
                return shape
            return self.translate(shape, x, y, z)

        return self.probe("cylinder", [
            Strategy("MakeCylinder(Ax2, r, h)", at_frame, self.has_solid),
            Strategy("MakeCylinder(r, h) + translate", at_origin_then_move, self.has_solid),
        ], radius=radius, height=height, base=(x, y, z))

    def box(self, corner_min: Vec3, corner_max: Vec3) -> Any:
        """Quader-Primitiv aus zwei gegenüberliegenden Ecken."""
        ns = self.ns
        self.trace.record("box", corner_min=corner_min, corner_max=corner_max)
        dx, dy, dz = _sub(corner_max, corner_min)

        def two_points():
            return ns.require("BRepPrimAPI_MakeBox")(self.point(*corner_min), self.point(*corner_max)).Shape()

        def point_and_size():
            return ns.require("BRepPrimAPI_MakeBox")(self.point(*corner_min), dx, dy, dz).Shape()

        def size_then_move():
            shape = ns.require("BRepPrimAPI_MakeBox")(dx, dy, dz).Shape()
            return self.translate(shape, *corner_min)

        return self.probe("box", [
            Strategy("MakeBox(P1, P2)", two_points, self.has_solid),
            Strategy("MakeBox(P, dx, dy, dz)", point_and_size, self.has_solid),
            Strategy("MakeBox(dx, dy, dz) + translate", size_then_move, self.has_solid),
        ], corner_min=corner_min, corner_max=corner_max)

    # --- Booleans, Transformationen, Compounds ---

    def _append(self, shape_list: Any, shape: Any) -> None:
        for name in ("Append", "Add", "Push"):
            fn = getattr(shape_list, name, None)
            if callable(fn):
                fn(shape)
                return
        raise AttributeError("TopTools_ListOfShape ohne Append/Add")

    def cut(self, minuend: Any, subtrahend: Any) -> Any:
        """
        Boolean-Subtraktion minuend - subtrahend.

        Reihenfolge ist fix: manche Boolean-Pfade des Kernels sind im
        Fehlerverhalten nicht symmetrisch.
        """
        ns = self.ns
        self.trace.record("cut", minuend=minuend, subtrahend=subtrahend)

        def finish(op):
            has_errors = getattr(op, "HasErrors", None)
            if callable(has_errors) and has_errors():
                raise RuntimeError("BRepAlgoAPI_Cut meldet Fehler")
            is_done = getattr(op, "IsDone", None)
            if callable(is_done) and not is_done():
                raise RuntimeError("BRepAlgoAPI_Cut nicht abgeschlossen")
            return op.Shape()

        def direct():
            op = ns.require("BRepAlgoAPI_Cut")(minuend, subtrahend)
            return finish(op)

        def arguments_tools():
            op = ns.require("BRepAlgoAPI_Cut")()
            arguments = ns.require("TopTools_ListOfShape")()
            tools = ns.require("TopTools_ListOfShape")()
            self._append(arguments, minuend)
            self._append(tools, subtrahend)
            op.SetArguments(arguments)
            op.SetTools(tools)
            op.Build()
            return finish(op)

        result = self.probe("cut", [
            Strategy("BRepAlgoAPI_Cut(A, B)", direct, self.has_solid),
            Strategy("BRepAlgoAPI_Cut().SetArguments/SetTools", arguments_tools, self.has_solid),
        ])
        return self.unwrap_single_solid(result)

    def translate(self, shape: Any, dx: float, dy: float, dz: float) -> Any:
        """Starre Translation; liefert eine neue Shape."""
        ns = self.ns
        self.trace.record("translate", shape=shape, vector=(dx, dy, dz))
        vec = self.vector(dx, dy, dz)

        def make_trsf():
            trsf = ns.require("gp_Trsf")()
            trsf.SetTranslation(vec)
            return trsf

        def transform(*extra):
            def build():
                transformer = ns.require("BRepBuilderAPI_Transform")(shape, make_trsf(), *extra)
                return transformer.Shape()
            return build

        def moved():
            return shape.Moved(ns.require("TopLoc_Location")(make_trsf()))

        return self.probe("translate", [
            Strategy("Transform(shape, trsf, Copy=True)", transform(True)),
            Strategy("Transform(shape, trsf)", transform()),
            Strategy("shape.Moved(TopLoc_Location)", moved),
        ], vector=(dx, dy, dz))

    def compound(self, shapes: Iterable[Any]) -> Any:
        """Gruppiert Bodies ohne Fusion."""
        ns = self.ns
        shapes = list(shapes)
        self.trace.record("compound", count=len(shapes))

        def build():
            compound = ns.require("TopoDS_Compound")()
            builder = ns.require("BRep_Builder")()
            builder.MakeCompound(compound)
            for shape in shapes:
                builder.Add(compound, shape)
            return compound

        return self.probe("compound", [Strategy("BRep_Builder.MakeCompound", build)], count=len(shapes))

    # --- Topologie-Abfragen ---

    def solids(self, shape: Any) -> List[Any]:
        """Alle Solids einer Shape (TopExp_Explorer)."""
        solid_type = self.enum_value("TopAbs_SOLID", "TopAbs_ShapeEnum")
        explorer = self.ns.require("TopExp_Explorer")(shape, solid_type)
        found = []
        while explorer.More():
            found.append(explorer.Current())
            explorer.Next()
        return found

    def count_solids(self, shape: Any) -> int:
        return len(self.solids(shape))

    def has_solid(self, shape: Any) -> bool:
        return _not_none(shape) and self.count_solids(shape) > 0

    def unwrap_single_solid(self, shape: Any) -> Any:
        """Boolean-Ergebnisse kommen oft als Compound mit genau einem Solid."""
        found = self.solids(shape)
        if len(found) != 1:
            logger.debug(f"Boolean-Ergebnis enthält {len(found)} Solids - bleibt Compound")
            return shape
        solid = found[0]
        if type(solid).__name__ == "TopoDS_Solid":
            return solid
        return self.cast("solid", solid)
