"""
BoxCad - Preview Tessellation
=============================

Dreiecksnetz für die Vorschau aus dem Kernel-Mesher (BRepMesh).
Positionen und Indizes als flache numpy-Arrays, so wie ein Renderer sie
direkt in Vertex-/Index-Buffer lädt.
"""

from dataclasses import dataclass
from typing import Any, List

import numpy as np
from loguru import logger

from config.tolerances import Tolerances
from boxcad.strategies import Strategy


@dataclass(frozen=True)
class PreviewMesh:
    """positions: float32[3N] (x, y, z je Vertex), indices: int32[3M] (je Dreieck)."""
    positions: np.ndarray
    indices: np.ndarray

    @property
    def vertex_count(self) -> int:
        return int(self.positions.size // 3)

    @property
    def triangle_count(self) -> int:
        return int(self.indices.size // 3)

    @property
    def is_empty(self) -> bool:
        return self.triangle_count == 0

    def bounds(self):
        """(min_xyz, max_xyz) der Vertices."""
        if self.vertex_count == 0:
            return np.zeros(3, dtype=np.float32), np.zeros(3, dtype=np.float32)
        points = self.positions.reshape(-1, 3)
        return points.min(axis=0), points.max(axis=0)

    @classmethod
    def empty(cls) -> "PreviewMesh":
        return cls(np.zeros(0, dtype=np.float32), np.zeros(0, dtype=np.int32))


def _mesh(kernel: Any, shape: Any, linear: float, angular: float) -> None:
    ns = kernel.ns
    kernel.probe("incremental_mesh", [
        Strategy("IncrementalMesh(shape, lin, False, ang, True)",
                 lambda: ns.require("BRepMesh_IncrementalMesh")(shape, linear, False, angular, True)),
        Strategy("IncrementalMesh(shape, lin)",
                 lambda: ns.require("BRepMesh_IncrementalMesh")(shape, linear)),
    ], linear=linear, angular=angular)


def _node(triangulation: Any, index: int) -> Any:
    node = getattr(triangulation, "Node", None)
    if callable(node):
        return node(index)
    # OCCT < 7.6
    return triangulation.Nodes().Value(index)


def tessellate(kernel: Any, shape: Any, linear: float = None, angular: float = None) -> PreviewMesh:
    """
    Tesselliert alle Faces einer Shape.

    REVERSED Faces bekommen umgekehrte Dreiecks-Windung, damit alle
    Normalen nach außen zeigen.
    """
    linear = linear if linear is not None else Tolerances.TESSELLATION_PREVIEW
    angular = angular if angular is not None else Tolerances.TESSELLATION_ANGULAR
    ns = kernel.ns
    kernel.trace.record("tessellate", linear=linear, angular=angular)
    _mesh(kernel, shape, linear, angular)

    face_type = kernel.enum_value("TopAbs_FACE", "TopAbs_ShapeEnum")
    reversed_orientation = kernel.enum_value("TopAbs_REVERSED", "TopAbs_Orientation")

    vertices: List[List[float]] = []
    triangles: List[List[int]] = []
    offset = 0
    face_count = 0

    explorer = ns.require("TopExp_Explorer")(shape, face_type)
    while explorer.More():
        face = kernel.cast("face", explorer.Current())
        face_count += 1
        loc = ns.require("TopLoc_Location")()
        triangulation = kernel.static_call(
            "triangulation", ("BRep_Tool",), "Triangulation", face, loc, accept=lambda _: True
        )
        if triangulation is not None:
            transform = loc.Transformation()
            n_nodes = triangulation.NbNodes()
            for i in range(1, n_nodes + 1):
                p = _node(triangulation, i)
                if not loc.IsIdentity():
                    p = p.Transformed(transform)
                vertices.append([p.X(), p.Y(), p.Z()])

            flip = face.Orientation() == reversed_orientation
            for i in range(1, triangulation.NbTriangles() + 1):
                v1, v2, v3 = triangulation.Triangle(i).Get()
                if flip:
                    v2, v3 = v3, v2
                triangles.append([v1 - 1 + offset, v2 - 1 + offset, v3 - 1 + offset])
            offset += n_nodes
        explorer.Next()

    if not triangles:
        logger.warning(f"Tessellation ohne Dreiecke ({face_count} Faces)")
        return PreviewMesh.empty()

    mesh = PreviewMesh(
        positions=np.array(vertices, dtype=np.float32).reshape(-1),
        indices=np.array(triangles, dtype=np.int32).reshape(-1),
    )
    logger.debug(f"Tesselliert: {mesh.triangle_count} Dreiecke, {face_count} Faces")
    return mesh
