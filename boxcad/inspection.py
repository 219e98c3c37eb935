"""
BoxCad - STEP Inspection
========================

Dekodiert exportierte STEP-Bytes mit build123d und fasst das Modell
zusammen (Anzahl Solids, Bounding-Boxen, Volumina, Disjunktheit).
Wird von der CLI für die Build-Zusammenfassung und von den Tests für die
End-to-End-Eigenschaften genutzt.
"""

import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Tuple

from loguru import logger

from config.tolerances import Tolerances

Size = Tuple[float, float, float]


@dataclass
class SolidSummary:
    volume: float
    size: Size
    min_corner: Size
    valid: bool = True


@dataclass
class ModelSummary:
    """Zusammenfassung eines dekodierten STEP-Modells."""
    solids: List[SolidSummary] = field(default_factory=list)
    size: Size = (0.0, 0.0, 0.0)
    overlap_volume: float = 0.0

    @property
    def solid_count(self) -> int:
        return len(self.solids)

    @property
    def total_volume(self) -> float:
        return sum(s.volume for s in self.solids)

    @property
    def is_disjoint(self) -> bool:
        """Kein Volumen-Überlapp zwischen den Bodies (Flächenkontakt zählt nicht)."""
        return self.overlap_volume <= Tolerances.COMPARE_LENGTH * max(1.0, self.total_volume)

    @property
    def all_valid(self) -> bool:
        return all(s.valid for s in self.solids)

    def to_dict(self) -> dict:
        return {
            "solid_count": self.solid_count,
            "size": self.size,
            "volumes": [round(s.volume, 3) for s in self.solids],
            "disjoint": self.is_disjoint,
            "valid": self.all_valid,
        }


def _is_valid(shape: Any) -> bool:
    check = getattr(shape, "is_valid", True)
    return bool(check()) if callable(check) else bool(check)


def _size(box: Any) -> Size:
    return (float(box.size.X), float(box.size.Y), float(box.size.Z))


def _intersection_volume(a: Any, b: Any) -> float:
    common = a.intersect(b)
    if common is None:
        return 0.0
    return float(common.volume)


def describe_step(data: bytes) -> ModelSummary:
    """
    Dekodiert STEP-Bytes und liefert eine ModelSummary.

    Raises:
        ValueError: Wenn die Bytes leer sind
    """
    from build123d import import_step

    if not data:
        raise ValueError("Keine STEP-Daten")

    with tempfile.TemporaryDirectory(prefix="boxcad_inspect_") as tmp:
        path = Path(tmp) / "model.step"
        path.write_bytes(data)
        shape = import_step(str(path))

    solids = list(shape.solids())
    summary = ModelSummary(size=_size(shape.bounding_box()))
    for solid in solids:
        box = solid.bounding_box()
        summary.solids.append(SolidSummary(
            volume=float(solid.volume),
            size=_size(box),
            min_corner=(float(box.min.X), float(box.min.Y), float(box.min.Z)),
            valid=_is_valid(solid),
        ))

    for i in range(len(solids)):
        for j in range(i + 1, len(solids)):
            summary.overlap_volume += _intersection_volume(solids[i], solids[j])

    logger.debug(f"STEP dekodiert: {summary.to_dict()}")
    return summary
