"""
BoxCad - Fehler-Taxonomie
=========================

PrimitiveConstructionError und ExportFailure brechen einen Build sofort ab.
Beide tragen einen Snapshot des Diagnose-Trace, damit Fehler ohne erneuten
Kernel-Lauf reproduzierbar sind.

Degenerierte Radius/Wandstärken-Kombinationen sind KEIN Fehler: sie werden
im Profile Builder geklemmt bzw. zu einem Rechteck degradiert.
"""

from typing import Any, Dict, List, Optional, Sequence, Tuple


class BoxCadError(Exception):
    """Basis aller Pipeline-Fehler. Die Message ist nutzerseitig lesbar."""

    def __init__(self, message: str, trace: Sequence[Any] = ()):
        super().__init__(message)
        self.message = message
        self.trace = list(trace)

    def trace_lines(self) -> List[str]:
        """Trace-Snapshot als formatierte Zeilen (älteste zuerst)."""
        return [entry.format() if hasattr(entry, "format") else str(entry) for entry in self.trace]


class PrimitiveConstructionError(BoxCadError):
    """
    Kein Kandidat (Konstruktor/Overload) hat das Kernel-Primitiv erzeugt.

    Attributes:
        primitive: Name des Primitivs ("point", "arc_edge", "prism", ...)
        operands: Zusammengefasste Operanden (Koordinaten statt Kernel-Objekte)
        attempts: Liste von (Kandidat, Fehlerbeschreibung)
    """

    def __init__(
        self,
        primitive: str,
        operands: Optional[Dict[str, Any]] = None,
        attempts: Sequence[Tuple[str, str]] = (),
        trace: Sequence[Any] = (),
    ):
        self.primitive = primitive
        self.operands = dict(operands or {})
        self.attempts = list(attempts)
        message = f"Kernel-Primitiv '{primitive}' konnte nicht erzeugt werden"
        if self.attempts:
            message += f" ({len(self.attempts)} Kandidaten probiert)"
        super().__init__(message, trace)


class ExportFailure(BoxCadError):
    """Der STEP-Writer lief, aber keine Ausgabe-Bytes konnten gelesen werden."""

    def __init__(self, message: str, targets: Sequence[str] = (), trace: Sequence[Any] = ()):
        self.targets = list(targets)
        super().__init__(message, trace)


class KernelUnavailableError(BoxCadError):
    """Keine OpenCASCADE Binding-Generation importierbar."""


class KernelBusyError(BoxCadError):
    """Ein zweiter Build wurde gestartet, während der erste noch läuft."""


class InvalidParametersError(BoxCadError, ValueError):
    """Parameter verletzen die Datenmodell-Invarianten (nicht-endlich, keine Innenspanne, ...)."""
