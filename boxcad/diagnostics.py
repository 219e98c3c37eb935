"""
BoxCad - Diagnose-Trace
=======================

Begrenzter Ringpuffer der letzten Kernel-Ereignisse (Label, Operanden als
Koordinaten, Zeitstempel). Der Aufrufer besitzt den Trace und reicht ihn
explizit in die Pipeline; es gibt keinen globalen Zustand.

Verwendung:
    from boxcad.diagnostics import DiagnosticTrace

    trace = DiagnosticTrace()
    trace.record("line_edge", p1=(0, 0, 0), p2=(10, 0, 0))
    for line in trace.format_lines():
        print(line)
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional, Tuple

from loguru import logger

from config.feature_flags import is_enabled
from config.tolerances import Tolerances


@dataclass(frozen=True)
class TraceEntry:
    """Ein Diagnose-Ereignis."""
    label: str
    payload: Dict[str, Any] = field(default_factory=dict)
    time: str = ""

    def format(self) -> str:
        if not self.payload:
            return f"{self.time} {self.label}"
        details = ", ".join(f"{key}={value}" for key, value in self.payload.items())
        return f"{self.time} {self.label}: {details}"


class DiagnosticTrace:
    """
    Ringpuffer für Diagnose-Ereignisse.

    Ältere Einträge fallen heraus, sobald die Kapazität erreicht ist.
    """

    def __init__(self, capacity: Optional[int] = None):
        self.capacity = capacity if capacity is not None else Tolerances.TRACE_CAPACITY
        if self.capacity < 1:
            raise ValueError(f"Trace-Kapazität muss positiv sein: {self.capacity}")
        self._entries: Deque[TraceEntry] = deque(maxlen=self.capacity)

    def record(self, label: str, **payload: Any) -> TraceEntry:
        """Zeichnet ein Ereignis auf. Operanden werden zu Koordinaten zusammengefasst."""
        entry = TraceEntry(
            label=label,
            payload={key: summarize_operand(value) for key, value in payload.items()},
            time=datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
        )
        self._entries.append(entry)
        if is_enabled("kernel_trace_logging"):
            logger.debug(f"[TRACE] {entry.format()}")
        return entry

    def snapshot(self) -> Tuple[TraceEntry, ...]:
        """Unveränderliche Kopie des aktuellen Inhalts (älteste zuerst)."""
        return tuple(self._entries)

    def labels(self) -> List[str]:
        return [entry.label for entry in self._entries]

    def format_lines(self) -> List[str]:
        return [entry.format() for entry in self._entries]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(tuple(self._entries))


def summarize_operand(value: Any) -> Any:
    """
    Fasst einen Operanden für den Trace zusammen.

    Kernel-Punkte/Vektoren (X()/Y()/Z()) werden zu gerundeten Koordinaten,
    Sequenzen rekursiv, alles andere Opake wird zum Typnamen.
    """
    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        return round(value, 6)
    if isinstance(value, (list, tuple)):
        return tuple(summarize_operand(item) for item in value)
    if isinstance(value, dict):
        return {key: summarize_operand(item) for key, item in value.items()}
    coords = _coordinates(value)
    if coords is not None:
        return coords
    return type(value).__name__


def _coordinates(value: Any) -> Optional[Tuple[float, float, float]]:
    getters = [getattr(value, name, None) for name in ("X", "Y", "Z")]
    if not all(callable(getter) for getter in getters):
        return None
    try:
        return tuple(round(float(getter()), 6) for getter in getters)
    except (TypeError, ValueError):
        return None
