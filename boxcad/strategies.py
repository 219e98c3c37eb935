"""
BoxCad - Ordered Strategy Probing
=================================

Jedes Kernel-Primitiv wird über eine geordnete Liste von Kandidaten
aufgelöst: (Name, Build-Callable, Akzeptanz-Prädikat). Der erste Kandidat,
der ohne Exception ein akzeptiertes Ergebnis liefert, gewinnt. Scheitern
alle, wird PrimitiveConstructionError mit allen Einzelfehlern geworfen.

Der Gewinner wird pro Primitiv im ProbeCache gemerkt und beim nächsten
Aufruf zuerst probiert. Bei fester Kernel-Version gewinnt damit immer
derselbe Kandidat.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from boxcad.diagnostics import DiagnosticTrace
from boxcad.errors import PrimitiveConstructionError


def _not_none(value: Any) -> bool:
    if value is None:
        return False
    is_null = getattr(value, "IsNull", None)
    if callable(is_null):
        return not is_null()
    return True


@dataclass(frozen=True)
class Strategy:
    """Ein Kandidat für ein Kernel-Primitiv."""
    name: str
    build: Callable[[], Any]
    accept: Callable[[Any], bool] = _not_none


class ProbeCache:
    """Merkt sich pro Primitiv den zuletzt erfolgreichen Kandidaten."""

    def __init__(self):
        self._winners: Dict[str, str] = {}

    def winner(self, primitive: str) -> Optional[str]:
        return self._winners.get(primitive)

    def remember(self, primitive: str, strategy_name: str) -> None:
        previous = self._winners.get(primitive)
        if previous != strategy_name:
            logger.debug(f"[PROBE] {primitive}: Kandidat '{strategy_name}' aktiv")
        self._winners[primitive] = strategy_name

    def as_dict(self) -> Dict[str, str]:
        return dict(self._winners)

    def clear(self) -> None:
        self._winners.clear()


def _ordered(primitive: str, strategies: Sequence[Strategy], cache: Optional[ProbeCache]) -> List[Strategy]:
    ordered = list(strategies)
    if cache is None:
        return ordered
    winner = cache.winner(primitive)
    if winner is None:
        return ordered
    preferred = [s for s in ordered if s.name == winner]
    return preferred + [s for s in ordered if s.name != winner]


def first_success(
    primitive: str,
    strategies: Sequence[Strategy],
    trace: DiagnosticTrace,
    operands: Optional[Dict[str, Any]] = None,
    cache: Optional[ProbeCache] = None,
) -> Any:
    """
    Probiert die Kandidaten in Reihenfolge und liefert das erste akzeptierte Ergebnis.

    Args:
        primitive: Name des Primitivs (für Fehler und Trace)
        strategies: Geordnete Kandidaten
        trace: Diagnose-Trace des aktuellen Builds
        operands: Operanden für Fehlerkontext (werden zusammengefasst)
        cache: Optionaler ProbeCache der Session

    Raises:
        PrimitiveConstructionError: Wenn kein Kandidat erfolgreich war
    """
    attempts: List[Tuple[str, str]] = []
    for strategy in _ordered(primitive, strategies, cache):
        try:
            value = strategy.build()
            accepted = strategy.accept(value)
        except Exception as e:
            attempts.append((strategy.name, f"{type(e).__name__}: {e}"))
            continue
        if not accepted:
            attempts.append((strategy.name, "Ergebnis verworfen"))
            continue
        if cache is not None:
            cache.remember(primitive, strategy.name)
        if attempts:
            logger.debug(f"[PROBE] {primitive}: '{strategy.name}' nach {len(attempts)} Fehlversuchen")
        return value

    entry = trace.record(f"{primitive} failed", attempts=len(attempts), **(operands or {}))
    logger.error(f"Kernel-Primitiv '{primitive}' fehlgeschlagen: {entry.format()}")
    for name, reason in attempts:
        logger.debug(f"  - {name}: {reason}")
    raise PrimitiveConstructionError(
        primitive,
        operands=entry.payload,
        attempts=attempts,
        trace=trace.snapshot(),
    )
