"""
BoxCad - Feature Flags
======================

Feature Flags schalten Fallback-Pfade und Debug-Ausgaben zur Laufzeit.
Tests setzen die Defaults über conftest.py zurück.
"""

from typing import Dict

# Feature Flag Registry
# =====================
# Fallback-Pfade sind standardmäßig aktiv. Abschalten nur zum Debuggen,
# damit ein Fehler im Primärpfad sichtbar wird statt still umgangen.

FEATURE_FLAGS: Dict[str, bool] = {
    # Debug-Modi
    "kernel_trace_logging": False,  # Jeder Trace-Eintrag zusätzlich als logger.debug (sehr verbose)

    # Solid Synthesizer
    "prism_sweep_fallback": True,  # Face scheitert -> Pipe-Sweep entlang gerader Spine
    "primitive_solid_fallback": True,  # Letzter Ausweg: Box/Zylinder-Primitiv für Rechteck/Kreis

    # Shape-Varianten
    "expose_cylinder_shape": True,  # CLI bietet --shape cylinder an

    # Export
    "deterministic_step_header": True,  # FILE_NAME Zeitstempel fixieren -> byte-identische Builds
}


def is_enabled(flag: str) -> bool:
    """
    Prüft ob ein Feature-Flag aktiviert ist.

    Args:
        flag: Name des Feature-Flags

    Returns:
        True wenn aktiviert, False wenn nicht aktiviert oder unbekannt
    """
    return FEATURE_FLAGS.get(flag, False)


def set_flag(flag: str, value: bool) -> None:
    """
    Setzt ein Feature-Flag zur Laufzeit.
    Nützlich für Tests und Debugging.

    Args:
        flag: Name des Feature-Flags
        value: Neuer Wert
    """
    FEATURE_FLAGS[flag] = value


def get_all_flags() -> Dict[str, bool]:
    """Gibt alle Feature-Flags zurück."""
    return FEATURE_FLAGS.copy()
