"""
BoxCad - Zentralisierte Toleranz-Konfiguration
===============================================

Alle numerischen Konstanten der Pipeline an einem Ort.

Toleranz-Philosophie:
- Radius-Clamp: absolutes Epsilon (0.01) in Modell-Einheiten, skaliert nicht
- Rundung: 3 Nachkommastellen für Vergleiche und Parameter-Ausgabe
- Vergleich: 1e-6 (Überlappungs-Volumen), STEP-Writer 1e-4
- Tessellation: nur für die Vorschau, grob genug für schnelle Meshes

Verwendung:
    from config.tolerances import Tolerances

    eps = Tolerances.RADIUS_EPSILON
"""


class Tolerances:
    """
    Zentrale Toleranz-Konstanten für BoxCad.

    Kategorien:
    - RADIUS_*: Eckenradius-Behandlung im Profile Builder
    - COMPARE_*: Vergleiche auf dekodierten Modellen
    - STEP_*: Export
    - TESSELLATION_*: Vorschau-Mesh
    - TRACE_*: Diagnose-Ringpuffer
    """

    # =========================================================================
    # Profile / Radius
    # =========================================================================

    # Radius wird auf min(width, depth)/2 - RADIUS_EPSILON geklemmt.
    # Absolut, nicht relativ zur Modellgröße.
    RADIUS_EPSILON = 0.01

    # Rundungspräzision für Maß-Vergleiche (Shell/Lid-Invarianten)
    ROUNDING_DIGITS = 3

    # =========================================================================
    # Vergleiche
    # =========================================================================

    # Längen-Vergleich (sind zwei Längen "gleich"?)
    COMPARE_LENGTH = 1e-6

    # =========================================================================
    # STEP Export
    # =========================================================================

    # Standard-Schema des Writers (Wert von boxcad.step_io.STEPSchema)
    STEP_SCHEMA = "AP214CD"
    STEP_WRITE_PRECISION = 1e-4

    # Fester Zeitstempel im FILE_NAME Header -> byte-identische Exporte
    STEP_TIMESTAMP = "2000-01-01T00:00:00"

    # =========================================================================
    # Tessellation (Vorschau)
    # =========================================================================

    # Lineare Abweichung (Chord Height)
    TESSELLATION_PREVIEW = 0.05

    # Winkel-Abweichung in Radians
    TESSELLATION_ANGULAR = 0.2

    # =========================================================================
    # Diagnose
    # =========================================================================

    # Anzahl der Trace-Einträge im Ringpuffer
    TRACE_CAPACITY = 40


# =============================================================================
# Toleranz-Validierung (für Debugging)
# =============================================================================

def validate_tolerances():
    """
    Validiert dass alle Toleranzen sinnvolle Werte haben.
    Nützlich für Tests und Debugging.
    """
    issues = []

    if not (0.0 < Tolerances.RADIUS_EPSILON <= 1.0):
        issues.append(f"RADIUS_EPSILON außerhalb sinnvoller Grenzen: {Tolerances.RADIUS_EPSILON}")

    # Epsilon muss oberhalb der Rundungspräzision liegen, sonst verschwindet der Clamp
    if Tolerances.RADIUS_EPSILON < 10 ** -Tolerances.ROUNDING_DIGITS:
        issues.append(
            f"RADIUS_EPSILON ({Tolerances.RADIUS_EPSILON}) kleiner als Rundungspräzision "
            f"({10 ** -Tolerances.ROUNDING_DIGITS})"
        )

    if Tolerances.TRACE_CAPACITY < 1:
        issues.append(f"TRACE_CAPACITY muss positiv sein: {Tolerances.TRACE_CAPACITY}")

    if not (0.001 <= Tolerances.TESSELLATION_PREVIEW <= 1.0):
        issues.append(f"TESSELLATION_PREVIEW außerhalb sinnvoller Grenzen: {Tolerances.TESSELLATION_PREVIEW}")

    return issues


# Automatische Validierung beim Import (nur Warnung, kein Fehler)
_validation_issues = validate_tolerances()
if _validation_issues:
    from loguru import logger
    for issue in _validation_issues:
        logger.warning(f"Toleranz-Validierung: {issue}")
