"""
BoxCad - Shape-Parameter
========================

Extern gelieferte, pro Build unveränderliche Parameter plus die daraus
einmalig abgeleitete Wandstärke (ResolvedThickness).

Verwendung:
    from boxcad.parameters import ShapeParameters, resolve_thickness

    params = ShapeParameters.from_mapping({"insideWidth": 40, "includeLid": False})
    params.validate()
    thickness = resolve_thickness(params)
"""

import math
from dataclasses import asdict, dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping

from config.tolerances import Tolerances
from boxcad.errors import InvalidParametersError


class ShapeKind(Enum):
    BOX = "box"
    CYLINDER = "cylinder"


class ThicknessMode(Enum):
    UNIFORM = "uniform"   # ein Wert für Wand/Deckel/Boden
    CUSTOM = "custom"     # unabhängige Werte


@dataclass(frozen=True)
class ResolvedThickness:
    """{wall, top, bottom} - wird pro Build genau einmal bestimmt."""
    wall: float
    top: float
    bottom: float


@dataclass(frozen=True)
class ShapeParameters:
    """
    Dimensionale Parameter eines Builds.

    Alle Längen in Millimetern. ``inside_*`` beschreibt den nutzbaren
    Innenraum, Wandstärken kommen außen dazu.
    """
    shape: ShapeKind = ShapeKind.BOX
    include_lid: bool = True
    inside_width: float = 10.0
    inside_depth: float = 10.0
    inside_height: float = 10.0
    include_inside_radius: bool = True
    inside_radius: float = 2.5
    thickness_mode: ThicknessMode = ThicknessMode.UNIFORM
    thickness: float = 1.67
    wall_thickness: float = 1.67
    top_thickness: float = 1.67
    bottom_thickness: float = 1.67
    clearance: float = 0.2

    def validate(self) -> "ShapeParameters":
        """
        Prüft die Datenmodell-Invarianten.

        Ein zu großer Radius ist KEIN Fehler (wird im Profile Builder geklemmt).

        Raises:
            InvalidParametersError: Nicht-endliche Werte, keine positive Innenspanne, ...
        """
        if not isinstance(self.shape, ShapeKind):
            raise InvalidParametersError(f"Unbekannte Form: {self.shape!r}")
        if not isinstance(self.thickness_mode, ThicknessMode):
            raise InvalidParametersError(f"Unbekannter Wandstärken-Modus: {self.thickness_mode!r}")

        for name in _LENGTH_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or isinstance(value, bool) or not math.isfinite(value):
                raise InvalidParametersError(f"{name} muss eine endliche Zahl sein (ist {value!r})")

        for name in ("inside_width", "inside_depth", "inside_height"):
            if getattr(self, name) <= 0:
                raise InvalidParametersError(f"{name} muss positiv sein (ist {getattr(self, name)})")

        resolved = resolve_thickness(self)
        if resolved.wall <= 0:
            raise InvalidParametersError(f"Wandstärke muss positiv sein (ist {resolved.wall})")
        if resolved.top < 0 or resolved.bottom < 0:
            raise InvalidParametersError("Deckel- und Bodenstärke dürfen nicht negativ sein")
        if self.clearance < 0:
            raise InvalidParametersError(f"Spiel (clearance) darf nicht negativ sein (ist {self.clearance})")
        if self.inside_radius < 0:
            raise InvalidParametersError(f"Innenradius darf nicht negativ sein (ist {self.inside_radius})")
        return self

    def with_changes(self, **changes: Any) -> "ShapeParameters":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["shape"] = self.shape.value
        data["thickness_mode"] = self.thickness_mode.value
        return data

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ShapeParameters":
        """
        Baut Parameter aus einem Dict (JSON-Datei, CLI).

        Akzeptiert snake_case und camelCase Schlüssel (``insideWidth``,
        ``includeLid``, ``thicknessMode`` ...). Fehlende Werte nehmen die Defaults.

        Raises:
            InvalidParametersError: Unbekannte Schlüssel oder Enum-Werte
        """
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in data.items():
            name = _CAMEL_ALIASES.get(key, key)
            if name not in known:
                raise InvalidParametersError(f"Unbekannter Parameter: {key}")
            values[name] = value

        if "shape" in values:
            values["shape"] = _enum_value(ShapeKind, values["shape"], "shape")
        if "thickness_mode" in values:
            values["thickness_mode"] = _enum_value(ThicknessMode, values["thickness_mode"], "thickness_mode")
        for name in _LENGTH_FIELDS:
            if name in values and isinstance(values[name], str):
                values[name] = _to_float(values[name], name)
        for name in _BOOL_FIELDS:
            if name in values and not isinstance(values[name], bool):
                values[name] = _to_bool(values[name])
        return cls(**values)


_LENGTH_FIELDS = (
    "inside_width", "inside_depth", "inside_height", "inside_radius",
    "thickness", "wall_thickness", "top_thickness", "bottom_thickness", "clearance",
)

_BOOL_FIELDS = ("include_lid", "include_inside_radius")

_CAMEL_ALIASES = {
    "includeLid": "include_lid",
    "insideWidth": "inside_width",
    "insideDepth": "inside_depth",
    "insideHeight": "inside_height",
    "includeInsideRadius": "include_inside_radius",
    "insideRadius": "inside_radius",
    "thicknessMode": "thickness_mode",
    "wallThickness": "wall_thickness",
    "topThickness": "top_thickness",
    "bottomThickness": "bottom_thickness",
}


def _enum_value(enum_cls, value: Any, name: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidParametersError(f"{name}: '{value}' ungültig (erlaubt: {allowed})")


def _to_float(value: str, name: str) -> float:
    try:
        return float(value)
    except ValueError:
        raise InvalidParametersError(f"{name}: '{value}' ist keine Zahl")


def _to_bool(value: Any) -> bool:
    """Nur "1" und "true" sind wahr (Query-/JSON-Strings), Zahlen über bool()."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true")
    return bool(value)


def resolve_thickness(params: ShapeParameters) -> ResolvedThickness:
    """uniform: ein Wert für alles, custom: Wand/Deckel/Boden einzeln."""
    if params.thickness_mode == ThicknessMode.UNIFORM:
        return ResolvedThickness(params.thickness, params.thickness, params.thickness)
    return ResolvedThickness(params.wall_thickness, params.top_thickness, params.bottom_thickness)


def round_to(value: float, digits: int = Tolerances.ROUNDING_DIGITS) -> float:
    """Rundet auf die konfigurierte Anzeigepräzision (Default 3 Stellen)."""
    return round(value, digits)


def clamp_radius(radius: float, width: float, depth: float) -> float:
    """
    Klemmt den Eckradius auf die halbe kürzere Spanne minus Epsilon.

    Nie negativ; ein Ergebnis von 0 bedeutet eckige Ecken.
    """
    limit = min(width, depth) / 2.0 - Tolerances.RADIUS_EPSILON
    return min(radius, max(0.0, limit))
