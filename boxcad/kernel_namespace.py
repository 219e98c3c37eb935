"""
BoxCad - Kernel Binding Namespace
=================================

Flache Sicht auf alle benötigten OpenCASCADE-Symbole einer Binding-Generation.

Unterstützt:
- OCP (cadquery-ocp, wie build123d/CadQuery es nutzen)
- OCC.Core (pythonocc-core)

Beide Generationen verteilen dieselben Klassen auf Module gleichen Namens,
unterscheiden sich aber bei statischen Methoden (``TopoDS.Face_s`` vs.
``topods.Face`` vs. ``topods_Face``). Diese Varianz löst der KernelAdapter
über Kandidaten-Listen auf; hier wird nur importiert und nachgeschlagen.
"""

import importlib
from types import SimpleNamespace
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from boxcad.errors import KernelUnavailableError

# Reihenfolge = Priorität
BINDING_ROOTS = ("OCP", "OCC.Core")

# Module, aus denen die Pipeline Symbole bezieht
KERNEL_MODULES = (
    "gp",
    "GC",
    "Geom",
    "BRep",
    "BRepBuilderAPI",
    "BRepPrimAPI",
    "BRepOffsetAPI",
    "BRepAlgoAPI",
    "BRepMesh",
    "TopoDS",
    "TopExp",
    "TopAbs",
    "TopLoc",
    "TopTools",
    "STEPControl",
    "Interface",
    "IFSelect",
    "TCollection",
    "Message",
)

# Ohne diese Module ist keine Geometrie möglich
ESSENTIAL_MODULES = ("gp", "BRepBuilderAPI", "BRepPrimAPI", "BRepAlgoAPI", "STEPControl")

_MISSING = object()


class KernelNamespace:
    """
    Symbol-Lookup über die geladenen Kernel-Module.

    Args:
        root: Name der Binding-Generation ("OCP", "OCC.Core", "fake", ...)
        modules: Geordnete Liste von Modul-Objekten (oder Namespaces)
    """

    def __init__(self, root: str, modules: Sequence[Any]):
        self.root = root
        self._modules: List[Any] = list(modules)
        self._cache: Dict[str, Any] = {}

    def get(self, name: str) -> Optional[Any]:
        """Liefert das Symbol oder None."""
        cached = self._cache.get(name, _MISSING)
        if cached is not _MISSING:
            return cached
        value = None
        for module in self._modules:
            value = getattr(module, name, None)
            if value is not None:
                break
        self._cache[name] = value
        return value

    def require(self, name: str) -> Any:
        """Liefert das Symbol oder wirft AttributeError (für Strategie-Kandidaten)."""
        value = self.get(name)
        if value is None:
            raise AttributeError(f"{name} nicht in Kernel-Binding '{self.root}'")
        return value

    def first(self, *names: str) -> Optional[Any]:
        for name in names:
            value = self.get(name)
            if value is not None:
                return value
        return None

    def has(self, name: str) -> bool:
        return self.get(name) is not None

    @property
    def module_count(self) -> int:
        return len(self._modules)

    @classmethod
    def from_symbols(cls, root: str = "fake", **symbols: Any) -> "KernelNamespace":
        """Namespace aus expliziten Symbolen (Tests, alternative Bindings)."""
        return cls(root, [SimpleNamespace(**symbols)])

    @classmethod
    def load(cls, roots: Sequence[str] = BINDING_ROOTS) -> "KernelNamespace":
        """
        Lädt die erste vollständig importierbare Binding-Generation.

        Raises:
            KernelUnavailableError: Wenn keine Generation die essentiellen Module liefert
        """
        failures = []
        for root in roots:
            modules = []
            missing = []
            for name in KERNEL_MODULES:
                try:
                    modules.append(importlib.import_module(f"{root}.{name}"))
                except ImportError:
                    missing.append(name)
            essential_missing = [name for name in missing if name in ESSENTIAL_MODULES]
            if essential_missing:
                failures.append(f"{root}: {', '.join(essential_missing)} fehlt")
                continue
            if missing:
                logger.warning(f"Kernel '{root}': optionale Module fehlen: {', '.join(missing)}")
            logger.info(f"Kernel-Binding geladen: {root} ({len(modules)} Module)")
            return cls(root, modules)

        raise KernelUnavailableError(
            "OpenCASCADE nicht verfügbar - bitte cadquery-ocp installieren ("
            + "; ".join(failures) + ")"
        )


def check_kernel_availability(roots: Sequence[str] = BINDING_ROOTS) -> Optional[str]:
    """Gibt den Namen der ersten importierbaren Binding-Generation zurück, sonst None."""
    for root in roots:
        try:
            importlib.import_module(f"{root}.gp")
            return root
        except ImportError:
            continue
    return None
