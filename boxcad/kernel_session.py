"""
OpenCASCADE kernel session.

Die Kernel-Binding wird beim ersten Build geladen und danach für alle
weiteren Builds der Session wiederverwendet. OCP/OpenCASCADE ist nicht
thread-safe: pro Session läuft höchstens ein Build, ein zweiter paralleler
Build schlägt laut fehl statt das Kernel-Objekt zu teilen.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Sequence

from loguru import logger

from boxcad.diagnostics import DiagnosticTrace
from boxcad.errors import KernelBusyError
from boxcad.kernel_adapter import KernelAdapter
from boxcad.kernel_namespace import BINDING_ROOTS, KernelNamespace
from boxcad.strategies import ProbeCache


class KernelSession:
    """
    Explizit erzeugte, explizit besessene Kernel-Ressource.

    Args:
        roots: Binding-Generationen in Prioritätsreihenfolge
        namespace: Bereits geladener Namespace (Tests, alternative Bindings)
    """

    def __init__(self, roots: Sequence[str] = BINDING_ROOTS, namespace: Optional[KernelNamespace] = None):
        self._roots = tuple(roots)
        self._namespace = namespace
        self._init_lock = threading.Lock()
        self._build_lock = threading.Lock()
        self.cache = ProbeCache()
        self.builds_completed = 0

    @property
    def is_loaded(self) -> bool:
        return self._namespace is not None

    @property
    def namespace(self) -> KernelNamespace:
        """Lädt die Binding beim ersten Zugriff (init once, reuse)."""
        if self._namespace is None:
            with self._init_lock:
                if self._namespace is None:
                    self._namespace = KernelNamespace.load(self._roots)
        return self._namespace

    @property
    def is_busy(self) -> bool:
        return self._build_lock.locked()

    @contextmanager
    def build(self, trace: Optional[DiagnosticTrace] = None) -> Iterator[KernelAdapter]:
        """
        Exklusiver Build-Kontext.

        Raises:
            KernelBusyError: Wenn auf dieser Session bereits ein Build läuft
        """
        trace = trace if trace is not None else DiagnosticTrace()
        if not self._build_lock.acquire(blocking=False):
            current = threading.current_thread().name or "unknown"
            raise KernelBusyError(
                f"Kernel-Session ist belegt - Builds müssen serialisiert werden (thread: {current})",
                trace=trace.snapshot(),
            )
        try:
            adapter = KernelAdapter(self.namespace, trace, self.cache)
            yield adapter
            self.builds_completed += 1
        finally:
            self._build_lock.release()

    def info(self) -> Dict[str, Any]:
        """Status für CLI und Logs, ohne die Binding zu laden."""
        return {
            "binding": self._namespace.root if self._namespace is not None else None,
            "loaded": self.is_loaded,
            "builds_completed": self.builds_completed,
            "probe_winners": self.cache.as_dict(),
        }

    def reset_probes(self) -> None:
        logger.debug("Probe-Cache der Kernel-Session geleert")
        self.cache.clear()
