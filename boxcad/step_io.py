"""
BoxCad - STEP Export
====================

Serialisiert ein Solid oder Compound über den STEPControl_Writer des Kernels
zu Bytes.

Erfolg ist operational definiert: ein nicht-leerer Byte-Puffer wurde
zurückgelesen. Die Status-Codes von Transfer/Write sind über Binding-
Generationen nicht zuverlässig und werden nur geloggt.

Verwendung:
    from boxcad.step_io import STEPWriter, save_step

    with session.build(trace) as kernel:
        data = STEPWriter(kernel).to_bytes(shape)
    save_step(data, "box.step")
"""

import re
import tempfile
from enum import Enum
from pathlib import Path
from typing import Any, List, Sequence, Union

from loguru import logger

from config.feature_flags import is_enabled
from config.tolerances import Tolerances
from config.version import APP_NAME
from boxcad.errors import ExportFailure, PrimitiveConstructionError
from boxcad.strategies import Strategy


class STEPSchema(Enum):
    """STEP Schema Varianten."""
    AP214 = "AP214CD"       # Standard - Automotive/Aerospace
    AP214_IS = "AP214IS"    # Internationaler Standard
    AP203 = "AP203"         # Ältere Tools
    AP242 = "AP242DIS"      # PMI Support


DEFAULT_SCHEMA = STEPSchema(Tolerances.STEP_SCHEMA)


# Ausgabe-Ziele innerhalb des temporären Verzeichnisses, in dieser Reihenfolge
TARGET_NAMES = ("model.step", "export/model.step", "model.stp")

_FILE_NAME_HEADER = re.compile(r"FILE_NAME\('((?:[^']|'')*)','((?:[^']|'')*)'")


def normalize_header(data: bytes, name: str = "model.step", timestamp: str = Tolerances.STEP_TIMESTAMP) -> bytes:
    """
    Ersetzt Dateiname und Zeitstempel im FILE_NAME Header.

    Der Writer schreibt die aktuelle Uhrzeit und den (temporären) Pfad in den
    Header; ohne Normalisierung wären zwei identische Builds nicht byte-gleich.
    """
    text = data.decode("latin-1")
    text, count = _FILE_NAME_HEADER.subn(f"FILE_NAME('{name}','{timestamp}'", text, count=1)
    if count == 0:
        logger.debug("STEP: kein FILE_NAME Header gefunden - Bytes unverändert")
        return data
    return text.encode("latin-1")


class STEPWriter:
    """
    STEP Export über den KernelAdapter.

    Args:
        kernel: KernelAdapter des laufenden Builds
        schema: STEP-Schema
        product_name: Produktname im Header
    """

    def __init__(self, kernel: Any, schema: STEPSchema = DEFAULT_SCHEMA, product_name: str = APP_NAME):
        self.kernel = kernel
        self.schema = schema
        self.product_name = product_name

    def _configure(self) -> None:
        """Globale Writer-Einstellungen; Fehlschlag ist nicht fatal."""
        settings = [
            ("SetCVal", "write.step.schema", self.schema.value),
            ("SetCVal", "write.step.product.name", self.product_name),
            ("SetRVal", "write.precision.val", Tolerances.STEP_WRITE_PRECISION),
        ]
        for method, key, value in settings:
            try:
                self.kernel.static_call(f"interface_static.{method}", ("Interface_Static",), method, key, value)
            except PrimitiveConstructionError as e:
                logger.warning(f"STEP-Einstellung {key} nicht gesetzt: {e.message}")

    def _transfer(self, writer: Any, shape: Any) -> Any:
        kernel = self.kernel
        mode = kernel.enum_value("STEPControl_AsIs", "STEPControl_StepModelType")
        accept_any = lambda status: True
        status = kernel.probe("step_transfer", [
            Strategy("Transfer(shape, AsIs)", lambda: writer.Transfer(shape, mode), accept_any),
            Strategy("Transfer(shape, AsIs, True)", lambda: writer.Transfer(shape, mode, True), accept_any),
        ])
        done = kernel.ns.get("IFSelect_RetDone")
        if done is not None and status != done:
            logger.warning(f"STEP Transfer meldet Status {status} - Ergebnis wird über Rücklesen geprüft")
        return status

    def _path_variants(self, path: Path) -> List[Strategy]:
        ns = self.kernel.ns
        return [
            Strategy("Write(str)", lambda: str(path)),
            Strategy("Write(TCollection_AsciiString)", lambda: ns.require("TCollection_AsciiString")(str(path))),
            Strategy("Write(posix str)", lambda: path.as_posix()),
        ]

    def to_bytes(self, shape: Any) -> bytes:
        """
        Schreibt die Shape als STEP und liest die Bytes zurück.

        Raises:
            PrimitiveConstructionError: Writer oder Transfer nicht konstruierbar
            ExportFailure: Keine Bytes nach allen Zielen/Pfad-Varianten
        """
        kernel = self.kernel
        kernel.trace.record("step_export", shape=shape, schema=self.schema.value)
        self._configure()
        writer = kernel.probe("step_writer", [
            Strategy("STEPControl_Writer()", lambda: kernel.ns.require("STEPControl_Writer")()),
        ])
        self._transfer(writer, shape)

        tried: List[str] = []
        with tempfile.TemporaryDirectory(prefix="boxcad_step_") as tmp:
            for name in TARGET_NAMES:
                path = Path(tmp) / name
                path.parent.mkdir(parents=True, exist_ok=True)
                for variant in self._path_variants(path):
                    tried.append(f"{name} [{variant.name}]")
                    data = self._attempt(writer, path, variant)
                    if data:
                        logger.debug(f"STEP geschrieben: {name} via {variant.name} ({len(data)} Bytes)")
                        if is_enabled("deterministic_step_header"):
                            data = normalize_header(data, Path(name).name)
                        return data

        kernel.trace.record("step_export failed", targets=len(tried))
        logger.error(f"STEP Export fehlgeschlagen: keine Bytes nach {len(tried)} Versuchen")
        raise ExportFailure(
            "STEP-Export fehlgeschlagen: keine Ausgabe-Datei erzeugt",
            targets=tried,
            trace=kernel.trace.snapshot(),
        )

    def _attempt(self, writer: Any, path: Path, variant: Strategy) -> bytes:
        try:
            status = writer.Write(variant.build())
        except Exception as e:
            self.kernel.trace.record("step_write", target=path.name, variant=variant.name, error=type(e).__name__)
            return b""
        self.kernel.trace.record("step_write", target=path.name, variant=variant.name, status=str(status))
        if not path.exists():
            logger.debug(f"STEP Write ({variant.name}) meldet {status}, aber {path.name} existiert nicht")
            return b""
        return path.read_bytes()


def write_step(kernel: Any, shape: Any, schema: STEPSchema = DEFAULT_SCHEMA) -> bytes:
    """Kurzform für STEPWriter(kernel, schema).to_bytes(shape)."""
    return STEPWriter(kernel, schema).to_bytes(shape)


def save_step(data: bytes, filename: Union[str, Path]) -> Path:
    """Schreibt exportierte Bytes auf die Platte (legt Verzeichnisse an)."""
    path = Path(filename)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    logger.success(f"STEP exportiert: {path} ({len(data)/1024:.1f} KB)")
    return path


def schema_names() -> Sequence[str]:
    """Schema-Namen für die CLI-Auswahl."""
    return [schema.name for schema in STEPSchema]
