"""
Tests für den STEP-Export (Header-Normalisierung, Ziel-/Pfad-Probing).

Der Writer wird durch Fakes ersetzt; der echte Kernel-Export wird in
test_pipeline.py geprüft.
"""

from pathlib import Path
from types import SimpleNamespace

import pytest

from config.feature_flags import set_flag
from config.tolerances import Tolerances
from boxcad.diagnostics import DiagnosticTrace
from boxcad.errors import ExportFailure
from boxcad.kernel_adapter import KernelAdapter
from boxcad.kernel_namespace import KernelNamespace
from boxcad.step_io import (
    DEFAULT_SCHEMA, STEPSchema, STEPWriter, TARGET_NAMES, normalize_header, save_step, schema_names,
)

HEADER = (
    "ISO-10303-21;\nHEADER;\nFILE_DESCRIPTION(('Open CASCADE Model'),'2;1');\n"
    "FILE_NAME('/tmp/boxcad_step_abc/model.step','2026-10-17T09:41:12',('Author'),(\n"
    "    'Open CASCADE'),'Open CASCADE STEP processor 7.7','Open CASCADE 7.7'\n  ,'Unknown');\n"
    "ENDSEC;\nDATA;\n#1 = APPLICATION_PROTOCOL_DEFINITION('international standard');\nENDSEC;\n"
    "END-ISO-10303-21;\n"
)

RET_DONE = 1


class AsciiString:
    def __init__(self, text):
        self.text = text


def _writer_class(accepts=str, writes=True, calls=None):
    class FakeWriter:
        def Transfer(self, shape, mode, *args):
            return RET_DONE

        def Write(self, target):
            if calls is not None:
                calls.append(type(target).__name__)
            if not isinstance(target, accepts):
                raise TypeError(f"Write({type(target).__name__}) nicht unterstützt")
            path = target.text if isinstance(target, AsciiString) else target
            if writes:
                Path(path).write_text(HEADER, encoding="latin-1")
            return RET_DONE

    return FakeWriter


def _kernel(writer_cls, with_static=True, settings=None):
    settings = settings if settings is not None else {}

    def store(key, value):
        settings[key] = value
        return True

    statics = SimpleNamespace(SetCVal_s=store, SetRVal_s=store)
    symbols = dict(
        STEPControl_Writer=writer_cls,
        STEPControl_AsIs=1,
        IFSelect_RetDone=RET_DONE,
        TCollection_AsciiString=AsciiString,
    )
    if with_static:
        symbols["Interface_Static"] = statics
    return KernelAdapter(KernelNamespace.from_symbols(**symbols), DiagnosticTrace())


class TestNormalizeHeader:

    def test_timestamp_and_name_replaced(self):
        data = normalize_header(HEADER.encode("latin-1"))
        text = data.decode("latin-1")

        assert f"FILE_NAME('model.step','{Tolerances.STEP_TIMESTAMP}',('Author')" in text
        assert "2026-10-17" not in text
        assert "/tmp/boxcad_step_abc" not in text

    def test_rest_of_file_untouched(self):
        data = normalize_header(HEADER.encode("latin-1"))
        assert data.endswith(b"END-ISO-10303-21;\n")
        assert b"APPLICATION_PROTOCOL_DEFINITION" in data

    def test_quoted_apostrophe_in_name(self):
        raw = b"FILE_NAME('it''s.step','2026-01-01T00:00:00',('A'));"
        assert normalize_header(raw, "x.step") == b"FILE_NAME('x.step','2000-01-01T00:00:00',('A'));"

    def test_without_header_unchanged(self):
        assert normalize_header(b"no header here") == b"no header here"


class TestSTEPWriter:

    def test_export_returns_normalized_bytes(self):
        data = STEPWriter(_kernel(_writer_class())).to_bytes("shape")

        assert data.startswith(b"ISO-10303-21;")
        assert Tolerances.STEP_TIMESTAMP.encode() in data

    def test_raw_header_without_deterministic_flag(self):
        set_flag("deterministic_step_header", False)
        data = STEPWriter(_kernel(_writer_class())).to_bytes("shape")

        assert b"2026-10-17T09:41:12" in data

    def test_identical_exports_are_byte_identical(self):
        kernel = _kernel(_writer_class())
        assert STEPWriter(kernel).to_bytes("shape") == STEPWriter(kernel).to_bytes("shape")

    def test_falls_back_to_ascii_string_path(self):
        calls = []
        kernel = _kernel(_writer_class(accepts=AsciiString, calls=calls))

        data = STEPWriter(kernel).to_bytes("shape")

        assert data
        assert calls == ["str", "AsciiString"]

    def test_status_done_but_no_file_is_export_failure(self):
        """Test: Writer meldet Erfolg, aber keine Datei -> ExportFailure nach allen Zielen."""
        kernel = _kernel(_writer_class(writes=False))

        with pytest.raises(ExportFailure) as exc_info:
            STEPWriter(kernel).to_bytes("shape")

        error = exc_info.value
        assert len(error.targets) == len(TARGET_NAMES) * 3
        assert error.trace[-1].label == "step_export failed"

    def test_missing_interface_static_is_not_fatal(self):
        data = STEPWriter(_kernel(_writer_class(), with_static=False)).to_bytes("shape")
        assert data

    def test_schema_passed_to_interface_static(self):
        settings = {}
        kernel = _kernel(_writer_class(), settings=settings)

        STEPWriter(kernel, STEPSchema.AP242, product_name="Testbox").to_bytes("shape")

        assert settings["write.step.schema"] == "AP242DIS"
        assert settings["write.step.product.name"] == "Testbox"
        assert settings["write.precision.val"] == Tolerances.STEP_WRITE_PRECISION

    def test_default_schema_from_tolerances(self):
        settings = {}
        STEPWriter(_kernel(_writer_class(), settings=settings)).to_bytes("shape")

        assert DEFAULT_SCHEMA is STEPSchema.AP214
        assert settings["write.step.schema"] == Tolerances.STEP_SCHEMA
        assert "AP214" in schema_names()


def test_save_step_creates_directories(tmp_path):
    target = tmp_path / "out" / "nested" / "box.step"

    path = save_step(b"ISO-10303-21;", target)

    assert path == target
    assert target.read_bytes() == b"ISO-10303-21;"
