"""
Tests für den Diagnose-Trace (Ringpuffer) und die Fehler-Taxonomie.
"""

from types import SimpleNamespace

import pytest

from config.feature_flags import set_flag
from config.tolerances import Tolerances
from boxcad.diagnostics import DiagnosticTrace, summarize_operand
from boxcad.errors import BoxCadError, ExportFailure, InvalidParametersError, PrimitiveConstructionError


def _pnt(x, y, z):
    return SimpleNamespace(X=lambda: x, Y=lambda: y, Z=lambda: z)


class TestDiagnosticTrace:

    def test_default_capacity(self):
        """Test: Default-Kapazität kommt aus Tolerances (40)."""
        trace = DiagnosticTrace()
        assert trace.capacity == Tolerances.TRACE_CAPACITY == 40

    def test_ring_buffer_drops_oldest(self):
        trace = DiagnosticTrace(capacity=3)
        for i in range(5):
            trace.record(f"event_{i}")

        assert len(trace) == 3
        assert trace.labels() == ["event_2", "event_3", "event_4"]

    def test_record_summarizes_kernel_points(self):
        trace = DiagnosticTrace()
        entry = trace.record("line_edge", p1=_pnt(0.0, 1.5, 2.0), p2=_pnt(10.0, 1.5, 2.0))

        assert entry.payload == {"p1": (0.0, 1.5, 2.0), "p2": (10.0, 1.5, 2.0)}
        assert entry.time.endswith("+00:00")

    def test_snapshot_is_immutable_copy(self):
        trace = DiagnosticTrace()
        trace.record("a")
        snapshot = trace.snapshot()
        trace.record("b")

        assert len(snapshot) == 1
        assert len(trace) == 2

    def test_format_lines(self):
        trace = DiagnosticTrace()
        trace.record("prism", vector=(0.0, 0.0, 11.67))

        line = trace.format_lines()[0]
        assert "prism: vector=(0.0, 0.0, 11.67)" in line

    def test_clear(self):
        trace = DiagnosticTrace()
        trace.record("a")
        trace.clear()
        assert len(trace) == 0

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            DiagnosticTrace(capacity=0)

    def test_trace_logging_flag(self):
        """Test: Mit kernel_trace_logging wird jeder Eintrag geloggt."""
        from loguru import logger

        messages = []
        handler_id = logger.add(messages.append, level="DEBUG", format="{message}")
        try:
            set_flag("kernel_trace_logging", True)
            DiagnosticTrace().record("cut")
        finally:
            logger.remove(handler_id)

        assert any("[TRACE]" in str(m) and "cut" in str(m) for m in messages)


class TestSummarizeOperand:

    def test_float_rounding(self):
        assert summarize_operand(1.23456789) == 1.234568

    def test_nested_sequences(self):
        assert summarize_operand([1, (2.0, _pnt(1, 2, 3))]) == (1, (2.0, (1.0, 2.0, 3.0)))

    def test_opaque_object_becomes_type_name(self):
        class TopoDS_Face:
            pass

        assert summarize_operand(TopoDS_Face()) == "TopoDS_Face"


class TestErrors:

    def test_primitive_error_message_and_attempts(self):
        error = PrimitiveConstructionError(
            "arc_edge",
            operands={"p1": (0.0, 0.0, 0.0)},
            attempts=[("GC_MakeArcOfCircle(P1, Pm, P2)", "RuntimeError: x")],
        )

        assert "arc_edge" in error.message
        assert "1 Kandidaten" in error.message
        assert error.operands["p1"] == (0.0, 0.0, 0.0)
        assert isinstance(error, BoxCadError)

    def test_trace_lines(self):
        trace = DiagnosticTrace()
        trace.record("face")
        error = ExportFailure("kein Output", targets=["model.step"], trace=trace.snapshot())

        assert error.targets == ["model.step"]
        assert len(error.trace_lines()) == 1
        assert "face" in error.trace_lines()[0]

    def test_invalid_parameters_is_value_error(self):
        assert issubclass(InvalidParametersError, ValueError)
