"""
Tests für das geordnete Strategy-Probing (first_success, ProbeCache).
"""

from unittest.mock import Mock

import pytest

from boxcad.diagnostics import DiagnosticTrace
from boxcad.errors import PrimitiveConstructionError
from boxcad.strategies import ProbeCache, Strategy, first_success


def _fail(message="nope"):
    def build():
        raise TypeError(message)
    return build


class TestFirstSuccess:

    def test_first_candidate_wins(self):
        second = Mock(return_value="b")
        result = first_success("point", [Strategy("a", lambda: "a"), Strategy("b", second)], DiagnosticTrace())

        assert result == "a"
        second.assert_not_called()

    def test_falls_through_exceptions(self):
        result = first_success("point", [Strategy("a", _fail()), Strategy("b", lambda: "b")], DiagnosticTrace())
        assert result == "b"

    def test_rejected_result_falls_through(self):
        strategies = [
            Strategy("none", lambda: None),
            Strategy("null", lambda: Mock(IsNull=Mock(return_value=True))),
            Strategy("ok", lambda: "ok"),
        ]
        assert first_success("face", strategies, DiagnosticTrace()) == "ok"

    def test_custom_accept_predicate(self):
        strategies = [
            Strategy("odd", lambda: 3, accept=lambda v: v % 2 == 0),
            Strategy("even", lambda: 4, accept=lambda v: v % 2 == 0),
        ]
        assert first_success("number", strategies, DiagnosticTrace()) == 4

    def test_raising_predicate_falls_through(self):
        """Test: Ein werfendes accept() verwirft nur diesen Kandidaten."""
        def explode(value):
            raise RuntimeError("TopExp_Explorer: unerwarteter Rückgabetyp")

        strategies = [
            Strategy("odd_return", lambda: object(), accept=explode),
            Strategy("ok", lambda: "ok"),
        ]
        assert first_success("prism", strategies, DiagnosticTrace()) == "ok"

    def test_raising_predicate_on_all_candidates_is_construction_error(self):
        def explode(value):
            raise RuntimeError("kaputt")

        with pytest.raises(PrimitiveConstructionError) as exc_info:
            first_success("cut", [Strategy("a", lambda: 1, accept=explode)], DiagnosticTrace())

        assert exc_info.value.attempts == [("a", "RuntimeError: kaputt")]

    def test_all_fail_raises_with_context(self):
        trace = DiagnosticTrace()
        trace.record("wire", edge_count=8)

        with pytest.raises(PrimitiveConstructionError) as exc_info:
            first_success(
                "prism",
                [Strategy("a", _fail("bad overload")), Strategy("b", lambda: None)],
                trace,
                operands={"vector": (0.0, 0.0, 10.0)},
            )

        error = exc_info.value
        assert error.primitive == "prism"
        assert error.attempts == [("a", "TypeError: bad overload"), ("b", "Ergebnis verworfen")]
        assert error.operands["vector"] == (0.0, 0.0, 10.0)
        assert [entry.label for entry in error.trace] == ["wire", "prism failed"]

    def test_empty_strategy_list_raises(self):
        with pytest.raises(PrimitiveConstructionError):
            first_success("nothing", [], DiagnosticTrace())


class TestProbeCache:

    def test_winner_is_remembered(self):
        cache = ProbeCache()
        first_success("point", [Strategy("a", _fail()), Strategy("b", lambda: "b")], DiagnosticTrace(), cache=cache)

        assert cache.winner("point") == "b"

    def test_winner_is_tried_first(self):
        cache = ProbeCache()
        cache.remember("point", "b")
        first_candidate = Mock(return_value="a")

        result = first_success("point", [Strategy("a", first_candidate), Strategy("b", lambda: "b")],
                               DiagnosticTrace(), cache=cache)

        assert result == "b"
        first_candidate.assert_not_called()

    def test_stale_winner_falls_back_to_order(self):
        cache = ProbeCache()
        cache.remember("point", "b")

        result = first_success("point", [Strategy("a", lambda: "a"), Strategy("b", _fail())],
                               DiagnosticTrace(), cache=cache)

        assert result == "a"
        assert cache.winner("point") == "a"

    def test_deterministic_for_fixed_kernel(self):
        """Test: Bei gleichem Kernel gewinnt immer derselbe Kandidat."""
        cache = ProbeCache()
        strategies = [Strategy("a", _fail()), Strategy("b", lambda: "b"), Strategy("c", lambda: "c")]
        results = [first_success("point", strategies, DiagnosticTrace(), cache=cache) for _ in range(5)]

        assert results == ["b"] * 5
        assert cache.as_dict() == {"point": "b"}
