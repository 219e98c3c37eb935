from types import SimpleNamespace

import pytest

from boxcad.errors import KernelUnavailableError
from boxcad.kernel_namespace import KernelNamespace, check_kernel_availability


def test_get_returns_first_module_hit():
    ns = KernelNamespace("fake", [SimpleNamespace(gp_Pnt="first"), SimpleNamespace(gp_Pnt="second", gp_Dir="dir")])

    assert ns.get("gp_Pnt") == "first"
    assert ns.get("gp_Dir") == "dir"
    assert ns.get("gp_Vec") is None
    assert ns.module_count == 2


def test_require_raises_attribute_error():
    ns = KernelNamespace.from_symbols(gp_Pnt=object())

    with pytest.raises(AttributeError, match="gp_Vec"):
        ns.require("gp_Vec")


def test_first_and_has():
    ns = KernelNamespace.from_symbols(topods=1)

    assert ns.first("TopoDS", "topods") == 1
    assert ns.has("topods") is True
    assert ns.has("TopoDS") is False


def test_lookup_is_cached():
    module = SimpleNamespace(gp_Pnt="a")
    ns = KernelNamespace("fake", [module])
    ns.get("gp_Pnt")
    module.gp_Pnt = "b"

    assert ns.get("gp_Pnt") == "a"


def test_load_unknown_roots_raises():
    with pytest.raises(KernelUnavailableError) as exc_info:
        KernelNamespace.load(("boxcad_no_such_binding",))

    assert "cadquery-ocp" in exc_info.value.message


def test_check_availability_unknown_root():
    assert check_kernel_availability(("boxcad_no_such_binding",)) is None
