import pytest

from config.feature_flags import set_flag
from boxcad.kernel_namespace import check_kernel_availability


# Global Feature Flag Defaults - Single Source of Truth for Test Isolation
# ========================================================================
# WICHTIG: Jeder Test muss mit sauberen Feature-Flags starten.
# Diese Defaults müssen mit config/feature_flags.py synchron gehalten werden.
FEATURE_FLAG_DEFAULTS = {
    # Debug-Modi
    "kernel_trace_logging": False,

    # Solid Synthesizer
    "prism_sweep_fallback": True,
    "primitive_solid_fallback": True,

    # Shape-Varianten
    "expose_cylinder_shape": True,

    # Export
    "deterministic_step_header": True,
}

HAS_KERNEL = check_kernel_availability() is not None


@pytest.fixture(autouse=True)
def _global_feature_flag_isolation():
    """
    Globale Feature-Flag-Isolation.

    Jeder Test startet mit den Default-Flags; Mutationen (z.B.
    prism_sweep_fallback=False) leaken nicht in andere Tests.
    """
    for key, value in FEATURE_FLAG_DEFAULTS.items():
        set_flag(key, value)

    yield

    for key, value in FEATURE_FLAG_DEFAULTS.items():
        set_flag(key, value)


@pytest.fixture(scope="module")
def kernel_session():
    """Eine Kernel-Session pro Modul (Binding wird einmal geladen und wiederverwendet)."""
    if not HAS_KERNEL:
        pytest.skip("OpenCASCADE (cadquery-ocp) nicht installiert")
    from boxcad.kernel_session import KernelSession

    session = KernelSession()
    session.namespace  # eager laden, damit Importfehler hier und nicht im Test auftreten
    return session


@pytest.fixture
def kernel(kernel_session):
    """KernelAdapter in einem exklusiven Build-Kontext."""
    from boxcad.diagnostics import DiagnosticTrace

    with kernel_session.build(DiagnosticTrace()) as adapter:
        yield adapter
