"""
BoxCad - Parametrische Box/Zylinder-Hohlkörper mit Deckel als STEP.
"""

from boxcad.diagnostics import DiagnosticTrace, TraceEntry
from boxcad.errors import (
    BoxCadError,
    ExportFailure,
    InvalidParametersError,
    KernelBusyError,
    KernelUnavailableError,
    PrimitiveConstructionError,
)
from boxcad.kernel_namespace import check_kernel_availability
from boxcad.kernel_session import KernelSession
from boxcad.lids import plan_lid
from boxcad.parameters import (
    ResolvedThickness,
    ShapeKind,
    ShapeParameters,
    ThicknessMode,
    clamp_radius,
    resolve_thickness,
    round_to,
)
from boxcad.pipeline import (
    ExportedModel,
    build_inner_cavity_only,
    build_model,
    build_model_with_preview,
    try_build_inner_cavity,
    try_build_model,
)
from boxcad.shells import ShellPlan, plan_box_shell, plan_cylinder_shell

__all__ = [
    "BoxCadError",
    "DiagnosticTrace",
    "ExportFailure",
    "ExportedModel",
    "InvalidParametersError",
    "KernelBusyError",
    "KernelSession",
    "KernelUnavailableError",
    "PrimitiveConstructionError",
    "ResolvedThickness",
    "ShapeKind",
    "ShapeParameters",
    "ShellPlan",
    "ThicknessMode",
    "TraceEntry",
    "build_inner_cavity_only",
    "build_model",
    "build_model_with_preview",
    "check_kernel_availability",
    "clamp_radius",
    "plan_box_shell",
    "plan_cylinder_shell",
    "plan_lid",
    "resolve_thickness",
    "round_to",
    "try_build_inner_cavity",
    "try_build_model",
]
