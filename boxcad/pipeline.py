"""
BoxCad - Build Pipeline
=======================

Parameter -> Profile -> Solids -> Shell (-> Deckel) -> Compound -> STEP-Bytes.

Alle Einstiegspunkte bekommen die KernelSession explizit übergeben; der
Diagnose-Trace gehört dem Aufrufer (optional, sonst pro Build neu).

Verwendung:
    from boxcad import KernelSession, ShapeParameters, build_model

    session = KernelSession()
    data = build_model(ShapeParameters(), session)
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from loguru import logger

from boxcad.diagnostics import DiagnosticTrace
from boxcad.errors import BoxCadError
from boxcad.kernel_session import KernelSession
from boxcad.lids import build_lid, plan_lid
from boxcad.parameters import ShapeKind, ShapeParameters, resolve_thickness
from boxcad.result_types import BuildResult
from boxcad.shells import build_inner, build_shell, plan_box_shell, plan_shell
from boxcad.step_io import DEFAULT_SCHEMA, STEPSchema, write_step
from boxcad.tessellation import PreviewMesh, tessellate


@dataclass(frozen=True)
class ExportedModel:
    """STEP-Bytes plus optionales Vorschau-Mesh."""
    step: bytes
    mesh: Optional[PreviewMesh] = None
    solid_count: int = 1
    fallbacks_used: Tuple[str, ...] = field(default_factory=tuple)


def assemble(kernel: Any, params: ShapeParameters) -> Tuple[Any, int]:
    """
    Baut Basis und optional Deckel.

    Returns:
        (shape, solid_count) - ohne Deckel das Basis-Solid, sonst ein
        Compound aus Basis und Deckel (keine Fusion)
    """
    thickness = resolve_thickness(params)
    base_plan = plan_shell(params, thickness)
    base = build_shell(kernel, base_plan)
    if not params.include_lid:
        return base, 1

    lid = build_lid(kernel, plan_lid(params, base_plan, thickness))
    return kernel.compound([base, lid]), 2


def _build(params: ShapeParameters, session: KernelSession, trace: Optional[DiagnosticTrace],
           preview: bool, schema: STEPSchema) -> ExportedModel:
    params.validate()
    logger.info(
        f"Build: {params.shape.value} {params.inside_width:g}x{params.inside_depth:g}x{params.inside_height:g}, "
        f"Deckel={'ja' if params.include_lid else 'nein'}"
    )
    with session.build(trace) as kernel:
        shape, solid_count = assemble(kernel, params)
        data = write_step(kernel, shape, schema)
        mesh = tessellate(kernel, shape) if preview else None
        fallbacks = tuple(kernel.fallbacks_used)

    logger.info(f"Build fertig: {solid_count} Solid(s), {len(data)} Bytes STEP")
    return ExportedModel(step=data, mesh=mesh, solid_count=solid_count, fallbacks_used=fallbacks)


def build_model(params: ShapeParameters, session: KernelSession, trace: Optional[DiagnosticTrace] = None,
                schema: STEPSchema = DEFAULT_SCHEMA) -> bytes:
    """
    Baut das Modell und liefert STEP-Bytes.

    Raises:
        InvalidParametersError, PrimitiveConstructionError, ExportFailure,
        KernelUnavailableError, KernelBusyError
    """
    return _build(params, session, trace, preview=False, schema=schema).step


def build_model_with_preview(params: ShapeParameters, session: KernelSession,
                             trace: Optional[DiagnosticTrace] = None,
                             schema: STEPSchema = DEFAULT_SCHEMA) -> ExportedModel:
    """Wie build_model, zusätzlich mit trianguliertem Vorschau-Mesh."""
    return _build(params, session, trace, preview=True, schema=schema)


def build_inner_cavity_only(params: ShapeParameters, session: KernelSession,
                            trace: Optional[DiagnosticTrace] = None) -> Optional[bytes]:
    """
    Exportiert nur das gerundete Innen-Werkzeug (Kavität) zur Inspektion.

    None für Zylinder oder eckige Innenecken.
    """
    if params.shape != ShapeKind.BOX or not params.include_inside_radius:
        logger.debug("Innen-Werkzeug nur für Box mit gerundeten Ecken")
        return None
    params.validate()
    plan = plan_box_shell(params)
    with session.build(trace) as kernel:
        tool = build_inner(kernel, plan)
        return write_step(kernel, tool)


def try_build_inner_cavity(params: ShapeParameters, session: KernelSession,
                           trace: Optional[DiagnosticTrace] = None) -> BuildResult:
    """
    Wie build_inner_cavity_only, als Result: EMPTY für Zylinder oder eckige
    Innenecken, ERROR bei Kernel-/Export-Fehlern.
    """
    trace = trace if trace is not None else DiagnosticTrace()
    try:
        data = build_inner_cavity_only(params, session, trace)
    except BoxCadError as e:
        return BuildResult.error(
            f"Innen-Kavität: {e.message}",
            exception=e,
            trace_lines=e.trace_lines() or trace.format_lines(),
        )
    if data is None:
        return BuildResult.empty(
            "Innen-Kavität übersprungen",
            reason="nur für Box mit gerundeten Innenecken",
        )
    return BuildResult.success(data, "Innen-Kavität exportiert")


def try_build_model(params: ShapeParameters, session: KernelSession,
                    trace: Optional[DiagnosticTrace] = None, preview: bool = False,
                    schema: STEPSchema = DEFAULT_SCHEMA) -> BuildResult:
    """
    Wie build_model, aber ohne Exception: jeder BoxCadError wird zu einem
    ERROR-Result mit einer Nutzer-Meldung und den Trace-Zeilen.
    """
    trace = trace if trace is not None else DiagnosticTrace()
    try:
        model = _build(params, session, trace, preview=preview, schema=schema)
    except BoxCadError as e:
        return BuildResult.error(
            e.message,
            exception=e,
            trace_lines=e.trace_lines() or trace.format_lines(),
        )

    value = model if preview else model.step
    if model.fallbacks_used:
        fallbacks: List[str] = list(model.fallbacks_used)
        return BuildResult.warning(
            value,
            f"Modell exportiert ({model.solid_count} Solid(s)), Fallback verwendet",
            fallback_used=", ".join(fallbacks),
            fallbacks_used=fallbacks,
        )
    return BuildResult.success(value, f"Modell exportiert ({model.solid_count} Solid(s))")
