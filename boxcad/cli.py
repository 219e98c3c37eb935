#!/usr/bin/env python3
"""
BoxCad CLI
==========

Baut eine Box (oder einen Zylinder) mit optionalem Deckel und schreibt STEP.

Usage:
    boxcad --width 40 --depth 30 --height 20 -o box.step
    boxcad --params box.json --no-lid --summary
    boxcad --radius 3 --inner-cavity cavity.step
    boxcad --no-lid --report build.json
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

from config.feature_flags import is_enabled, set_flag
from config.version import APP_NAME, VERSION_STRING
from boxcad.diagnostics import DiagnosticTrace
from boxcad.errors import BoxCadError
from boxcad.kernel_session import KernelSession
from boxcad.parameters import ShapeParameters
from boxcad.pipeline import try_build_inner_cavity, try_build_model
from boxcad.result_types import BuildResult
from boxcad.step_io import DEFAULT_SCHEMA, STEPSchema, save_step, schema_names


def configure_logging(verbose: bool = False) -> None:
    logger.remove()
    logger.add(sys.stderr, format="<level>{level: <8}</level> | {message}", level="DEBUG" if verbose else "INFO")


def build_parser() -> argparse.ArgumentParser:
    shapes = ["box", "cylinder"] if is_enabled("expose_cylinder_shape") else ["box"]
    parser = argparse.ArgumentParser(prog="boxcad", description=f"{APP_NAME} - parametrische Box mit Deckel als STEP")
    parser.add_argument("--version", action="version", version=f"{APP_NAME} {VERSION_STRING}")
    parser.add_argument("--params", "-p", type=Path, help="JSON-Datei mit Parametern (snake_case oder camelCase)")
    parser.add_argument("--shape", choices=shapes, help="Grundform")
    parser.add_argument("--width", type=float, help="Innenbreite (mm)")
    parser.add_argument("--depth", type=float, help="Innentiefe (mm)")
    parser.add_argument("--height", type=float, help="Innenhöhe (mm)")
    parser.add_argument("--lid", action=argparse.BooleanOptionalAction, default=None, help="Deckel erzeugen")
    parser.add_argument("--radius", type=float, help="Innen-Eckradius (mm), aktiviert gerundete Ecken")
    parser.add_argument("--square", action="store_true", help="Eckige Innenecken")
    parser.add_argument("--thickness", "-t", type=float, help="Einheitliche Wandstärke (mm)")
    parser.add_argument("--wall", type=float, help="Wandstärke (aktiviert custom Modus)")
    parser.add_argument("--top", type=float, help="Deckelstärke (aktiviert custom Modus)")
    parser.add_argument("--bottom", type=float, help="Bodenstärke (aktiviert custom Modus)")
    parser.add_argument("--clearance", "-c", type=float, help="Spiel zwischen Basis und Deckel (mm)")
    parser.add_argument("--output", "-o", type=Path, default=Path("box.step"), help="Ausgabe STEP-Datei")
    parser.add_argument("--inner-cavity", type=Path, help="Zusätzlich nur die Innen-Kavität exportieren")
    parser.add_argument("--schema", choices=schema_names(), default=DEFAULT_SCHEMA.name)
    parser.add_argument("--summary", action="store_true", help="Exportiertes Modell dekodieren und zusammenfassen")
    parser.add_argument("--report", type=Path, help="Build-Report als JSON schreiben")
    parser.add_argument("--trace", action="store_true", help="Kernel-Trace ins Debug-Log spiegeln")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug-Ausgabe")
    return parser


def parameters_from_args(args: argparse.Namespace) -> ShapeParameters:
    """Defaults <- JSON-Datei <- Kommandozeile."""
    values: Dict[str, Any] = {}
    if args.params is not None:
        with open(args.params, "r", encoding="utf-8") as f:
            values.update(json.load(f))

    overrides = {
        "shape": args.shape,
        "inside_width": args.width,
        "inside_depth": args.depth,
        "inside_height": args.height,
        "include_lid": args.lid,
        "inside_radius": args.radius,
        "thickness": args.thickness,
        "wall_thickness": args.wall,
        "top_thickness": args.top,
        "bottom_thickness": args.bottom,
        "clearance": args.clearance,
    }
    values.update({key: value for key, value in overrides.items() if value is not None})

    if args.radius is not None:
        values["include_inside_radius"] = True
    if args.square:
        values["include_inside_radius"] = False
    if any(v is not None for v in (args.wall, args.top, args.bottom)):
        values["thickness_mode"] = "custom"

    params = ShapeParameters.from_mapping(values)
    if params.thickness_mode.value == "custom" and args.thickness is not None:
        # -t als Default für alle nicht explizit gesetzten Einzelwerte
        params = params.with_changes(**{
            name: args.thickness
            for name, explicit in (("wall_thickness", args.wall), ("top_thickness", args.top),
                                   ("bottom_thickness", args.bottom))
            if explicit is None
        })
    return params


def _print_summary(data: bytes) -> None:
    from boxcad.inspection import describe_step

    summary = describe_step(data)
    logger.info(f"Solids: {summary.solid_count}, disjunkt: {'ja' if summary.is_disjoint else 'nein'}")
    for index, solid in enumerate(summary.solids, start=1):
        sx, sy, sz = solid.size
        logger.info(f"  #{index}: {sx:.3f} x {sy:.3f} x {sz:.3f} mm, V = {solid.volume:.3f} mm³")


def _write_report(path: Path, result: BuildResult) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(result.to_report_dict(), f, indent=2)
    logger.debug(f"Build-Report geschrieben: {path}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    if args.trace:
        set_flag("kernel_trace_logging", True)

    try:
        params = parameters_from_args(args)
    except (OSError, json.JSONDecodeError, BoxCadError) as e:
        logger.error(f"Parameter ungültig: {e}")
        return 1

    session = KernelSession()
    trace = DiagnosticTrace()
    result = try_build_model(params, session, trace, schema=STEPSchema[args.schema])
    if args.report is not None:
        _write_report(args.report, result)
    if result.is_error:
        logger.error(result.message)
        for line in result.trace_lines:
            logger.debug(f"  {line}")
        return 1

    result.log("build")
    save_step(result.value, args.output)

    if args.inner_cavity is not None:
        cavity = try_build_inner_cavity(params, session).log("inner-cavity")
        if cavity.is_error:
            return 1
        if cavity.is_success:
            save_step(cavity.value, args.inner_cavity)

    if args.summary:
        _print_summary(result.value)

    logger.debug(f"Kernel-Session: {session.info()}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
