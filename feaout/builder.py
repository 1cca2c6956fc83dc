"""
Field declarations for the structural (elasticity) analysis.

Both functions must run exactly once per registry, before any binding.
A second call raises SchemaConflictError on the first repeated key.
"""

from __future__ import annotations

from .context import OutputContext
from .fields import FieldFormat, FieldKind, HistoryFields, VolumeFields

AXES = ("X", "Y", "Z")

# Nonlinear convergence metrics: displacement, residual force and energy
TOLERANCE_FIELDS = (
    ("RMS_UTOL", "rms[U]"),
    ("RMS_RTOL", "rms[R]"),
    ("RMS_ETOL", "rms[E]"),
)

# Solver stress vector ordering
STRESS_COMPONENTS_2D = ("XX", "YY", "XY")
STRESS_COMPONENTS_3D = ("XX", "YY", "XY", "ZZ", "XZ", "YZ")


def axes(ctx: OutputContext) -> tuple[str, ...]:
    """Axis suffixes active for the context's dimensionality."""
    return AXES[:ctx.ndim]


def stress_components(ctx: OutputContext) -> tuple[str, ...]:
    """Stress tensor components active for the context's dimensionality."""
    return STRESS_COMPONENTS_3D if ctx.ndim == 3 else STRESS_COMPONENTS_2D


def residual_keys(ctx: OutputContext) -> list[str]:
    """Keys of the intra-zone residual fields, in solver variable order."""
    if ctx.linear:
        return [f"RMS_DISP_{axis}" for axis in axes(ctx)]
    return [key for key, _ in TOLERANCE_FIELDS]


def coupling_keys(ctx: OutputContext) -> list[str]:
    """Keys of the multizone coupling residuals (empty for single zone)."""
    if not ctx.multizone:
        return []
    return [f"BGS_DISP_{axis}" for axis in axes(ctx)]


def declare_history_fields(history: HistoryFields, ctx: OutputContext) -> None:
    """
    Declare the scalar fields of one structural zone.

    Parameters
    ----------
    history : HistoryFields
        Empty history registry.
    ctx : OutputContext
        Run context.
    """
    # Iteration numbers
    history.declare("TIME_ITER", "Time_Iter", FieldFormat.INTEGER, "ITER")
    history.declare("OUTER_ITER", "Outer_Iter", FieldFormat.INTEGER, "ITER")
    history.declare("INNER_ITER", "Inner_Iter", FieldFormat.INTEGER, "ITER")

    # Misc.
    history.declare("PHYS_TIME", "Time(min)", FieldFormat.SCIENTIFIC, "PHYS_TIME")
    history.declare(
        "LINSOL_ITER", "Linear_Solver_Iterations", FieldFormat.INTEGER, "LINSOL_ITER"
    )

    # Residuals
    if ctx.linear:
        for axis in axes(ctx):
            history.declare(
                f"RMS_DISP_{axis}", f"rms[Disp{axis}]",
                FieldFormat.FIXED, "RMS_RES", FieldKind.RESIDUAL,
            )
    else:
        for key, label in TOLERANCE_FIELDS:
            history.declare(key, label, FieldFormat.FIXED, "RMS_RES", FieldKind.RESIDUAL)

    if ctx.multizone:
        for axis in axes(ctx):
            history.declare(
                f"BGS_DISP_{axis}", f"bgs[Disp{axis}]",
                FieldFormat.FIXED, "BGS_RES", FieldKind.RESIDUAL,
            )

    history.declare("VMS", "VonMises", FieldFormat.SCIENTIFIC, "VMS")
    history.declare("LOAD_INCREMENT", "Load_Increment", FieldFormat.FIXED, "LOAD_INCREMENT")
    history.declare("LOAD_RAMP", "Load_Ramp", FieldFormat.FIXED, "LOAD_RAMP")


def declare_volume_fields(volume: VolumeFields, ctx: OutputContext) -> None:
    """
    Declare the per-point fields of one structural zone.

    Velocity and acceleration are only declared for dynamic analyses;
    out-of-plane coordinates, solution and stress components only in 3-D.
    Von Mises stress is always declared last.
    """
    sci = FieldFormat.SCIENTIFIC

    # Grid coordinates
    for axis in axes(ctx):
        volume.declare(f"COORD-{axis}", axis.lower(), sci, "COORDINATES")

    for axis in axes(ctx):
        volume.declare(f"DISPLACEMENT-{axis}", f"Displacement_{axis.lower()}", sci, "SOLUTION")

    if ctx.dynamic:
        for axis in axes(ctx):
            volume.declare(f"VELOCITY-{axis}", f"Velocity_{axis.lower()}", sci, "VELOCITY")
        for axis in axes(ctx):
            volume.declare(
                f"ACCELERATION-{axis}", f"Acceleration_{axis.lower()}", sci, "ACCELERATION"
            )

    for comp in stress_components(ctx):
        volume.declare(f"STRESS-{comp}", f"S{comp.lower()}", sci, "STRESS")

    volume.declare("VON_MISES_STRESS", "Von_Mises_Stress", sci, "STRESS")
