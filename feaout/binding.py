"""
Per-iteration data binding: copy solver/geometry values into the registries.

Binding is one-directional. Solver and geometry objects are only read.
Which keys get written is decided by the same OutputContext that drove
the declarations in :mod:`feaout.builder`.
"""

from __future__ import annotations

import math
import warnings

from .builder import axes, coupling_keys, residual_keys, stress_components
from .context import IterationCounters, OutputContext
from .errors import UnboundFieldError
from .fields import HistoryFields, VolumeFields
from .interfaces import ElasticitySolver, Geometry
from .warnings import BindingWarning, ResidualWarning


# ---------------------------------------------------------------------------
# Residual scaling
# ---------------------------------------------------------------------------

def log_residual(value: float, floor: float = 1e-16) -> float:
    """
    Clamp a residual to ``floor`` and return its log10.

    Positive values below the floor are clamped silently. Zero, negative
    and non-finite residuals issue a ResidualWarning and map to
    ``log10(floor)``. The result is always finite.

    Parameters
    ----------
    value : float
        Raw residual magnitude.
    floor : float
        Positive lower bound.

    Returns
    -------
    float
        log10 of the clamped residual.

    Raises
    ------
    ValueError
        If ``floor`` is not a positive finite number.
    """
    if not (math.isfinite(floor) and floor > 0.0):
        raise ValueError(f"residual floor must be positive and finite, got {floor!r}")
    value = float(value)
    if not math.isfinite(value) or value <= 0.0:
        warnings.warn(
            f"Residual {value!r} cannot be log-scaled; using floor {floor:g}",
            ResidualWarning,
            stacklevel=2,
        )
        value = floor
    return math.log10(max(value, floor))


# ---------------------------------------------------------------------------
# Guarded writes
# ---------------------------------------------------------------------------

def _set_history(history: HistoryFields, ctx: OutputContext, key: str, value: float) -> None:
    try:
        history.set_value(key, value)
    except UnboundFieldError as e:
        if ctx.strict_binding:
            raise
        warnings.warn(f"Skipped binding: {e}", BindingWarning, stacklevel=3)


def _set_volume(
    volume: VolumeFields, ctx: OutputContext, key: str, i_point: int, value: float
) -> None:
    try:
        volume.set_value(key, i_point, value)
    except UnboundFieldError as e:
        if ctx.strict_binding:
            raise
        warnings.warn(f"Skipped binding: {e}", BindingWarning, stacklevel=3)


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------

def bind_history(
    history: HistoryFields,
    ctx: OutputContext,
    counters: IterationCounters,
    solver: ElasticitySolver,
) -> None:
    """
    Refresh all history fields for the current iteration.

    Linear analyses report the per-axis RMS residuals, nonlinear analyses
    the U/R/E tolerance metrics. Multizone runs add the coupling residuals.
    """
    _set_history(history, ctx, "TIME_ITER", counters.time_iter)
    _set_history(history, ctx, "OUTER_ITER", counters.outer_iter)
    _set_history(history, ctx, "INNER_ITER", counters.inner_iter)
    _set_history(history, ctx, "PHYS_TIME", counters.physical_time)
    _set_history(history, ctx, "LINSOL_ITER", solver.linear_solver_iterations())

    floor = ctx.residual_floor
    read = solver.residual_rms if ctx.linear else solver.residual_tolerance
    for i_var, key in enumerate(residual_keys(ctx)):
        _set_history(history, ctx, key, log_residual(read(i_var), floor))

    for i_var, key in enumerate(coupling_keys(ctx)):
        _set_history(history, ctx, key, log_residual(solver.residual_coupling(i_var), floor))

    _set_history(history, ctx, "VMS", solver.total_von_mises())
    _set_history(history, ctx, "LOAD_INCREMENT", solver.load_increment())
    _set_history(history, ctx, "LOAD_RAMP", solver.load_ramp())


# ---------------------------------------------------------------------------
# Volume
# ---------------------------------------------------------------------------

def bind_volume_point(
    volume: VolumeFields,
    ctx: OutputContext,
    solver: ElasticitySolver,
    geometry: Geometry,
    i_point: int,
) -> None:
    """Refresh all volume fields of one mesh point."""
    for i_dim, axis in enumerate(axes(ctx)):
        _set_volume(volume, ctx, f"COORD-{axis}", i_point, geometry.coord(i_point, i_dim))

    for i_dim, axis in enumerate(axes(ctx)):
        _set_volume(
            volume, ctx, f"DISPLACEMENT-{axis}", i_point, solver.displacement(i_point, i_dim)
        )

    if ctx.dynamic:
        for i_dim, axis in enumerate(axes(ctx)):
            _set_volume(
                volume, ctx, f"VELOCITY-{axis}", i_point, solver.velocity(i_point, i_dim)
            )
            _set_volume(
                volume, ctx, f"ACCELERATION-{axis}", i_point,
                solver.acceleration(i_point, i_dim),
            )

    stress = solver.stress(i_point)
    for i_comp, comp in enumerate(stress_components(ctx)):
        _set_volume(volume, ctx, f"STRESS-{comp}", i_point, stress[i_comp])

    _set_volume(volume, ctx, "VON_MISES_STRESS", i_point, solver.von_mises(i_point))


def bind_volume(
    volume: VolumeFields,
    ctx: OutputContext,
    solver: ElasticitySolver,
    geometry: Geometry,
) -> None:
    """Refresh the volume fields of every mesh point."""
    for i_point in range(geometry.n_points):
        bind_volume_point(volume, ctx, solver, geometry, i_point)
