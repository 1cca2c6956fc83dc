"""
Output of one structural zone: registries, declarations, binding and gates.

    output = ElasticityOutput(config, mesh)
    output.load_history_data(counters, solver)
    decision = output.decisions(counters)
    if decision.screen_output:
        row = output.history.snapshot(output.screen_fields)
"""

from __future__ import annotations

import logging
import warnings
from typing import Iterable

from .binding import bind_history, bind_volume
from .builder import declare_history_fields, declare_volume_fields, residual_keys
from .config import SimulationConfig
from .context import IterationCounters, OutputContext
from .errors import ConfigurationError
from .fields import FieldRegistry, HistoryFields, VolumeFields
from .gate import OutputDecision, evaluate_gates
from .interfaces import ElasticitySolver, Geometry
from .warnings import OutputFieldWarning

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_FIELDS = ("ITER", "RMS_RES")
DEFAULT_VOLUME_FIELDS = ("COORDINATES", "SOLUTION", "STRESS")


def _requested(
    registry: FieldRegistry,
    requested: Iterable[str],
    purpose: str,
) -> list[str]:
    keys, unknown = registry.resolve(requested)
    for name in unknown:
        warnings.warn(
            f"Requested {purpose} field '{name}' is not defined for this analysis",
            OutputFieldWarning,
            stacklevel=3,
        )
    return keys


class ElasticityOutput:
    """
    Output fields of a structural (elasticity) zone.

    Declares the history and volume fields once at construction, then binds
    values each iteration. Writers read ``screen_fields``,
    ``history_file_fields`` and ``volume_output_fields`` and pull current
    values from ``history`` and ``volume``.

    Parameters
    ----------
    config : SimulationConfig
        Validated configuration. Only read here, never re-queried later.
    geometry : Geometry
        Mesh the volume fields are defined on.
    """

    def __init__(self, config: SimulationConfig, geometry: Geometry):
        self.context = OutputContext.from_config(config, ndim=geometry.ndim)
        self.geometry = geometry
        ctx = self.context

        self.history = HistoryFields()
        self.volume = VolumeFields(geometry.n_points)
        declare_history_fields(self.history, ctx)
        declare_volume_fields(self.volume, ctx)

        out = config.output
        self.screen_fields = _requested(
            self.history, out.screen_fields or self.default_screen_fields(), "screen"
        )
        self.history_file_fields = _requested(
            self.history, out.history_fields or DEFAULT_HISTORY_FIELDS, "history"
        )
        self.volume_output_fields = _requested(
            self.volume, out.volume_fields or DEFAULT_VOLUME_FIELDS, "volume"
        )

        self.conv_field = out.conv_field or residual_keys(ctx)[0]
        if self.conv_field not in self.history:
            raise ConfigurationError(
                f"Convergence field '{self.conv_field}' is not a history field. "
                f"Available: {', '.join(self.history.keys())}"
            )

        self.multizone_header = f"Zone {ctx.zone} (Structure)"

        logger.info(
            "%s: %s %dD %s analysis, %d history / %d volume fields",
            self.multizone_header,
            "linear" if ctx.linear else "nonlinear",
            ctx.ndim,
            "dynamic" if ctx.dynamic else "static",
            len(self.history),
            len(self.volume),
        )

    def default_screen_fields(self) -> list[str]:
        """Screen columns used when the configuration requests none."""
        ctx = self.context
        fields = []
        if ctx.dynamic:
            fields.append("TIME_ITER")
        if ctx.multizone:
            fields.append("OUTER_ITER")
        fields.append("INNER_ITER")
        fields.extend(residual_keys(ctx))
        fields.append("VMS")
        return fields

    # -----------------------------------------------------------------------
    # Binding
    # -----------------------------------------------------------------------

    def load_history_data(
        self, counters: IterationCounters, solver: ElasticitySolver
    ) -> None:
        """Bind the history fields for the current iteration."""
        bind_history(self.history, self.context, counters, solver)

    def load_volume_data(self, solver: ElasticitySolver) -> None:
        """Bind the volume fields of every mesh point."""
        bind_volume(self.volume, self.context, solver, self.geometry)

    # -----------------------------------------------------------------------
    # Gates and convergence
    # -----------------------------------------------------------------------

    def decisions(self, counters: IterationCounters) -> OutputDecision:
        """Header/row/history-row decisions for the current iteration."""
        return evaluate_gates(self.context, counters)

    def is_converged(self, threshold: float | None) -> bool:
        """
        Whether the convergence field has dropped below ``threshold``.

        Residual fields are log10-scaled, so ``threshold`` is a log10 value
        (e.g. -8). Returns False while the field is unbound or without a
        threshold.
        """
        if threshold is None:
            return False
        value = self.history.get_value(self.conv_field)
        return value is not None and value < threshold

    # -----------------------------------------------------------------------
    # Pass-through file names
    # -----------------------------------------------------------------------

    @property
    def volume_filename(self) -> str:
        return self.context.volume_filename

    @property
    def surface_filename(self) -> str:
        return self.context.surface_filename

    @property
    def restart_filename(self) -> str:
        return self.context.restart_filename

    @property
    def history_filename(self) -> str:
        return self.context.history_filename
