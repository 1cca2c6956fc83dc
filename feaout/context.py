"""
Immutable run context and explicit iteration counters.

The context is captured once from the configuration (and the geometry's
dimensionality) and handed to the schema builder, the data binder and the
output gate, so the declared and bound field sets always agree.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .config import SimulationConfig


@dataclass(frozen=True)
class OutputContext:
    """
    Configuration snapshot consumed by the output core.

    Attributes
    ----------
    ndim : int
        Spatial dimensionality (2 or 3).
    linear : bool
        Small-deformation (linear) analysis. False means nonlinear.
    dynamic : bool
        Time-dependent analysis (velocity/acceleration are output).
    multizone : bool
        Coupled multizone run (adds coupling residuals, gates screen output).
    write_conv_freq : int
        Screen convergence write frequency; linear headers every 40x this.
    write_zone_conv : bool
        Explicit opt-in to per-zone screen output in multizone runs.
    residual_floor : float
        Positive floor applied to residuals before log10.
    strict_binding : bool
        Re-raise binding errors instead of warning and continuing.
    zone : int
        Zone index, used for the multizone header.
    volume_filename, surface_filename, restart_filename, history_filename : str
        Output names, passed through to writers unchanged.
    """
    ndim: int
    linear: bool
    dynamic: bool = False
    multizone: bool = False
    write_conv_freq: int = 1
    write_zone_conv: bool = False
    residual_floor: float = 1e-16
    strict_binding: bool = False
    zone: int = 0
    volume_filename: str = "volume"
    surface_filename: str = "surface"
    restart_filename: str = "restart"
    history_filename: str = "history"

    def __post_init__(self):
        if self.ndim not in (2, 3):
            raise ValueError(f"ndim must be 2 or 3, got {self.ndim}")
        if self.write_conv_freq < 1:
            raise ValueError(
                f"write_conv_freq must be >= 1, got {self.write_conv_freq}"
            )
        if not self.residual_floor > 0:
            raise ValueError(
                f"residual_floor must be positive, got {self.residual_floor}"
            )

    @property
    def nonlinear(self) -> bool:
        return not self.linear

    @property
    def n_residuals(self) -> int:
        """Number of intra-zone residual fields (nDim if linear, else 3)."""
        return self.ndim if self.linear else 3

    @classmethod
    def from_config(
        cls,
        config: "SimulationConfig",
        ndim: int | None = None,
    ) -> "OutputContext":
        """
        Capture a context from a validated configuration.

        Parameters
        ----------
        config : SimulationConfig
            Validated configuration.
        ndim : int or None
            Geometry dimensionality; defaults to the mesh configuration's.
        """
        problem = config.problem
        output = config.output
        return cls(
            ndim=config.mesh.ndim if ndim is None else ndim,
            linear=problem.linear,
            dynamic=problem.dynamic,
            multizone=problem.multizone,
            write_conv_freq=output.write_conv_freq,
            write_zone_conv=output.write_zone_conv,
            residual_floor=output.residual_floor,
            strict_binding=output.strict_binding,
            zone=problem.zone,
            volume_filename=output.volume_filename,
            surface_filename=output.surface_filename,
            restart_filename=output.restart_filename,
            history_filename=output.history_filename,
        )


@dataclass(frozen=True)
class IterationCounters:
    """Iteration counters of the driving loop, passed explicitly each call."""
    time_iter: int = 0
    outer_iter: int = 0
    inner_iter: int = 0
    physical_time: float = 0.0
