"""
Configuration parsing and validation for structural output runs.

Uses pydantic for strict schema validation with helpful error messages.

Supports two analysis kinds:
- small_deformations: linear elasticity (per-axis RMS residuals)
- large_deformations: nonlinear elasticity (U/R/E tolerance residuals)
"""

from __future__ import annotations

import warnings
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, model_validator

from .warnings import ConfigWarning


# ---------------------------------------------------------------------------
# Sub-models
# ---------------------------------------------------------------------------

class MeshConfig(BaseModel):
    """2D or 3D structured point grid."""
    x_min: float = Field(..., description="Lower x bound")
    x_max: float = Field(..., description="Upper x bound")
    n_points_x: int = Field(..., gt=1, description="Number of grid points in x")
    y_min: float = Field(..., description="Lower y bound")
    y_max: float = Field(..., description="Upper y bound")
    n_points_y: int = Field(..., gt=1, description="Number of grid points in y")
    z_min: Optional[float] = Field(None, description="Lower z bound (3D)")
    z_max: Optional[float] = Field(None, description="Upper z bound (3D)")
    n_points_z: Optional[int] = Field(None, gt=1, description="Number of grid points in z (3D)")

    @model_validator(mode="after")
    def validate_mesh_params(self) -> "MeshConfig":
        """Ensure the z parameters are given all together or not at all."""
        z_params = (self.z_min, self.z_max, self.n_points_z)
        is_3d = any(p is not None for p in z_params)
        if is_3d and any(p is None for p in z_params):
            raise ValueError("3D mesh requires 'z_min', 'z_max', and 'n_points_z'")
        if self.x_max <= self.x_min or self.y_max <= self.y_min:
            raise ValueError("Mesh bounds must satisfy min < max")
        if is_3d and self.z_max <= self.z_min:  # type: ignore
            raise ValueError("Mesh bounds must satisfy min < max")
        return self

    @property
    def ndim(self) -> int:
        """Number of spatial dimensions."""
        return 3 if self.n_points_z is not None else 2

    @property
    def n_points(self) -> int:
        """Total number of grid points."""
        n = self.n_points_x * self.n_points_y
        if self.n_points_z is not None:
            n *= self.n_points_z
        return n


class ProblemConfig(BaseModel):
    """Structural analysis kind and zone coupling."""
    geometric_conditions: Literal["small_deformations", "large_deformations"] = Field(
        "small_deformations",
        description="'small_deformations' (linear) or 'large_deformations' (nonlinear)",
    )
    time_domain: bool = Field(False, description="Time-domain simulation")
    dynamic_analysis: Literal["static", "dynamic"] = Field(
        "static", description="Structural dynamic analysis"
    )
    multizone: bool = Field(False, description="Coupled multizone problem")
    zone: int = Field(0, ge=0, description="Zone index of this structure")

    @property
    def linear(self) -> bool:
        return self.geometric_conditions == "small_deformations"

    @property
    def dynamic(self) -> bool:
        """Time-domain runs and dynamic structural analyses both output velocities."""
        return self.time_domain or self.dynamic_analysis == "dynamic"


class IterationConfig(BaseModel):
    """Iteration limits of the driving loop."""
    n_time_iter: int = Field(1, gt=0, description="Number of time iterations")
    n_outer_iter: int = Field(1, gt=0, description="Outer (coupling) iterations per time step")
    n_inner_iter: int = Field(..., gt=0, description="Inner iterations per outer iteration")
    time_step: float = Field(1.0, gt=0, description="Physical time step size")
    conv_residual_min: Optional[float] = Field(
        None, description="Stop inner iterations once the convergence field (log10) drops below"
    )


class SolverConfig(BaseModel):
    """Solver selection and synthetic solver parameters."""
    type: str = Field("synthetic", description="Registered solver type")
    initial_residual: float = Field(1.0, gt=0, description="Residual magnitude at iteration 0")
    convergence_rate: float = Field(
        0.5, gt=0, lt=1, description="Residual reduction factor per inner iteration"
    )
    load: float = Field(1.0e-3, description="Displacement amplitude at full load")
    ramp_iterations: int = Field(
        1, gt=0, description="Outer iterations to ramp the load from 0 to 1"
    )
    youngs_modulus: float = Field(2.0e11, gt=0, description="Young's modulus")
    frequency: float = Field(1.0, gt=0, description="Oscillation frequency for dynamic runs")
    linear_solver_iterations: int = Field(10, ge=0, description="Reported linear solver iterations")


class MonitorConfig(BaseModel):
    """Output monitor configuration."""
    type: Literal["screen", "history", "hdf5"] = Field(..., description="Monitor type")
    every_n_steps: Optional[int] = Field(
        None, gt=0, description="Write every N calls (history/hdf5)"
    )

    @model_validator(mode="after")
    def validate_output_trigger(self) -> "MonitorConfig":
        if self.every_n_steps is None and self.type == "hdf5":
            raise ValueError("Monitor 'hdf5' requires 'every_n_steps'")
        return self


class OutputConfig(BaseModel):
    """Output configuration."""
    directory: str = Field("./results", description="Output directory")
    volume_filename: str = Field("volume", description="Volume snapshot file name (no extension)")
    surface_filename: str = Field("surface", description="Surface file name (no extension)")
    restart_filename: str = Field("restart", description="Restart file name (no extension)")
    history_filename: str = Field("history", description="History file name (no extension)")
    write_conv_freq: int = Field(1, gt=0, description="Screen convergence write frequency")
    write_zone_conv: bool = Field(
        False, description="Print per-zone convergence in multizone problems"
    )
    screen_fields: list[str] = Field(
        default_factory=list, description="Screen columns (keys or groups); empty = defaults"
    )
    history_fields: list[str] = Field(
        default_factory=list, description="History file columns (keys or groups); empty = defaults"
    )
    volume_fields: list[str] = Field(
        default_factory=list, description="Volume snapshot fields (keys or groups); empty = defaults"
    )
    conv_field: Optional[str] = Field(
        None, description="Field monitored for convergence (default depends on analysis)"
    )
    residual_floor: float = Field(1e-16, gt=0, description="Floor applied before log10 of residuals")
    strict_binding: bool = Field(
        False, description="Raise on binding errors instead of warning"
    )
    monitors: list[MonitorConfig] = Field(
        default_factory=list, description="List of output monitors"
    )


# ---------------------------------------------------------------------------
# Main configuration
# ---------------------------------------------------------------------------

class SimulationConfig(BaseModel):
    """Complete run configuration."""
    mesh: MeshConfig
    iterations: IterationConfig
    problem: ProblemConfig = Field(default_factory=ProblemConfig)
    solver: SolverConfig = Field(default_factory=SolverConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

    @model_validator(mode="after")
    def validate_conv_threshold(self) -> "SimulationConfig":
        """A convergence threshold is compared against log10 residuals."""
        threshold = self.iterations.conv_residual_min
        if threshold is not None and threshold > 0:
            warnings.warn(
                f"conv_residual_min = {threshold} > 0 is compared against log10 "
                f"residuals; did you mean {-threshold}?",
                ConfigWarning,
                stacklevel=2,
            )
        return self


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

def load_config(path: str | Path) -> SimulationConfig:
    """
    Load and validate a YAML configuration file.

    Parameters
    ----------
    path : str or Path
        Path to the YAML configuration file.

    Returns
    -------
    SimulationConfig
        Validated configuration object.

    Raises
    ------
    FileNotFoundError
        If the configuration file does not exist.
    pydantic.ValidationError
        If the configuration is invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, "r") as f:
        raw = yaml.safe_load(f)

    return SimulationConfig.model_validate(raw)
