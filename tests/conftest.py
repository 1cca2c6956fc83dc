"""
Shared stubs for the output tests: a fixed-value solver, a tiny geometry
and a configuration factory.
"""

import numpy as np
import pytest

from feaout.config import SimulationConfig
from feaout.context import OutputContext


class StubGeometry:
    """Points on a line with recognisable coordinates."""

    def __init__(self, ndim: int, n_points: int = 4):
        self.ndim = ndim
        self.n_points = n_points
        self.coords = np.array(
            [[10.0 * p + d for d in range(ndim)] for p in range(n_points)]
        )

    def coord(self, i_point: int, i_dim: int) -> float:
        return float(self.coords[i_point, i_dim])


class StubSolver:
    """Solver returning fixed, index-encoded values."""

    def __init__(self, ndim: int, residual: float = 1e-3):
        self.ndim = ndim
        self.residual = residual
        self.calls: list[str] = []

    def residual_rms(self, i_var):
        self.calls.append(f"rms{i_var}")
        return self.residual * 10**i_var

    def residual_tolerance(self, i_var):
        self.calls.append(f"tol{i_var}")
        return self.residual * 100**i_var

    def residual_coupling(self, i_var):
        self.calls.append(f"bgs{i_var}")
        return self.residual / 10**(i_var + 1)

    def total_von_mises(self):
        return 2.5e8

    def load_increment(self):
        return 0.25

    def load_ramp(self):
        return 0.75

    def linear_solver_iterations(self):
        return 17

    def displacement(self, i_point, i_dim):
        return 100.0 * i_point + i_dim + 0.1

    def velocity(self, i_point, i_dim):
        return 200.0 * i_point + i_dim + 0.2

    def acceleration(self, i_point, i_dim):
        return 300.0 * i_point + i_dim + 0.3

    def stress(self, i_point):
        n = 6 if self.ndim == 3 else 3
        return [1000.0 * i_point + c for c in range(n)]

    def von_mises(self, i_point):
        return 5000.0 + i_point


def make_config_dict(
    ndim: int = 2,
    linear: bool = True,
    dynamic: bool = False,
    multizone: bool = False,
    **output,
) -> dict:
    mesh = {
        "x_min": 0.0, "x_max": 1.0, "n_points_x": 5,
        "y_min": 0.0, "y_max": 0.5, "n_points_y": 3,
    }
    if ndim == 3:
        mesh.update({"z_min": 0.0, "z_max": 0.5, "n_points_z": 3})
    return {
        "mesh": mesh,
        "iterations": {"n_inner_iter": 5},
        "problem": {
            "geometric_conditions": "small_deformations" if linear else "large_deformations",
            "dynamic_analysis": "dynamic" if dynamic else "static",
            "multizone": multizone,
        },
        "output": output,
    }


def make_config(**kwargs) -> SimulationConfig:
    return SimulationConfig.model_validate(make_config_dict(**kwargs))


def make_context(**kwargs) -> OutputContext:
    return OutputContext(**kwargs)


@pytest.fixture
def geometry_2d():
    return StubGeometry(ndim=2)


@pytest.fixture
def geometry_3d():
    return StubGeometry(ndim=3)
