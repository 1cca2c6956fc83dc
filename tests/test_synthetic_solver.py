"""
Unit tests: structured mesh and the synthetic structural solver.

Run: pytest tests/test_synthetic_solver.py -v
"""

import numpy as np
import pytest

from conftest import make_config
from feaout.config import MeshConfig, SolverConfig
from feaout.context import IterationCounters
from feaout.domain import create_mesh
from feaout.interfaces import ElasticitySolver, Geometry
from feaout.registry import get_solver
from feaout.solvers.synthetic import SyntheticElasticitySolver, von_mises_2d, von_mises_3d


def _mesh(ndim: int):
    return create_mesh(make_config(ndim=ndim).mesh)


def test_mesh_points_x_fastest():
    mesh = create_mesh(MeshConfig(
        x_min=0.0, x_max=1.0, n_points_x=3,
        y_min=0.0, y_max=2.0, n_points_y=2,
        z_min=0.0, z_max=1.0, n_points_z=2,
    ))
    assert mesh.ndim == 3
    assert mesh.n_points == 12
    np.testing.assert_allclose(mesh.coords[1], [0.5, 0.0, 0.0])
    np.testing.assert_allclose(mesh.coords[3], [0.0, 2.0, 0.0])
    np.testing.assert_allclose(mesh.coords[6], [0.0, 0.0, 1.0])
    assert mesh.coord(11, 1) == 2.0
    assert isinstance(mesh, Geometry)


def test_solver_is_registered_and_satisfies_protocol():
    mesh = _mesh(2)
    solver = get_solver("synthetic")(SolverConfig(), mesh)
    assert isinstance(solver, SyntheticElasticitySolver)
    assert isinstance(solver, ElasticitySolver)


def test_von_mises_reference_states():
    np.testing.assert_allclose(von_mises_2d(np.array([[3.0, 0.0, 0.0]])), [3.0])
    np.testing.assert_allclose(
        von_mises_3d(np.array([[0.0, 0.0, 2.0, 0.0, 0.0, 0.0]])), [2.0 * np.sqrt(3.0)]
    )
    # Hydrostatic stress has no deviatoric part
    np.testing.assert_allclose(
        von_mises_3d(np.array([[5.0, 5.0, 0.0, 5.0, 0.0, 0.0]])), [0.0], atol=1e-12
    )


def test_static_displacement_clamped_at_x_min():
    mesh = _mesh(2)
    config = SolverConfig(load=2.0, convergence_rate=0.5)
    solver = SyntheticElasticitySolver(config, mesh)
    solver.advance(IterationCounters(inner_iter=0))

    clamped = np.flatnonzero(mesh.coords[:, 0] == 0.0)
    tip = np.flatnonzero(mesh.coords[:, 0] == 1.0)
    for p in clamped:
        assert solver.displacement(p, 0) == 0.0
        assert solver.displacement(p, 1) == 0.0
    # amplitude = load * ramp * (1 - rate)
    for p in tip:
        assert solver.displacement(p, 1) == pytest.approx(1.0)


def test_residuals_decay_and_ramp():
    mesh = _mesh(3)
    config = SolverConfig(initial_residual=1.0, convergence_rate=0.1, ramp_iterations=4)
    solver = SyntheticElasticitySolver(config, mesh)

    solver.advance(IterationCounters(outer_iter=1, inner_iter=3))

    assert solver.residual_rms(0) == pytest.approx(1e-3)
    assert solver.residual_rms(2) == pytest.approx(2e-3)
    assert solver.residual_tolerance(2) == pytest.approx(1e-6)
    assert solver.residual_coupling(0) == pytest.approx(0.1)
    assert solver.load_ramp() == pytest.approx(0.5)
    assert solver.load_increment() == pytest.approx(0.25)
    assert len(solver.stress(0)) == 6
    assert solver.total_von_mises() == pytest.approx(
        max(solver.von_mises(p) for p in range(mesh.n_points))
    )
    assert solver.total_von_mises() > 0.0


def test_dynamic_solution_oscillates():
    mesh = _mesh(2)
    config = SolverConfig(frequency=1.0)
    solver = SyntheticElasticitySolver(config, mesh, dynamic=True)
    solver.advance(IterationCounters(physical_time=0.25))

    tip = int(np.flatnonzero(mesh.coords[:, 0] == 1.0)[0])
    omega = 2.0 * np.pi
    # sin(omega * 0.25) = 1, cos = 0
    assert solver.velocity(tip, 1) == pytest.approx(0.0, abs=1e-12)
    assert solver.acceleration(tip, 1) == pytest.approx(-omega**2 * solver.displacement(tip, 1))
