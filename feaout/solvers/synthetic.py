"""
Synthetic structural solver.

Produces a smooth bending displacement field on a structured mesh, the
matching small-strain stresses, and geometrically decaying residuals.
It implements the read accessors of :class:`feaout.interfaces.ElasticitySolver`
and is meant to drive the output pipeline without a real FEA code.
"""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

from ..config import SolverConfig
from ..context import IterationCounters
from ..domain import StructuredMesh
from ..registry import register_solver

POISSON_RATIO = 0.3


def von_mises_2d(stress: NDArray[np.float64]) -> NDArray[np.float64]:
    """Von Mises stress from (n, 3) in-plane components XX, YY, XY."""
    sxx, syy, sxy = stress.T
    return np.sqrt(sxx**2 - sxx * syy + syy**2 + 3.0 * sxy**2)


def von_mises_3d(stress: NDArray[np.float64]) -> NDArray[np.float64]:
    """Von Mises stress from (n, 6) components XX, YY, XY, ZZ, XZ, YZ."""
    sxx, syy, sxy, szz, sxz, syz = stress.T
    normal = (sxx - syy)**2 + (syy - szz)**2 + (szz - sxx)**2
    shear = sxy**2 + sxz**2 + syz**2
    return np.sqrt(0.5 * normal + 3.0 * shear)


@register_solver("synthetic")
class SyntheticElasticitySolver:
    """
    Analytic stand-in for a structural solver.

    The converged displacement is a cantilever-like bending mode clamped at
    x_min. During inner iterations the solution approaches it as
    ``1 - rate**(inner + 1)``; the load ramps up over ``ramp_iterations``
    outer iterations. Dynamic runs oscillate the amplitude in time.

    Parameters
    ----------
    config : SolverConfig
        Solver parameters.
    mesh : StructuredMesh
        Point grid.
    dynamic : bool
        Compute velocities and accelerations.
    """

    def __init__(self, config: SolverConfig, mesh: StructuredMesh, dynamic: bool = False):
        self.config = config
        self.mesh = mesh
        self.dynamic = dynamic
        self.ndim = mesh.ndim
        self._omega = 2.0 * np.pi * config.frequency

        n = mesh.n_points
        self._disp = np.zeros((n, self.ndim))
        self._vel = np.zeros((n, self.ndim))
        self._accel = np.zeros((n, self.ndim))
        n_stress = 6 if self.ndim == 3 else 3
        self._stress = np.zeros((n, n_stress))
        self._von_mises = np.zeros(n)

        self._inner = 0
        self._outer = 0
        self._ramp = 0.0

        self._mode = self._bending_mode()

    # -----------------------------------------------------------------------
    # Iteration
    # -----------------------------------------------------------------------

    def advance(self, counters: IterationCounters) -> None:
        """Recompute the solution state for the given iteration."""
        self._inner = counters.inner_iter
        self._outer = counters.outer_iter
        self._ramp = min(1.0, (counters.outer_iter + 1) / self.config.ramp_iterations)

        converged = 1.0 - self.config.convergence_rate ** (counters.inner_iter + 1)
        amplitude = self.config.load * self._ramp * converged

        if self.dynamic:
            phase = self._omega * counters.physical_time
            self._disp = amplitude * np.sin(phase) * self._mode
            self._vel = amplitude * self._omega * np.cos(phase) * self._mode
            self._accel = -self._omega**2 * self._disp
        else:
            self._disp = amplitude * self._mode

        self._stress = self._compute_stress(self._disp)
        if self.ndim == 3:
            self._von_mises = von_mises_3d(self._stress)
        else:
            self._von_mises = von_mises_2d(self._stress)

    def _bending_mode(self) -> NDArray[np.float64]:
        coords = self.mesh.coords
        (x_min, _), (y_min, _) = self.mesh.bounds[:2]
        lx, ly = self.mesh.extent(0), self.mesh.extent(1)
        xi = (coords[:, 0] - x_min) / lx
        eta = (coords[:, 1] - y_min) / ly - 0.5

        mode = np.zeros_like(coords)
        mode[:, 0] = -2.0 * xi * eta * ly / lx
        mode[:, 1] = xi**2
        if self.ndim == 3:
            mode[:, 2] = 0.25 * xi**2
        return mode

    def _compute_stress(self, disp: NDArray[np.float64]) -> NDArray[np.float64]:
        shape = self.mesh.shape
        spacing = [
            self.mesh.extent(d) / (shape[d] - 1) for d in range(self.ndim)
        ]
        # grad[i][j] = d u_i / d x_j, flattened per point
        grad = [
            [
                g.ravel(order="F")
                for g in np.gradient(disp[:, i].reshape(shape, order="F"), *spacing)
            ]
            for i in range(self.ndim)
        ]

        e = self.config.youngs_modulus
        nu = POISSON_RATIO
        lam = e * nu / ((1.0 + nu) * (1.0 - 2.0 * nu))
        mu = e / (2.0 * (1.0 + nu))

        trace = sum(grad[i][i] for i in range(self.ndim))

        def normal(i: int) -> NDArray[np.float64]:
            return lam * trace + 2.0 * mu * grad[i][i]

        def shear(i: int, j: int) -> NDArray[np.float64]:
            return mu * (grad[i][j] + grad[j][i])

        if self.ndim == 3:
            return np.column_stack(
                [normal(0), normal(1), shear(0, 1), normal(2), shear(0, 2), shear(1, 2)]
            )
        return np.column_stack([normal(0), normal(1), shear(0, 1)])

    # -----------------------------------------------------------------------
    # Scalar accessors
    # -----------------------------------------------------------------------

    def _decay(self, n: int, i_var: int) -> float:
        return self.config.initial_residual * (1.0 + 0.5 * i_var) * self.config.convergence_rate**n

    def residual_rms(self, i_var: int) -> float:
        return self._decay(self._inner, i_var)

    def residual_tolerance(self, i_var: int) -> float:
        base = self._decay(self._inner, 0)
        if i_var == 0:
            return base
        if i_var == 1:
            return 10.0 * base
        # Energy norm converges with the square of the displacement error
        return base**2

    def residual_coupling(self, i_var: int) -> float:
        return self._decay(self._outer, i_var)

    def total_von_mises(self) -> float:
        return float(self._von_mises.max()) if self._von_mises.size else 0.0

    def load_increment(self) -> float:
        return 1.0 / self.config.ramp_iterations

    def load_ramp(self) -> float:
        return self._ramp

    def linear_solver_iterations(self) -> int:
        return self.config.linear_solver_iterations

    # -----------------------------------------------------------------------
    # Per-point accessors
    # -----------------------------------------------------------------------

    def displacement(self, i_point: int, i_dim: int) -> float:
        return float(self._disp[i_point, i_dim])

    def velocity(self, i_point: int, i_dim: int) -> float:
        return float(self._vel[i_point, i_dim])

    def acceleration(self, i_point: int, i_dim: int) -> float:
        return float(self._accel[i_point, i_dim])

    def stress(self, i_point: int) -> NDArray[np.float64]:
        return self._stress[i_point]

    def von_mises(self, i_point: int) -> float:
        return float(self._von_mises[i_point])
