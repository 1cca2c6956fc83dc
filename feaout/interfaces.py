"""
Collaborator protocols consumed by the data binder.

The output core only reads from these objects. Component indices follow
the solver's variable ordering: 0 = x, 1 = y, 2 = z. Stress vectors are
ordered XX, YY, XY (2-D) or XX, YY, XY, ZZ, XZ, YZ (3-D).
"""

from __future__ import annotations

from typing import Protocol, Sequence, runtime_checkable


@runtime_checkable
class ElasticitySolver(Protocol):
    """Read-only accessors of a structural solver."""

    def residual_rms(self, i_var: int) -> float:
        """RMS residual of displacement component ``i_var`` (linear analysis)."""
        ...

    def residual_tolerance(self, i_var: int) -> float:
        """Nonlinear convergence metric: 0 = U, 1 = R, 2 = E tolerance."""
        ...

    def residual_coupling(self, i_var: int) -> float:
        """Block Gauss-Seidel coupling residual of component ``i_var``."""
        ...

    def total_von_mises(self) -> float: ...

    def load_increment(self) -> float: ...

    def load_ramp(self) -> float: ...

    def linear_solver_iterations(self) -> int: ...

    def displacement(self, i_point: int, i_dim: int) -> float: ...

    def velocity(self, i_point: int, i_dim: int) -> float: ...

    def acceleration(self, i_point: int, i_dim: int) -> float: ...

    def stress(self, i_point: int) -> Sequence[float]: ...

    def von_mises(self, i_point: int) -> float: ...


@runtime_checkable
class Geometry(Protocol):
    """Point coordinates of the mesh."""

    ndim: int
    n_points: int

    def coord(self, i_point: int, i_dim: int) -> float: ...
