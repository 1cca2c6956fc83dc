"""
2D and 3D structured point grids.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from .config import MeshConfig


@dataclass
class StructuredMesh:
    """
    Structured grid of mesh points.

    Attributes
    ----------
    coords : NDArray[np.float64]
        Point coordinates, shape (n_points, ndim). Points are ordered with
        x varying fastest.
    shape : tuple[int, ...]
        Number of points along each axis (nx, ny) or (nx, ny, nz).
    bounds : tuple[tuple[float, float], ...]
        (min, max) per axis.
    """
    coords: NDArray[np.float64]
    shape: tuple[int, ...]
    bounds: tuple[tuple[float, float], ...]

    @property
    def ndim(self) -> int:
        """Number of spatial dimensions."""
        return self.coords.shape[1]

    @property
    def n_points(self) -> int:
        """Number of mesh points."""
        return self.coords.shape[0]

    def coord(self, i_point: int, i_dim: int) -> float:
        """Coordinate ``i_dim`` of point ``i_point``."""
        return float(self.coords[i_point, i_dim])

    def extent(self, i_dim: int) -> float:
        """Domain length along axis ``i_dim``."""
        lo, hi = self.bounds[i_dim]
        return hi - lo


def create_mesh(config: MeshConfig) -> StructuredMesh:
    """
    Create a 2D or 3D structured mesh from configuration.

    Parameters
    ----------
    config : MeshConfig
        Mesh configuration.

    Returns
    -------
    StructuredMesh
        The point grid.
    """
    bounds = [(config.x_min, config.x_max), (config.y_min, config.y_max)]
    shape = [config.n_points_x, config.n_points_y]
    if config.ndim == 3:
        bounds.append((config.z_min, config.z_max))  # type: ignore
        shape.append(config.n_points_z)  # type: ignore

    axes_1d = [np.linspace(lo, hi, n) for (lo, hi), n in zip(bounds, shape)]

    # indexing="ij" then Fortran-order ravel keeps x varying fastest
    grids = np.meshgrid(*axes_1d, indexing="ij")
    coords = np.column_stack([g.ravel(order="F") for g in grids])

    return StructuredMesh(
        coords=coords.astype(np.float64),
        shape=tuple(shape),
        bounds=tuple(bounds),
    )
