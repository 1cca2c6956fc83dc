"""
HDF5 volume snapshot monitor.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from ..registry import register_monitor
from .base import Monitor

if TYPE_CHECKING:
    from ..context import IterationCounters
    from ..gate import OutputDecision
    from ..output import ElasticityOutput


@register_monitor("hdf5")
class HDF5Monitor(Monitor):
    """
    HDF5 volume output.

    Saves the requested volume fields at the end of every N-th outer
    iteration into ``<volume_filename>.h5``. Field metadata (label, group,
    format) is stored once under ``/schema``; each snapshot is a group
    ``step_NNNNNN`` with one dataset per field.
    """

    def __init__(
        self,
        output_dir: Path,
        every_n_steps: int | None = None,
        **kwargs,
    ):
        super().__init__(output_dir, every_n_steps)
        self._h5file = None
        self._frame_count = 0
        self._solution_count = 0
        self.filepath: Path | None = None

    def on_start(self, output: "ElasticityOutput") -> None:
        """Create output directory and initialize HDF5 file."""
        self.output_dir.mkdir(parents=True, exist_ok=True)

        try:
            import h5py
        except ImportError:
            raise ImportError(
                "h5py is required for HDF5 output. Install with: pip install h5py"
            )

        self.filepath = self.output_dir / f"{output.volume_filename}.h5"
        self._h5file = h5py.File(self.filepath, "w")

        ctx = output.context
        self._h5file.attrs["ndim"] = ctx.ndim
        self._h5file.attrs["n_points"] = output.volume.n_points
        self._h5file.attrs["zone"] = ctx.zone

        schema_group = self._h5file.create_group("schema")
        for key in output.volume_output_fields:
            schema = output.volume.schema(key)
            entry = schema_group.create_group(key)
            entry.attrs["label"] = schema.label
            entry.attrs["group"] = schema.group
            entry.attrs["format"] = schema.format.value

    def on_iteration(
        self,
        step: int,
        counters: "IterationCounters",
        decision: "OutputDecision",
        output: "ElasticityOutput",
    ) -> None:
        """Volume snapshots are written from on_solution only."""
        pass

    def on_solution(
        self,
        step: int,
        counters: "IterationCounters",
        output: "ElasticityOutput",
    ) -> None:
        """Save the bound volume fields if output is due."""
        if self._h5file is None:
            return

        due = self.should_output(self._solution_count)
        self._solution_count += 1
        if not due:
            return

        group = self._h5file.create_group(f"step_{self._frame_count:06d}")
        group.attrs["step"] = step
        group.attrs["time_iter"] = counters.time_iter
        group.attrs["outer_iter"] = counters.outer_iter
        group.attrs["physical_time"] = counters.physical_time
        for key in output.volume_output_fields:
            group.create_dataset(key, data=output.volume.get_values(key))

        self._frame_count += 1

    def on_end(self, output: "ElasticityOutput") -> None:
        """Close HDF5 file."""
        if self._h5file is not None:
            self._h5file.close()
            self._h5file = None
