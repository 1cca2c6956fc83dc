"""
Base class for output monitors.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING

from ..fields import FieldFormat, FieldSchema

if TYPE_CHECKING:
    from ..context import IterationCounters
    from ..gate import OutputDecision
    from ..output import ElasticityOutput


def format_value(schema: FieldSchema, value: float | None, width: int = 0) -> str:
    """
    Render a field value according to its format hint.

    Unbound values (None or NaN) render as '-'.
    """
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return "-".rjust(width)
    if schema.format is FieldFormat.INTEGER:
        return f"{int(value):>{width}d}"
    if schema.format is FieldFormat.FIXED:
        return f"{value:>{width}.6f}"
    return f"{value:>{width}.4e}"


class Monitor(ABC):
    """
    Abstract base class for output writers.

    Monitors receive every iteration together with the gate decisions and
    read field values out of the output registries. The optional
    ``every_n_steps`` adds a writer-side cadence on top of the gates.
    """

    def __init__(
        self,
        output_dir: Path,
        every_n_steps: int | None = None,
    ):
        """
        Initialize monitor.

        Parameters
        ----------
        output_dir : Path
            Directory for output files.
        every_n_steps : int or None
            Write every N calls. None writes on every call.
        """
        self.output_dir = Path(output_dir)
        self.every_n_steps = every_n_steps

    def should_output(self, step: int) -> bool:
        """Check the writer-side cadence for global step ``step``."""
        if self.every_n_steps is None:
            return True
        return step % self.every_n_steps == 0

    def on_start(self, output: "ElasticityOutput") -> None:
        """Called once after the fields are declared. Override for setup."""
        pass

    @abstractmethod
    def on_iteration(
        self,
        step: int,
        counters: "IterationCounters",
        decision: "OutputDecision",
        output: "ElasticityOutput",
    ) -> None:
        """
        Called after the history fields are bound for an iteration.

        Parameters
        ----------
        step : int
            Global iteration number (0-based, across all loops).
        counters : IterationCounters
            Loop counters of this iteration.
        decision : OutputDecision
            Gate decisions of this iteration.
        output : ElasticityOutput
            Output with freshly bound history values.
        """
        pass

    def on_solution(
        self,
        step: int,
        counters: "IterationCounters",
        output: "ElasticityOutput",
    ) -> None:
        """Called after the volume fields are bound, at the end of each outer iteration."""
        pass

    def on_end(self, output: "ElasticityOutput") -> None:
        """Called at run end. Override for finalization."""
        pass
