"""
History file monitor.

Writes one comma-separated row per history-row decision: a quoted label
header line, then the requested history fields formatted by their hints.
"""

from __future__ import annotations

from pathlib import Path
from typing import IO, TYPE_CHECKING

from ..registry import register_monitor
from .base import Monitor, format_value

if TYPE_CHECKING:
    from ..context import IterationCounters
    from ..gate import OutputDecision
    from ..output import ElasticityOutput


@register_monitor("history")
class HistoryMonitor(Monitor):
    """
    Convergence history as ``<history_filename>.csv``.

    Columns are the output's ``history_file_fields`` in declaration order.
    """

    def __init__(
        self,
        output_dir: Path,
        every_n_steps: int | None = None,
        **kwargs,
    ):
        super().__init__(output_dir, every_n_steps)
        self._file: IO[str] | None = None
        self.filepath: Path | None = None
        self.n_rows = 0

    def on_start(self, output: "ElasticityOutput") -> None:
        """Create output directory, open the file and write the header."""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.filepath = self.output_dir / f"{output.history_filename}.csv"
        self._file = open(self.filepath, "w")

        labels = [output.history.schema(k).label for k in output.history_file_fields]
        self._file.write(",".join(f'"{label}"' for label in labels) + "\n")

    def on_iteration(
        self,
        step: int,
        counters: "IterationCounters",
        decision: "OutputDecision",
        output: "ElasticityOutput",
    ) -> None:
        """Append a row if the gate and cadence allow it."""
        if self._file is None:
            return
        if not decision.history_output or not self.should_output(step):
            return

        cells = [
            format_value(output.history.schema(k), output.history.get_value(k)).strip()
            for k in output.history_file_fields
        ]
        self._file.write(",".join(cells) + "\n")
        self._file.flush()
        self.n_rows += 1

    def on_end(self, output: "ElasticityOutput") -> None:
        """Close the history file."""
        if self._file is not None:
            self._file.close()
            self._file = None
