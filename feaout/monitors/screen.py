"""
Screen (console) convergence monitor with progress bar.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from tqdm import tqdm

from ..registry import register_monitor
from .base import Monitor, format_value

if TYPE_CHECKING:
    from ..context import IterationCounters
    from ..gate import OutputDecision
    from ..output import ElasticityOutput

COLUMN_WIDTH = 14


@register_monitor("screen")
class ScreenMonitor(Monitor):
    """
    Convergence table on the console.

    Prints the header and rows of the requested screen fields when the
    gates allow it. Lines go through ``tqdm.write`` so they do not break
    the progress bar.
    """

    def __init__(
        self,
        output_dir: Path,
        every_n_steps: int | None = None,
        total_steps: int | None = None,
        **kwargs,
    ):
        super().__init__(output_dir, every_n_steps)
        self.total_steps = total_steps
        self._pbar: tqdm | None = None

    def header_lines(self, output: "ElasticityOutput") -> list[str]:
        """Separator, column labels, separator."""
        labels = [output.history.schema(k).label for k in output.screen_fields]
        row = "|" + "|".join(label.rjust(COLUMN_WIDTH) for label in labels) + "|"
        rule = "+" + "-" * (len(row) - 2) + "+"
        lines = [rule, row, rule]
        if output.context.multizone:
            lines.insert(0, output.multizone_header)
        return lines

    def row_line(self, output: "ElasticityOutput") -> str:
        """Current values of the screen fields."""
        cells = [
            format_value(output.history.schema(k), output.history.get_value(k), COLUMN_WIDTH)
            for k in output.screen_fields
        ]
        return "|" + "|".join(cells) + "|"

    def on_start(self, output: "ElasticityOutput") -> None:
        """Initialize progress bar."""
        if self.total_steps is not None:
            self._pbar = tqdm(total=self.total_steps, desc="Iterating", unit="iter", leave=False)

    def on_iteration(
        self,
        step: int,
        counters: "IterationCounters",
        decision: "OutputDecision",
        output: "ElasticityOutput",
    ) -> None:
        """Print header and row as decided by the gates."""
        if self._pbar is not None:
            self._pbar.update(1)

        if not self.should_output(step):
            return
        if decision.screen_header:
            for line in self.header_lines(output):
                tqdm.write(line)
        if decision.screen_output:
            tqdm.write(self.row_line(output))

    def on_end(self, output: "ElasticityOutput") -> None:
        """Close progress bar."""
        if self._pbar is not None:
            self._pbar.close()
            self._pbar = None
