"""
Driving loop: time, outer and inner iterations around the output pipeline.

Each inner iteration advances the solver, binds the history fields,
evaluates the gates and hands everything to the monitors. Volume fields
are bound at the end of every outer iteration.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from .config import SimulationConfig, load_config
from .context import IterationCounters
from .domain import create_mesh
from .output import ElasticityOutput
from .registry import get_monitor, get_solver

# Import submodules to trigger registration of solvers/monitors
from . import solvers  # noqa: F401
from . import monitors  # noqa: F401

if TYPE_CHECKING:
    from .monitors.base import Monitor

logger = logging.getLogger(__name__)


def create_monitors(
    config: SimulationConfig,
    output_dir: Path,
) -> list["Monitor"]:
    """
    Create monitor instances from configuration.

    Parameters
    ----------
    config : SimulationConfig
        Run configuration.
    output_dir : Path
        Base output directory.

    Returns
    -------
    list[Monitor]
        List of monitor instances.
    """
    it = config.iterations
    monitor_list = []

    for mon_cfg in config.output.monitors:
        monitor_cls = get_monitor(mon_cfg.type)

        kwargs = {
            "output_dir": output_dir,
            "every_n_steps": mon_cfg.every_n_steps,
        }
        if mon_cfg.type == "screen":
            kwargs["total_steps"] = it.n_time_iter * it.n_outer_iter * it.n_inner_iter

        monitor_list.append(monitor_cls(**kwargs))

    return monitor_list


def run_simulation(config: SimulationConfig) -> ElasticityOutput:
    """
    Run the iteration loops and write all monitor output.

    Parameters
    ----------
    config : SimulationConfig
        Complete run configuration.

    Returns
    -------
    ElasticityOutput
        Output holding the values of the last iteration.
    """
    mesh = create_mesh(config.mesh)
    output = ElasticityOutput(config, mesh)
    ctx = output.context

    solver_cls = get_solver(config.solver.type)
    solver = solver_cls(config.solver, mesh, dynamic=ctx.dynamic)

    output_dir = Path(config.output.directory)
    output_dir.mkdir(parents=True, exist_ok=True)
    monitor_list = create_monitors(config, output_dir)

    for monitor in monitor_list:
        monitor.on_start(output)

    it = config.iterations
    step = 0
    logger.info(
        "Running %d time x %d outer x %d inner iterations on %d points",
        it.n_time_iter, it.n_outer_iter, it.n_inner_iter, mesh.n_points,
    )

    for time_iter in range(it.n_time_iter):
        physical_time = (time_iter + 1) * it.time_step if ctx.dynamic else 0.0

        for outer_iter in range(it.n_outer_iter):
            for inner_iter in range(it.n_inner_iter):
                counters = IterationCounters(
                    time_iter=time_iter,
                    outer_iter=outer_iter,
                    inner_iter=inner_iter,
                    physical_time=physical_time,
                )
                solver.advance(counters)
                output.load_history_data(counters, solver)
                decision = output.decisions(counters)

                for monitor in monitor_list:
                    monitor.on_iteration(step, counters, decision, output)
                step += 1

                if output.is_converged(it.conv_residual_min):
                    logger.debug(
                        "%s converged at time %d, outer %d, inner %d",
                        output.conv_field, time_iter, outer_iter, inner_iter,
                    )
                    break

            # Full-field values of the last inner iteration
            output.load_volume_data(solver)
            for monitor in monitor_list:
                monitor.on_solution(step, counters, output)

    for monitor in monitor_list:
        monitor.on_end(output)

    logger.info("Finished after %d iterations", step)
    return output


def run_from_file(config_path: str | Path) -> ElasticityOutput:
    """
    Load configuration from file and run.

    Parameters
    ----------
    config_path : str or Path
        Path to YAML configuration file.

    Returns
    -------
    ElasticityOutput
        Output holding the values of the last iteration.
    """
    config = load_config(config_path)
    return run_simulation(config)
