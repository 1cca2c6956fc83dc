"""
feaout: Output Field Registry for Structural Solvers

Declares named, typed output fields once, binds solver values into them
every iteration, and decides when screen and history rows are due.

Usage:
    from feaout.runner import run_from_file
    output = run_from_file("config.yaml")

Or via CLI:
    python run.py config.yaml
"""

from .config import SimulationConfig, load_config
from .context import IterationCounters, OutputContext
from .fields import FieldFormat, FieldKind, FieldSchema, HistoryFields, VolumeFields
from .gate import OutputDecision, evaluate_gates
from .output import ElasticityOutput
from .runner import run_from_file, run_simulation

__version__ = "0.1.0"

__all__ = [
    "SimulationConfig",
    "load_config",
    "IterationCounters",
    "OutputContext",
    "FieldFormat",
    "FieldKind",
    "FieldSchema",
    "HistoryFields",
    "VolumeFields",
    "OutputDecision",
    "evaluate_gates",
    "ElasticityOutput",
    "run_simulation",
    "run_from_file",
]
