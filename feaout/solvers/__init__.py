"""
Structural solvers driving the output pipeline.

Import all solvers here to register them automatically.
"""

from . import synthetic

__all__ = ["synthetic"]
