"""
Output monitors (writers) for screen, history and volume output.

Import all monitors here to register them automatically.
"""

from . import base, hdf5, history, screen

__all__ = ["base", "hdf5", "history", "screen"]
