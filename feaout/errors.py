"""Custom exceptions for the :mod:`feaout` package."""
from __future__ import annotations


class FeaOutError(Exception):
    """Base exception for output registry errors."""


class ConfigurationError(FeaOutError, ValueError):
    """Output settings inconsistent with the declared fields."""


class SchemaConflictError(FeaOutError, ValueError):
    """A field key was declared twice in the same registry."""

    def __init__(self, key: str, domain: str):
        super().__init__(f"{domain} field '{key}' is already declared")
        self.key = key
        self.domain = domain


class UnboundFieldError(FeaOutError, LookupError):
    """A value was written to (or read from) a key that was never declared."""

    def __init__(self, key: str, domain: str):
        super().__init__(f"{domain} field '{key}' was never declared")
        self.key = key
        self.domain = domain


class PointIndexError(FeaOutError, IndexError):
    """A volume point index outside ``[0, n_points)``."""

    def __init__(self, key: str, index: int, n_points: int):
        super().__init__(
            f"volume field '{key}': point {index} out of range [0, {n_points})"
        )
        self.key = key
        self.index = index
        self.n_points = n_points


__all__ = [
    "FeaOutError",
    "ConfigurationError",
    "SchemaConflictError",
    "UnboundFieldError",
    "PointIndexError",
]
