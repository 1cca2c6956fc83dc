"""Structured warning classes for the :mod:`feaout` package."""
from __future__ import annotations


class FeaOutWarning(UserWarning):
    """Base warning class for feaout."""


class BindingWarning(FeaOutWarning):
    """A value could not be bound and was skipped."""


class ResidualWarning(FeaOutWarning):
    """A residual was non-positive or non-finite before log scaling."""


class ConfigWarning(FeaOutWarning):
    """A configuration value is valid but probably not what was meant."""


class OutputFieldWarning(FeaOutWarning):
    """A requested output field is not declared for this analysis."""


__all__ = [
    "FeaOutWarning",
    "BindingWarning",
    "ResidualWarning",
    "ConfigWarning",
    "OutputFieldWarning",
]
