"""
Field schemas and the history/volume field registries.

Fields are declared once, by string key, and bound many times:

    history = HistoryFields()
    history.declare("INNER_ITER", "Inner_Iter", FieldFormat.INTEGER, "ITER")
    history.set_value("INNER_ITER", 3)

Volume fields hold one value per mesh point:

    volume = VolumeFields(n_points=geometry.n_points)
    volume.declare("COORD-X", "x", FieldFormat.SCIENTIFIC, "COORDINATES")
    volume.set_value("COORD-X", 0, 0.25)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator

import numpy as np
from numpy.typing import NDArray

from .errors import PointIndexError, SchemaConflictError, UnboundFieldError


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

class FieldFormat(Enum):
    """Rendering hint for writers."""
    INTEGER = "integer"
    FIXED = "fixed"
    SCIENTIFIC = "scientific"


class FieldKind(Enum):
    """Semantic kind. RESIDUAL fields hold log10-scaled convergence metrics."""
    PLAIN = "plain"
    RESIDUAL = "residual"


@dataclass(frozen=True)
class FieldSchema:
    """
    Immutable description of one output field.

    Attributes
    ----------
    key : str
        Unique identifier within a registry (e.g. "RMS_DISP_X").
    label : str
        Short column header (e.g. "rms[DispX]").
    format : FieldFormat
        Rendering hint.
    group : str
        Tag used to cluster related fields (e.g. "RMS_RES", "STRESS").
    kind : FieldKind
        PLAIN or RESIDUAL.
    """
    key: str
    label: str
    format: FieldFormat
    group: str
    kind: FieldKind = FieldKind.PLAIN

    @property
    def is_residual(self) -> bool:
        return self.kind is FieldKind.RESIDUAL


# ---------------------------------------------------------------------------
# Registries
# ---------------------------------------------------------------------------

class FieldRegistry(ABC):
    """
    Ordered mapping of declared field schemas.

    Declaration order is display order. Schemas are never removed or
    replaced; subclasses add the value storage for their domain.
    """

    domain = "output"

    def __init__(self):
        self._schemas: dict[str, FieldSchema] = {}

    def declare(
        self,
        key: str,
        label: str,
        format: FieldFormat,
        group: str,
        kind: FieldKind = FieldKind.PLAIN,
    ) -> FieldSchema:
        """
        Append a new field schema.

        Raises
        ------
        SchemaConflictError
            If ``key`` is already declared. The existing schema is kept.
        """
        if key in self._schemas:
            raise SchemaConflictError(key, self.domain)
        schema = FieldSchema(key, label, format, group, kind)
        self._allocate(key)
        self._schemas[key] = schema
        return schema

    @abstractmethod
    def _allocate(self, key: str) -> None:
        """Create the value storage for a newly declared key."""
        pass

    def _require(self, key: str) -> None:
        if key not in self._schemas:
            raise UnboundFieldError(key, self.domain)

    def schema(self, key: str) -> FieldSchema:
        """Get the schema declared under ``key``."""
        self._require(key)
        return self._schemas[key]

    def keys(self, group: str | None = None) -> list[str]:
        """Declaration-ordered keys, optionally restricted to one group."""
        if group is None:
            return list(self._schemas)
        return [k for k, s in self._schemas.items() if s.group == group]

    def groups(self) -> list[str]:
        """Distinct group tags in order of first declaration."""
        return list(dict.fromkeys(s.group for s in self._schemas.values()))

    def resolve(self, requested: Iterable[str]) -> tuple[list[str], list[str]]:
        """
        Expand requested names into declared keys.

        Each requested name may be a field key or a group tag. The result
        follows declaration order and contains each key once.

        Parameters
        ----------
        requested : iterable of str
            Keys and/or group tags.

        Returns
        -------
        tuple[list[str], list[str]]
            (resolved keys, names that matched neither a key nor a group)
        """
        wanted: set[str] = set()
        unknown: list[str] = []
        group_tags = set(self.groups())
        for name in requested:
            if name in self._schemas:
                wanted.add(name)
            elif name in group_tags:
                wanted.update(self.keys(name))
            else:
                unknown.append(name)
        return [k for k in self._schemas if k in wanted], unknown

    def __contains__(self, key: object) -> bool:
        return key in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)

    def __iter__(self) -> Iterator[FieldSchema]:
        return iter(self._schemas.values())


class HistoryFields(FieldRegistry):
    """Scalar fields: one value per iteration snapshot."""

    domain = "history"

    def __init__(self):
        super().__init__()
        self._values: dict[str, float | None] = {}

    def _allocate(self, key: str) -> None:
        self._values[key] = None

    def set_value(self, key: str, value: float) -> None:
        """Overwrite the current value of ``key``."""
        self._require(key)
        self._values[key] = value

    def get_value(self, key: str) -> float | None:
        """Current value of ``key``, or None if it was never bound."""
        self._require(key)
        return self._values[key]

    def snapshot(self, keys: Iterable[str] | None = None) -> dict[str, float | None]:
        """Copy of the current values, in declaration order."""
        if keys is None:
            return dict(self._values)
        return {k: self.get_value(k) for k in keys}


class VolumeFields(FieldRegistry):
    """
    Per-entity fields: one value per (key, point index).

    Each key owns a float64 array of length ``n_points``, NaN until bound.
    Distinct point indices never share storage, so per-point binding may
    run in parallel across indices.
    """

    domain = "volume"

    def __init__(self, n_points: int):
        if n_points < 0:
            raise ValueError(f"n_points must be non-negative, got {n_points}")
        super().__init__()
        self.n_points = n_points
        self._values: dict[str, NDArray[np.float64]] = {}

    def _allocate(self, key: str) -> None:
        self._values[key] = np.full(self.n_points, np.nan, dtype=np.float64)

    def _check_index(self, key: str, index: int) -> None:
        # Negative indices would alias points counted from the end
        if not 0 <= index < self.n_points:
            raise PointIndexError(key, index, self.n_points)

    def set_value(self, key: str, index: int, value: float) -> None:
        """Overwrite the value of ``key`` at point ``index``."""
        self._require(key)
        self._check_index(key, index)
        self._values[key][index] = value

    def get_value(self, key: str, index: int) -> float:
        """Value of ``key`` at point ``index`` (NaN if never bound)."""
        self._require(key)
        self._check_index(key, index)
        return float(self._values[key][index])

    def get_values(self, key: str) -> NDArray[np.float64]:
        """Read-only view of all point values for ``key``."""
        self._require(key)
        view = self._values[key].view()
        view.flags.writeable = False
        return view
