"""Coordinate pairs: values keyed by an n-dimensional location."""

from __future__ import annotations

from typing import Any, SupportsFloat

import jax.numpy as jnp
import numpy as np
from jaxtyping import Array

from .dtypes import FLOAT_DTYPE, as_vector


class CoordinatePair:
    """Immutable association between a value and the vector pointing to it.

    The vector is copied on construction and on every read of ``location``.
    Equality and hashing only consider the vector, so two pairs compare equal
    exactly when their coordinates are numerically identical.
    """

    __slots__ = ("_value", "_vector")

    def __init__(self, value: Any, vector, *, dtype=FLOAT_DTYPE):
        self._value = value
        self._vector = as_vector(vector, dtype=dtype)

    @classmethod
    def from_coordinates(cls, value: Any, *coordinates: SupportsFloat) -> "CoordinatePair":
        """Create a pair from loose coordinates, ``from_coordinates(v, x, y, z)``."""

        return cls(value, [float(c) for c in coordinates])

    @property
    def value(self) -> Any:
        return self._value

    @property
    def location(self) -> Array:
        """Return a copy of the stored vector."""

        return jnp.array(self._vector, copy=True)

    @property
    def dimension(self) -> int:
        return int(self._vector.shape[0])

    def key(self, dimension: int) -> Array:
        """Return the leading ``dimension`` coordinates used for indexing."""

        return self._vector[:dimension]

    def host_key(self, dimension: int) -> np.ndarray:
        """Return the leading ``dimension`` coordinates as a host NumPy array."""

        return np.asarray(self._vector)[:dimension]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CoordinatePair):
            return NotImplemented
        if self._vector.shape != other._vector.shape:
            return False
        return bool(jnp.array_equal(self._vector, other._vector))

    def __hash__(self) -> int:
        return hash(tuple(self._vector.tolist()))

    def __repr__(self) -> str:
        shown = "NULL" if self._value is None else repr(self._value)
        coords = ", ".join(f"{c:g}" for c in self._vector.tolist())
        return f"CoordinatePair(({coords}) : {shown})"


__all__ = ["CoordinatePair"]
