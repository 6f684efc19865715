"""Abstract spatial index contract with the helpers every strategy shares."""

from __future__ import annotations

import abc
from typing import Any, Iterator, Optional

from jaxtyping import Array

from .config import IndexConfig, KnnBackend, resolve_index_config
from .errors import InvalidDimensionError
from .nodes import Probe
from .pair import CoordinatePair
from .protocols import VectorLike


class SpatialIndex(abc.ABC):
    """Stores ``(vector, value)`` pairs and answers nearest-neighbour queries.

    Usage follows a bulk pattern: ``add`` pairs, ``build`` once, then query
    any number of times. Pairs added after a build sit in a pending buffer
    until the next ``build``.
    """

    def __init__(self, dimension: int, *, config: Optional[IndexConfig] = None):
        if int(dimension) < 1:
            raise ValueError(f"dimension must be >= 1, received {dimension}")
        self._dimension = int(dimension)
        self._config = resolve_index_config(config)

    @property
    def dimension(self) -> int:
        """Number of leading coordinates that take part in searches."""

        return self._dimension

    @property
    def config(self) -> IndexConfig:
        return self._config

    @property
    @abc.abstractmethod
    def build_required(self) -> bool:
        """Whether ``build()`` must run before every stored pair is indexed."""

    @property
    @abc.abstractmethod
    def count(self) -> int:
        """Number of stored pairs, pending ones included."""

    @property
    def is_empty(self) -> bool:
        return self.count == 0

    @abc.abstractmethod
    def add(self, vector: VectorLike, value: Any) -> None:
        """Buffer a new pair; it becomes searchable after the next build."""

    @abc.abstractmethod
    def build(self) -> None:
        """(Re)build the searchable structure from every stored pair."""

    @abc.abstractmethod
    def clear(self) -> None:
        """Drop every pair and return to the unbuilt state."""

    @abc.abstractmethod
    def nearest(self, probe: VectorLike) -> Optional[CoordinatePair]:
        """Return the stored pair closest to ``probe``, or ``None`` when empty."""

    @abc.abstractmethod
    def nearest_k(
        self,
        probe: VectorLike,
        k: int,
        *,
        backend: Optional[KnnBackend] = None,
    ) -> list[CoordinatePair]:
        """Return up to ``k`` stored pairs ordered by ascending distance."""

    @abc.abstractmethod
    def __iter__(self) -> Iterator[CoordinatePair]:
        """Enumerate every stored pair."""

    def __len__(self) -> int:
        return self.count

    def values(self) -> Iterator[Any]:
        """Lazily yield the value of every stored pair."""

        return (pair.value for pair in self)

    def vectors(self) -> Iterator[Array]:
        """Lazily yield a copy of every stored vector."""

        return (pair.location for pair in self)

    def _make_pair(self, vector: VectorLike, value: Any) -> CoordinatePair:
        pair = CoordinatePair(value, vector, dtype=self._config.dtype)
        if pair.dimension < self._dimension:
            raise InvalidDimensionError.for_length(pair.dimension, self._dimension)
        return pair

    def _make_probe(self, probe: VectorLike) -> Probe:
        return Probe.from_vector(probe, self._dimension, dtype=self._config.dtype)

    def _resolve_backend(self, backend: Optional[str]) -> str:
        resolved = self._config.knn_backend if backend is None else backend
        if resolved not in {"tree", "dense"}:
            raise ValueError(f"backend must be one of: 'tree', 'dense'; received {resolved!r}")
        return resolved

    @staticmethod
    def _check_k(k: int) -> int:
        if k < 1:
            raise ValueError(f"k must be >= 1, received {k}")
        return int(k)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(dimension={self._dimension}, count={self.count}, "
            f"build_required={self.build_required})"
        )


__all__ = ["SpatialIndex"]
