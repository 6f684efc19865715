"""Brute-force spatial index: every query scores every stored pair."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Optional

import jax.numpy as jnp
from beartype import beartype
from jaxtyping import Array, jaxtyped

from . import _dense
from .config import IndexConfig, KnnBackend
from .errors import IndexNotBuiltError
from .index import SpatialIndex
from .pair import CoordinatePair
from .protocols import VectorLike


@dataclass(frozen=True)
class _ScanState:
    pairs: tuple[CoordinatePair, ...]
    keys: Array


class LinearScanIndex(SpatialIndex):
    """Reference index answering queries with dense distance kernels.

    It honours the same build/query contract as the KD-tree and is exact by
    construction, which makes it the baseline for conformance checks. Both
    ``nearest_k`` backends resolve to the same dense scan.
    """

    def __init__(self, dimension: int, *, config: Optional[IndexConfig] = None):
        super().__init__(dimension, config=config)
        self._pending: list[CoordinatePair] = []
        self._state: Optional[_ScanState] = None

    @property
    def build_required(self) -> bool:
        return (self._state is None) or bool(self._pending)

    @property
    def count(self) -> int:
        built = 0 if self._state is None else len(self._state.pairs)
        return built + len(self._pending)

    @jaxtyped(typechecker=beartype)
    def add(self, vector: VectorLike, value: Any) -> None:
        self._pending.append(self._make_pair(vector, value))

    def build(self) -> None:
        previous = () if self._state is None else self._state.pairs
        pairs = previous + tuple(self._pending)
        keys = _dense.stack_keys(pairs, self._dimension, self._config.dtype)
        self._state = _ScanState(pairs=pairs, keys=keys)
        self._pending = []

    def clear(self) -> None:
        self._pending = []
        self._state = None

    @jaxtyped(typechecker=beartype)
    def nearest(self, probe: VectorLike) -> Optional[CoordinatePair]:
        pairs, keys = self._snapshot()
        query = self._make_probe(probe)
        if not pairs:
            return None
        row, _distance = _dense.nearest_dense(keys, query.key)
        return CoordinatePair(pairs[row].value, pairs[row].location, dtype=self._config.dtype)

    @jaxtyped(typechecker=beartype)
    def nearest_k(
        self,
        probe: VectorLike,
        k: int,
        *,
        backend: Optional[KnnBackend] = None,
    ) -> list[CoordinatePair]:
        k = self._check_k(k)
        self._resolve_backend(backend)
        pairs, keys = self._snapshot()
        query = self._make_probe(probe)
        if not pairs:
            return []
        rows, _distances = _dense.top_k_dense(keys, query.key, k)
        return [
            CoordinatePair(pairs[row].value, pairs[row].location, dtype=self._config.dtype)
            for row in rows.tolist()
        ]

    def __iter__(self) -> Iterator[CoordinatePair]:
        if self._state is not None:
            yield from self._state.pairs
        yield from tuple(self._pending)

    def _snapshot(self) -> tuple[tuple[CoordinatePair, ...], Array]:
        """Return built plus pending pairs and their stacked keys."""

        state = self._state
        if state is None:
            raise IndexNotBuiltError()
        pending = tuple(self._pending)
        if not pending:
            return state.pairs, state.keys
        extra = _dense.stack_keys(pending, self._dimension, self._config.dtype)
        return state.pairs + pending, jnp.concatenate([state.keys, extra], axis=0)


__all__ = ["LinearScanIndex"]
